"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .client import RemoteSession


class SessionFactory(ABC):
    """SSH session factory interface"""
    
    @abstractmethod
    def create(self, params: Dict[str, Any]) -> "RemoteSession":
        """Create an unconnected session from connection parameters"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""
    
    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass
