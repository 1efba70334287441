"""
Session factory implementation
"""
from typing import Dict, Any, Optional

from ...core.client import RemoteSession
from ...core.constants import DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT
from ...core.interfaces import SessionFactory
from ...domain.shell import ShellConfig


class RemoteSessionFactory(SessionFactory):
    """RemoteSession factory applying runner keep-alive settings"""

    def __init__(self, config: Optional[ShellConfig] = None):
        self.config = config or ShellConfig()

    def create(self, params: Dict[str, Any]) -> RemoteSession:
        """
        Create an unconnected session.

        Args:
            params: Connection parameters dictionary (host, user, port, password, key, timeout)

        Returns:
            RemoteSession instance; runners connect it on first use
        """
        return RemoteSession(
            host=params["host"],
            user=params["user"],
            port=params.get("port", DEFAULT_SSH_PORT),
            password=params.get("password"),
            key_path=params.get("key") or self.config.key_file,
            timeout=params.get("timeout", DEFAULT_SSH_TIMEOUT),
            keepalive_interval_ms=self.config.keepalive_interval_ms,
            keepalive_max_missed=self.config.keepalive_max_missed,
        )
