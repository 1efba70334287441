"""
Core utility functions
"""
import paramiko
from pathlib import Path
from typing import Dict, Any, Optional

from .constants import SSH_CONFIG_PATH, DEFAULT_SSH_PORT
from .exceptions import ConfigError


# ============================================================
# SSH Config Management
# ============================================================

def load_ssh_config(hostname: str) -> Dict[str, Any]:
    """
    Load configuration for specified Host from ~/.ssh/config.
    
    Args:
        hostname: Host name in SSH configuration
    
    Returns:
        Dictionary containing host, user, port, key_file
    
    Raises:
        ConfigError: If ~/.ssh/config doesn't exist
    """
    config_path = Path(SSH_CONFIG_PATH).expanduser()
    if not config_path.exists():
        raise ConfigError(f"{SSH_CONFIG_PATH} does not exist")

    ssh_config = paramiko.SSHConfig.from_path(str(config_path))
    entry = ssh_config.lookup(hostname)

    return {
        "host": entry.get("hostname", hostname),
        "user": entry.get("user", None),
        "port": int(entry.get("port", DEFAULT_SSH_PORT)),
        "key_file": entry.get("identityfile", [None])[0],
    }


# ============================================================
# Target Parsing
# ============================================================

def parse_target(target: str) -> Dict[str, Optional[Any]]:
    """
    Split a ``[user@]host[:port]`` target into its parts.
    
    Missing parts are returned as None so that configuration and
    ssh_config lookups can fill them in.
    
    Raises:
        ConfigError: If the port is not an integer
    """
    user: Optional[str] = None
    port: Optional[int] = None
    host = target

    if "@" in host:
        user, host = host.rsplit("@", 1)
    if host.count(":") == 1:
        host, port_str = host.split(":")
        try:
            port = int(port_str)
        except ValueError:
            raise ConfigError(f"Invalid port in target: {target}")

    if not host:
        raise ConfigError(f"Missing host in target: {target}")

    return {"host": host, "user": user or None, "port": port}
