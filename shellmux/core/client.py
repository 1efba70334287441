from __future__ import annotations
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import paramiko

from .constants import (
    DEFAULT_SSH_PORT,
    DEFAULT_SSH_TIMEOUT,
    DEFAULT_KEEPALIVE_INTERVAL_MS,
    DEFAULT_KEEPALIVE_MAX_MISSED,
)
from .exceptions import ConnectionError
from .logging import get_logger

logger = get_logger(__name__)

# Key formats tried in order when loading an identity file
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.RSAKey, paramiko.ECDSAKey)


@dataclass
class SessionConfig:
    host: str
    user: str
    port: int = DEFAULT_SSH_PORT
    password: Optional[str] = None
    key_path: Optional[str] = None
    timeout: float = DEFAULT_SSH_TIMEOUT
    keepalive_interval_ms: int = DEFAULT_KEEPALIVE_INTERVAL_MS
    keepalive_max_missed: int = DEFAULT_KEEPALIVE_MAX_MISSED

    def __str__(self) -> str:
        return f"{self.user}@{self.host}:{self.port}"


class RemoteSession:
    """
    Authenticated SSH session to one remote host, wrapping paramiko.SSHClient:
    - accepts any host key (AutoAddPolicy), GSSAPI disabled
    - password and/or private key identity
    - transport keep-alive plus TCP keep-alive on the socket
    - opens exec and shell channels
    - usable as a context manager, disconnecting on exit

    Not thread-safe; open one session per thread.
    """
    def __init__(
        self,
        host: str,
        user: str,
        port: int = DEFAULT_SSH_PORT,
        password: Optional[str] = None,
        key_path: Optional[str] = None,
        timeout: float = DEFAULT_SSH_TIMEOUT,
        keepalive_interval_ms: int = DEFAULT_KEEPALIVE_INTERVAL_MS,
        keepalive_max_missed: int = DEFAULT_KEEPALIVE_MAX_MISSED,
    ) -> None:
        self.config = SessionConfig(
            host=host,
            user=user,
            port=port,
            password=password,
            key_path=key_path,
            timeout=timeout,
            keepalive_interval_ms=keepalive_interval_ms,
            keepalive_max_missed=keepalive_max_missed,
        )
        self.client: Optional[paramiko.SSHClient] = None

    # --------------------
    # Connection management
    # --------------------
    @property
    def is_connected(self) -> bool:
        if self.client is None:
            return False
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    def connect(self) -> None:
        """
        Connect and authenticate.

        Raises:
            ConnectionError: On key loading, negotiation or authentication
                failure. The session is left disconnected.
        """
        cfg = self.config
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            pkey = self._load_private_key(cfg.key_path) if cfg.key_path else None
            client.connect(**self._connect_kwargs(pkey))
            self._configure_keepalive(client)
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise ConnectionError(f"Failed to connect to {cfg}: {e}") from e

        self.client = client
        logger.debug(f"Connected to {cfg}")

    def _connect_kwargs(self, pkey: Optional[paramiko.PKey]) -> Dict[str, Any]:
        """Keyword arguments for SSHClient.connect: explicit credentials only, GSSAPI off"""
        cfg = self.config
        return {
            "hostname": cfg.host,
            "port": cfg.port,
            "username": cfg.user,
            "password": cfg.password,
            "pkey": pkey,
            "timeout": cfg.timeout,
            "allow_agent": False,
            "look_for_keys": False,
            "gss_auth": False,
            "gss_kex": False,
        }

    def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.debug(f"Disconnected from {self.config}")

    def _configure_keepalive(self, client: paramiko.SSHClient) -> None:
        cfg = self.config
        transport = client.get_transport()
        if transport is None:
            raise paramiko.SSHException("SSH transport not available")

        transport.set_keepalive(max(1, cfg.keepalive_interval_ms // 1000))
        sock = transport.sock
        if isinstance(sock, socket.socket):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        # paramiko has no missed-probe limit; recorded for diagnostics only
        logger.debug(
            f"Keep-alive every {cfg.keepalive_interval_ms}ms "
            f"(max missed {cfg.keepalive_max_missed})"
        )

    # --------------------
    # Load private key
    # --------------------
    def _load_private_key(self, path: str) -> paramiko.PKey:
        p = Path(path).expanduser()
        last_error: Optional[Exception] = None

        for key_class in _KEY_CLASSES:
            try:
                return key_class.from_private_key_file(str(p))
            except (paramiko.SSHException, ValueError) as e:
                last_error = e

        raise paramiko.SSHException(f"Failed to load private key at {p}: {last_error}")

    # --------------------
    # Channels
    # --------------------
    def _transport(self) -> paramiko.Transport:
        if not self.is_connected:
            raise ConnectionError(f"Session {self.config} is not connected")
        return self.client.get_transport()

    def open_exec_channel(self, command: str) -> paramiko.Channel:
        """Open a session channel and start ``command`` on it"""
        channel = self._transport().open_session()
        channel.exec_command(command)
        return channel

    def open_shell_channel(self, pty_type: str) -> paramiko.Channel:
        """Open a session channel running an interactive shell on a ``pty_type`` terminal"""
        channel = self._transport().open_session()
        channel.get_pty(term=pty_type)
        channel.invoke_shell()
        return channel

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> RemoteSession:
        if not self.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.disconnect()
