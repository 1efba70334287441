"""
Unified exception definitions
"""


class RemoteError(Exception):
    """Base exception class"""
    pass


class ConfigError(RemoteError):
    """Configuration error"""
    pass


class ConnectionError(RemoteError):
    """Connection or authentication error"""
    pass


class ChannelError(RemoteError):
    """I/O error on a channel of an active session"""
    pass
