"""Tests for the paramiko-backed transport session."""

import inspect
import socket
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from shellmux.core.client import RemoteSession
from shellmux.core.exceptions import ConnectionError
from shellmux.domain.shell import ShellConfig, ShellRunner


@pytest.fixture
def mock_ssh_client() -> Generator[Any, None, None]:
    """Patch paramiko.SSHClient with a connected-looking mock."""
    with patch("shellmux.core.client.paramiko.SSHClient") as mock_class:
        client = mock_class.return_value
        transport = MagicMock()
        transport.is_active.return_value = True
        transport.sock = MagicMock(spec=socket.socket)
        client.get_transport.return_value = transport
        yield client


class TestConnect:
    """Session establishment."""

    def test_connect_with_password(self, mock_ssh_client: MagicMock) -> None:
        session = RemoteSession("example.com", "deploy", 2222, password="secret")

        session.connect()

        kwargs = mock_ssh_client.connect.call_args.kwargs
        assert kwargs["hostname"] == "example.com"
        assert kwargs["port"] == 2222
        assert kwargs["username"] == "deploy"
        assert kwargs["password"] == "secret"
        assert kwargs["pkey"] is None
        assert session.is_connected is True

    def test_accepts_any_host_key(self, mock_ssh_client: MagicMock) -> None:
        RemoteSession("example.com", "deploy").connect()

        policy = mock_ssh_client.set_missing_host_key_policy.call_args.args[0]
        assert isinstance(policy, paramiko.AutoAddPolicy)

    def test_gssapi_disabled(self, mock_ssh_client: MagicMock) -> None:
        RemoteSession("example.com", "deploy").connect()

        kwargs = mock_ssh_client.connect.call_args.kwargs
        assert kwargs["gss_auth"] is False
        assert kwargs["gss_kex"] is False

    def test_keepalive_configured(self, mock_ssh_client: MagicMock) -> None:
        RemoteSession("example.com", "deploy").connect()

        transport = mock_ssh_client.get_transport.return_value
        transport.set_keepalive.assert_called_once_with(120)
        transport.sock.setsockopt.assert_called_once_with(
            socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1
        )

    def test_custom_keepalive_interval(self, mock_ssh_client: MagicMock) -> None:
        RemoteSession("example.com", "deploy", keepalive_interval_ms=30000).connect()

        transport = mock_ssh_client.get_transport.return_value
        transport.set_keepalive.assert_called_once_with(30)

    def test_auth_failure_raises_connection_error(self, mock_ssh_client: MagicMock) -> None:
        mock_ssh_client.connect.side_effect = paramiko.AuthenticationException("denied")
        session = RemoteSession("example.com", "deploy", password="wrong")

        with pytest.raises(ConnectionError, match="denied"):
            session.connect()

        assert session.is_connected is False
        mock_ssh_client.close.assert_called_once()

    def test_network_failure_raises_connection_error(self, mock_ssh_client: MagicMock) -> None:
        mock_ssh_client.connect.side_effect = socket.timeout("timed out")

        with pytest.raises(ConnectionError, match="timed out"):
            RemoteSession("10.255.255.1", "deploy").connect()


class TestPrivateKey:
    """Identity file loading."""

    def test_falls_back_across_key_formats(self, mock_ssh_client: MagicMock) -> None:
        rsa_key = MagicMock(spec=paramiko.PKey)
        with patch.object(
            paramiko.Ed25519Key, "from_private_key_file", side_effect=paramiko.SSHException("not ed25519")
        ), patch.object(paramiko.RSAKey, "from_private_key_file", return_value=rsa_key):
            RemoteSession("example.com", "deploy", key_path="~/.ssh/id_rsa").connect()

        assert mock_ssh_client.connect.call_args.kwargs["pkey"] is rsa_key

    def test_unreadable_key_raises_connection_error(self, mock_ssh_client: MagicMock) -> None:
        with pytest.raises(ConnectionError):
            RemoteSession("example.com", "deploy", key_path="/nonexistent/key").connect()

        mock_ssh_client.connect.assert_not_called()

    def test_key_in_no_known_format(self, mock_ssh_client: MagicMock) -> None:
        error = paramiko.SSHException("bad key")
        with patch.object(paramiko.Ed25519Key, "from_private_key_file", side_effect=error), \
                patch.object(paramiko.RSAKey, "from_private_key_file", side_effect=error), \
                patch.object(paramiko.ECDSAKey, "from_private_key_file", side_effect=error):
            with pytest.raises(ConnectionError, match="Failed to load private key"):
                RemoteSession("example.com", "deploy", key_path="~/.ssh/garbage").connect()


class TestLifecycle:
    """Disconnect and channel creation."""

    def test_disconnect_closes_client(self, mock_ssh_client: MagicMock) -> None:
        session = RemoteSession("example.com", "deploy")
        session.connect()

        session.disconnect()

        mock_ssh_client.close.assert_called_once()
        assert session.is_connected is False

    def test_disconnect_when_never_connected(self) -> None:
        session = RemoteSession("example.com", "deploy")

        session.disconnect()

        assert session.is_connected is False

    def test_context_manager(self, mock_ssh_client: MagicMock) -> None:
        with RemoteSession("example.com", "deploy") as session:
            assert session.is_connected is True

        mock_ssh_client.close.assert_called_once()

    def test_channel_requires_connection(self) -> None:
        session = RemoteSession("example.com", "deploy")

        with pytest.raises(ConnectionError, match="not connected"):
            session.open_exec_channel("uptime")

    def test_open_exec_channel(self, mock_ssh_client: MagicMock) -> None:
        session = RemoteSession("example.com", "deploy")
        session.connect()

        channel = session.open_exec_channel("uptime")

        transport = mock_ssh_client.get_transport.return_value
        assert channel is transport.open_session.return_value
        channel.exec_command.assert_called_once_with("uptime")

    def test_open_shell_channel(self, mock_ssh_client: MagicMock) -> None:
        session = RemoteSession("example.com", "deploy")
        session.connect()

        channel = session.open_shell_channel("dumb")

        channel.get_pty.assert_called_once_with(term="dumb")
        channel.invoke_shell.assert_called_once()


class TestRunnerSessions:
    """Sessions built by ShellRunner.get_session."""

    def test_uses_runner_identity_and_keepalive(self) -> None:
        config = ShellConfig(verbose=False, key_file="~/.ssh/id_ed25519", keepalive_interval_ms=60000)

        session = ShellRunner(config).get_session("deploy", "example.com", 2222, password="pw")

        assert str(session.config) == "deploy@example.com:2222"
        assert session.config.password == "pw"
        assert session.config.key_path == "~/.ssh/id_ed25519"
        assert session.config.keepalive_interval_ms == 60000
        assert session.is_connected is False


class TestConnectSignature:
    """Connect arguments against the installed paramiko, without mocks."""

    def test_connect_kwargs_match_ssh_client_signature(self) -> None:
        session = RemoteSession("example.com", "deploy", 2222, password="secret")

        bound = inspect.signature(paramiko.SSHClient.connect).bind(
            paramiko.SSHClient(), **session._connect_kwargs(None)
        )

        assert bound.arguments["hostname"] == "example.com"
        assert bound.arguments["gss_auth"] is False
        assert bound.arguments["gss_kex"] is False
