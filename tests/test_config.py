"""
Unit tests for configuration parsing.
"""

import socket

import pytest
from pydantic import ValidationError

from demo_service.core.config import ListenAddress, ServerConfig, parse_args
from demo_service.core.errors import ConfigurationError


class TestListenAddress:
    """Tests for host:port parsing."""

    def test_port_only(self):
        addr = ListenAddress.parse(":8080")
        assert addr.host == ""
        assert addr.port == 8080

    def test_empty_host_binds_dual_stack_when_supported(self, monkeypatch):
        monkeypatch.setattr(socket, "has_dualstack_ipv6", lambda: True)

        assert ListenAddress.parse(":8080").bind_host == "::"

    def test_empty_host_falls_back_to_ipv4(self, monkeypatch):
        monkeypatch.setattr(socket, "has_dualstack_ipv6", lambda: False)

        assert ListenAddress.parse(":8080").bind_host == "0.0.0.0"

    def test_host_and_port(self):
        addr = ListenAddress.parse("127.0.0.1:9090")
        assert addr.host == "127.0.0.1"
        assert addr.bind_host == "127.0.0.1"
        assert str(addr) == "127.0.0.1:9090"

    def test_bracketed_ipv6(self):
        addr = ListenAddress.parse("[::1]:8090")
        assert addr.host == "::1"
        assert addr.port == 8090
        assert str(addr) == "[::1]:8090"

    def test_ephemeral_port(self):
        assert ListenAddress.parse("127.0.0.1:0").port == 0

    @pytest.mark.parametrize("value", ["8080", ":http", ":70000", "::1:8080", ""])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            ListenAddress.parse(value)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ListenAddress.parse("no-port")


class TestParseArgs:
    """Tests for command line and environment parsing."""

    def test_defaults(self):
        config = parse_args([], environ={})

        assert config.listen_addr.port == 8080
        assert config.check_addr.port == 8090
        assert config.metric_addr.port == 9090
        assert config.version == ""
        assert config.log_level == "INFO"
        assert config.log_format == "simple"
        assert config.separate_health_listener

    def test_single_dash_flags(self):
        config = parse_args(
            ["-listen", "127.0.0.1:8081", "-check", ":8091", "-metric", ":9091"],
            environ={}
        )

        assert str(config.listen_addr) == "127.0.0.1:8081"
        assert config.check_addr.port == 8091
        assert config.metric_addr.port == 9091

    def test_double_dash_flags(self):
        config = parse_args(["--listen", ":7000", "--log-level", "debug"], environ={})

        assert config.listen_addr.port == 7000
        assert config.log_level == "DEBUG"

    def test_empty_check_address_folds_probes(self):
        config = parse_args(["-check", ""], environ={})

        assert config.check_addr is None
        assert not config.separate_health_listener

    def test_version_from_environment(self):
        config = parse_args([], environ={"VERSION": "2.0.1"})
        assert config.version == "2.0.1"

    def test_invalid_address_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["-listen", "8080"], environ={})

        assert exc_info.value.code == 2
        assert "missing port" in capsys.readouterr().err

    def test_invalid_log_level_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--log-level", "chatty"], environ={})

        assert exc_info.value.code == 2

    def test_config_is_immutable(self):
        config = parse_args([], environ={})

        with pytest.raises(ValidationError):
            config.version = "changed"


def test_server_config_accepts_address_models():
    config = ServerConfig(
        listen_addr=ListenAddress(host="127.0.0.1", port=1),
        check_addr=None,
    )

    assert config.listen_addr.port == 1
    assert config.check_addr is None
    assert config.metric_addr.port == 9090
