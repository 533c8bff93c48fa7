"""
Service Configuration Module

This module provides Pydantic-based configuration models for the demo service.
All configuration is validated and type-checked when the command line is parsed,
and is immutable afterwards.

Configuration:
    - ListenAddress: A parsed "host:port" bind address
    - ServerConfig: Root configuration (three addresses, version, logging)

Command Line Flags (single or double dash):
    - -listen:  Application traffic address (default ":8080")
    - -check:   Health check address (default ":8090", empty = serve probes
                on the application listener)
    - -metric:  Metrics scrape address (default ":9090")
    - --log-level, --log-format: Logging switches

Environment Variables:
    - VERSION: Build/version string, echoed by "/" and attached as the
               constant "version" label on every metric

Usage:
    from demo_service.core.config import parse_args

    config = parse_args(["-listen", ":8081"])
    print(config.listen_addr.port)
"""

import os
import socket
import argparse
import logging
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError


logger = logging.getLogger(__name__)


DEFAULT_LISTEN_ADDR = ":8080"
DEFAULT_CHECK_ADDR = ":8090"
DEFAULT_METRIC_ADDR = ":9090"

ALL_INTERFACES = "0.0.0.0"
ALL_INTERFACES_DUAL_STACK = "::"


class ListenAddress(BaseModel):
    """
    Network bind address.

    Attributes:
        host: Interface to bind, empty for all interfaces
        port: TCP port (0 asks the OS for an ephemeral port)
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="", description="Interface to bind")
    port: int = Field(ge=0, le=65535, description="TCP port (0-65535)")

    @classmethod
    def parse(cls, value: str) -> "ListenAddress":
        """
        Parse a "host:port" string.

        Accepts ":8080", "127.0.0.1:8080", "localhost:8080" and "[::1]:8080".

        Raises:
            ConfigurationError: If the string has no port or the port is invalid
        """
        value = value.strip()
        host, sep, port = value.rpartition(":")
        if not sep:
            raise ConfigurationError(
                f"Invalid address '{value}': missing port (expected host:port)"
            )

        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        elif ":" in host:
            raise ConfigurationError(
                f"Invalid address '{value}': IPv6 hosts must be bracketed"
            )

        try:
            port_number = int(port)
        except ValueError:
            raise ConfigurationError(
                f"Invalid address '{value}': port '{port}' is not a number"
            )

        if not 0 <= port_number <= 65535:
            raise ConfigurationError(
                f"Invalid address '{value}': port {port_number} out of range"
            )

        return cls(host=host, port=port_number)

    @property
    def bind_host(self) -> str:
        """
        Host to hand to bind().

        An empty host means every interface: "::" with IPv4 mapped in where
        the system supports dual-stack sockets, otherwise all IPv4 interfaces.
        """
        if self.host:
            return self.host
        if socket.has_dualstack_ipv6():
            return ALL_INTERFACES_DUAL_STACK
        return ALL_INTERFACES

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class ServerConfig(BaseModel):
    """
    Root configuration container.

    Attributes:
        listen_addr: Application traffic address
        check_addr: Health check address (None = probes on the application listener)
        metric_addr: Metrics scrape address
        version: Version string from the VERSION environment variable
        log_level: Root log level name
        log_format: "simple" (human readable) or "structured" (JSON lines)
    """

    model_config = ConfigDict(frozen=True)

    listen_addr: ListenAddress = Field(
        default_factory=lambda: ListenAddress.parse(DEFAULT_LISTEN_ADDR)
    )
    check_addr: Optional[ListenAddress] = Field(
        default_factory=lambda: ListenAddress.parse(DEFAULT_CHECK_ADDR)
    )
    metric_addr: ListenAddress = Field(
        default_factory=lambda: ListenAddress.parse(DEFAULT_METRIC_ADDR)
    )
    version: str = Field(default="", description="Build/version string")
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["simple", "structured"] = Field(default="simple")

    @field_validator("listen_addr", "metric_addr", mode="before")
    @classmethod
    def parse_address(cls, v):
        """Accept "host:port" strings as well as ListenAddress instances."""
        if isinstance(v, str):
            return ListenAddress.parse(v)
        return v

    @field_validator("check_addr", mode="before")
    @classmethod
    def parse_optional_address(cls, v):
        """An empty check address folds the probes into the application listener."""
        if isinstance(v, str):
            if not v.strip():
                return None
            return ListenAddress.parse(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown log level: '{v}'")
        return level

    @property
    def separate_health_listener(self) -> bool:
        """True when probes are served on their own listener."""
        return self.check_addr is not None


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="demo-service",
        description="Demo HTTP service for rollout, probe and scrape testing"
    )
    parser.add_argument(
        "-listen", "--listen",
        dest="listen_addr",
        default=DEFAULT_LISTEN_ADDR,
        help="The address to listen on for web requests"
    )
    parser.add_argument(
        "-check", "--check",
        dest="check_addr",
        default=DEFAULT_CHECK_ADDR,
        help="The address to listen on for health checks (empty = serve on -listen)"
    )
    parser.add_argument(
        "-metric", "--metric",
        dest="metric_addr",
        default=DEFAULT_METRIC_ADDR,
        help="The address to listen on for metric pulls"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level (default: INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=["simple", "structured"],
        default="simple",
        help="Log output format (default: simple)"
    )
    return parser


def parse_args(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None
) -> ServerConfig:
    """
    Parse command line flags and environment into a ServerConfig.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated, immutable ServerConfig

    Raises:
        SystemExit: On invalid flags (argparse usage error, exit status 2)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    env = os.environ if environ is None else environ

    try:
        return ServerConfig(
            listen_addr=args.listen_addr,
            check_addr=args.check_addr,
            metric_addr=args.metric_addr,
            version=env.get("VERSION", ""),
            log_level=args.log_level,
            log_format=args.log_format,
        )
    except ValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        parser.error(f"invalid configuration: {errors}")
