"""Runtime settings for the standalone server.

Values come from the environment (optionally a ``.env`` file in the
working directory) and can be overridden on the command line.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8100


def _split(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def parse_users(value: str | None) -> dict[str, str]:
    """``"alice:secret,bob:hunter2"`` → ``{"alice": "secret", "bob": "hunter2"}``."""
    users: dict[str, str] = {}
    for item in _split(value):
        username, sep, password = item.partition(":")
        if not sep:
            raise ValueError(f"user entry {item!r} must look like name:password")
        users[username] = password
    return users


@dataclass(slots=True)
class ServerSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    allowed_hosts: list[str] = field(default_factory=list)
    users: dict[str, str] = field(default_factory=dict)
    auth_header: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "ServerSettings":
        if load_dotenv_file:
            load_dotenv(os.path.join(Path.cwd(), ".env"))
        return cls(
            host=os.getenv("RPC_HOST", DEFAULT_HOST),
            port=int(os.getenv("RPC_PORT", str(DEFAULT_PORT))),
            allowed_hosts=_split(os.getenv("RPC_ALLOWED_HOSTS")),
            users=parse_users(os.getenv("RPC_USERS")),
            auth_header=os.getenv("RPC_AUTH_HEADER") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_args(cls, argv: list[str] | None = None) -> "ServerSettings":
        """Environment defaults, overridden by command-line flags."""
        settings = cls.from_env()

        parser = argparse.ArgumentParser(description="JSON-RPC 2.0 server")
        parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
        parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
        parser.add_argument(
            "--allowed-hosts",
            type=str,
            default=None,
            help="Comma-separated remote addresses allowed to call",
        )
        parser.add_argument(
            "--users",
            type=str,
            default=None,
            help="Comma-separated name:password pairs for HTTP Basic auth",
        )
        parser.add_argument(
            "--auth-header",
            type=str,
            default=settings.auth_header,
            help="Alternative header carrying base64 user:password",
        )
        parser.add_argument(
            "--log-level", type=str, default=settings.log_level, help="Logging level"
        )
        args = parser.parse_args(argv)

        settings.host = args.host
        settings.port = args.port
        if args.allowed_hosts is not None:
            settings.allowed_hosts = _split(args.allowed_hosts)
        if args.users is not None:
            settings.users = parse_users(args.users)
        settings.auth_header = args.auth_header
        settings.log_level = args.log_level
        return settings
