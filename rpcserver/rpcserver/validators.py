"""Host and user allow-list gates checked before any dispatch.

An empty allow-list lets everybody through.
"""

from __future__ import annotations

from typing import Collection, Mapping

from wire.errors import AccessDeniedError, AuthenticationFailureError


def validate_host(allowed: Collection[str], remote_addr: str | None) -> None:
    if allowed and remote_addr not in allowed:
        raise AccessDeniedError("Access Forbidden")


def validate_user(
    users: Mapping[str, str], username: str | None, password: str | None
) -> None:
    if users and (username not in users or users[username] != password):
        raise AuthenticationFailureError("Access not allowed")
