"""Resolve the identity recorded in ``createdBy``/``updatedBy``.

An identity provider is any zero-argument coroutine function returning a
string. The default asks git for ``user.name``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence

from envflags.core.errors import IdentityError

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[], Awaitable[str]]

GIT_USER_COMMAND: tuple[str, ...] = ("git", "config", "user.name")

_NON_WORD = re.compile(r"[^\w ]")


def clean_identity(raw: str) -> str:
    """Strip everything except word characters and spaces (line endings included)."""
    return _NON_WORD.sub("", raw)


class CommandIdentityProvider:
    """Reads the identity from the stdout of an external command."""

    def __init__(self, command: Sequence[str] = GIT_USER_COMMAND) -> None:
        self.command = tuple(command)

    async def __call__(self) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise IdentityError(f"Cannot run {' '.join(self.command)}: {e}") from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip() or f"exit status {proc.returncode}"
            raise IdentityError(f"{' '.join(self.command)} failed: {detail}")

        identity = clean_identity(stdout.decode(errors="replace"))
        logger.debug(f"Resolved identity {identity!r}")
        return identity


class StaticIdentityProvider:
    """Always returns the same identity."""

    def __init__(self, identity: str) -> None:
        self.identity = clean_identity(identity)

    async def __call__(self) -> str:
        return self.identity
