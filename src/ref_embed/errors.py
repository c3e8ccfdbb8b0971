"""Error taxonomy for weave passes."""

from __future__ import annotations

from typing import Any


class WeaveError(Exception):
    """Base class for weave failures, carrying originating context."""

    fatal: bool = True

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        rendered = " ".join(f"{key}={value}" for key, value in sorted(self.context.items()))
        return f"{self.message} ({rendered})"


class DirectiveParseError(WeaveError):
    """Malformed or unsupported directive shape; the directive is dropped."""

    fatal = False


class ReadError(WeaveError):
    """Artifact or candidate content could not be read."""


class WriteError(WeaveError):
    """Output artifact could not be persisted."""


class ConflictError(WeaveError):
    """Resource name already present; the resource is skipped."""

    fatal = False
