"""Errors raised by the remote data client."""

from __future__ import annotations

from typing import Optional

# PostgREST code for "JSON object requested, multiple (or no) rows returned"
NO_ROWS = "PGRST116"


class RemoteError(Exception):
    """A query or mutation failed on the data backend."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.code == NO_ROWS

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code!r} {self.message!r}>"


class RemoteTimeout(RemoteError):
    """The call did not finish before its deadline."""

    def __init__(self, message: str = "Remote call exceeded its deadline.") -> None:
        super().__init__(message, code="timeout")


def no_rows(table: str) -> RemoteError:
    return RemoteError(
        f"JSON object requested, multiple (or no) rows returned from '{table}'",
        code=NO_ROWS,
    )
