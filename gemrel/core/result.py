"""Result type for explicit error handling.

Every step of a release either produces a value or a reason to stop. This
module models that as a Result similar to Rust's Result<T, E>, so the
pipeline can short-circuit on the first failure without raising.

Usage:
    def read_token(path: Path) -> Result[str, ReleaseError]:
        if not path.exists():
            return Err(ReleaseError(kind="missing_token", message="no token"))
        return Ok(path.read_text().strip())

    match read_token(path):
        case Ok(token):
            push(token)
        case Err(error):
            print(error.message)

Callers narrow with `isinstance(result, Err)` and return early.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A step that produced `value`."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A step that stopped with `error`."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
