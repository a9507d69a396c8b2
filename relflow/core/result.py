"""Result type used by every release operation.

Release steps either produce a value or a structured error; none of them
raise for expected failures (missing tag, lint failure, missing changelog).
Callers branch on the variant and stop the pipeline on the first `Err`.

Usage:
    def parse_major(text: str) -> Result[int, str]:
        head = text.split(".", 1)[0]
        if not head.isdigit():
            return Err(f"not a version: {text}")
        return Ok(int(head))

    result = parse_major("4.7.3")
    if isinstance(result, Err):
        print(result.error)
    else:
        print(result.value)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying `value`."""

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the carried value, keeping the Ok wrapper."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying `error`."""

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
