from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """
    Tagged outcome of a repository or service call.
    ok=True carries `data`, ok=False carries an error tag in `err`.
    """
    ok: bool
    data: T | None = None
    err: E | None = None

    @classmethod
    def success(cls, data: T | None = None) -> "Result[T, E]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, err: E) -> "Result[T, E]":
        return cls(ok=False, err=err)
