"""Explicit success/failure values returned by ports and use cases.

A ``Result`` is either ``Ok(value)`` or ``Err(error)``. Failures travel as
return values so every signature shows what can go wrong:

    result = await repo.find_by_ids(ids)
    if isinstance(result, Err):
        return Err(IssueFindFailed(result.error))
    issues = result.value
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True


Result = Union[Ok[T], Err[E]]
