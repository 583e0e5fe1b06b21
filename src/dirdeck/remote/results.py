"""Discriminated results returned by the remote service and controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

from dirdeck.errors import DirdeckError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """A completed call carrying its payload."""

    value: T
    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """A failed call carrying the classified error."""

    error: DirdeckError
    ok: ClassVar[bool] = False

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


ServiceResult = Union[Success[T], Failure]

__all__ = ["Failure", "ServiceResult", "Success"]
