"""Result types shared by handlers, muxes and codecs."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Success:
    """A handler's successful return value.

    Attributes:
        value: Any value the codec knows how to encode (None is allowed).
    """

    value: Any = None


@dataclass(frozen=True)
class Failure:
    """A handler's failure.

    Attributes:
        error: The exception describing what went wrong. It is carried as a
            value and never raised by the dispatch machinery.
    """

    error: Exception


Result = Success | Failure


def to_result(value: Any) -> Result:
    """Normalize a handler return value into a Result.

    Success and Failure pass through unchanged, exception instances become
    Failure, everything else becomes Success.
    """
    if isinstance(value, (Success, Failure)):
        return value
    if isinstance(value, Exception):
        return Failure(value)
    return Success(value)
