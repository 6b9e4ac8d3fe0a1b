"""Explicit success/failure values threaded through the request pipeline.

Every gate and service returns ``Ok(value)`` or ``Err(rejection)``. Callers
branch with ``match`` (or ``isinstance``) instead of catching exceptions, so
the order in which checks short-circuit is visible in the code that composes
them.

Example:
    >>> match gate.check(headers):
    ...     case Err(rejection):
    ...         return render(rejection)
    ...     case Ok(origin):
    ...         ...
"""

from dataclasses import dataclass

from formgate.core.errors import Rejection


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful outcome carrying its value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err:
    """A failed outcome carrying the rejection to send back."""

    rejection: Rejection


type Result[T] = Ok[T] | Err
