"""
Typed results for service boundaries.

Services return ``Ok(value)`` or ``Err(error)`` instead of raising. Callers
branch on ``is_ok()`` / ``is_err()`` or call ``unwrap()`` at the edge (HTTP
layer) where raising is the convention.

Usage:
    result = await service.cancel_subscription(user_id, immediately=True)
    if result.is_err():
        return result
    subscription = result.value
"""

import functools
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar, Union

from common.core.exceptions import AppException, InternalError
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=AppException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err[E]]


def returns_result(message: str):
    """
    Convert anything unexpected escaping a service method into an internal error value.

    Domain failures are already returned as ``Err``; this only catches what the
    method did not anticipate (driver errors, lost connections) so no exception
    crosses the service boundary. The cause is logged and kept on the error.
    """

    def decorator(func: Callable[..., Awaitable[Result]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Result:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"{message}: {e}")
                return Err(InternalError(message, cause=e))

        return wrapper

    return decorator
