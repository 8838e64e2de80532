"""Result types for error handling without exceptions."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@frozen
class Ok(Generic[T]):
    """Success result wrapper."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        return True

    @beartype
    def is_err(self) -> bool:
        return False

    @property
    def ok_value(self) -> T:
        return self.value

    @property
    def err_value(self) -> None:
        return None

    @beartype
    def unwrap(self) -> T:
        return self.value

    @beartype
    def unwrap_or(self, default: Any) -> T:
        return self.value

    @beartype
    def unwrap_err(self) -> NoReturn:
        """Raise ValueError as this is Ok."""
        raise ValueError("Called unwrap_err on Ok value")

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], Any]) -> Any:
        """Chain a computation that itself returns a result."""
        return func(self.value)


@frozen
class Err(Generic[E]):
    """Error result wrapper."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        return False

    @beartype
    def is_err(self) -> bool:
        return True

    @property
    def ok_value(self) -> None:
        return None

    @property
    def err_value(self) -> E:
        return self.error

    @beartype
    def unwrap(self) -> NoReturn:
        """Raise ValueError as this is Err."""
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    @beartype
    def unwrap_or(self, default: T) -> T:
        return default

    @beartype
    def unwrap_err(self) -> E:
        return self.error

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        """Errors pass through untouched."""
        return self

    def and_then(self, func: Callable[[Any], Any]) -> "Err[E]":
        return self


if TYPE_CHECKING:
    Result = Ok[T] | Err[E]
else:

    class Result(Generic[T, E]):
        """Runtime factory; ``Result[T, E]`` is ``Ok[T] | Err[E]`` for type checkers."""

        @staticmethod
        def ok(value: T) -> Ok[T]:
            return Ok(value)

        @staticmethod
        def err(error: E) -> Err[E]:
            return Err(error)


__all__ = ["Err", "Ok", "Result"]
