from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .checks import AbstractCheck
    from .commands import Param
    from .context import Context
    from .view import StringView


class ParseError(Exception):
    """Raised when raw input cannot be tokenized or read by a converter."""


class CommandError(Exception):
    """Base exception for fluxer_commands."""


class CommandRegistrationError(CommandError):
    pass


class CommandNotFound(CommandError):
    def __init__(self, input: "StringView") -> None:
        super().__init__(f'Command "{input.buffer}" not found')
        self.input = input


class CommandInvocationError(CommandError):
    def __init__(self, message: str, context: "Context") -> None:
        super().__init__(message)
        self.context = context


class CheckFailure(CommandInvocationError):
    def __init__(self, check: "AbstractCheck", context: "Context") -> None:
        super().__init__(f'Check "{check.name}" failed', context)
        self.check = check


class UserInputError(CommandInvocationError):
    pass


class BadArgument(UserInputError):
    pass


class ConversionError(BadArgument):
    def __init__(self, converter: Any, original: Exception, context: "Context") -> None:
        super().__init__(f"Converter {converter!r} raised: {original}", context)
        self.converter = converter
        self.original = original


class MissingRequiredArgument(UserInputError):
    def __init__(self, param: "Param", context: "Context") -> None:
        command = context.command.qualified_name if context.command else "<unknown>"
        super().__init__(
            f'Not enough arguments for command "{command}": missing "{param.name}"',
            context,
        )
        self.param = param


class NoConverterFound(CommandInvocationError):
    def __init__(self, expected_type: Any, context: "Context") -> None:
        name = getattr(expected_type, "__name__", repr(expected_type))
        super().__init__(f'No converter found for type "{name}"', context)
        self.expected_type = expected_type


class CommandInvokeError(CommandInvocationError):
    def __init__(self, original: BaseException, context: "Context") -> None:
        super().__init__(f"{type(original).__name__}: {original}", context)
        self.original = original


class InvocationTimeout(CommandInvocationError):
    def __init__(self, timeout: Optional[float], context: "Context") -> None:
        super().__init__(f"Invocation did not complete within {timeout}s", context)
        self.timeout = timeout


class DispatchError(CommandError):
    """Raised when an event fails before a command could be resolved."""

    def __init__(self, original: BaseException, event: Any = None) -> None:
        super().__init__(f"Failed to dispatch event: {type(original).__name__}: {original}")
        self.original = original
        self.event = event
