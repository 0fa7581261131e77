from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Union,
)

from .checks import AbstractCheck
from .converters import Choice, Converter, ConverterRegistry, OptionType
from .errors import CommandError, CommandRegistrationError
from .models import ApplicationCommandType
from .utils import MISSING, to_kebab_case
from .view import StringView

if TYPE_CHECKING:
    from .context import Context

LOGGER = logging.getLogger("fluxer_commands")

CommandCallback = Callable[..., Awaitable[Any]]
Hook = Callable[["Context"], Awaitable[Any]]
ErrorHandler = Callable[["Context", CommandError], Awaitable[Any]]

_NAME_RE = re.compile(r"^[\w-]{1,32}$")


def _validate_name(name: str) -> None:
    if not _NAME_RE.match(name) or name != name.lower():
        raise CommandRegistrationError(
            f'Invalid command name "{name}": names must be 1-32 lowercase letters, digits, "_" or "-"'
        )


class CommandType(Enum):
    """Which invocation styles a chat command accepts."""

    text_only = "text_only"
    slash_only = "slash_only"
    all = "all"


@dataclass
class Param:
    """One declared argument of a command, in positional order."""

    name: str
    type: Any = str
    default: Any = MISSING
    description: Optional[str] = None
    converter: Optional[Converter] = None
    choices: Optional[Sequence[Choice]] = None
    rest: bool = False

    @property
    def required(self) -> bool:
        return self.default is MISSING

    @property
    def option_name(self) -> str:
        return to_kebab_case(self.name)


@dataclass
class OptionSchema:
    name: str
    type: OptionType
    description: Optional[str] = None
    required: bool = True
    choices: Optional[List[Choice]] = None
    min_value: Any = None
    max_value: Any = None
    channel_types: Optional[List[int]] = None
    autocomplete: bool = False


class GroupMixin:
    """A node that owns child commands and checks.

    Children are indexed by name and by alias. The effective checks of a
    node are those of all its ancestors followed by its own.
    """

    parent: Optional["GroupMixin"]

    def __init__(self, *, case_insensitive: bool = True) -> None:
        self.case_insensitive = case_insensitive
        self._commands: Dict[str, "CommandBase"] = {}
        self._checks: List[AbstractCheck] = []
        self.parent = None

    @property
    def commands(self) -> List["CommandBase"]:
        unique: List[CommandBase] = []
        for command in self._commands.values():
            if command not in unique:
                unique.append(command)
        return unique

    @property
    def all_commands(self) -> Dict[str, "CommandBase"]:
        return self._commands

    @property
    def checks(self) -> List[AbstractCheck]:
        inherited = self.parent.checks if self.parent is not None else []
        return inherited + self._checks

    @property
    def resolved_type(self) -> CommandType:
        return CommandType.all

    def check(self, check: AbstractCheck) -> AbstractCheck:
        self._checks.append(check)
        return check

    def walk_commands(self) -> Iterator["CommandBase"]:
        for command in self.commands:
            yield command
            yield from command.walk_commands()

    def _key(self, name: str) -> str:
        return name.lower() if self.case_insensitive else name

    def add_command(self, command: "CommandBase") -> None:
        if isinstance(command, ContextMenuCommand):
            raise CommandRegistrationError(
                f'Context menu command "{command.name}" can only be registered on the dispatcher'
            )
        if command.parent is not None:
            raise CommandRegistrationError(f'Command "{command.name}" has already been registered')
        for name in (command.name, *command.aliases):
            if self._key(name) in self._commands:
                raise CommandRegistrationError(f'A command with the name "{name}" already exists')
        for name in (command.name, *command.aliases):
            self._commands[self._key(name)] = command
        command.parent = self
        LOGGER.info("Registered command %s", command.qualified_name)

    def remove_command(self, name: str) -> Optional["CommandBase"]:
        command = self._commands.get(self._key(name))
        if command is None:
            return None
        for key in [key for key, value in self._commands.items() if value is command]:
            del self._commands[key]
        command.parent = None
        return command

    def get_command(self, name: Union[str, StringView]) -> Optional["CommandBase"]:
        """Resolve the deepest command named by the leading words of ``name``.

        When given a :class:`StringView`, the words that named the command are
        consumed and the view is left at the start of the arguments.
        """
        view = name if isinstance(name, StringView) else StringView(name)
        word = view.get_word()
        child = self._commands.get(self._key(word))
        if child is None:
            view.undo()
            return None
        return child.get_command(view) or child

    def command(
        self,
        name: Optional[str] = None,
        *,
        params: Sequence[Param] = (),
        description: Optional[str] = None,
        aliases: Sequence[str] = (),
        checks: Sequence[AbstractCheck] = (),
        hidden: bool = False,
        type: Optional[CommandType] = None,
    ) -> Callable[[CommandCallback], "Command"]:
        def decorator(func: CommandCallback) -> Command:
            command = Command(
                name or func.__name__,
                func,
                params,
                description=description or (func.__doc__ or "").strip() or None,
                aliases=aliases,
                checks=checks,
                hidden=hidden,
                type=type,
                case_insensitive=self.case_insensitive,
            )
            self.add_command(command)
            return command

        return decorator

    def group(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        aliases: Sequence[str] = (),
        checks: Sequence[AbstractCheck] = (),
        hidden: bool = False,
        type: Optional[CommandType] = None,
    ) -> "Group":
        group = Group(
            name,
            description=description,
            aliases=aliases,
            checks=checks,
            hidden=hidden,
            type=type,
            case_insensitive=self.case_insensitive,
        )
        self.add_command(group)
        return group


class CommandBase(GroupMixin):
    def __init__(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        aliases: Sequence[str] = (),
        checks: Sequence[AbstractCheck] = (),
        hidden: bool = False,
        type: Optional[CommandType] = None,
        case_insensitive: bool = True,
    ) -> None:
        super().__init__(case_insensitive=case_insensitive)
        self._validate_names(name, aliases)
        if len(set(aliases)) != len(aliases) or name in aliases:
            raise CommandRegistrationError(f'Command "{name}" has duplicate aliases')
        self.name = name
        self.description = description
        self.aliases = list(aliases)
        self.hidden = hidden
        self.type = type
        self._checks.extend(checks)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.qualified_name!r}>"

    def _validate_names(self, name: str, aliases: Sequence[str]) -> None:
        for value in (name, *aliases):
            _validate_name(value)

    @property
    def qualified_name(self) -> str:
        if isinstance(self.parent, CommandBase):
            return f"{self.parent.qualified_name} {self.name}"
        return self.name

    @property
    def resolved_type(self) -> CommandType:
        """The command's own type, else the nearest ancestor's."""
        if self.type is not None:
            return self.type
        if self.parent is not None:
            return self.parent.resolved_type
        return CommandType.all


class Group(CommandBase):
    """A named container for sub-commands that cannot be invoked itself."""


class Invokable(CommandBase):
    """A command node with a callback and invocation hooks."""

    application_type = ApplicationCommandType.chat_input

    def __init__(
        self,
        name: str,
        callback: CommandCallback,
        params: Iterable[Param] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(name, **kwargs)
        self.callback = callback
        self.params = list(params)
        self.error_handler: Optional[ErrorHandler] = None
        self._before_invoke: Optional[Hook] = None
        self._after_invoke: Optional[Hook] = None

    def error(self, coro: ErrorHandler) -> ErrorHandler:
        self.error_handler = coro
        return coro

    def before_invoke(self, coro: Hook) -> Hook:
        self._before_invoke = coro
        return coro

    def after_invoke(self, coro: Hook) -> Hook:
        self._after_invoke = coro
        return coro


class Command(Invokable):
    def __init__(
        self,
        name: str,
        callback: CommandCallback,
        params: Iterable[Param] = (),
        *,
        description: Optional[str] = None,
        aliases: Sequence[str] = (),
        checks: Sequence[AbstractCheck] = (),
        hidden: bool = False,
        type: Optional[CommandType] = None,
        case_insensitive: bool = True,
    ) -> None:
        super().__init__(
            name,
            callback,
            params,
            description=description,
            aliases=aliases,
            checks=checks,
            hidden=hidden,
            type=type,
            case_insensitive=case_insensitive,
        )
        self._validate_params()

    def _validate_params(self) -> None:
        seen = set()
        optional_seen = False
        for index, param in enumerate(self.params):
            if param.option_name in seen:
                raise CommandRegistrationError(f'Duplicate parameter "{param.name}" on command "{self.name}"')
            seen.add(param.option_name)
            if param.rest and index != len(self.params) - 1:
                raise CommandRegistrationError(f'Rest parameter "{param.name}" must be the last parameter')
            if param.required and optional_seen:
                raise CommandRegistrationError(
                    f'Required parameter "{param.name}" cannot follow an optional parameter'
                )
            optional_seen = optional_seen or not param.required
            converter = param.converter
            if (
                converter is not None
                and isinstance(param.type, type)
                and isinstance(converter.output, type)
                and converter.output is not object
                and not issubclass(converter.output, param.type)
            ):
                raise CommandRegistrationError(
                    f'Converter for parameter "{param.name}" produces {converter.output.__name__}, '
                    f"not {param.type.__name__}"
                )

    @property
    def signature(self) -> str:
        parts = []
        for param in self.params:
            if param.rest:
                parts.append(f"<{param.name}...>" if param.required else f"[{param.name}...]")
            elif param.required:
                parts.append(f"<{param.name}>")
            elif param.default is None:
                parts.append(f"[{param.name}]")
            else:
                parts.append(f"[{param.name}={param.default}]")
        return " ".join(parts)

    def describe_options(self, registry: ConverterRegistry) -> List[OptionSchema]:
        options = []
        for param in self.params:
            converter = param.converter or registry.resolve(param.type, warn=False)
            option = OptionSchema(
                name=param.option_name,
                type=converter.type if converter else OptionType.string,
                description=param.description,
                required=param.required,
            )
            choices = param.choices if param.choices is not None else (converter.choices if converter else None)
            option.choices = list(choices) if choices else None
            if converter is not None:
                option.autocomplete = converter.autocomplete is not None and option.choices is None
                if converter.process_option is not None:
                    converter.process_option(option)
            options.append(option)
        return options


class ContextMenuCommand(Invokable):
    """A command run from a context menu on a user or a message.

    It takes no arguments. The handler finds its target on ``ctx.target``.
    """

    def __init__(
        self,
        name: str,
        callback: CommandCallback,
        *,
        description: Optional[str] = None,
        checks: Sequence[AbstractCheck] = (),
    ) -> None:
        super().__init__(name, callback, (), description=description, checks=checks, case_insensitive=False)

    def _validate_names(self, name: str, aliases: Sequence[str]) -> None:
        if not 1 <= len(name) <= 32 or not name.strip():
            raise CommandRegistrationError(f'Invalid context menu command name "{name}": must be 1-32 characters')

    def add_command(self, command: CommandBase) -> None:
        raise CommandRegistrationError(f'Context menu command "{self.name}" cannot have sub-commands')


class UserCommand(ContextMenuCommand):
    application_type = ApplicationCommandType.user


class MessageCommand(ContextMenuCommand):
    application_type = ApplicationCommandType.message
