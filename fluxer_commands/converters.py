from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Union

from .errors import BadArgument, CommandError, ConversionError, NoConverterFound, ParseError
from .models import Attachment, Channel, Member, Role, Snowflake, User
from .utils import match_unique, maybe_await, parse_snowflake

if TYPE_CHECKING:
    from .commands import OptionSchema
    from .context import Context
    from .view import StringView

LOGGER = logging.getLogger("fluxer_commands")

_builtin_type = type

MAX_CHOICES = 25


class OptionType(IntEnum):
    string = 3
    integer = 4
    boolean = 5
    user = 6
    channel = 7
    role = 8
    mentionable = 9
    number = 10
    attachment = 11


@dataclass(frozen=True)
class Choice:
    name: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


ConvertFunc = Callable[["Context", "StringView"], Union[Any, Awaitable[Any]]]
ProcessFunc = Callable[["Context", Any], Union[Any, Awaitable[Any]]]
OptionCallback = Callable[["OptionSchema"], None]


class Converter:
    """Turns the next token(s) of a :class:`StringView` into a value, or ``None``."""

    def __init__(
        self,
        convert: ConvertFunc,
        output: Any = object,
        *,
        choices: Optional[Iterable[Choice]] = None,
        type: OptionType = OptionType.string,
        process_option: Optional[OptionCallback] = None,
        autocomplete: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._convert = convert
        self.output = output
        self._choices = list(choices) if choices is not None else None
        self._type = type
        self._process_option = process_option
        self._autocomplete = autocomplete

    def __repr__(self) -> str:
        return f"<{type(self).__name__} output={getattr(self.output, '__name__', self.output)}>"

    @property
    def choices(self) -> Optional[List[Choice]]:
        return self._choices

    @property
    def type(self) -> OptionType:
        return self._type

    @property
    def process_option(self) -> Optional[OptionCallback]:
        return self._process_option

    @property
    def autocomplete(self) -> Optional[Callable[..., Any]]:
        return self._autocomplete

    async def convert(self, ctx: "Context", view: "StringView") -> Any:
        return await maybe_await(self._convert(ctx, view))


class CombineConverter(Converter):
    def __init__(
        self,
        source: Converter,
        process: ProcessFunc,
        output: Any = object,
        *,
        choices: Optional[Iterable[Choice]] = None,
        type: Optional[OptionType] = None,
        process_option: Optional[OptionCallback] = None,
        autocomplete: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(
            self._combined,
            output,
            choices=choices,
            type=type or OptionType.string,
            process_option=process_option,
            autocomplete=autocomplete,
        )
        self.source = source
        self.process = process
        self._type_override = type

    def __repr__(self) -> str:
        return f"<CombineConverter output={getattr(self.output, '__name__', self.output)} source={self.source!r}>"

    @property
    def choices(self) -> Optional[List[Choice]]:
        if self._choices is not None:
            return self._choices
        return self.source.choices

    @property
    def type(self) -> OptionType:
        return self._type_override or self.source.type

    @property
    def process_option(self) -> Optional[OptionCallback]:
        return self._process_option or self.source.process_option

    @property
    def autocomplete(self) -> Optional[Callable[..., Any]]:
        return self._autocomplete or self.source.autocomplete

    async def _combined(self, ctx: "Context", view: "StringView") -> Any:
        value = await self.source.convert(ctx, view)
        if value is None:
            return None
        return await maybe_await(self.process(ctx, value))


class FallbackConverter(Converter):
    def __init__(
        self,
        converters: Iterable[Converter],
        output: Any = object,
        *,
        choices: Optional[Iterable[Choice]] = None,
        type: Optional[OptionType] = None,
        process_option: Optional[OptionCallback] = None,
        autocomplete: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(
            self._fallback,
            output,
            choices=choices,
            type=type or OptionType.string,
            process_option=process_option,
            autocomplete=autocomplete,
        )
        self.converters = list(converters)
        self._type_override = type

    def __repr__(self) -> str:
        return f"<FallbackConverter output={getattr(self.output, '__name__', self.output)} converters={self.converters!r}>"

    @property
    def choices(self) -> Optional[List[Choice]]:
        if self._choices is not None:
            return self._choices

        merged: Dict[str, Choice] = {}
        for converter in self.converters:
            converter_choices = converter.choices
            if converter_choices is None:
                return None
            for choice in converter_choices:
                existing = merged.get(choice.name)
                if existing is None:
                    merged[choice.name] = choice
                elif existing.value != choice.value:
                    return None

        if not merged or len(merged) > MAX_CHOICES:
            return None
        return list(merged.values())

    @property
    def type(self) -> OptionType:
        if self._type_override is not None:
            return self._type_override
        types = {converter.type for converter in self.converters}
        if len(types) == 1:
            return types.pop()
        return OptionType.string

    async def _fallback(self, ctx: "Context", view: "StringView") -> Any:
        # Only the winning copy is written back.
        for converter in self.converters:
            attempt = view.copy()
            result = await converter.convert(ctx, attempt)
            if result is not None:
                view.index = attempt.index
                view.history = list(attempt.history)
                return result
        return None


class ConverterRegistry:
    def __init__(self) -> None:
        self._converters: Dict[Any, Converter] = {}
        self._assembled: Dict[Any, Converter] = {}

    def __contains__(self, type_: Any) -> bool:
        return type_ in self._converters

    def __len__(self) -> int:
        return len(self._converters)

    def add(self, converter: Converter, type: Any = None) -> None:
        self._converters[type if type is not None else converter.output] = converter
        self._assembled.clear()

    def remove(self, type: Any) -> Optional[Converter]:
        self._assembled.clear()
        return self._converters.pop(type, None)

    def get(self, type: Any) -> Optional[Converter]:
        return self._converters.get(type)

    def resolve(self, type: Any, *, warn: bool = True) -> Optional[Converter]:
        converter = self._converters.get(type)
        if converter is not None:
            return converter

        converter = self._assembled.get(type)
        if converter is not None:
            return converter

        if isinstance(type, _builtin_type) and issubclass(type, Enum):
            converter = EnumConverter(type)
            self._assembled[type] = converter
            return converter

        if not isinstance(type, _builtin_type):
            return None

        subtypes: List[Converter] = []
        supertypes: List[Converter] = []
        for output, candidate in self._converters.items():
            if not isinstance(output, _builtin_type) or output is object:
                continue
            if issubclass(output, type):
                subtypes.append(candidate)
            elif issubclass(type, output):
                supertypes.append(_narrowed(candidate, type))

        candidates = subtypes + supertypes
        if not candidates:
            return None

        converter = FallbackConverter(candidates, type)
        self._assembled[type] = converter
        if warn:
            LOGGER.warning(
                "Using assembled converter for type %s; register a converter for it to avoid silent mismatches",
                type.__name__,
            )
        return converter

    def register_defaults(self) -> "ConverterRegistry":
        self.add(string_converter)
        self.add(int_converter)
        self.add(float_converter)
        self.add(bool_converter)
        self.add(snowflake_converter)
        self.add(member_converter)
        self.add(user_converter)
        self.add(channel_converter)
        self.add(role_converter)
        self.add(attachment_converter)
        return self


def _narrowed(converter: Converter, target: type) -> Converter:
    def narrow(ctx: "Context", value: Any) -> Any:
        return value if isinstance(value, target) else None

    return CombineConverter(converter, narrow, target)


async def parse(
    registry: ConverterRegistry,
    ctx: "Context",
    view: "StringView",
    expected_type: Any,
    converter: Optional[Converter] = None,
) -> Any:
    converter = converter or registry.resolve(expected_type)
    if converter is None:
        raise NoConverterFound(expected_type, ctx)

    type_name = getattr(expected_type, "__name__", repr(expected_type))
    try:
        parsed = await converter.convert(ctx, view)
    except ParseError as exc:
        raise BadArgument(f"Bad input: {exc}", ctx) from exc
    except CommandError:
        raise
    except Exception as exc:
        raise ConversionError(converter, exc, ctx) from exc

    if parsed is None:
        raise BadArgument(f'Could not parse input to type "{type_name}"', ctx)
    return parsed


def _convert_string(ctx: "Context", view: "StringView") -> str:
    return view.get_quoted_word()


string_converter = Converter(_convert_string, str)


class _NumberConverter(Converter):
    def __init__(self, cast: Callable[[str], Any], output: Any, type: OptionType, min: Any, max: Any) -> None:
        super().__init__(self._parse_number, output, type=type, process_option=self._bounds)
        self.cast = cast
        self.min = min
        self.max = max

    def _parse_number(self, ctx: "Context", view: "StringView") -> Any:
        try:
            value = self.cast(view.get_quoted_word())
        except ValueError:
            return None
        if self.min is not None and value < self.min:
            return None
        if self.max is not None and value > self.max:
            return None
        return value

    def _bounds(self, option: "OptionSchema") -> None:
        option.min_value = self.min
        option.max_value = self.max


class IntConverter(_NumberConverter):
    def __init__(self, min: Optional[int] = None, max: Optional[int] = None) -> None:
        super().__init__(int, int, OptionType.integer, min, max)


class FloatConverter(_NumberConverter):
    def __init__(self, min: Optional[float] = None, max: Optional[float] = None) -> None:
        super().__init__(float, float, OptionType.number, min, max)


int_converter = IntConverter()
float_converter = FloatConverter()

_TRUTHY = ("y", "yes", "+", "1", "true")
_FALSY = ("n", "no", "-", "0", "false")


def _convert_bool(ctx: "Context", view: "StringView") -> Optional[bool]:
    word = view.get_quoted_word().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    return None


bool_converter = Converter(_convert_bool, bool, type=OptionType.boolean)


def _convert_snowflake(ctx: "Context", view: "StringView") -> Optional[Snowflake]:
    found = parse_snowflake(view.get_quoted_word())
    if found is None:
        return None
    return Snowflake(found)


snowflake_converter = Converter(_convert_snowflake, Snowflake)


async def _snowflake_to_member(ctx: "Context", snowflake: Snowflake) -> Optional[Member]:
    if ctx.guild_id is None or ctx.provider is None:
        return None
    if ctx.member is not None and ctx.member.id == snowflake:
        return ctx.member
    return await ctx.provider.fetch_member(ctx.guild_id, snowflake)


async def _convert_member(ctx: "Context", view: "StringView") -> Optional[Member]:
    word = view.get_quoted_word()
    if ctx.guild_id is None or ctx.provider is None:
        return None
    members = await ctx.provider.search_members(ctx.guild_id, word)
    return match_unique(word, members, lambda m: m.user.username, lambda m: m.nick)


member_converter = FallbackConverter(
    [
        CombineConverter(snowflake_converter, _snowflake_to_member, Member),
        Converter(_convert_member, Member),
    ],
    Member,
    type=OptionType.user,
)


async def _snowflake_to_user(ctx: "Context", snowflake: Snowflake) -> Optional[User]:
    if ctx.author.id == snowflake:
        return ctx.author
    if ctx.provider is None:
        return None
    return await ctx.provider.fetch_user(snowflake)


def _member_to_user(ctx: "Context", member: Member) -> User:
    return member.user


def _convert_user(ctx: "Context", view: "StringView") -> Optional[User]:
    word = view.get_word()
    if not ctx.is_dm:
        return None
    return match_unique(word, [ctx.author], lambda u: u.username)


user_converter = FallbackConverter(
    [
        CombineConverter(snowflake_converter, _snowflake_to_user, User),
        CombineConverter(member_converter, _member_to_user, User),
        Converter(_convert_user, User),
    ],
    User,
    type=OptionType.user,
)


async def _guild_channels(ctx: "Context") -> List[Channel]:
    if ctx.guild_id is None or ctx.provider is None:
        return []
    return list(await ctx.provider.fetch_channels(ctx.guild_id))


async def _snowflake_to_channel(ctx: "Context", snowflake: Snowflake) -> Optional[Channel]:
    if ctx.channel is not None and ctx.channel.id == snowflake:
        return ctx.channel
    for channel in await _guild_channels(ctx):
        if channel.id == snowflake:
            return channel
    return None


async def _convert_channel(ctx: "Context", view: "StringView") -> Optional[Channel]:
    word = view.get_quoted_word()
    return match_unique(word, await _guild_channels(ctx), lambda c: c.name)


_any_channel = FallbackConverter(
    [
        CombineConverter(snowflake_converter, _snowflake_to_channel, Channel),
        Converter(_convert_channel, Channel),
    ],
    Channel,
    type=OptionType.channel,
)


class GuildChannelConverter(Converter):
    def __init__(self, channel_types: Optional[Sequence[int]] = None) -> None:
        super().__init__(
            self._convert_guild_channel,
            Channel,
            choices=[],
            type=OptionType.channel,
            process_option=self._set_channel_types,
        )
        self.channel_types = list(channel_types) if channel_types is not None else None

    async def _convert_guild_channel(self, ctx: "Context", view: "StringView") -> Optional[Channel]:
        channel = await _any_channel.convert(ctx, view)
        if channel is None:
            return None
        if self.channel_types is not None and channel.type not in self.channel_types:
            return None
        return channel

    def _set_channel_types(self, option: "OptionSchema") -> None:
        option.channel_types = self.channel_types


channel_converter = GuildChannelConverter()


async def _snowflake_to_role(ctx: "Context", snowflake: Snowflake) -> Optional[Role]:
    if ctx.member is not None:
        for role in ctx.member.roles:
            if role.id == snowflake and role.name is not None:
                return role
    if ctx.guild_id is None or ctx.provider is None:
        return None
    for role in await ctx.provider.fetch_roles(ctx.guild_id):
        if role.id == snowflake:
            return role
    return None


async def _convert_role(ctx: "Context", view: "StringView") -> Optional[Role]:
    word = view.get_quoted_word()
    if ctx.guild_id is None or ctx.provider is None:
        return None
    return match_unique(word, await ctx.provider.fetch_roles(ctx.guild_id), lambda r: r.name)


role_converter = FallbackConverter(
    [
        CombineConverter(snowflake_converter, _snowflake_to_role, Role),
        Converter(_convert_role, Role),
    ],
    Role,
    type=OptionType.role,
)

mentionable_converter = FallbackConverter(
    [member_converter, role_converter],
    object,
    type=OptionType.mentionable,
)


def _snowflake_to_attachment(ctx: "Context", snowflake: Snowflake) -> Optional[Attachment]:
    for attachment in ctx.attachments:
        if attachment.id == snowflake:
            return attachment
    return None


def _convert_attachment(ctx: "Context", view: "StringView") -> Optional[Attachment]:
    word = view.get_quoted_word()
    return match_unique(word, ctx.attachments, lambda a: a.filename)


attachment_converter = FallbackConverter(
    [
        CombineConverter(snowflake_converter, _snowflake_to_attachment, Attachment),
        Converter(_convert_attachment, Attachment),
    ],
    Attachment,
    type=OptionType.attachment,
)


class ChoiceConverter(Converter):
    """Picks one of a fixed set of ``elements`` by its string form."""

    def __init__(
        self,
        elements: Sequence[Any],
        stringify: Callable[[Any], str] = str,
        output: Any = None,
    ) -> None:
        self.elements = list(elements)
        self.stringify = stringify
        choices = None
        if len(self.elements) <= MAX_CHOICES:
            choices = [Choice(stringify(e), stringify(e)) for e in self.elements]
        if output is None:
            output = _builtin_type(self.elements[0]) if self.elements else object
        super().__init__(self._pick, output, choices=choices)

    def _pick(self, ctx: "Context", view: "StringView") -> Any:
        return match_unique(view.get_quoted_word(), self.elements, self.stringify)


class EnumConverter(ChoiceConverter):
    def __init__(self, enum_type: Any) -> None:
        self.enum_type = enum_type
        super().__init__(list(enum_type), lambda member: member.name, enum_type)

    def _pick(self, ctx: "Context", view: "StringView") -> Any:
        word = view.get_quoted_word()
        found = match_unique(word, self.elements, self.stringify)
        if found is not None:
            return found
        for member in self.elements:
            if str(member.value) == word:
                return member
        return None
