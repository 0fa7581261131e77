from __future__ import annotations

from .abc import EntityProvider, Messageable, Respondable
from .checks import (
    AbstractCheck,
    AllCheck,
    AnyCheck,
    ChatCommandCheck,
    Check,
    CheckResult,
    DenyCheck,
    GuildCheck,
    InteractionChatCommandCheck,
    InteractionCommandCheck,
    MessageChatCommandCheck,
    MessageCommandCheck,
    PermissionsCheck,
    RoleCheck,
    UserCheck,
    UserCommandCheck,
)
from .commands import (
    Command,
    CommandType,
    ContextMenuCommand,
    Group,
    GroupMixin,
    Invokable,
    MessageCommand,
    OptionSchema,
    Param,
    UserCommand,
)
from .context import CallbackResponder, Context, ContextOrigin, MessageResponder
from .converters import (
    MAX_CHOICES,
    Choice,
    ChoiceConverter,
    CombineConverter,
    Converter,
    ConverterRegistry,
    EnumConverter,
    FallbackConverter,
    FloatConverter,
    GuildChannelConverter,
    IntConverter,
    OptionType,
    attachment_converter,
    bool_converter,
    channel_converter,
    float_converter,
    int_converter,
    member_converter,
    mentionable_converter,
    parse,
    role_converter,
    snowflake_converter,
    string_converter,
    user_converter,
)
from .cooldown import CooldownCheck, CooldownType
from .dispatcher import Dispatcher, dm_or, when_mentioned_or
from .errors import (
    BadArgument,
    CheckFailure,
    CommandError,
    CommandInvocationError,
    CommandInvokeError,
    CommandNotFound,
    CommandRegistrationError,
    ConversionError,
    DispatchError,
    InvocationTimeout,
    MissingRequiredArgument,
    NoConverterFound,
    ParseError,
    UserInputError,
)
from .http import InteractionResponse, InteractionServer
from .models import (
    ApplicationCommandType,
    Attachment,
    Channel,
    ChannelType,
    InteractionEvent,
    Member,
    MessageEvent,
    Role,
    Snowflake,
    User,
)
from .options import CommandsOptions
from .permissions import PERMISSIONS, Permissions
from .utils import MISSING
from .view import QUOTES, StringView

__version__ = "0.1.0"

__all__ = [
    "Dispatcher",
    "CommandsOptions",
    "Context",
    "ContextOrigin",
    "Command",
    "CommandType",
    "Invokable",
    "ContextMenuCommand",
    "UserCommand",
    "MessageCommand",
    "Group",
    "GroupMixin",
    "Param",
    "OptionSchema",
    "StringView",
    "QUOTES",
    "AbstractCheck",
    "Check",
    "CheckResult",
    "AnyCheck",
    "AllCheck",
    "DenyCheck",
    "GuildCheck",
    "UserCheck",
    "RoleCheck",
    "PermissionsCheck",
    "InteractionCommandCheck",
    "InteractionChatCommandCheck",
    "ChatCommandCheck",
    "MessageChatCommandCheck",
    "UserCommandCheck",
    "MessageCommandCheck",
    "CooldownCheck",
    "CooldownType",
    "Converter",
    "CombineConverter",
    "FallbackConverter",
    "ConverterRegistry",
    "IntConverter",
    "FloatConverter",
    "GuildChannelConverter",
    "ChoiceConverter",
    "EnumConverter",
    "Choice",
    "OptionType",
    "MAX_CHOICES",
    "parse",
    "string_converter",
    "int_converter",
    "float_converter",
    "bool_converter",
    "snowflake_converter",
    "member_converter",
    "user_converter",
    "channel_converter",
    "role_converter",
    "mentionable_converter",
    "attachment_converter",
    "CommandError",
    "CommandInvocationError",
    "CommandNotFound",
    "CheckFailure",
    "UserInputError",
    "BadArgument",
    "ConversionError",
    "MissingRequiredArgument",
    "NoConverterFound",
    "CommandInvokeError",
    "InvocationTimeout",
    "CommandRegistrationError",
    "DispatchError",
    "ParseError",
    "Respondable",
    "Messageable",
    "EntityProvider",
    "MessageResponder",
    "CallbackResponder",
    "InteractionServer",
    "InteractionResponse",
    "User",
    "Role",
    "Member",
    "Channel",
    "ChannelType",
    "ApplicationCommandType",
    "Attachment",
    "Snowflake",
    "MessageEvent",
    "InteractionEvent",
    "Permissions",
    "PERMISSIONS",
    "MISSING",
    "when_mentioned_or",
    "dm_or",
]
