from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Sequence


class ChannelType(IntEnum):
    text = 0
    dm = 1
    voice = 2
    group_dm = 3
    category = 4
    announcement = 5


class ApplicationCommandType(IntEnum):
    chat_input = 1
    user = 2
    message = 3


class Snowflake(str):
    """A platform id, as parsed from a raw id or a mention."""


def _optional_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass
class User:
    id: str
    username: Optional[str] = None
    bot: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "User":
        if data is None:
            return cls(id="0")
        return cls(
            id=str(data.get("id")),
            username=data.get("username"),
            bot=bool(data.get("bot") or data.get("is_bot") or False),
            raw=data,
        )

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    def __str__(self) -> str:
        return self.username or self.id


@dataclass
class Role:
    id: str
    name: Optional[str] = None
    position: Optional[int] = None
    permissions: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        perms = data.get("permissions")
        try:
            perms_value = int(perms) if perms is not None else None
        except (TypeError, ValueError):
            perms_value = None
        return cls(
            id=str(data.get("id")),
            name=data.get("name"),
            position=data.get("position"),
            permissions=perms_value,
            raw=data,
        )

    @property
    def mention(self) -> str:
        return f"<@&{self.id}>"


@dataclass
class Member:
    user: User
    guild_id: str
    roles: List[Role] = field(default_factory=list)
    nick: Optional[str] = None
    permissions: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        guild_id: str,
        *,
        user: Optional[User] = None,
        guild_roles: Optional[Iterable[Role]] = None,
    ) -> "Member":
        """Build a member from a gateway/interaction payload.

        Member payloads usually list role ids only. ``guild_roles`` lets the
        caller supply the guild's role objects so positions are known.
        """
        known = {role.id: role for role in guild_roles or ()}
        roles: List[Role] = []
        for item in data.get("roles") or []:
            if isinstance(item, dict):
                roles.append(Role.from_dict(item))
            else:
                roles.append(known.get(str(item)) or Role(id=str(item)))

        perms = data.get("permissions")
        try:
            perms_value = int(perms) if perms is not None else None
        except (TypeError, ValueError):
            perms_value = None

        return cls(
            user=user or User.from_dict(data.get("user")),
            guild_id=str(guild_id),
            roles=roles,
            nick=data.get("nick"),
            permissions=perms_value,
            raw=data,
        )

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def mention(self) -> str:
        return self.user.mention

    @property
    def display_name(self) -> str:
        return self.nick or self.user.username or self.user.id

    @property
    def top_role(self) -> Optional[Role]:
        positioned = [role for role in self.roles if role.position is not None]
        if not positioned:
            return None
        return max(positioned, key=lambda role: role.position)


@dataclass
class Channel:
    id: str
    type: Optional[int] = None
    name: Optional[str] = None
    guild_id: Optional[str] = None
    parent_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            id=str(data.get("id")),
            type=data.get("type"),
            name=data.get("name"),
            guild_id=_optional_id(data.get("guild_id")),
            parent_id=_optional_id(data.get("parent_id")),
            raw=data,
        )

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"

    @property
    def is_private(self) -> bool:
        return self.type in (ChannelType.dm, ChannelType.group_dm) or self.guild_id is None


@dataclass
class Attachment:
    id: str
    filename: Optional[str] = None
    url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attachment":
        return cls(id=str(data.get("id")), filename=data.get("filename"), url=data.get("url"), raw=data)


def _attachments(items: Optional[Iterable[Dict[str, Any]]]) -> List[Attachment]:
    return [Attachment.from_dict(item) for item in items or []]


@dataclass
class MessageEvent:
    """A text message that may contain a prefixed command."""

    author: User
    channel: Channel
    content: str
    guild_id: Optional[str] = None
    member: Optional[Member] = None
    attachments: List[Attachment] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, channel: Optional[Channel] = None) -> "MessageEvent":
        guild_id = _optional_id(data.get("guild_id"))
        author = User.from_dict(data.get("author"))
        member = None
        member_payload = data.get("member")
        if guild_id and isinstance(member_payload, dict):
            member = Member.from_dict(member_payload, guild_id, user=author)
        if channel is None:
            channel = Channel(id=str(data.get("channel_id")), guild_id=guild_id)
        return cls(
            author=author,
            channel=channel,
            content=data.get("content") or "",
            guild_id=guild_id,
            member=member,
            attachments=_attachments(data.get("attachments")),
            raw=data,
        )

    @classmethod
    def from_message(cls, message: Any) -> "MessageEvent":
        """Adapt a client-side message object (``author``, ``channel_id``, ``raw`` ...)."""
        raw = dict(getattr(message, "raw", None) or {})
        raw.setdefault("content", getattr(message, "content", None))
        raw.setdefault("channel_id", getattr(message, "channel_id", None))
        raw.setdefault("guild_id", getattr(message, "guild_id", None))
        event = cls.from_dict(raw)
        author = getattr(message, "author", None)
        if author is not None:
            event.author = User(
                id=str(author.id),
                username=getattr(author, "username", None),
                bot=bool(getattr(author, "bot", False)),
            )
            if event.member is not None:
                event.member.user = event.author
        return event


_SUBCOMMAND = 1
_SUBCOMMAND_GROUP = 2


@dataclass
class InteractionEvent:
    """A structured invocation: a slash command with named raw arguments, or
    a context-menu command run on a target user or message."""

    author: User
    channel: Channel
    command_path: Sequence[str]
    arguments: Dict[str, Any] = field(default_factory=dict)
    guild_id: Optional[str] = None
    member: Optional[Member] = None
    attachments: List[Attachment] = field(default_factory=list)
    command_type: ApplicationCommandType = ApplicationCommandType.chat_input
    target_id: Optional[str] = None
    target: Any = None
    id: Optional[str] = None
    token: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InteractionEvent":
        guild_id = _optional_id(data.get("guild_id"))
        member = None
        member_payload = data.get("member")
        if isinstance(member_payload, dict) and guild_id:
            member = Member.from_dict(member_payload, guild_id)
            author = member.user
        else:
            author = User.from_dict(data.get("user"))

        channel_payload = data.get("channel")
        if isinstance(channel_payload, dict):
            channel = Channel.from_dict(channel_payload)
        else:
            channel = Channel(id=str(data.get("channel_id")), guild_id=guild_id)

        command = data.get("data") or {}
        path = [str(command.get("name"))]
        options = command.get("options") or []
        # Sub-command groups and sub-commands nest their options one level down.
        while len(options) == 1 and options[0].get("type") in (_SUBCOMMAND, _SUBCOMMAND_GROUP):
            path.append(str(options[0].get("name")))
            options = options[0].get("options") or []

        resolved = command.get("resolved") or {}
        try:
            command_type = ApplicationCommandType(command.get("type") or ApplicationCommandType.chat_input)
        except ValueError:
            command_type = ApplicationCommandType.chat_input
        target_id = _optional_id(command.get("target_id"))
        return cls(
            author=author,
            channel=channel,
            command_path=path,
            arguments={option.get("name"): option.get("value") for option in options},
            guild_id=guild_id,
            member=member,
            attachments=_attachments((resolved.get("attachments") or {}).values()),
            command_type=command_type,
            target_id=target_id,
            target=_resolve_target(command_type, target_id, resolved, guild_id),
            id=_optional_id(data.get("id")),
            token=data.get("token"),
            raw=data,
        )


def _resolve_target(
    command_type: ApplicationCommandType,
    target_id: Optional[str],
    resolved: Dict[str, Any],
    guild_id: Optional[str],
) -> Any:
    if target_id is None:
        return None
    if command_type is ApplicationCommandType.user:
        user_payload = (resolved.get("users") or {}).get(target_id)
        if user_payload is None:
            return None
        user = User.from_dict(user_payload)
        member_payload = (resolved.get("members") or {}).get(target_id)
        if guild_id and isinstance(member_payload, dict):
            return Member.from_dict(member_payload, guild_id, user=user)
        return user
    if command_type is ApplicationCommandType.message:
        message_payload = (resolved.get("messages") or {}).get(target_id)
        if message_payload is None:
            return None
        message_payload = dict(message_payload)
        message_payload.setdefault("guild_id", guild_id)
        return MessageEvent.from_dict(message_payload)
    return None
