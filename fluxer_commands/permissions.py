from __future__ import annotations

from typing import Dict, Iterable, Iterator, Tuple


PERMISSIONS: Dict[str, int] = {
    "create_instant_invite": 1 << 0,
    "kick_members": 1 << 1,
    "ban_members": 1 << 2,
    "administrator": 1 << 3,
    "manage_channels": 1 << 4,
    "manage_guild": 1 << 5,
    "add_reactions": 1 << 6,
    "view_audit_log": 1 << 7,
    "priority_speaker": 1 << 8,
    "stream": 1 << 9,
    "view_channel": 1 << 10,
    "send_messages": 1 << 11,
    "send_tts_messages": 1 << 12,
    "manage_messages": 1 << 13,
    "embed_links": 1 << 14,
    "attach_files": 1 << 15,
    "read_message_history": 1 << 16,
    "mention_everyone": 1 << 17,
    "use_external_emojis": 1 << 18,
    "view_guild_insights": 1 << 19,
    "connect": 1 << 20,
    "speak": 1 << 21,
    "mute_members": 1 << 22,
    "deafen_members": 1 << 23,
    "move_members": 1 << 24,
    "use_vad": 1 << 25,
    "change_nickname": 1 << 26,
    "manage_nicknames": 1 << 27,
    "manage_roles": 1 << 28,
    "manage_webhooks": 1 << 29,
    "manage_guild_expressions": 1 << 30,
    "use_application_commands": 1 << 31,
    "request_to_speak": 1 << 32,
    "manage_events": 1 << 33,
    "manage_threads": 1 << 34,
    "create_public_threads": 1 << 35,
    "create_private_threads": 1 << 36,
    "use_external_stickers": 1 << 37,
    "send_messages_in_threads": 1 << 38,
    "use_embedded_activities": 1 << 39,
    "moderate_members": 1 << 40,
    "view_creator_monetization_analytics": 1 << 41,
    "use_soundboard": 1 << 42,
    "use_external_sounds": 1 << 45,
    "send_voice_messages": 1 << 46,
}


_ALL_PERMISSIONS = 0
for _bit in PERMISSIONS.values():
    _ALL_PERMISSIONS |= _bit
del _bit


class Permissions:
    """An immutable permission bitmask.

    ``~`` complements within the set of known permissions, so the result of
    ``~Permissions.none()`` equals ``Permissions.all()``.
    """

    __slots__ = ("value",)

    def __init__(self, value: int = 0, **kwargs: bool) -> None:
        value = int(value)
        for name, enabled in kwargs.items():
            bit = PERMISSIONS.get(name)
            if bit is None:
                raise AttributeError(name)
            value = value | bit if enabled else value & ~bit
        object.__setattr__(self, "value", value)

    def __repr__(self) -> str:
        return f"<Permissions value={self.value}>"

    def __iter__(self) -> Iterator[Tuple[str, bool]]:
        for name in PERMISSIONS:
            yield name, getattr(self, name)

    def __int__(self) -> int:
        return self.value

    def __getattr__(self, name: str) -> bool:
        if name in PERMISSIONS:
            return bool(self.value & PERMISSIONS[name])
        raise AttributeError(name)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Permissions objects are immutable")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Permissions):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __and__(self, other: "Permissions") -> "Permissions":
        return Permissions(self.value & int(other))

    def __or__(self, other: "Permissions") -> "Permissions":
        return Permissions(self.value | int(other))

    def __invert__(self) -> "Permissions":
        return Permissions(~self.value & _ALL_PERMISSIONS)

    def __bool__(self) -> bool:
        return self.value != 0

    def has(self, *names: str) -> bool:
        return all(getattr(self, name) for name in names)

    def is_subset(self, other: "Permissions") -> bool:
        return self.value & int(other) == self.value

    def is_superset(self, other: "Permissions") -> bool:
        return int(other) & self.value == int(other)

    @classmethod
    def none(cls) -> "Permissions":
        return cls(0)

    @classmethod
    def from_value(cls, value: int) -> "Permissions":
        return cls(value)

    @classmethod
    def all(cls) -> "Permissions":
        return cls(_ALL_PERMISSIONS)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "Permissions":
        return cls(**{name: True for name in names})
