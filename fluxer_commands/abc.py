from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from .models import Channel, Member, Role, User


class Messageable(ABC):
    @abstractmethod
    async def send(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        raise NotImplementedError


class Respondable(ABC):
    @abstractmethod
    async def respond(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        raise NotImplementedError


class EntityProvider(ABC):
    """Lookups used by the entity converters.

    Every method may return ``None`` or an empty list when the entity is not
    available; converters treat that as a failed conversion.
    """

    async def fetch_user(self, user_id: str) -> Optional["User"]:
        return None

    async def fetch_member(self, guild_id: str, user_id: str) -> Optional["Member"]:
        return None

    async def search_members(self, guild_id: str, query: str) -> List["Member"]:
        return []

    async def fetch_roles(self, guild_id: str) -> List["Role"]:
        return []

    async def fetch_channels(self, guild_id: str) -> List["Channel"]:
        return []
