"""Builders and fakes shared by the test modules."""

from typing import List, Optional

from fluxer_commands import Channel, EntityProvider, Member, MessageEvent, Role, User

GUILD_ID = "111111111111111111"
CHANNEL_ID = "222222222222222222"
CATEGORY_ID = "333333333333333333"
AUTHOR_ID = "444444444444444444"


class FakeProvider(EntityProvider):
    """In-memory entity lookups."""

    def __init__(
        self,
        users: Optional[List[User]] = None,
        members: Optional[List[Member]] = None,
        roles: Optional[List[Role]] = None,
        channels: Optional[List[Channel]] = None,
    ) -> None:
        self.users = users or []
        self.members = members or []
        self.roles = roles or []
        self.channels = channels or []

    async def fetch_user(self, user_id):
        return next((u for u in self.users if u.id == user_id), None)

    async def fetch_member(self, guild_id, user_id):
        return next((m for m in self.members if m.id == user_id), None)

    async def search_members(self, guild_id, query):
        return list(self.members)

    async def fetch_roles(self, guild_id):
        return list(self.roles)

    async def fetch_channels(self, guild_id):
        return list(self.channels)


def message(
    content: str,
    *,
    guild_id: Optional[str] = GUILD_ID,
    bot: bool = False,
    member: Optional[Member] = None,
) -> MessageEvent:
    return MessageEvent(
        author=User(id=AUTHOR_ID, username="alice", bot=bot),
        channel=Channel(id=CHANNEL_ID, guild_id=guild_id),
        content=content,
        guild_id=guild_id,
        member=member,
    )
