"""Shared fixtures for fluxer_commands tests."""

from typing import Any, Optional

import pytest

from fluxer_commands import Channel, Context, ContextOrigin, Dispatcher, Member, User

from tests.helpers import AUTHOR_ID, CATEGORY_ID, CHANNEL_ID, GUILD_ID


@pytest.fixture
def author():
    return User(id=AUTHOR_ID, username="alice")


@pytest.fixture
def channel():
    return Channel(id=CHANNEL_ID, type=0, name="general", guild_id=GUILD_ID, parent_id=CATEGORY_ID)


@pytest.fixture
def dispatcher():
    return Dispatcher("!")


@pytest.fixture
def make_ctx(dispatcher, author, channel):
    """Build a context; ``guild_id=None`` gives a DM context."""

    def factory(
        *,
        guild_id: Any = GUILD_ID,
        member: Optional[Member] = None,
        user: Optional[User] = None,
        chan: Optional[Channel] = None,
        origin: ContextOrigin = ContextOrigin.TEXT,
        command=None,
        disp: Optional[Dispatcher] = None,
        **kwargs: Any,
    ) -> Context:
        return Context(
            origin=origin,
            dispatcher=disp or dispatcher,
            author=user or author,
            channel=chan or channel,
            guild_id=guild_id,
            member=member,
            command=command,
            **kwargs,
        )

    return factory
