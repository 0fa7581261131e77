from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

from .abc import Messageable, Respondable
from .models import Attachment, Channel, Member, User
from .utils import maybe_await

if TYPE_CHECKING:
    from .abc import EntityProvider
    from .commands import Invokable
    from .dispatcher import Dispatcher
    from .view import StringView


class ContextOrigin(Enum):
    TEXT = "text"
    INTERACTION = "interaction"


class MessageResponder(Respondable):
    """Answers by sending a message to a :class:`Messageable` (usually the channel)."""

    def __init__(self, target: Messageable) -> None:
        self.target = target

    async def respond(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        return await self.target.send(content, **kwargs)


class CallbackResponder(Respondable):
    def __init__(self, callback: Callable[..., Union[Any, Awaitable[Any]]]) -> None:
        self.callback = callback

    async def respond(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        return await maybe_await(self.callback(content, **kwargs))


@dataclass
class Context:
    """Everything known about one attempt to run a command.

    ``raw_arguments`` is the text left after the command name for text
    invocations and the name to raw value mapping for interactions.
    ``arguments`` is filled in once argument parsing succeeds. ``target`` is
    the user or message a context menu command was run on.
    """

    origin: ContextOrigin
    dispatcher: "Dispatcher"
    author: User
    channel: Channel
    guild_id: Optional[str] = None
    member: Optional[Member] = None
    command: Optional["Invokable"] = None
    prefix: Optional[str] = None
    invoked_with: Optional[str] = None
    raw_arguments: Union[str, Dict[str, Any]] = ""
    responder: Optional[Respondable] = None
    attachments: List[Attachment] = field(default_factory=list)
    event: Any = None
    view: Optional["StringView"] = None
    arguments: Optional[List[Any]] = None
    target: Any = None

    @property
    def user_id(self) -> str:
        return self.author.id

    @property
    def channel_id(self) -> str:
        return self.channel.id

    @property
    def is_dm(self) -> bool:
        return self.guild_id is None

    @property
    def provider(self) -> Optional["EntityProvider"]:
        return getattr(self.dispatcher, "provider", None)

    async def respond(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        if self.responder is None:
            raise RuntimeError("This context has no responder")
        return await self.responder.respond(content, **kwargs)

    async def send(self, content: Optional[str] = None, **kwargs: Any) -> Any:
        return await self.respond(content, **kwargs)
