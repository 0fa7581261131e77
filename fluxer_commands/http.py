from __future__ import annotations

import json as _json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from aiohttp import web

from .abc import Respondable
from .models import InteractionEvent

if TYPE_CHECKING:
    from .dispatcher import Dispatcher

LOGGER = logging.getLogger("fluxer_commands")

PING = 1
APPLICATION_COMMAND = 2

PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


class InteractionResponse(Respondable):
    """Collects what a handler answers to a single HTTP interaction.

    The first response becomes the HTTP reply. Later ones are kept in
    ``followups`` for the host to deliver through its own client.
    """

    def __init__(self) -> None:
        self.data: Optional[Dict[str, Any]] = None
        self.followups: List[Dict[str, Any]] = []

    @property
    def responded(self) -> bool:
        return self.data is not None

    async def respond(self, content: Optional[str] = None, **kwargs: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(kwargs)
        if content is not None:
            payload["content"] = content
        if self.data is None:
            self.data = payload
        else:
            LOGGER.debug("Interaction already answered; keeping follow-up")
            self.followups.append(payload)
        return payload

    def to_dict(self) -> Dict[str, Any]:
        if self.data is None:
            return {"type": DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE}
        return {"type": CHANNEL_MESSAGE_WITH_SOURCE, "data": self.data}


class InteractionServer:
    """Receives interactions over HTTP and feeds them to a dispatcher."""

    def __init__(self, dispatcher: "Dispatcher", *, path: str = "/interactions") -> None:
        self.dispatcher = dispatcher
        self.path = path
        self._app = web.Application()
        self._app.router.add_post(path, self.handle)
        self._runner: Optional[web.AppRunner] = None

    @property
    def app(self) -> web.Application:
        return self._app

    async def handle(self, request: web.Request) -> web.Response:
        try:
            data = await request.json()
        except (_json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({"error": "invalid JSON body"}, status=400)
        if not isinstance(data, dict):
            return web.json_response({"error": "expected a JSON object"}, status=400)

        kind = data.get("type")
        if kind == PING:
            return web.json_response({"type": PONG})
        if kind != APPLICATION_COMMAND:
            LOGGER.debug("Ignoring interaction of type %s", kind)
            return web.json_response({"error": f"unsupported interaction type {kind}"}, status=400)

        event = InteractionEvent.from_dict(data)
        response = InteractionResponse()
        await self.dispatcher.process_interaction(event, response)
        return web.json_response(response.to_dict())

    async def start(self, host: str = "0.0.0.0", port: int = 8080) -> None:
        if self._runner is not None:
            return
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        LOGGER.info("Listening for interactions on http://%s:%s%s", host, port, self.path)

    async def close(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
