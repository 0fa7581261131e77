from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .abc import EntityProvider, Respondable
from .checks import AbstractCheck, CheckResult
from .commands import (
    Command,
    CommandBase,
    CommandCallback,
    CommandType,
    ContextMenuCommand,
    GroupMixin,
    Invokable,
    MessageCommand,
    UserCommand,
)
from .context import CallbackResponder, Context, ContextOrigin
from .converters import Converter, ConverterRegistry, parse
from .errors import (
    CheckFailure,
    CommandError,
    CommandInvokeError,
    CommandNotFound,
    CommandRegistrationError,
    DispatchError,
    InvocationTimeout,
    MissingRequiredArgument,
)
from .models import ApplicationCommandType, InteractionEvent, MessageEvent
from .options import CommandsOptions
from .utils import maybe_await
from .view import StringView

LOGGER = logging.getLogger("fluxer_commands")

Prefix = Union[str, Sequence[str], Callable[[MessageEvent], Any]]
ErrorListener = Callable[[CommandError], Union[Any, Awaitable[Any]]]
Hook = Callable[[Context], Awaitable[Any]]


def when_mentioned_or(user_id: Any, *prefixes: str) -> Callable[[MessageEvent], List[str]]:
    """Prefix callable accepting a mention of ``user_id`` or any of ``prefixes``."""
    user_id = str(user_id)

    def inner(event: MessageEvent) -> List[str]:
        return [f"<@{user_id}> ", f"<@!{user_id}> ", *prefixes]

    return inner


def dm_or(prefix: Prefix) -> Callable[[MessageEvent], Awaitable[List[str]]]:
    """Prefix callable that also accepts commands without any prefix in DMs."""

    async def inner(event: MessageEvent) -> List[str]:
        prefixes = await _resolve_prefix(prefix, event)
        if event.guild_id is None:
            prefixes.append("")
        return prefixes

    return inner


async def _resolve_prefix(prefix: Optional[Prefix], event: MessageEvent) -> List[str]:
    value = prefix
    if callable(value):
        value = await maybe_await(value(event))
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    raise ValueError("Invalid command prefix")


class Dispatcher(GroupMixin):
    """Root of the command tree and entry point for inbound events.

    Events are fed in through :meth:`process_message` and
    :meth:`process_interaction`. Neither raises: every failure is reported to
    the command's error handler and to the registered error listeners.
    A ``prefix`` of ``None`` disables text commands.
    """

    def __init__(
        self,
        prefix: Optional[Prefix] = "!",
        *,
        options: Optional[CommandsOptions] = None,
        registry: Optional[ConverterRegistry] = None,
        provider: Optional[EntityProvider] = None,
        user_id: Any = None,
        **kwargs: Any,
    ) -> None:
        self.options = CommandsOptions.from_kwargs(options, **kwargs)
        super().__init__(case_insensitive=self.options.case_insensitive)
        self.prefix = prefix
        self.registry = registry if registry is not None else ConverterRegistry().register_defaults()
        self.provider = provider
        self.user_id: Optional[str] = str(user_id) if user_id is not None else None
        self._context_commands: Dict[Tuple[ApplicationCommandType, str], ContextMenuCommand] = {}
        self._error_listeners: List[ErrorListener] = []
        self._before_invoke: Optional[Hook] = None
        self._after_invoke: Optional[Hook] = None

    @property
    def resolved_type(self) -> CommandType:
        command_type = self.options.type
        if self.options.infer_default_command_type and command_type is CommandType.all and self.prefix is None:
            return CommandType.slash_only
        return command_type

    @property
    def context_commands(self) -> List[ContextMenuCommand]:
        return list(self._context_commands.values())

    def add_command(self, command: CommandBase) -> None:
        if not isinstance(command, ContextMenuCommand):
            super().add_command(command)
            return
        if command.parent is not None:
            raise CommandRegistrationError(f'Command "{command.name}" has already been registered')
        key = (command.application_type, command.name)
        if key in self._context_commands:
            raise CommandRegistrationError(
                f'A {command.application_type.name} command with the name "{command.name}" already exists'
            )
        self._context_commands[key] = command
        command.parent = self
        LOGGER.info("Registered %s command %s", command.application_type.name, command.name)

    def get_context_command(self, type: ApplicationCommandType, name: str) -> Optional[ContextMenuCommand]:
        return self._context_commands.get((type, name))

    def remove_context_command(self, type: ApplicationCommandType, name: str) -> Optional[ContextMenuCommand]:
        command = self._context_commands.pop((type, name), None)
        if command is not None:
            command.parent = None
        return command

    def user_command(
        self, name: str, *, checks: Sequence[AbstractCheck] = ()
    ) -> Callable[[CommandCallback], UserCommand]:
        def decorator(func: CommandCallback) -> UserCommand:
            command = UserCommand(name, func, checks=checks)
            self.add_command(command)
            return command

        return decorator

    def message_command(
        self, name: str, *, checks: Sequence[AbstractCheck] = ()
    ) -> Callable[[CommandCallback], MessageCommand]:
        def decorator(func: CommandCallback) -> MessageCommand:
            command = MessageCommand(name, func, checks=checks)
            self.add_command(command)
            return command

        return decorator

    def add_converter(self, converter: Converter, type: Any = None) -> None:
        self.registry.add(converter, type)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def remove_error_listener(self, listener: ErrorListener) -> None:
        if listener in self._error_listeners:
            self._error_listeners.remove(listener)

    def error(self, listener: ErrorListener) -> ErrorListener:
        self.add_error_listener(listener)
        return listener

    def before_invoke(self, coro: Hook) -> Hook:
        self._before_invoke = coro
        return coro

    def after_invoke(self, coro: Hook) -> Hook:
        self._after_invoke = coro
        return coro

    def attach(self, client: Any) -> Callable[[Any], Awaitable[None]]:
        """Feed a client's ``on_message`` events into :meth:`process_message`."""

        async def on_message(message: Any) -> None:
            if self.user_id is None and getattr(client, "user", None) is not None:
                self.user_id = str(client.user.id)
            event = MessageEvent.from_message(message)
            channel = getattr(message, "channel", None)
            responder = None
            if channel is not None and hasattr(channel, "send"):
                responder = CallbackResponder(channel.send)
            await self.process_message(event, responder)

        client.add_listener(on_message, name="on_message")
        return on_message

    async def get_prefixes(self, event: MessageEvent) -> List[str]:
        return await _resolve_prefix(self.prefix, event)

    async def get_context(self, event: MessageEvent, responder: Optional[Respondable] = None) -> Optional[Context]:
        """Build a context for a text message, or ``None`` if it has no prefix."""
        view = StringView(event.content or "")
        matched = None
        for prefix in await self.get_prefixes(event):
            if prefix == "" or view.skip_string(prefix):
                matched = prefix
                break
        if matched is None:
            return None
        if not self.options.strip_prefix_whitespace and not view.eof and view.is_whitespace:
            return None

        view.skip_whitespace()
        start = view.index
        command = self.get_command(view)
        invoked_with = view.buffer[start:view.index].strip() or None
        if not isinstance(command, Command) or command.resolved_type is CommandType.slash_only:
            command = None

        return Context(
            origin=ContextOrigin.TEXT,
            dispatcher=self,
            author=event.author,
            channel=event.channel,
            guild_id=event.guild_id,
            member=event.member,
            command=command,
            prefix=matched,
            invoked_with=invoked_with,
            raw_arguments=view.remaining,
            responder=responder,
            attachments=list(event.attachments),
            event=event,
            view=view,
        )

    async def process_message(self, event: MessageEvent, responder: Optional[Respondable] = None) -> None:
        if event.author.bot and not self.options.accept_bot_commands:
            return
        if event.author.id == self.user_id and not self.options.accept_self_commands:
            return
        try:
            ctx = await self.get_context(event, responder)
        except Exception as exc:
            error = DispatchError(exc, event)
            error.__cause__ = exc
            await self.report(None, error)
            return
        if ctx is None:
            return
        if ctx.command is None:
            await self.report(ctx, CommandNotFound(StringView(event.content or "")))
            return
        await self.invoke(ctx)

    def resolve_path(self, path: Sequence[str]) -> Optional[CommandBase]:
        node: GroupMixin = self
        for name in path:
            child = node.all_commands.get(node._key(name))
            if child is None:
                return None
            node = child
        return node if isinstance(node, CommandBase) else None

    def _interaction_command(self, event: InteractionEvent) -> Optional[Invokable]:
        if event.command_type is not ApplicationCommandType.chat_input:
            return self.get_context_command(event.command_type, event.command_path[0])
        command = self.resolve_path(event.command_path)
        if not isinstance(command, Command) or command.resolved_type is CommandType.text_only:
            return None
        return command

    async def process_interaction(
        self, event: InteractionEvent, responder: Optional[Respondable] = None
    ) -> None:
        ctx = Context(
            origin=ContextOrigin.INTERACTION,
            dispatcher=self,
            author=event.author,
            channel=event.channel,
            guild_id=event.guild_id,
            member=event.member,
            command=self._interaction_command(event),
            invoked_with=" ".join(event.command_path),
            raw_arguments=dict(event.arguments),
            responder=responder,
            attachments=list(event.attachments),
            event=event,
            target=event.target,
        )
        if ctx.command is None:
            await self.report(ctx, CommandNotFound(StringView(" ".join(event.command_path))))
            return
        await self.invoke(ctx)

    async def invoke(self, ctx: Context) -> None:
        timeout = self.options.invoke_timeout
        try:
            if timeout is None:
                await self._execute(ctx)
            else:
                try:
                    await asyncio.wait_for(self._execute(ctx), timeout)
                except asyncio.TimeoutError:
                    raise InvocationTimeout(timeout, ctx) from None
        except CommandError as exc:
            await self.report(ctx, exc)

    async def _execute(self, ctx: Context) -> None:
        # Only CommandError escapes; a TimeoutError reaching invoke() is from wait_for.
        try:
            await self._run(ctx)
        except CommandError:
            raise
        except Exception as exc:
            raise CommandInvokeError(exc, ctx) from exc

    async def run_checks(self, ctx: Context) -> List[CheckResult]:
        results = []
        for check in ctx.command.checks:
            result = await check.evaluate(ctx)
            if not result.passed:
                raise CheckFailure(check, ctx)
            results.append(result)
        return results

    async def _run(self, ctx: Context) -> None:
        command = ctx.command
        LOGGER.debug("Invoking %s for user %s", command.qualified_name, ctx.user_id)

        results = await self.run_checks(ctx)
        try:
            for result in results:
                for hook in result.pre_call_hooks:
                    await maybe_await(hook(ctx))

            if self._before_invoke is not None:
                await maybe_await(self._before_invoke(ctx))
            if command._before_invoke is not None:
                await maybe_await(command._before_invoke(ctx))

            ctx.arguments = await self.bind_arguments(ctx)
            try:
                await command.callback(ctx, *ctx.arguments)
            except Exception as exc:
                raise CommandInvokeError(exc, ctx) from exc
        finally:
            await self._run_post_call_hooks(ctx, results)

        if command._after_invoke is not None:
            await maybe_await(command._after_invoke(ctx))
        if self._after_invoke is not None:
            await maybe_await(self._after_invoke(ctx))

    async def _run_post_call_hooks(self, ctx: Context, results: List[CheckResult]) -> None:
        for result in results:
            for hook in result.post_call_hooks:
                try:
                    await maybe_await(hook(ctx))
                except Exception:
                    LOGGER.exception("Error in post-call hook of check %s", result.check.name)

    async def bind_arguments(self, ctx: Context) -> List[Any]:
        command = ctx.command
        values: List[Any] = []

        if ctx.origin is ContextOrigin.TEXT:
            view = ctx.view if ctx.view is not None else StringView(str(ctx.raw_arguments))
            for param in command.params:
                view.skip_whitespace()
                if view.eof:
                    if param.required:
                        raise MissingRequiredArgument(param, ctx)
                    values.append(param.default)
                    continue
                if param.rest:
                    view.is_rest_block = True
                values.append(await parse(self.registry, ctx, view, param.type, param.converter))
            return values

        raw = ctx.raw_arguments
        for param in command.params:
            key = param.option_name if param.option_name in raw else param.name
            if key not in raw or raw[key] is None:
                if param.required:
                    raise MissingRequiredArgument(param, ctx)
                values.append(param.default)
                continue
            value = raw[key]
            if param.converter is None and isinstance(param.type, type) and isinstance(value, param.type):
                values.append(value)
                continue
            view = StringView(str(value), is_rest_block=True)
            values.append(await parse(self.registry, ctx, view, param.type, param.converter))
        return values

    async def report(self, ctx: Optional[Context], error: CommandError) -> None:
        if isinstance(error, CommandNotFound):
            LOGGER.debug("%s", error)
        elif self.options.log_errors:
            LOGGER.warning(
                "Error in command %s: %s",
                ctx.command.qualified_name if ctx is not None and ctx.command else "<unknown>",
                error,
                exc_info=error if isinstance(error, (CommandInvokeError, DispatchError)) else None,
            )

        command = ctx.command if ctx is not None else None
        if command is not None and command.error_handler is not None:
            try:
                await command.error_handler(ctx, error)
            except Exception:
                LOGGER.exception("Error in error handler of command %s", command.qualified_name)

        for listener in list(self._error_listeners):
            try:
                await maybe_await(listener(error))
            except Exception:
                LOGGER.exception("Error in error listener %r", listener)
