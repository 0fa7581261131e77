"""End-to-end tests for text and structured dispatch."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fluxer_commands import (
    ApplicationCommandType,
    BadArgument,
    CallbackResponder,
    Channel,
    Check,
    CheckFailure,
    CommandInvokeError,
    CommandNotFound,
    CommandRegistrationError,
    CommandsOptions,
    CommandType,
    ContextOrigin,
    Converter,
    CooldownCheck,
    CooldownType,
    DispatchError,
    Dispatcher,
    IntConverter,
    InteractionEvent,
    InvocationTimeout,
    Member,
    MessageCommand,
    Messageable,
    MessageResponder,
    MissingRequiredArgument,
    OptionType,
    Param,
    User,
    UserCommand,
    UserCommandCheck,
    dm_or,
    when_mentioned_or,
)

from tests.helpers import AUTHOR_ID, CHANNEL_ID, GUILD_ID, message

BOT_ID = "999999999999999999"


def loud_flag(ctx, view):
    return True if view.get_word() == "--loud" else None


loud_converter = Converter(loud_flag, bool, type=OptionType.boolean)


@pytest.fixture
def errors(dispatcher):
    collected = []
    dispatcher.add_error_listener(collected.append)
    return collected


@pytest.fixture
def responder():
    return CallbackResponder(AsyncMock())


def interaction(path, arguments=None, guild_id=GUILD_ID):
    return InteractionEvent(
        author=User(id=AUTHOR_ID, username="alice"),
        channel=Channel(id=CHANNEL_ID, guild_id=guild_id),
        command_path=path,
        arguments=arguments or {},
        guild_id=guild_id,
    )


class TestTextDispatch:
    @pytest.mark.asyncio
    async def test_greet_with_quoted_name_and_flag(self, dispatcher, errors, responder):
        calls = []

        @dispatcher.command(params=[Param("name"), Param("loud", bool, default=False, converter=loud_converter)])
        async def greet(ctx, name, loud):
            calls.append((name, loud))
            await ctx.respond(f"Hello {name}")

        await dispatcher.process_message(message('!greet "John Doe" --loud'), responder)

        assert calls == [("John Doe", True)]
        responder.callback.assert_awaited_once_with("Hello John Doe")
        assert errors == []

    @pytest.mark.asyncio
    async def test_missing_optional_uses_default(self, dispatcher, errors):
        calls = []

        @dispatcher.command(params=[Param("name"), Param("loud", bool, default=False, converter=loud_converter)])
        async def greet(ctx, name, loud):
            calls.append((ctx.prefix, ctx.invoked_with, name, loud))

        await dispatcher.process_message(message("!GREET Bob"))

        assert calls == [("!", "GREET", "Bob", False)]

    @pytest.mark.asyncio
    async def test_rest_parameter_takes_remainder(self, dispatcher):
        calls = []

        @dispatcher.command(params=[Param("times", int), Param("text", rest=True)])
        async def say(ctx, times, text):
            calls.append((times, text))

        await dispatcher.process_message(message('!say 3 hello "big" world'))

        assert calls == [(3, 'hello "big" world')]

    @pytest.mark.asyncio
    async def test_nested_command(self, dispatcher):
        calls = []
        admin = dispatcher.group("admin")

        @admin.command(params=[Param("reason")])
        async def ban(ctx, reason):
            calls.append((ctx.command.qualified_name, reason))

        await dispatcher.process_message(message("!admin ban spam"))

        assert calls == [("admin ban", "spam")]

    @pytest.mark.asyncio
    async def test_not_enough_arguments(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.command(name="greet", params=[Param("name")])(handler)

        await dispatcher.process_message(message("!greet"))

        handler.assert_not_awaited()
        assert len(errors) == 1
        assert isinstance(errors[0], MissingRequiredArgument)
        assert errors[0].param.name == "name"

    @pytest.mark.asyncio
    async def test_bad_argument(self, dispatcher, errors):
        @dispatcher.command(params=[Param("count", int)])
        async def repeat(ctx, count):
            pass

        await dispatcher.process_message(message("!repeat lots"))

        assert isinstance(errors[0], BadArgument)
        assert errors[0].context.command is repeat

    @pytest.mark.asyncio
    async def test_unknown_command_is_reported(self, dispatcher, errors):
        await dispatcher.process_message(message("!nope"))

        assert len(errors) == 1
        assert isinstance(errors[0], CommandNotFound)

    @pytest.mark.asyncio
    async def test_group_alone_is_not_invocable(self, dispatcher, errors):
        dispatcher.group("admin")

        await dispatcher.process_message(message("!admin"))

        assert isinstance(errors[0], CommandNotFound)

    @pytest.mark.asyncio
    async def test_unprefixed_message_is_ignored(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.command(name="ping")(handler)

        await dispatcher.process_message(message("ping"))

        handler.assert_not_awaited()
        assert errors == []

    @pytest.mark.asyncio
    async def test_bots_are_ignored_unless_enabled(self):
        handler = AsyncMock()
        quiet = Dispatcher()
        quiet.command(name="ping")(handler)
        eager = Dispatcher(options=CommandsOptions(accept_bot_commands=True))
        eager.command(name="ping")(handler)

        await quiet.process_message(message("!ping", bot=True))
        handler.assert_not_awaited()

        await eager.process_message(message("!ping", bot=True))
        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_own_messages_are_ignored_unless_enabled(self):
        handler = AsyncMock()
        guarded = Dispatcher(user_id=AUTHOR_ID, accept_bot_commands=True)
        guarded.command(name="ping")(handler)
        loopback = Dispatcher(user_id=AUTHOR_ID, accept_bot_commands=True, accept_self_commands=True)
        loopback.command(name="ping")(handler)

        await guarded.process_message(message("!ping", bot=True))
        handler.assert_not_awaited()

        await loopback.process_message(message("!ping", bot=True))
        handler.assert_awaited_once()


class TestPrefixes:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "prefix, content",
        [
            (["?", "!"], "!ping"),
            (["?", "!"], "?ping"),
            (lambda event: "$", "$ping"),
            (when_mentioned_or(BOT_ID, "!"), f"<@{BOT_ID}> ping"),
            (when_mentioned_or(BOT_ID, "!"), f"<@!{BOT_ID}> ping"),
        ],
    )
    async def test_prefix_forms(self, prefix, content):
        handler = AsyncMock()
        dispatcher = Dispatcher(prefix)
        dispatcher.command(name="ping")(handler)

        await dispatcher.process_message(message(content))

        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_async_prefix_callable(self):
        async def prefix(event):
            return ["%"]

        handler = AsyncMock()
        dispatcher = Dispatcher(prefix)
        dispatcher.command(name="ping")(handler)

        await dispatcher.process_message(message("%ping"))

        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dm_or_allows_bare_commands_in_dms(self):
        handler = AsyncMock()
        dispatcher = Dispatcher(dm_or("!"))
        dispatcher.command(name="ping")(handler)

        await dispatcher.process_message(message("ping", guild_id=None))
        await dispatcher.process_message(message("ping"))

        assert handler.await_count == 1

    @pytest.mark.asyncio
    async def test_whitespace_after_prefix(self):
        handler = AsyncMock()
        strict = Dispatcher("!", strip_prefix_whitespace=False)
        strict.command(name="ping")(handler)
        lenient = Dispatcher("!")
        lenient.command(name="ping")(handler)

        await strict.process_message(message("! ping"))
        assert handler.await_count == 0

        await lenient.process_message(message("! ping"))
        assert handler.await_count == 1

    def test_unknown_option_is_rejected(self):
        with pytest.raises(TypeError):
            Dispatcher(not_an_option=True)


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_full_order_of_hooks(self, dispatcher, errors):
        order = []
        check = Check(lambda ctx: True, "tracked")
        check.before(lambda ctx: order.append("pre"))
        check.after(lambda ctx: order.append("post"))

        @dispatcher.command(checks=[check])
        async def ping(ctx):
            order.append("handler")

        @dispatcher.before_invoke
        async def global_before(ctx):
            order.append("global before")

        @ping.before_invoke
        async def local_before(ctx):
            order.append("local before")

        @ping.after_invoke
        async def local_after(ctx):
            order.append("local after")

        @dispatcher.after_invoke
        async def global_after(ctx):
            order.append("global after")

        await dispatcher.process_message(message("!ping"))

        assert order == [
            "pre",
            "global before",
            "local before",
            "handler",
            "post",
            "local after",
            "global after",
        ]
        assert errors == []

    @pytest.mark.asyncio
    async def test_failing_check_stops_dispatch(self, dispatcher, errors):
        handler = AsyncMock()
        local_errors = []
        guard = Check(lambda ctx: False, "never")
        command = dispatcher.command(name="ping", checks=[guard])(handler)

        @command.error
        async def on_error(ctx, error):
            local_errors.append(error)

        await dispatcher.process_message(message("!ping"))

        handler.assert_not_awaited()
        assert isinstance(errors[0], CheckFailure)
        assert errors[0].check is guard
        assert 'Check "never" failed' in str(errors[0])
        assert local_errors == errors

    @pytest.mark.asyncio
    async def test_inherited_check_runs_first(self, dispatcher, errors):
        seen = []
        dispatcher.check(Check(lambda ctx: seen.append("global") or False, "global"))

        @dispatcher.command(checks=[Check(lambda ctx: seen.append("own") or True, "own")])
        async def ping(ctx):
            pass

        await dispatcher.process_message(message("!ping"))

        assert seen == ["global"]
        assert errors[0].check.name == "global"

    @pytest.mark.asyncio
    async def test_handler_exception_is_wrapped_and_post_hooks_fire(self, dispatcher, errors):
        order = []
        check = Check(lambda ctx: True)
        check.after(lambda ctx: order.append("post"))

        @dispatcher.command(checks=[check])
        async def explode(ctx):
            raise ValueError("kaboom")

        await dispatcher.process_message(message("!explode"))

        assert order == ["post"]
        assert isinstance(errors[0], CommandInvokeError)
        assert isinstance(errors[0].original, ValueError)
        assert errors[0].__cause__ is errors[0].original

    @pytest.mark.asyncio
    async def test_post_hooks_fire_when_binding_fails(self, dispatcher, errors):
        order = []
        check = Check(lambda ctx: True)
        check.before(lambda ctx: order.append("pre"))
        check.after(lambda ctx: order.append("post"))

        @dispatcher.command(checks=[check], params=[Param("count", int)])
        async def repeat(ctx, count):
            order.append("handler")

        await dispatcher.process_message(message("!repeat many"))

        assert order == ["pre", "post"]
        assert isinstance(errors[0], BadArgument)

    @pytest.mark.asyncio
    async def test_post_hooks_fire_when_a_pre_hook_fails(self, dispatcher, errors):
        fired = []
        first = Check(lambda ctx: True, "first")
        first.before(lambda ctx: fired.append("first.pre"))
        first.after(lambda ctx: fired.append("first.post"))
        second = Check(lambda ctx: True, "second")

        @second.before
        def reserve(ctx):
            raise RuntimeError("no slots left")

        handler = AsyncMock()
        dispatcher.command(name="ping", checks=[first, second])(handler)

        await dispatcher.process_message(message("!ping"))

        handler.assert_not_awaited()
        assert fired == ["first.pre", "first.post"]
        assert isinstance(errors[0], CommandInvokeError)
        assert isinstance(errors[0].original, RuntimeError)

    @pytest.mark.asyncio
    async def test_failing_post_hook_keeps_handler_error(self, dispatcher, errors, caplog):
        fired = []
        check = Check(lambda ctx: True, "release")

        @check.after
        def release(ctx):
            raise RuntimeError("post hook failed")

        check.after(lambda ctx: fired.append("second post"))

        @dispatcher.command(checks=[check])
        async def explode(ctx):
            raise ValueError("kaboom")

        with caplog.at_level(logging.ERROR, logger="fluxer_commands"):
            await dispatcher.process_message(message("!explode"))

        assert len(errors) == 1
        assert isinstance(errors[0], CommandInvokeError)
        assert isinstance(errors[0].original, ValueError)
        assert fired == ["second post"]
        assert "Error in post-call hook of check release" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timeout", [None, 5])
    async def test_timeout_raised_by_a_check_is_an_invoke_error(self, timeout):
        dispatcher = Dispatcher(invoke_timeout=timeout)
        received = []
        dispatcher.add_error_listener(received.append)

        def lookup(ctx):
            raise TimeoutError("upstream lookup timed out")

        handler = AsyncMock()
        dispatcher.command(name="ping", checks=[Check(lookup, "lookup")])(handler)

        await dispatcher.process_message(message("!ping"))

        handler.assert_not_awaited()
        assert len(received) == 1
        assert not isinstance(received[0], InvocationTimeout)
        assert isinstance(received[0], CommandInvokeError)
        assert isinstance(received[0].original, TimeoutError)

    @pytest.mark.asyncio
    async def test_cooldown_consumes_only_after_all_checks_pass(self, dispatcher, errors):
        handler = AsyncMock()
        cooldown = CooldownCheck(CooldownType.user, 60)
        allowed = {"value": False}
        gate = Check(lambda ctx: allowed["value"], "gate")
        dispatcher.command(name="ping", checks=[cooldown, gate])(handler)

        await dispatcher.process_message(message("!ping"))
        assert isinstance(errors[-1], CheckFailure)
        assert errors[-1].check is gate

        allowed["value"] = True
        await dispatcher.process_message(message("!ping"))
        await dispatcher.process_message(message("!ping"))

        assert handler.await_count == 1
        assert errors[-1].check is cooldown

    @pytest.mark.asyncio
    async def test_timeout(self, errors):
        dispatcher = Dispatcher(invoke_timeout=0.01)
        dispatcher.add_error_listener(errors.append)

        @dispatcher.command()
        async def slow(ctx):
            await asyncio.sleep(5)

        await dispatcher.process_message(message("!slow"))

        assert isinstance(errors[0], InvocationTimeout)
        assert errors[0].timeout == 0.01


class TestErrorSink:
    @pytest.mark.asyncio
    async def test_listener_failures_are_logged_not_raised(self, dispatcher, caplog):
        later = []

        def broken(error):
            raise RuntimeError("listener broke")

        dispatcher.add_error_listener(broken)
        dispatcher.add_error_listener(later.append)

        with caplog.at_level(logging.ERROR, logger="fluxer_commands"):
            await dispatcher.process_message(message("!nope"))

        assert len(later) == 1
        assert "Error in error listener" in caplog.text

    @pytest.mark.asyncio
    async def test_error_decorator_and_removal(self, dispatcher):
        received = []

        @dispatcher.error
        async def on_error(error):
            received.append(error)

        await dispatcher.process_message(message("!nope"))
        dispatcher.remove_error_listener(on_error)
        await dispatcher.process_message(message("!nope"))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_errors_are_logged_when_enabled(self, dispatcher, caplog):
        @dispatcher.command(params=[Param("count", int)])
        async def repeat(ctx, count):
            pass

        with caplog.at_level(logging.WARNING, logger="fluxer_commands"):
            await dispatcher.process_message(message("!repeat x"))

        assert "Error in command repeat" in caplog.text

    @pytest.mark.asyncio
    async def test_prefix_failure_reaches_listeners(self):
        def prefix(event):
            raise RuntimeError("prefix store unavailable")

        dispatcher = Dispatcher(prefix)
        received = []
        dispatcher.add_error_listener(received.append)

        await dispatcher.process_message(message("!ping"))

        assert len(received) == 1
        assert isinstance(received[0], DispatchError)
        assert isinstance(received[0].original, RuntimeError)
        assert received[0].event.content == "!ping"


class TestStructuredDispatch:
    @pytest.fixture
    def poke(self, dispatcher):
        calls = []

        @dispatcher.command(params=[Param("target"), Param("max_count", int, default=3)])
        async def poke(ctx, target, max_count):
            calls.append((ctx.origin, target, max_count))

        return calls

    @pytest.mark.asyncio
    async def test_type_correct_values_skip_conversion(self, dispatcher, poke, errors):
        await dispatcher.process_interaction(interaction(["poke"], {"target": "bob smith", "max-count": 5}))

        assert poke == [(ContextOrigin.INTERACTION, "bob smith", 5)]
        assert errors == []

    @pytest.mark.asyncio
    async def test_raw_strings_are_converted(self, dispatcher, poke):
        await dispatcher.process_interaction(interaction(["poke"], {"target": "bob", "max_count": "7"}))

        assert poke == [(ContextOrigin.INTERACTION, "bob", 7)]

    @pytest.mark.asyncio
    async def test_absent_optional_uses_default(self, dispatcher, poke):
        await dispatcher.process_interaction(interaction(["poke"], {"target": "bob", "max-count": None}))

        assert poke == [(ContextOrigin.INTERACTION, "bob", 3)]

    @pytest.mark.asyncio
    async def test_absent_required_is_reported(self, dispatcher, poke, errors):
        await dispatcher.process_interaction(interaction(["poke"], {}))

        assert poke == []
        assert isinstance(errors[0], MissingRequiredArgument)

    @pytest.mark.asyncio
    async def test_converter_override_always_converts(self, dispatcher, errors):
        @dispatcher.command(params=[Param("level", int, converter=IntConverter(max=5))])
        async def volume(ctx, level):
            pass

        await dispatcher.process_interaction(interaction(["volume"], {"level": 9}))

        assert isinstance(errors[0], BadArgument)

    @pytest.mark.asyncio
    async def test_nested_path_and_unknown_path(self, dispatcher, errors):
        calls = []
        admin = dispatcher.group("admin")

        @admin.command()
        async def purge(ctx):
            calls.append(ctx.invoked_with)

        await dispatcher.process_interaction(interaction(["admin", "purge"]))
        await dispatcher.process_interaction(interaction(["admin"]))
        await dispatcher.process_interaction(interaction(["missing"]))

        assert calls == ["admin purge"]
        assert [type(error) for error in errors] == [CommandNotFound, CommandNotFound]

    @pytest.mark.asyncio
    async def test_respond_without_responder_is_an_invoke_error(self, dispatcher, errors):
        @dispatcher.command()
        async def ping(ctx):
            await ctx.respond("pong")

        await dispatcher.process_interaction(interaction(["ping"]))

        assert isinstance(errors[0], CommandInvokeError)
        assert isinstance(errors[0].original, RuntimeError)


class TestAttach:
    @pytest.mark.asyncio
    async def test_attach_feeds_client_messages(self, dispatcher):
        client = MagicMock()

        @dispatcher.command()
        async def ping(ctx):
            await ctx.respond("pong")

        on_message = dispatcher.attach(client)

        client.add_listener.assert_called_once_with(on_message, name="on_message")

        channel = SimpleNamespace(send=AsyncMock())
        incoming = SimpleNamespace(
            author=SimpleNamespace(id=int(AUTHOR_ID), username="alice", bot=False),
            channel=channel,
            channel_id=int(CHANNEL_ID),
            guild_id=int(GUILD_ID),
            content="!ping",
        )

        await on_message(incoming)

        channel.send.assert_awaited_once_with("pong")


class RecordingChannel(Messageable):
    def __init__(self):
        self.sent = []

    async def send(self, content=None, **kwargs):
        self.sent.append((content, kwargs))
        return len(self.sent)


class TestResponders:
    @pytest.mark.asyncio
    async def test_message_responder_sends_to_target(self, dispatcher):
        target = RecordingChannel()

        @dispatcher.command()
        async def ping(ctx):
            await ctx.respond("pong")
            await ctx.send(embeds=[{"title": "t"}])

        await dispatcher.process_message(message("!ping"), MessageResponder(target))

        assert target.sent == [("pong", {}), (None, {"embeds": [{"title": "t"}]})]


class TestCommandTypes:
    @pytest.mark.asyncio
    async def test_text_only_command_is_hidden_from_interactions(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.command(name="ping", type=CommandType.text_only)(handler)

        await dispatcher.process_interaction(interaction(["ping"]))
        assert isinstance(errors[-1], CommandNotFound)

        await dispatcher.process_message(message("!ping"))
        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_slash_only_command_is_hidden_from_text(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.command(name="ping", type=CommandType.slash_only)(handler)

        await dispatcher.process_message(message("!ping"))
        assert isinstance(errors[-1], CommandNotFound)

        await dispatcher.process_interaction(interaction(["ping"]))
        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_type_is_inherited_and_overridable(self, dispatcher, errors):
        admin = dispatcher.group("admin", type=CommandType.slash_only)
        inherited = AsyncMock()
        overridden = AsyncMock()
        admin.command(name="ban")(inherited)
        admin.command(name="kick", type=CommandType.all)(overridden)

        await dispatcher.process_message(message("!admin ban"))
        await dispatcher.process_message(message("!admin kick"))

        inherited.assert_not_awaited()
        overridden.assert_awaited_once()
        assert admin.get_command("ban").resolved_type is CommandType.slash_only

    def test_default_type_comes_from_options(self):
        assert Dispatcher("!").resolved_type is CommandType.all
        assert Dispatcher("!", type=CommandType.text_only).resolved_type is CommandType.text_only

    @pytest.mark.asyncio
    async def test_no_prefix_infers_slash_only(self):
        handler = AsyncMock()
        dispatcher = Dispatcher(None)
        command = dispatcher.command(name="ping")(handler)

        assert command.resolved_type is CommandType.slash_only
        assert Dispatcher(None, infer_default_command_type=False).resolved_type is CommandType.all

        await dispatcher.process_message(message("ping"))
        await dispatcher.process_interaction(interaction(["ping"]))

        handler.assert_awaited_once()


def context_menu(kind, name, target):
    return InteractionEvent(
        author=User(id=AUTHOR_ID, username="alice"),
        channel=Channel(id=CHANNEL_ID, guild_id=GUILD_ID),
        command_path=[name],
        guild_id=GUILD_ID,
        command_type=kind,
        target_id=target.id if hasattr(target, "id") else None,
        target=target,
    )


class TestContextMenuCommands:
    @pytest.mark.asyncio
    async def test_user_command_receives_target(self, dispatcher, errors):
        seen = []
        target = Member(user=User(id="555555555555555555", username="bob"), guild_id=GUILD_ID)

        @dispatcher.user_command("Report user")
        async def report(ctx):
            seen.append((ctx.target, ctx.origin, ctx.arguments))

        await dispatcher.process_interaction(context_menu(ApplicationCommandType.user, "Report user", target))

        assert errors == []
        assert seen == [(target, ContextOrigin.INTERACTION, [])]
        assert isinstance(report, UserCommand)

    @pytest.mark.asyncio
    async def test_message_command_and_kind_mismatch(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.add_command(MessageCommand("Quote", handler))
        quoted = message("hello there")

        await dispatcher.process_interaction(context_menu(ApplicationCommandType.user, "Quote", quoted))
        assert isinstance(errors[-1], CommandNotFound)

        await dispatcher.process_interaction(context_menu(ApplicationCommandType.message, "Quote", quoted))
        handler.assert_awaited_once()
        assert handler.await_args.args[0].target is quoted

    @pytest.mark.asyncio
    async def test_dispatcher_checks_apply(self, dispatcher, errors):
        handler = AsyncMock()
        dispatcher.check(UserCommandCheck())
        dispatcher.add_command(UserCommand("Profile", handler))
        dispatcher.add_command(MessageCommand("Profile", handler))
        target = User(id="555555555555555555")

        await dispatcher.process_interaction(context_menu(ApplicationCommandType.user, "Profile", target))
        await dispatcher.process_interaction(context_menu(ApplicationCommandType.message, "Profile", target))

        assert handler.await_count == 1
        assert isinstance(errors[0], CheckFailure)

    def test_registration_rules(self, dispatcher):
        dispatcher.add_command(UserCommand("Report user", AsyncMock()))

        with pytest.raises(CommandRegistrationError):
            dispatcher.add_command(UserCommand("Report user", AsyncMock()))
        with pytest.raises(CommandRegistrationError):
            dispatcher.group("admin").add_command(UserCommand("Ban", AsyncMock()))
        with pytest.raises(CommandRegistrationError):
            UserCommand("x" * 33, AsyncMock())
        with pytest.raises(CommandRegistrationError):
            UserCommand("Report", AsyncMock()).add_command(UserCommand("Nested", AsyncMock()))

        removed = dispatcher.remove_context_command(ApplicationCommandType.user, "Report user")
        assert removed.parent is None
        assert dispatcher.context_commands == []
        assert list(dispatcher.walk_commands())[0].name == "admin"
