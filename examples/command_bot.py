import logging
import os

import fluxer

from fluxer_commands import (
    Check,
    CooldownCheck,
    CooldownType,
    Dispatcher,
    Member,
    Param,
    PermissionsCheck,
    Permissions,
    when_mentioned_or,
)


TOKEN = os.environ.get("FLUXER_TOKEN", "")
BOT_ID = os.environ.get("FLUXER_BOT_ID", "0")

logging.basicConfig(level=logging.INFO)

client = fluxer.Client()
commands = Dispatcher(when_mentioned_or(BOT_ID, "!"))
commands.attach(client)


@client.event
async def on_ready():
    print("Fluxer command bot connected")


@commands.command(checks=[CooldownCheck(CooldownType.user, 5)])
async def ping(ctx):
    """Check that the bot is alive."""
    await ctx.respond("pong")


@commands.command(aliases=["say"], params=[Param("text", rest=True)])  # !echo hello world
async def echo(ctx, text):
    await ctx.respond(text)


moderation = commands.group("mod", checks=[PermissionsCheck(Permissions(kick_members=True), allows_dm=False)])


@moderation.command(params=[Param("member", Member), Param("reason", default=None, rest=True)])
async def warn(ctx, member, reason):
    await ctx.respond(f"{member.display_name} has been warned: {reason or 'no reason given'}")


@commands.command(checks=[Check.deny(Check(lambda ctx: ctx.is_dm, "dm"), "not in DMs")])
async def where(ctx):
    await ctx.respond(f"This is channel {ctx.channel.mention}")


@commands.error
async def on_command_error(error):
    print(f"command failed: {error}")


if __name__ == "__main__":
    if not TOKEN:
        raise SystemExit("Set FLUXER_TOKEN in the environment")
    client.run(TOKEN)
