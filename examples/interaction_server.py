import asyncio
import logging
import os
from enum import Enum

from fluxer_commands import (
    CheckFailure,
    Command,
    CommandType,
    Dispatcher,
    FloatConverter,
    InteractionCommandCheck,
    InteractionServer,
    Param,
)


HOST = os.environ.get("INTERACTIONS_HOST", "127.0.0.1")
PORT = int(os.environ.get("INTERACTIONS_PORT", "8080"))

logging.basicConfig(level=logging.DEBUG)


class Unit(Enum):
    celsius = "c"
    fahrenheit = "f"


commands = Dispatcher(None)
commands.check(InteractionCommandCheck())


@commands.command(params=[Param("degrees", float, converter=FloatConverter(min=-273.15)), Param("to", Unit)])
async def convert(ctx, degrees, to):
    """Convert a temperature."""
    if to is Unit.fahrenheit:
        await ctx.respond(f"{degrees * 9 / 5 + 32:.1f}°F")
    else:
        await ctx.respond(f"{(degrees - 32) * 5 / 9:.1f}°C")


@commands.user_command("Say hello")
async def say_hello(ctx):
    await ctx.respond(f"Hello {ctx.target.mention}!", ephemeral=True)


@commands.error
async def on_command_error(error):
    if isinstance(error, CheckFailure):
        return
    print(f"command failed: {error}")


def print_schema():
    for command in commands.walk_commands():
        if isinstance(command, Command) and command.resolved_type is not CommandType.text_only:
            print(command.qualified_name, [option.name for option in command.describe_options(commands.registry)])
    for command in commands.context_commands:
        print(command.application_type.name, command.name)


async def main():
    server = InteractionServer(commands)
    await server.start(HOST, PORT)
    try:
        await asyncio.Event().wait()
    finally:
        await server.close()


if __name__ == "__main__":
    print_schema()
    asyncio.run(main())
