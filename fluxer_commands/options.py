from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .commands import CommandType


@dataclass
class CommandsOptions:
    case_insensitive: bool = True
    accept_bot_commands: bool = False
    # Own messages from a bot account also need accept_bot_commands.
    accept_self_commands: bool = False
    log_errors: bool = True
    invoke_timeout: Optional[float] = None
    strip_prefix_whitespace: bool = True
    type: CommandType = CommandType.all
    infer_default_command_type: bool = True

    @classmethod
    def from_kwargs(cls, base: Optional["CommandsOptions"] = None, **kwargs: Any) -> "CommandsOptions":
        known = {item.name for item in fields(cls)}
        unknown = set(kwargs) - known
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        values: Dict[str, Any] = {}
        if base is not None:
            values = {name: getattr(base, name) for name in known}
        values.update(kwargs)
        return cls(**values)
