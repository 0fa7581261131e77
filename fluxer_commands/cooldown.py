from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from enum import IntFlag
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union

from .checks import AbstractCheck, CheckHook, CheckResult

if TYPE_CHECKING:
    from .context import Context


class CooldownType(IntFlag):
    category = 1 << 0
    channel = 1 << 1
    command = 1 << 2
    global_ = 1 << 3
    guild = 1 << 4
    role = 1 << 5
    user = 1 << 6


_DIMENSIONS = (
    CooldownType.category,
    CooldownType.channel,
    CooldownType.command,
    CooldownType.global_,
    CooldownType.guild,
    CooldownType.role,
    CooldownType.user,
)


@dataclass
class _BucketEntry:
    start: float
    count: int = 1


BucketKey = Tuple[Any, ...]


class CooldownCheck(AbstractCheck):
    """Rate limits invocations to ``tokens_per`` uses per ``duration``.

    Usage is tracked in two generations of buckets, each covering one
    ``duration``. A key found in the current generation is certainly on
    cooldown once its tokens are spent. A key found only in the previous
    generation may still be on cooldown and needs its window start checked.
    A key found in neither is free. The previous generation is replaced
    wholesale on rollover, so nothing has to be swept or timed out per key.

    Tokens are consumed by the pre-call hook, which only runs once every
    check on the command has passed.
    """

    def __init__(
        self,
        type: CooldownType,
        duration: Union[float, timedelta],
        *,
        tokens_per: int = 1,
        name: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(duration, timedelta):
            duration = duration.total_seconds()
        if duration <= 0:
            raise ValueError("duration must be > 0")
        if tokens_per <= 0:
            raise ValueError("tokens_per must be > 0")
        super().__init__(name or f"Cooldown Check on {type!r}")
        self.type = CooldownType(type)
        self.duration = float(duration)
        self.tokens_per = tokens_per
        self._clock = clock
        self._current: Dict[BucketKey, _BucketEntry] = {}
        self._previous: Dict[BucketKey, _BucketEntry] = {}
        self._current_start = clock()

    @property
    def pre_call_hooks(self) -> List[CheckHook]:
        return [self._consume]

    def _rollover(self, now: float) -> None:
        if now > self._current_start + self.duration:
            self._previous = self._current
            self._current = {}
            self._current_start = now

    def _is_active(self, entry: _BucketEntry, now: float) -> bool:
        return entry.start + self.duration > now

    def get_key(self, ctx: "Context") -> BucketKey:
        keys: List[Any] = []
        in_guild = ctx.guild_id is not None
        for dimension in _DIMENSIONS:
            if not self.type & dimension:
                continue
            if dimension is CooldownType.category:
                parent_id = getattr(ctx.channel, "parent_id", None)
                keys.append(parent_id if in_guild and parent_id else ctx.channel_id)
            elif dimension is CooldownType.channel:
                keys.append(ctx.channel_id)
            elif dimension is CooldownType.command:
                keys.append(ctx.command.qualified_name if ctx.command else None)
            elif dimension is CooldownType.global_:
                keys.append(0)
            elif dimension is CooldownType.guild:
                keys.append(ctx.guild_id if in_guild else ctx.user_id)
            elif dimension is CooldownType.role:
                if ctx.member is not None and in_guild:
                    top_role = ctx.member.top_role
                    # Members without a known role fall into the guild's default role.
                    keys.append(top_role.id if top_role is not None else ctx.guild_id)
                else:
                    keys.append(ctx.user_id)
            elif dimension is CooldownType.user:
                keys.append(ctx.user_id)
        return tuple(keys)

    def _passes(self, key: BucketKey, now: float) -> bool:
        self._rollover(now)
        entry = self._current.get(key)
        if entry is not None:
            return entry.count < self.tokens_per
        entry = self._previous.get(key)
        if entry is not None:
            return not self._is_active(entry, now) or entry.count < self.tokens_per
        return True

    async def evaluate(self, ctx: "Context") -> CheckResult:
        return self._result(self._passes(self.get_key(ctx), self._clock()))

    def _consume(self, ctx: "Context") -> None:
        now = self._clock()
        key = self.get_key(ctx)
        previous = self._previous.get(key)
        if previous is not None and self._is_active(previous, now):
            previous.count += 1
        elif key in self._current:
            self._current[key].count += 1
        else:
            self._current[key] = _BucketEntry(start=now)

    def remaining(self, ctx: "Context") -> float:
        """Seconds until ``ctx`` may invoke again, ``0.0`` if it already can."""
        now = self._clock()
        key = self.get_key(ctx)
        if self._passes(key, now):
            return 0.0
        entry = self._current.get(key) or self._previous.get(key)
        if entry is None:
            return 0.0
        return max(0.0, entry.start + self.duration - now)

    def reset(self, ctx: "Context") -> None:
        key = self.get_key(ctx)
        self._current.pop(key, None)
        self._previous.pop(key, None)
