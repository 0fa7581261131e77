from __future__ import annotations

import inspect
import re
from typing import Any, Callable, List, Optional, Sequence, TypeVar


class _MissingSentinel:
    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingSentinel()

T = TypeVar("T")


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


_KEBAB_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_kebab_case(name: str) -> str:
    name = _KEBAB_BOUNDARY.sub("-", name)
    return name.replace("_", "-").lower()


_ID_RE = re.compile(r"^(?:<(?:@[!&]?|#)(\d{15,20})>|(\d{15,20}))$")


def parse_snowflake(argument: str) -> Optional[str]:
    match = _ID_RE.match(argument)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def match_unique(
    query: str,
    candidates: Sequence[T],
    *keys: Callable[[T], Optional[str]],
) -> Optional[T]:
    """Pick a single candidate whose name matches ``query``.

    Three tiers are tried in order: exact, case-insensitive and prefix. Inside
    a tier every key is tried in order (e.g. username before nickname). A
    tier/key pair only wins if it matches exactly one candidate, so ambiguous
    names resolve to ``None`` instead of an arbitrary entity.
    """
    lowered = query.lower()
    tiers: List[Callable[[str], bool]] = [
        lambda name: name == query,
        lambda name: name.lower() == lowered,
        lambda name: name.lower().startswith(lowered),
    ]
    for matches in tiers:
        for key in keys:
            found = []
            for candidate in candidates:
                name = key(candidate)
                if name and matches(name):
                    found.append(candidate)
            if len(found) == 1:
                return found[0]
    return None
