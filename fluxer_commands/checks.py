from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence

from .context import ContextOrigin
from .models import ApplicationCommandType
from .permissions import PERMISSIONS, Permissions
from .utils import maybe_await

if TYPE_CHECKING:
    from .context import Context

CheckHook = Callable[["Context"], Any]
CheckPredicate = Callable[["Context"], Any]


@dataclass
class CheckResult:
    """Outcome of one evaluation; carries the hooks to fire if the chain passes."""

    check: "AbstractCheck"
    passed: bool
    pre_call_hooks: List[CheckHook] = field(default_factory=list)
    post_call_hooks: List[CheckHook] = field(default_factory=list)
    matched: Optional["CheckResult"] = None

    def __bool__(self) -> bool:
        return self.passed


class AbstractCheck(ABC):
    def __init__(self, name: str = "Check") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"

    @property
    def allows_dm(self) -> bool:
        return True

    @property
    def required_permissions(self) -> Optional[Permissions]:
        return None

    @property
    def pre_call_hooks(self) -> List[CheckHook]:
        return []

    @property
    def post_call_hooks(self) -> List[CheckHook]:
        return []

    @abstractmethod
    async def evaluate(self, ctx: "Context") -> CheckResult:
        raise NotImplementedError

    async def check(self, ctx: "Context") -> bool:
        result = await self.evaluate(ctx)
        return result.passed

    def _result(self, passed: bool) -> CheckResult:
        return CheckResult(
            check=self,
            passed=bool(passed),
            pre_call_hooks=list(self.pre_call_hooks),
            post_call_hooks=list(self.post_call_hooks),
        )


class Check(AbstractCheck):
    def __init__(
        self,
        predicate: CheckPredicate,
        name: str = "Check",
        *,
        allows_dm: bool = True,
        required_permissions: Optional[Permissions] = None,
    ) -> None:
        super().__init__(name)
        self.predicate = predicate
        self._allows_dm = allows_dm
        self._required_permissions = required_permissions
        self._pre_call_hooks: List[CheckHook] = []
        self._post_call_hooks: List[CheckHook] = []

    @property
    def allows_dm(self) -> bool:
        return self._allows_dm

    @property
    def required_permissions(self) -> Optional[Permissions]:
        return self._required_permissions

    @property
    def pre_call_hooks(self) -> List[CheckHook]:
        return self._pre_call_hooks

    @property
    def post_call_hooks(self) -> List[CheckHook]:
        return self._post_call_hooks

    def before(self, hook: CheckHook) -> CheckHook:
        self._pre_call_hooks.append(hook)
        return hook

    def after(self, hook: CheckHook) -> CheckHook:
        self._post_call_hooks.append(hook)
        return hook

    async def evaluate(self, ctx: "Context") -> CheckResult:
        passed = await maybe_await(self.predicate(ctx))
        return self._result(passed)

    @staticmethod
    def any(checks: Iterable[AbstractCheck], name: Optional[str] = None) -> "AnyCheck":
        return AnyCheck(checks, name)

    @staticmethod
    def all(checks: Iterable[AbstractCheck], name: Optional[str] = None) -> "AllCheck":
        return AllCheck(checks, name)

    @staticmethod
    def deny(check: AbstractCheck, name: Optional[str] = None) -> "DenyCheck":
        return DenyCheck(check, name)


def _joined(checks: Sequence[AbstractCheck]) -> str:
    return ", ".join(check.name for check in checks)


class AnyCheck(AbstractCheck):
    def __init__(self, checks: Iterable[AbstractCheck], name: Optional[str] = None) -> None:
        self.checks = list(checks)
        if not self.checks:
            raise ValueError("Cannot build an any check with no children")
        super().__init__(name or f"Any of [{_joined(self.checks)}]")

    @property
    def allows_dm(self) -> bool:
        return any(check.allows_dm for check in self.checks)

    @property
    def required_permissions(self) -> Optional[Permissions]:
        masks = [check.required_permissions for check in self.checks]
        if any(mask is None for mask in masks):
            return None
        union = Permissions.none()
        for mask in masks:
            union = union | mask
        return union

    async def evaluate(self, ctx: "Context") -> CheckResult:
        for check in self.checks:
            result = await check.evaluate(ctx)
            if result.passed:
                return CheckResult(
                    check=self,
                    passed=True,
                    pre_call_hooks=list(result.pre_call_hooks),
                    post_call_hooks=list(result.post_call_hooks),
                    matched=result,
                )
        return CheckResult(check=self, passed=False)


class AllCheck(AbstractCheck):
    def __init__(self, checks: Iterable[AbstractCheck], name: Optional[str] = None) -> None:
        self.checks = list(checks)
        super().__init__(name or f"All of [{_joined(self.checks)}]")

    @property
    def allows_dm(self) -> bool:
        return all(check.allows_dm for check in self.checks)

    @property
    def required_permissions(self) -> Optional[Permissions]:
        masks = [check.required_permissions for check in self.checks]
        if not masks or any(mask is None for mask in masks):
            return None
        intersection = Permissions.all()
        for mask in masks:
            intersection = intersection & mask
        return intersection

    @property
    def pre_call_hooks(self) -> List[CheckHook]:
        return [hook for check in self.checks for hook in check.pre_call_hooks]

    @property
    def post_call_hooks(self) -> List[CheckHook]:
        return [hook for check in self.checks for hook in check.post_call_hooks]

    async def evaluate(self, ctx: "Context") -> CheckResult:
        pre: List[CheckHook] = []
        post: List[CheckHook] = []
        for check in self.checks:
            result = await check.evaluate(ctx)
            if not result.passed:
                failed = self._result(False)
                failed.matched = result
                return failed
            pre.extend(result.pre_call_hooks)
            post.extend(result.post_call_hooks)
        return CheckResult(check=self, passed=True, pre_call_hooks=pre, post_call_hooks=post)


class DenyCheck(AbstractCheck):
    def __init__(self, check: AbstractCheck, name: Optional[str] = None) -> None:
        self.inner = check
        super().__init__(name or f"Denied {check.name}")

    @property
    def allows_dm(self) -> bool:
        return not self.inner.allows_dm

    @property
    def required_permissions(self) -> Optional[Permissions]:
        mask = self.inner.required_permissions
        if mask is None:
            return None
        return ~mask

    @property
    def pre_call_hooks(self) -> List[CheckHook]:
        return self.inner.pre_call_hooks

    @property
    def post_call_hooks(self) -> List[CheckHook]:
        return self.inner.post_call_hooks

    async def evaluate(self, ctx: "Context") -> CheckResult:
        result = await self.inner.evaluate(ctx)
        return CheckResult(
            check=self,
            passed=not result.passed,
            pre_call_hooks=list(result.pre_call_hooks),
            post_call_hooks=list(result.post_call_hooks),
            matched=result,
        )


class GuildCheck(Check):
    def __init__(
        self,
        predicate: CheckPredicate,
        name: str,
        guild_ids: Sequence[Optional[str]],
        *,
        allows_dm: bool = False,
        required_permissions: Optional[Permissions] = None,
    ) -> None:
        super().__init__(predicate, name, allows_dm=allows_dm, required_permissions=required_permissions)
        self.guild_ids = list(guild_ids)

    @classmethod
    def id(cls, guild_id: Any, name: Optional[str] = None) -> "GuildCheck":
        guild_id = str(guild_id)
        return cls(lambda ctx: ctx.guild_id == guild_id, name or f"Guild Check on {guild_id}", [guild_id])

    @classmethod
    def any_id(cls, guild_ids: Iterable[Any], name: Optional[str] = None) -> "GuildCheck":
        ids = [str(guild_id) for guild_id in guild_ids]
        return cls(
            lambda ctx: ctx.guild_id in ids,
            name or f"Guild Check on any of [{', '.join(ids)}]",
            ids,
        )

    @classmethod
    def none(cls, name: Optional[str] = None) -> "GuildCheck":
        return cls(
            lambda ctx: ctx.guild_id is None,
            name or "Guild Check on <none>",
            [],
            allows_dm=True,
            required_permissions=Permissions.none(),
        )

    @classmethod
    def all(cls, name: Optional[str] = None) -> "GuildCheck":
        return cls(lambda ctx: ctx.guild_id is not None, name or "Guild Check on <any>", [None])


class UserCheck(Check):
    def __init__(self, user_ids: Iterable[Any], name: Optional[str] = None) -> None:
        self.user_ids = [str(user_id) for user_id in user_ids]
        if name is None:
            if len(self.user_ids) == 1:
                name = f"User Check on {self.user_ids[0]}"
            else:
                name = f"User Check on any of [{', '.join(self.user_ids)}]"
        super().__init__(lambda ctx: ctx.user_id in self.user_ids, name)

    @classmethod
    def id(cls, user_id: Any, name: Optional[str] = None) -> "UserCheck":
        return cls([user_id], name)

    @classmethod
    def any_id(cls, user_ids: Iterable[Any], name: Optional[str] = None) -> "UserCheck":
        return cls(user_ids, name)


class RoleCheck(Check):
    def __init__(self, role_ids: Iterable[Any], name: Optional[str] = None) -> None:
        self.role_ids = [str(role_id) for role_id in role_ids]
        if name is None:
            if len(self.role_ids) == 1:
                name = f"Role Check on {self.role_ids[0]}"
            else:
                name = f"Role Check on any of [{', '.join(self.role_ids)}]"
        super().__init__(self._has_role, name)

    def _has_role(self, ctx: "Context") -> bool:
        if ctx.member is None:
            return False
        return any(role.id in self.role_ids for role in ctx.member.roles)

    @classmethod
    def id(cls, role_id: Any, name: Optional[str] = None) -> "RoleCheck":
        return cls([role_id], name)

    @classmethod
    def any_id(cls, role_ids: Iterable[Any], name: Optional[str] = None) -> "RoleCheck":
        return cls(role_ids, name)


_ADMINISTRATOR = PERMISSIONS["administrator"]


class PermissionsCheck(Check):
    def __init__(
        self,
        permissions: Permissions,
        *,
        requires_all: bool = False,
        allows_dm: bool = True,
        name: Optional[str] = None,
    ) -> None:
        self.permissions = permissions
        self.requires_all = requires_all
        super().__init__(
            self._has_permissions,
            name or f"Permissions check on {permissions.value}",
            allows_dm=allows_dm,
            required_permissions=permissions,
        )

    def _has_permissions(self, ctx: "Context") -> bool:
        member = ctx.member
        if member is None:
            return self.allows_dm
        if member.permissions is None:
            return False
        effective = member.permissions
        if effective & _ADMINISTRATOR:
            return True
        corresponding = effective & self.permissions.value
        if self.requires_all:
            return corresponding == self.permissions.value
        return corresponding != 0

    @classmethod
    def nobody(cls, *, allows_dm: bool = True, name: Optional[str] = None) -> "PermissionsCheck":
        return cls(Permissions.none(), allows_dm=allows_dm, name=name)


def _application_type(ctx: "Context") -> Optional[ApplicationCommandType]:
    return getattr(ctx.command, "application_type", None)


class InteractionCommandCheck(Check):
    def __init__(self, name: str = "Interaction check") -> None:
        super().__init__(lambda ctx: ctx.origin is ContextOrigin.INTERACTION, name)


class ChatCommandCheck(Check):
    def __init__(self, name: str = "Chat command check") -> None:
        super().__init__(lambda ctx: _application_type(ctx) is ApplicationCommandType.chat_input, name)


class InteractionChatCommandCheck(Check):
    def __init__(self, name: str = "Interaction chat command check") -> None:
        super().__init__(
            lambda ctx: ctx.origin is ContextOrigin.INTERACTION
            and _application_type(ctx) is ApplicationCommandType.chat_input,
            name,
        )


class MessageChatCommandCheck(Check):
    # Exported as unavailable to structured invocations everywhere.
    def __init__(self, name: str = "Message chat command check") -> None:
        super().__init__(
            lambda ctx: ctx.origin is ContextOrigin.TEXT,
            name,
            allows_dm=False,
            required_permissions=Permissions.none(),
        )


class UserCommandCheck(Check):
    def __init__(self, name: str = "User command check") -> None:
        super().__init__(lambda ctx: _application_type(ctx) is ApplicationCommandType.user, name)


class MessageCommandCheck(Check):
    def __init__(self, name: str = "Message command check") -> None:
        super().__init__(lambda ctx: _application_type(ctx) is ApplicationCommandType.message, name)
