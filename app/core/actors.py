# app/core/actors.py
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

from app.core.exceptions import AuthorizationError


class ActorKind(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Capability(str, Enum):
    POST_CREATE = "post:create"
    REPORT_CREATE = "report:create"
    POST_APPROVE = "post:approve"
    POST_DEACTIVATE = "post:deactivate"
    POST_MODERATE = "post:moderate"
    REPORT_ADJUDICATE = "report:adjudicate"
    REPORT_MANAGE = "report:manage"
    USER_MANAGE = "user:manage"


USER_CAPABILITIES = frozenset({Capability.POST_CREATE, Capability.REPORT_CREATE})

ADMIN_CAPABILITIES = frozenset(
    {
        Capability.POST_APPROVE,
        Capability.POST_DEACTIVATE,
        Capability.POST_MODERATE,
        Capability.REPORT_ADJUDICATE,
        Capability.REPORT_MANAGE,
        Capability.USER_MANAGE,
    }
)


@dataclass(frozen=True)
class Actor:
    """An authenticated caller: either an end user or an admin user."""

    kind: ActorKind
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, user) -> "Actor":
        return cls(
            kind=ActorKind.USER,
            id=user.id,
            email=user.email,
            name=user.name,
            capabilities=USER_CAPABILITIES,
        )

    @classmethod
    def for_admin(cls, admin) -> "Actor":
        return cls(
            kind=ActorKind.ADMIN,
            id=admin.id,
            email=admin.email,
            name=admin.full_name,
            capabilities=ADMIN_CAPABILITIES,
        )

    @property
    def is_admin(self) -> bool:
        return self.kind == ActorKind.ADMIN

    @property
    def is_user(self) -> bool:
        return self.kind == ActorKind.USER

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


def require_capability(actor: Optional[Actor], capability: Capability, message: str):
    if actor is None or not actor.can(capability):
        raise AuthorizationError(message)
    return actor
