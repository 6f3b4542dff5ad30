"""Session model: roles, probe descriptors and the established session.

A session exists only after one role probe accepted the credential.
Its role never changes; a new login builds a new Session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.domain.exceptions import AccessDenied, ValidationError
from storefront.domain.model.value_objects import Credential


class Role(Enum):
    OWNER = "OWNER"
    PRODUCT_MANAGER = "PRODUCT_MANAGER"
    MERCHANDISE_MANAGER = "MERCHANDISE_MANAGER"
    DISPATCH_OFFICER = "DISPATCH_OFFICER"
    CUSTOMER = "CUSTOMER"

    @staticmethod
    def parse(name: str) -> Role:
        try:
            return Role[name.strip().upper()]
        except KeyError:
            raise ValidationError(f"Unknown role '{name}'") from None


@dataclass(frozen=True)
class ProbeDescriptor:
    """One role-gated resource to try during login."""

    role: Role
    probe_path: str
    redirect_target: str


DEFAULT_PROBES: tuple[ProbeDescriptor, ...] = (
    ProbeDescriptor(Role.OWNER, "/ceo/dashboard", "/ceo/dashboard"),
    ProbeDescriptor(Role.PRODUCT_MANAGER, "/product-manager/dashboard", "/product-manager/dashboard"),
    ProbeDescriptor(Role.MERCHANDISE_MANAGER, "/merchandise-manager/dashboard", "/merchandise-manager/dashboard"),
    ProbeDescriptor(Role.DISPATCH_OFFICER, "/dispatch-officer/dashboard", "/dispatch-officer/dashboard"),
    ProbeDescriptor(Role.CUSTOMER, "/customer/dashboard", "/c"),
)

LOGIN_ENTRY_POINT = "/login"


def probes_in_priority(priority: list[Role] | None = None) -> list[ProbeDescriptor]:
    """Order the default probes by *priority*.

    Roles missing from *priority* keep their default relative order and
    are tried after the listed ones.
    """
    if not priority:
        return list(DEFAULT_PROBES)
    if len(set(priority)) != len(priority):
        raise ValidationError("Role priority lists a role more than once")
    by_role = {probe.role: probe for probe in DEFAULT_PROBES}
    ordered = [by_role[role] for role in priority]
    ordered.extend(p for p in DEFAULT_PROBES if p.role not in priority)
    return ordered


class ProbeStatus(Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class ProbeOutcome:
    """Tagged result of probing one descriptor."""

    status: ProbeStatus
    descriptor: ProbeDescriptor
    detail: str = ""

    @staticmethod
    def accepted(descriptor: ProbeDescriptor) -> ProbeOutcome:
        return ProbeOutcome(ProbeStatus.ACCEPTED, descriptor)

    @staticmethod
    def rejected(descriptor: ProbeDescriptor, detail: str = "") -> ProbeOutcome:
        return ProbeOutcome(ProbeStatus.REJECTED, descriptor, detail)

    @staticmethod
    def aborted(descriptor: ProbeDescriptor, detail: str) -> ProbeOutcome:
        return ProbeOutcome(ProbeStatus.ABORTED, descriptor, detail)


@dataclass(frozen=True)
class Session:
    username: str
    credential: Credential
    role: Role
    redirect_target: str

    @property
    def is_customer(self) -> bool:
        return self.role is Role.CUSTOMER

    def with_credential(self, credential: Credential) -> Session:
        """Copy with a rotated credential; role and target are kept."""
        if credential.username != self.username:
            raise ValidationError("A rotated credential must keep the same username")
        return Session(self.username, credential, self.role, self.redirect_target)


def require_role(session: Session, allowed: list[Role | str]) -> None:
    """Raise AccessDenied unless the session's role is one of *allowed*."""
    allowed_roles = {r if isinstance(r, Role) else Role.parse(r) for r in allowed}
    if allowed_roles and session.role not in allowed_roles:
        names = ", ".join(sorted(r.value for r in allowed_roles))
        raise AccessDenied(
            f"Role {session.role.value} is not allowed here (requires one of: {names})"
        )
