"""Reconciliation of requested client-role changes against a role catalog.

``plan_role_changes`` and ``reconcile_roles`` are pure: the catalog is passed
in and the grant/revoke calls are injected. ``RoleReconciler`` wires them to
the Keycloak role service and fetches the catalog exactly once.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from keycloak_mcp.core.keycloak import RoleService
from keycloak_mcp.core.resolver import ClientRecord

RoleCall = Callable[[list["RoleDescriptor"]], None]


@dataclass(frozen=True)
class RoleDescriptor:
    name: str
    canonical_id: str

    @classmethod
    def from_representation(cls, rep: dict) -> Optional["RoleDescriptor"]:
        name, canonical_id = rep.get("name"), rep.get("id")
        if not name or not canonical_id:
            return None
        return cls(name=name, canonical_id=canonical_id)

    def to_representation(self) -> dict:
        return {"id": self.canonical_id, "name": self.name}


@dataclass(frozen=True)
class RoleSelection:
    found: tuple[RoleDescriptor, ...]
    missing: tuple[str, ...]


@dataclass(frozen=True)
class RolePlan:
    to_add: RoleSelection
    to_remove: RoleSelection


@dataclass
class ReconciliationResult:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _unique(names: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)


def _select(catalog: dict[str, RoleDescriptor], requested: Iterable[str]) -> RoleSelection:
    found, missing = [], []
    for name in _unique(requested):
        if name in catalog:
            found.append(catalog[name])
        else:
            missing.append(name)
    return RoleSelection(found=tuple(found), missing=tuple(missing))


def plan_role_changes(
    catalog: Iterable[RoleDescriptor],
    requested_add: Iterable[str] = (),
    requested_remove: Iterable[str] = (),
) -> RolePlan:
    """Split both requests into known and unknown role names against one catalog."""
    by_name = {role.name: role for role in catalog}
    return RolePlan(to_add=_select(by_name, requested_add), to_remove=_select(by_name, requested_remove))


def reconcile_roles(
    catalog: Iterable[RoleDescriptor],
    requested_add: Iterable[str],
    requested_remove: Iterable[str],
    grant: RoleCall,
    revoke: RoleCall,
) -> ReconciliationResult:
    """Apply a role plan: one batched grant, then one batched revoke.

    Unknown names become warnings. A failing grant propagates and the revoke
    is not attempted.
    """
    plan = plan_role_changes(catalog, requested_add, requested_remove)
    result = ReconciliationResult()

    if plan.to_add.missing:
        result.warnings.append(f"Some roles to add not found: {', '.join(plan.to_add.missing)}")
    if plan.to_add.found:
        grant(list(plan.to_add.found))
        result.added = [role.name for role in plan.to_add.found]

    if plan.to_remove.missing:
        result.warnings.append(f"Some roles to remove not found: {', '.join(plan.to_remove.missing)}")
    if plan.to_remove.found:
        revoke(list(plan.to_remove.found))
        result.removed = [role.name for role in plan.to_remove.found]

    return result


class RoleReconciler:
    """Reconcile a user's client roles through the Keycloak role service."""

    def __init__(self, roles: RoleService):
        self.roles = roles

    def fetch_catalog(self, realm: str, client: ClientRecord) -> list[RoleDescriptor]:
        reps = self.roles.list_client_roles(realm, client.canonical_id)
        return [d for d in (RoleDescriptor.from_representation(rep) for rep in reps) if d]

    def reconcile(
        self,
        realm: str,
        user_id: str,
        client: ClientRecord,
        requested_add: Iterable[str] = (),
        requested_remove: Iterable[str] = (),
    ) -> ReconciliationResult:
        catalog = self.fetch_catalog(realm, client)

        def grant(roles: list[RoleDescriptor]) -> None:
            self.roles.grant_client_roles(
                realm, user_id, client.canonical_id, [r.to_representation() for r in roles]
            )

        def revoke(roles: list[RoleDescriptor]) -> None:
            self.roles.revoke_client_roles(
                realm, user_id, client.canonical_id, [r.to_representation() for r in roles]
            )

        return reconcile_roles(catalog, requested_add, requested_remove, grant, revoke)
