"""Registry of entities and the resources they are allowed to access."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from healthledger.environment import Environment


class EntityType(Enum):
    HOSPITAL = "Hospital"
    DOCTOR = "Doctor"
    PATIENT = "Patient"
    INSURER = "Insurer"
    ADMIN = "Admin"


@dataclass(frozen=True)
class EntityData:
    entity_type: EntityType
    name: str
    metadata: str
    active: bool = True


@dataclass(frozen=True)
class AccessPermission:
    resource_id: str
    granted_by: str
    granted_at: int
    expires_at: int  # 0 means no expiration


class AccessControlError(Exception):
    """Raised when an access-control operation is rejected."""


class AccessControl:
    """Grants, revokes and checks per-resource access between registered entities."""

    def __init__(self, env: Environment) -> None:
        self.env = env
        self._admin: str | None = None
        self._entities: dict[str, EntityData] = {}
        self._access_lists: dict[str, list[AccessPermission]] = {}
        self._resource_access: dict[str, list[str]] = {}

    def _require_admin(self) -> str:
        if self._admin is None:
            raise AccessControlError("Contract not initialized")
        return self._admin

    def _entity(self, wallet: str) -> EntityData:
        try:
            return self._entities[wallet]
        except KeyError:
            raise AccessControlError("Entity not found") from None

    def initialize(self, admin: str) -> None:
        """Set the contract admin; may only be done once."""
        if self._admin is not None:
            raise AccessControlError("Contract already initialized")
        self.env.require_auth(admin)
        self._admin = admin
        self.env.publish(("init", admin), "success")

    def register_entity(self, wallet: str, entity_type: EntityType, name: str, metadata: str) -> None:
        """Register a new, active entity with an empty access list."""
        self.env.require_auth(wallet)
        if wallet in self._entities:
            raise AccessControlError("Entity already registered")
        self._entities[wallet] = EntityData(entity_type, name, metadata, True)
        self._access_lists[wallet] = []
        self.env.publish(("reg_ent", wallet), "success")

    def grant_access(self, grantor: str, grantee: str, resource_id: str, expires_at: int) -> None:
        """Give ``grantee`` access to ``resource_id``; an expiry of 0 never expires."""
        self.env.require_auth(grantor)
        if grantor not in self._entities:
            raise AccessControlError("Grantor not registered")
        if grantee not in self._entities:
            raise AccessControlError("Grantee not registered")

        access_list = self._access_lists.setdefault(grantee, [])
        if any(p.resource_id == resource_id for p in access_list):
            raise AccessControlError("Access already granted for this resource")

        access_list.append(
            AccessPermission(resource_id, grantor, self.env.timestamp, expires_at)
        )
        self._resource_access.setdefault(resource_id, []).append(grantee)
        self.env.publish(("grant", grantee, resource_id), "success")

    def revoke_access(self, revoker: str, revokee: str, resource_id: str) -> None:
        """Remove ``revokee``'s access; only the original grantor or the admin may."""
        self.env.require_auth(revoker)
        admin = self._require_admin()

        remaining = []
        found = False
        for permission in self._access_lists.get(revokee, []):
            if permission.resource_id == resource_id:
                if permission.granted_by != revoker and revoker != admin:
                    raise AccessControlError("Not authorized to revoke this access")
                found = True
            else:
                remaining.append(permission)
        if not found:
            raise AccessControlError("Access permission not found")

        self._access_lists[revokee] = remaining
        self._resource_access[resource_id] = [
            addr for addr in self._resource_access.get(resource_id, []) if addr != revokee
        ]
        self.env.publish(("revoke", revokee, resource_id), "success")

    def check_access(self, entity: str, resource_id: str) -> bool:
        """True if ``entity`` holds a non-expired permission for ``resource_id``."""
        now = self.env.timestamp
        return any(
            p.resource_id == resource_id and (p.expires_at == 0 or p.expires_at > now)
            for p in self._access_lists.get(entity, [])
        )

    def get_authorized_parties(self, resource_id: str) -> list[str]:
        return list(self._resource_access.get(resource_id, []))

    def get_entity(self, wallet: str) -> EntityData:
        return self._entity(wallet)

    def get_entity_permissions(self, wallet: str) -> list[AccessPermission]:
        return list(self._access_lists.get(wallet, []))

    def update_entity(self, wallet: str, metadata: str) -> None:
        """Replace an entity's metadata."""
        self.env.require_auth(wallet)
        entity = self._entity(wallet)
        self._entities[wallet] = dataclasses.replace(entity, metadata=metadata)
        self.env.publish(("upd_ent", wallet), "success")

    def deactivate_entity(self, admin: str, wallet: str) -> None:
        """Mark an entity inactive; admin only."""
        self.env.require_auth(admin)
        stored_admin = self._require_admin()
        if admin != stored_admin:
            raise AccessControlError("Only admin can deactivate entities")
        entity = self._entity(wallet)
        self._entities[wallet] = dataclasses.replace(entity, active=False)
        self.env.publish(("deact", wallet), "success")