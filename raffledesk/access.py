"""Caller capabilities.

Authentication happens upstream; by the time a request reaches a service the
caller is described by an :class:`AccessPolicy`. Services ask the policy
instead of comparing role strings themselves.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from raffledesk.errors import AuthenticationError, PermissionDeniedError


class Role(str, Enum):
    SUPERUSER = "superuser"
    CLUB_OWNER = "club_owner"
    EVENT_MANAGER = "event_manager"
    STAFF = "staff"


USER_ID_HEADER = "X-User-Id"
USERNAME_HEADER = "X-Username"
ROLE_HEADER = "X-User-Role"
ENTITY_IDS_HEADER = "X-Entity-Ids"


@dataclass(frozen=True)
class AccessPolicy:
    """What an authenticated caller may do."""

    user_id: str
    username: str
    role: Role
    entity_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def system(cls) -> "AccessPolicy":
        """Unrestricted policy for scripts and maintenance jobs."""

        return cls(user_id="system", username="system", role=Role.SUPERUSER)

    @classmethod
    def from_headers(cls, headers) -> "AccessPolicy":  # type: ignore[no-untyped-def]
        """Build a policy from identity headers set by the auth gateway."""

        user_id = (headers.get(USER_ID_HEADER) or "").strip()
        if not user_id:
            raise AuthenticationError()

        raw_role = (headers.get(ROLE_HEADER) or Role.STAFF.value).strip().lower()
        try:
            role = Role(raw_role)
        except ValueError as exc:
            raise AuthenticationError(
                message="Unknown role",
                details={"role": [f"Must be one of {'|'.join(r.value for r in Role)}"]},
            ) from exc

        username = (headers.get(USERNAME_HEADER) or user_id).strip()
        raw_entities = headers.get(ENTITY_IDS_HEADER) or ""
        entity_ids = frozenset(e.strip() for e in raw_entities.split(",") if e.strip())
        return cls(user_id=user_id, username=username, role=role, entity_ids=entity_ids)

    @property
    def is_superuser(self) -> bool:
        return self.role is Role.SUPERUSER

    def can_access_entity(self, entity_id: str) -> bool:
        return self.is_superuser or entity_id in self.entity_ids

    def visible_entity_ids(self, entity_ids: Iterable[str]) -> list[str]:
        return [e for e in entity_ids if self.can_access_entity(e)]

    def can_edit_entity_info(self) -> bool:
        return self.role in (Role.SUPERUSER, Role.CLUB_OWNER, Role.EVENT_MANAGER)

    def can_create_entities(self) -> bool:
        return self.is_superuser

    def can_delete_entities(self) -> bool:
        return self.is_superuser

    def can_close_session(self, owner_user_id: str) -> bool:
        return self.is_superuser or owner_user_id == self.user_id

    def require_entity(self, entity_id: str) -> None:
        if not self.can_access_entity(entity_id):
            raise PermissionDeniedError(message="Access denied to this entity")

    def require_entity_edit(self, entity_id: str) -> None:
        if not self.can_edit_entity_info():
            raise PermissionDeniedError(message="Permission denied to edit club info")
        self.require_entity(entity_id)

    def require_entity_create(self) -> None:
        if not self.can_create_entities():
            raise PermissionDeniedError(message="Only superusers can create clubs")

    def require_entity_delete(self) -> None:
        if not self.can_delete_entities():
            raise PermissionDeniedError(message="Superuser access required")
