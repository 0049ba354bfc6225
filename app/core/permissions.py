"""Role-based access control and the dispute authorization policy."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.models.dispute import Dispute
    from app.models.order import Order
    from app.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    CUSTOMER = "customer"
    HOST = "host"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Permission(str, Enum):
    """System permissions."""

    CREATE_DISPUTE = "create_dispute"
    VIEW_DISPUTE = "view_dispute"
    UPDATE_DISPUTE = "update_dispute"
    RESOLVE_DISPUTE = "resolve_dispute"
    DELETE_DISPUTE = "delete_dispute"

    # Not scoped to the actor's own records
    MANAGE_ALL_DISPUTES = "manage_all_disputes"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.CUSTOMER: {
        Permission.CREATE_DISPUTE,
        Permission.VIEW_DISPUTE,
    },
    UserRole.HOST: {
        Permission.CREATE_DISPUTE,
        Permission.VIEW_DISPUTE,
        Permission.UPDATE_DISPUTE,
        Permission.RESOLVE_DISPUTE,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        perm for perm in Permission
    },
    UserRole.SUPER_ADMIN: {
        perm for perm in Permission
    },
}


def has_permission(role: str | UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    try:
        user_role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(user_role, set())


def is_admin(user: User) -> bool:
    """Whether the user sees and manages every dispute."""
    return has_permission(user.role, Permission.MANAGE_ALL_DISPUTES)


class AuthorizationPolicy(Protocol):
    """Capability checks the dispute service asks before acting."""

    def can_create(self, actor: User, order: Order) -> bool: ...

    def can_view(self, actor: User, dispute: Dispute) -> bool: ...

    def can_update(self, actor: User, dispute: Dispute) -> bool: ...

    def can_resolve(self, actor: User, dispute: Dispute) -> bool: ...

    def can_delete(self, actor: User, dispute: Dispute) -> bool: ...


class DisputePolicy:
    """Default policy backed by the role/permission table.

    Hosts may only touch disputes on their own orders; customers may raise and
    read disputes on orders they bought; admins may do anything.
    """

    def can_create(self, actor: User, order: Order) -> bool:
        if not has_permission(actor.role, Permission.CREATE_DISPUTE):
            return False
        if is_admin(actor) or actor.role == UserRole.HOST.value:
            # Host ownership is checked while defaulting, so it can be masked
            return True
        return order.user_id == actor.id

    def can_view(self, actor: User, dispute: Dispute) -> bool:
        if is_admin(actor):
            return True
        if not has_permission(actor.role, Permission.VIEW_DISPUTE):
            return False
        return actor.id in (dispute.user_id, dispute.order.user_id)

    def can_update(self, actor: User, dispute: Dispute) -> bool:
        if is_admin(actor):
            return True
        return (
            has_permission(actor.role, Permission.UPDATE_DISPUTE)
            and dispute.user_id == actor.id
        )

    def can_resolve(self, actor: User, dispute: Dispute) -> bool:
        if is_admin(actor):
            return True
        return (
            has_permission(actor.role, Permission.RESOLVE_DISPUTE)
            and dispute.user_id == actor.id
        )

    def can_delete(self, actor: User, dispute: Dispute) -> bool:
        return has_permission(actor.role, Permission.DELETE_DISPUTE)


dispute_policy = DisputePolicy()
