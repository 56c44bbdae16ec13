from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pizzeria.domain.common.ids import UserId


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
    STAFF = "staff"
    DELIVERY = "entregador"


class OrderAction(str, Enum):
    CONFIRM_PAYMENT = "confirm_payment"
    START_PREPARING = "start_preparing"
    MARK_OUT_FOR_DELIVERY = "mark_out_for_delivery"
    MARK_DELIVERED = "mark_delivered"
    CANCEL = "cancel"
    SET_STATUS = "set_status"
    NOTIFY = "notify"
    PLACE_IN_STORE = "place_in_store"
    MANAGE_STORE = "manage_store"
    VIEW_ORDERS = "view_orders"
    MANAGE_CASH = "manage_cash"


# An empty set means the action needs no session at all.
ACTION_ROLES: dict[OrderAction, frozenset[Role]] = {
    OrderAction.CONFIRM_PAYMENT: frozenset(),
    OrderAction.START_PREPARING: frozenset({Role.ADMIN, Role.STAFF}),
    OrderAction.MARK_OUT_FOR_DELIVERY: frozenset({Role.ADMIN, Role.STAFF}),
    OrderAction.MARK_DELIVERED: frozenset({Role.ADMIN, Role.DELIVERY}),
    OrderAction.CANCEL: frozenset({Role.ADMIN, Role.STAFF}),
    OrderAction.SET_STATUS: frozenset({Role.ADMIN}),
    OrderAction.NOTIFY: frozenset({Role.ADMIN, Role.STAFF}),
    OrderAction.PLACE_IN_STORE: frozenset({Role.ADMIN, Role.STAFF}),
    OrderAction.MANAGE_STORE: frozenset({Role.ADMIN}),
    OrderAction.VIEW_ORDERS: frozenset({Role.ADMIN, Role.STAFF, Role.DELIVERY}),
    OrderAction.MANAGE_CASH: frozenset({Role.ADMIN, Role.STAFF}),
}


@dataclass(frozen=True)
class UserSession:
    user_id: UserId
    roles: frozenset[Role] = field(default_factory=frozenset)


def has_role(session: UserSession | None, role: Role) -> bool:
    if session is None:
        return False
    return role in session.roles


def is_allowed(session: UserSession | None, action: OrderAction) -> bool:
    required = ACTION_ROLES[action]
    if not required:
        return True
    return any(has_role(session, role) for role in required)


class PermissionDeniedError(Exception):
    def __init__(self, action: OrderAction) -> None:
        roles = ", ".join(sorted(role.value for role in ACTION_ROLES[action]))
        super().__init__(f"action {action.value} requires one of the roles: {roles}")
        self.action = action


def ensure_allowed(session: UserSession | None, action: OrderAction) -> None:
    if not is_allowed(session, action):
        raise PermissionDeniedError(action)


CUSTOMER_CHANNEL = "customer"
# Most privileged first; a socket without a requested role gets the first one held.
_STAFF_CHANNELS = (Role.ADMIN, Role.STAFF, Role.DELIVERY)


def realtime_channel(session: UserSession | None, requested: str | None) -> str | None:
    """Pick the realtime channel for a socket, or None when the request is not granted.

    A requested role can only narrow to a role the session actually holds.
    """
    granted = [role.value for role in _STAFF_CHANNELS if has_role(session, role)]
    if not requested:
        return granted[0] if granted else CUSTOMER_CHANNEL
    if requested == CUSTOMER_CHANNEL or requested in granted:
        return requested
    return None
