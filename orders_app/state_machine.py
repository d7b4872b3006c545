"""
The order status state machine.

`TRANSITIONS` lists the moves any party of an order may request. `FORCED_TRANSITIONS`
lists the additional moves that only the dispute workflow performs: escalating an
active or completed order into a dispute, and closing a dispute by completing the
order. Terminal states (COMPLETED, CANCELLED) have no regular successors.
"""
from core.exceptions import IllegalTransition
from .models import OrderStatus

TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.CANCELLED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED, OrderStatus.DISPUTED}),
    OrderStatus.DISPUTED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

FORCED_TRANSITIONS = {
    OrderStatus.ACCEPTED: frozenset({OrderStatus.DISPUTED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.DISPUTED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.DISPUTED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.DISPUTED}),
    OrderStatus.DISPUTED: frozenset({OrderStatus.COMPLETED}),
}

TERMINAL_STATES = frozenset(
    status for status, successors in TRANSITIONS.items() if not successors
)

# Statuses in which the delivery deadline may still be extended.
EXTENDABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS})


def allowed_next(current, forced=False):
    """Returns the set of statuses reachable from `current`."""
    allowed = TRANSITIONS.get(current, frozenset())
    if forced:
        allowed = allowed | FORCED_TRANSITIONS.get(current, frozenset())
    return allowed


def can_transition(current, requested, forced=False):
    return requested in allowed_next(current, forced=forced)


def ensure_transition(current, requested, forced=False):
    """Raises IllegalTransition unless `requested` is reachable from `current`."""
    if not can_transition(current, requested, forced=forced):
        raise IllegalTransition(current, requested)
