"""Order lifecycle rules.

PENDING is the initial state; COMPLETED and CANCELLED are terminal.
"""

from datetime import datetime

from kitchen.errors import InvalidOrderStatus, InvalidStatusTransition, Validation
from kitchen.models.enums import OrderStatus

VALID_TRANSITIONS = {
    OrderStatus.PENDING.value: {OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.PREPARING.value, OrderStatus.CANCELLED.value},
    OrderStatus.PREPARING.value: {OrderStatus.OUT_FOR_DELIVERY.value, OrderStatus.CANCELLED.value},
    OrderStatus.OUT_FOR_DELIVERY.value: {OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value},
    OrderStatus.COMPLETED.value: set(),
    OrderStatus.CANCELLED.value: set(),
}

DEFAULT_ADMIN_CANCELLATION_REASON = 'Cancelled by admin'


def _value(status):
    return status.value if isinstance(status, OrderStatus) else status


def can_transition(current, requested):
    return _value(requested) in VALID_TRANSITIONS.get(_value(current), set())


def validate_transition(current, requested):
    if not can_transition(current, requested):
        raise InvalidStatusTransition(_value(current), _value(requested))


def apply_transition(order, requested, actor_id, reason=None, now=None):
    """Move an order to ``requested`` and stamp the matching timestamp.

    The caller owns the transaction.
    """
    requested = _value(requested)
    validate_transition(order.status, requested)
    now = now or datetime.utcnow()

    order.status = requested
    notes = reason
    if requested == OrderStatus.CONFIRMED.value:
        order.confirmed_at = now
    elif requested == OrderStatus.COMPLETED.value:
        order.completed_at = now
    elif requested == OrderStatus.CANCELLED.value:
        order.cancelled_at = now
        order.cancelled_by = actor_id
        order.cancellation_reason = notes = reason or DEFAULT_ADMIN_CANCELLATION_REASON

    order.add_status_history(requested, notes=notes, changed_by=actor_id)
    return order


def apply_customer_cancellation(order, customer_id, reason, now=None):
    """Customer-facing cancel: stricter than the admin table."""
    if not order.can_cancel():
        raise InvalidOrderStatus('Cannot cancel order in current status',
                                 details={'status': order.status})
    if not reason or not reason.strip():
        raise Validation('A cancellation reason is required')
    return apply_transition(order, OrderStatus.CANCELLED, customer_id, reason.strip(), now=now)
