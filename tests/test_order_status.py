from datetime import datetime

import pytest

from kitchen.errors import InvalidOrderStatus, InvalidStatusTransition, Validation
from kitchen.models import Order, OrderStatus
from kitchen.services.order_status import (VALID_TRANSITIONS, apply_customer_cancellation,
                                           apply_transition, can_transition)

ALLOWED = {
    ('PENDING', 'CONFIRMED'),
    ('PENDING', 'CANCELLED'),
    ('CONFIRMED', 'PREPARING'),
    ('CONFIRMED', 'CANCELLED'),
    ('PREPARING', 'OUT_FOR_DELIVERY'),
    ('PREPARING', 'CANCELLED'),
    ('OUT_FOR_DELIVERY', 'COMPLETED'),
    ('OUT_FOR_DELIVERY', 'CANCELLED'),
}

ALL_PAIRS = [(current.value, requested.value) for current in OrderStatus for requested in OrderStatus]

NOW = datetime(2024, 5, 1, 12, 30)


def new_order(status='PENDING'):
    # transient order; history is appended but never flushed
    return Order(order_number='CK1', user_id=1, contact_number='08012345678',
                 subtotal=0, delivery_fee=0, service_fee=0, tax=0, total=0,
                 payment_method='CASH_ON_DELIVERY', status=status)


class TestTransitionTable:
    @pytest.mark.parametrize('current, requested', ALL_PAIRS)
    def test_every_pair(self, current, requested):
        assert can_transition(current, requested) is ((current, requested) in ALLOWED)

    def test_table_covers_every_status(self):
        assert set(VALID_TRANSITIONS) == {status.value for status in OrderStatus}

    @pytest.mark.parametrize('status', ['COMPLETED', 'CANCELLED'])
    def test_terminal_states(self, status):
        assert VALID_TRANSITIONS[status] == set()

    def test_same_status_is_not_a_transition(self):
        assert not can_transition('PENDING', 'PENDING')

    def test_accepts_enum_members(self):
        assert can_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED)


class TestApplyTransition:
    def test_confirm_stamps_confirmed_at(self, app_ctx):
        order = apply_transition(new_order(), 'CONFIRMED', actor_id=7, now=NOW)
        assert order.status == 'CONFIRMED'
        assert order.confirmed_at == NOW
        assert order.cancelled_at is None

    def test_complete_stamps_completed_at(self, app_ctx):
        order = apply_transition(new_order('OUT_FOR_DELIVERY'), 'COMPLETED', actor_id=7, now=NOW)
        assert order.completed_at == NOW

    def test_admin_cancel_from_preparing(self, app_ctx):
        order = apply_transition(new_order('PREPARING'), OrderStatus.CANCELLED, actor_id=7, now=NOW)
        assert order.status == 'CANCELLED'
        assert order.cancelled_at == NOW
        assert order.cancelled_by == 7
        assert order.cancellation_reason == 'Cancelled by admin'

    def test_admin_cancel_keeps_given_reason(self, app_ctx):
        order = apply_transition(new_order(), 'CANCELLED', actor_id=7, reason='Out of stock')
        assert order.cancellation_reason == 'Out of stock'

    def test_invalid_transition_leaves_order_unchanged(self, app_ctx):
        order = new_order('COMPLETED')
        with pytest.raises(InvalidStatusTransition) as excinfo:
            apply_transition(order, 'PREPARING', actor_id=7)
        assert order.status == 'COMPLETED'
        assert excinfo.value.details == {'current_status': 'COMPLETED', 'requested_status': 'PREPARING'}


class TestCustomerCancellation:
    @pytest.mark.parametrize('status', ['PENDING', 'CONFIRMED'])
    def test_allowed_before_preparing(self, app_ctx, status):
        order = apply_customer_cancellation(new_order(status), customer_id=3, reason=' Late ', now=NOW)
        assert order.status == 'CANCELLED'
        assert order.cancelled_by == 3
        assert order.cancellation_reason == 'Late'
        assert order.cancelled_at == NOW

    @pytest.mark.parametrize('status', ['PREPARING', 'OUT_FOR_DELIVERY', 'COMPLETED', 'CANCELLED'])
    def test_refused_afterwards(self, app_ctx, status):
        with pytest.raises(InvalidOrderStatus):
            apply_customer_cancellation(new_order(status), customer_id=3, reason='Late')

    def test_reason_required(self, app_ctx):
        with pytest.raises(Validation):
            apply_customer_cancellation(new_order(), customer_id=3, reason='')
