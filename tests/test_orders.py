from datetime import datetime, timedelta

import pytest

from factories import make_address, make_food_item, make_promo, make_user
from kitchen.errors import (CartEmpty, Forbidden, InvalidOrderStatus, InvalidPromoCode,
                            InvalidStatusTransition, NotFound, OrderNumberExhausted,
                            PromoExhausted, Unavailable, Validation)
from kitchen.extensions import db
from kitchen.models import CartItem, Order, OrderItem, OrderStatus, PromoCode
from kitchen.services import cart as cart_service
from kitchen.services import orders as order_service
from kitchen.services.orders import price_order


@pytest.fixture()
def customer(app_ctx):
    return make_user()


@pytest.fixture()
def address(customer):
    return make_address(customer)


@pytest.fixture()
def jollof(app_ctx):
    return make_food_item(name='Jollof Rice', base_price=2500)


@pytest.fixture()
def filled_cart(customer, jollof):
    cart_service.add_item(customer.id, jollof.id, quantity=3, selected_protein='GRILLED_FISH',
                          selected_extra_sides=['FRIED_PLANTAIN'])
    return customer


def place(customer, address, **kwargs):
    kwargs.setdefault('contact_number', '08012345678')
    kwargs.setdefault('payment_method', 'CASH_ON_DELIVERY')
    return order_service.create_order(customer.id, address.id, **kwargs)


class TestPriceOrder:
    def test_totals_without_discount(self):
        totals = price_order(9900, 0, 500, 0.05, 0.075)
        assert totals['service_fee'] == pytest.approx(495)
        assert totals['tax'] == pytest.approx(817.125)
        assert totals['total'] == pytest.approx(11712.125)

    def test_discount_applied_once(self):
        totals = price_order(10000, 1000, 500, 0.05, 0.075)
        # taxable: 10000 - 1000 + 500 + 500
        assert totals['tax'] == pytest.approx(750)
        assert totals['total'] == pytest.approx(10000 + 500 + 500 + 750 - 1000)


class TestCreateOrder:
    def test_order_totals(self, filled_cart, address):
        order = place(filled_cart, address)
        assert order['subtotal'] == 9900
        assert order['service_fee'] == pytest.approx(495)
        assert order['delivery_fee'] == 500
        assert order['tax'] == pytest.approx(817.125)
        assert order['total'] == pytest.approx(11712.125)
        assert order['discount'] == 0
        assert order['status'] == OrderStatus.PENDING.value
        assert order['payment_status'] == 'PENDING'

    def test_order_number_format(self, filled_cart, address):
        order = place(filled_cart, address)
        assert order['order_number'].startswith('CK')
        assert order['order_number'][2:].isdigit()

    def test_snapshots_cart_lines_and_clears_cart(self, filled_cart, address, jollof):
        order = place(filled_cart, address)
        assert len(order['items']) == 1
        line = order['items'][0]
        assert line['food_name'] == 'Jollof Rice'
        assert line['quantity'] == 3
        assert line['unit_price'] == 3300
        assert line['total_price'] == 9900
        assert line['selected_protein'] == 'GRILLED_FISH'
        assert line['selected_extra_sides'] == ['FRIED_PLANTAIN']
        assert cart_service.count(filled_cart.id) == {'item_count': 0, 'total_quantity': 0}

    def test_snapshots_survive_menu_changes(self, filled_cart, address, jollof):
        order = place(filled_cart, address)
        jollof.name = 'Party Jollof'
        jollof.base_price = 9000
        db.session.commit()

        line = db.session.get(OrderItem, order['items'][0]['id'])
        assert line.food_name == 'Jollof Rice'
        assert line.unit_price == 3300

    def test_records_initial_history(self, filled_cart, address):
        order = place(filled_cart, address)
        assert [h['status'] for h in order['status_history']] == ['PENDING']

    def test_empty_cart(self, customer, address):
        with pytest.raises(CartEmpty):
            place(customer, address)
        assert Order.query.count() == 0

    def test_cart_emptied_by_clear(self, filled_cart, address):
        cart_service.clear_cart(filled_cart.id)
        with pytest.raises(CartEmpty):
            place(filled_cart, address)

    def test_unknown_address(self, filled_cart):
        with pytest.raises(NotFound):
            order_service.create_order(filled_cart.id, 999, '08012345678', 'CASH_ON_DELIVERY')

    def test_someone_elses_address(self, filled_cart):
        stranger_address = make_address(make_user())
        with pytest.raises(Forbidden):
            place(filled_cart, stranger_address)

    def test_unavailable_item_leaves_cart_untouched(self, filled_cart, address, jollof):
        jollof.is_available = False
        db.session.commit()

        with pytest.raises(Unavailable):
            place(filled_cart, address)
        assert Order.query.count() == 0
        assert cart_service.count(filled_cart.id) == {'item_count': 1, 'total_quantity': 3}

    def test_stored_line_price_is_charged(self, filled_cart, address, jollof):
        jollof.base_price = 5000
        db.session.commit()
        order = place(filled_cart, address)
        assert order['subtotal'] == 9900


class TestPromoCodes:
    def test_percentage_discount(self, filled_cart, address):
        make_promo('SAVE10', discount_value=10)
        order = place(filled_cart, address, promo_code='SAVE10')
        assert order['discount'] == pytest.approx(990)
        assert order['promo_code'] == 'SAVE10'
        assert order['total'] == pytest.approx(
            9900 + 495 + 500 + (9900 - 990 + 495 + 500) * 0.075 - 990
        )

    def test_fixed_discount_capped_at_subtotal(self, filled_cart, address):
        make_promo('BIG', discount_type='FIXED', discount_value=50000)
        order = place(filled_cart, address, promo_code='BIG')
        assert order['discount'] == 9900

    def test_usage_counted(self, filled_cart, address):
        promo = make_promo('SAVE10', max_uses=5)
        place(filled_cart, address, promo_code='SAVE10')
        db.session.refresh(promo)
        assert promo.current_uses == 1

    def test_unknown_code(self, filled_cart, address):
        with pytest.raises(InvalidPromoCode):
            place(filled_cart, address, promo_code='NOPE')

    def test_inactive_code(self, filled_cart, address):
        make_promo('OFF', is_active=False)
        with pytest.raises(InvalidPromoCode):
            place(filled_cart, address, promo_code='OFF')

    def test_expired_code(self, filled_cart, address):
        make_promo('OLD', expires_at=datetime.utcnow() - timedelta(days=1))
        with pytest.raises(InvalidPromoCode):
            place(filled_cart, address, promo_code='OLD')

    def test_exhausted_code_creates_nothing(self, filled_cart, address):
        make_promo('ONCE', max_uses=1, current_uses=1)
        with pytest.raises(PromoExhausted):
            place(filled_cart, address, promo_code='ONCE')
        assert Order.query.count() == 0
        assert cart_service.count(filled_cart.id)['item_count'] == 1

    def test_cap_reached_between_check_and_redeem(self, filled_cart, address, monkeypatch):
        promo = make_promo('LAST', max_uses=1)
        real_find = order_service.find_redeemable_promo

        def find_then_use_up(code, now=None):
            found = real_find(code, now)
            PromoCode.query.filter_by(id=promo.id).update({PromoCode.current_uses: 1})
            return found

        monkeypatch.setattr(order_service, 'find_redeemable_promo', find_then_use_up)
        with pytest.raises(PromoExhausted):
            place(filled_cart, address, promo_code='LAST')
        assert Order.query.count() == 0
        assert CartItem.query.count() == 1

    def test_preview(self, app_ctx):
        make_promo('SAVE10', discount_value=10)
        preview = order_service.preview_promo('SAVE10', 2000)
        assert preview['discount'] == 200
        assert preview['discount_type'] == 'PERCENTAGE'


class TestOrderNumbers:
    def test_collision_retries_with_wider_suffix(self, filled_cart, address, monkeypatch):
        monkeypatch.setattr(order_service.time, 'time', lambda: 1700000000.0)
        widths = []

        def suffix(width):
            widths.append(width)
            return '0' * width

        monkeypatch.setattr(order_service, '_random_suffix', suffix)
        first = place(filled_cart, address)
        assert first['order_number'] == 'CK' + '1700000000000' + '000'

        cart_service.add_item(filled_cart.id, make_food_item().id)
        second = place(filled_cart, address)
        assert second['order_number'] == 'CK' + '1700000000000' + '0000'
        assert widths == [3, 3, 4]

    def test_gives_up_after_max_attempts(self, filled_cart, address, monkeypatch):
        monkeypatch.setattr(order_service.time, 'time', lambda: 1700000000.0)
        monkeypatch.setattr(order_service, '_random_suffix', lambda width: '000')
        place(filled_cart, address)

        cart_service.add_item(filled_cart.id, make_food_item().id)
        with pytest.raises(OrderNumberExhausted):
            place(filled_cart, address)
        assert Order.query.count() == 1
        assert cart_service.count(filled_cart.id)['item_count'] == 1


class TestOrderQueries:
    def test_list_user_orders_newest_first(self, filled_cart, address, jollof):
        first = place(filled_cart, address)
        cart_service.add_item(filled_cart.id, jollof.id)
        second = place(filled_cart, address)

        data = order_service.list_user_orders(filled_cart.id)
        assert [o['id'] for o in data['orders']] == [second['id'], first['id']]
        assert data['pagination']['total'] == 2

    def test_list_filters_by_status(self, filled_cart, address):
        place(filled_cart, address)
        assert order_service.list_user_orders(filled_cart.id, status='CANCELLED')['orders'] == []

    def test_get_by_number(self, filled_cart, address):
        order = place(filled_cart, address)
        found = order_service.get_user_order_by_number(filled_cart.id, order['order_number'])
        assert found['id'] == order['id']

    def test_other_customers_order_is_forbidden(self, filled_cart, address):
        order = place(filled_cart, address)
        with pytest.raises(Forbidden):
            order_service.get_user_order(make_user().id, order['id'])

    def test_missing_order(self, customer):
        with pytest.raises(NotFound):
            order_service.get_user_order(customer.id, 12345)

    def test_statistics(self, filled_cart, address):
        order = place(filled_cart, address)
        admin = make_user(role='ADMIN')
        for status in ('CONFIRMED', 'PREPARING', 'OUT_FOR_DELIVERY', 'COMPLETED'):
            order_service.update_order_status(order['id'], status, admin.id)

        stats = order_service.order_statistics()
        assert stats['total_orders'] == 1
        assert stats['status_breakdown']['completed'] == 1
        assert stats['status_breakdown']['pending'] == 0
        assert stats['revenue']['total'] == pytest.approx(11712.125)
        assert stats['today']['orders'] == 1

    def test_admin_listing_includes_customer(self, filled_cart, address):
        place(filled_cart, address)
        data = order_service.list_all_orders()
        assert data['orders'][0]['customer']['email'] == filled_cart.email


class TestCancelAndUpdate:
    def test_customer_cancels_pending_order(self, filled_cart, address):
        order = place(filled_cart, address)
        cancelled = order_service.cancel_order(filled_cart.id, order['id'], 'Changed my mind')
        assert cancelled['status'] == 'CANCELLED'
        assert cancelled['cancelled_by'] == filled_cart.id
        assert cancelled['cancellation_reason'] == 'Changed my mind'
        assert cancelled['status_history'][-1]['notes'] == 'Changed my mind'
        assert cancelled['cancelled_at'] is not None

    def test_customer_cannot_cancel_once_preparing(self, filled_cart, address):
        order = place(filled_cart, address)
        admin = make_user(role='ADMIN')
        order_service.update_order_status(order['id'], 'CONFIRMED', admin.id)
        order_service.update_order_status(order['id'], 'PREPARING', admin.id)

        with pytest.raises(InvalidOrderStatus):
            order_service.cancel_order(filled_cart.id, order['id'], 'Too slow')

    def test_admin_can_cancel_while_preparing(self, filled_cart, address):
        order = place(filled_cart, address)
        admin = make_user(role='ADMIN')
        order_service.update_order_status(order['id'], 'CONFIRMED', admin.id)
        order_service.update_order_status(order['id'], 'PREPARING', admin.id)

        cancelled = order_service.update_order_status(order['id'], 'CANCELLED', admin.id)
        assert cancelled['cancelled_by'] == admin.id
        assert cancelled['cancellation_reason'] == 'Cancelled by admin'
        assert cancelled['status_history'][-1]['notes'] == 'Cancelled by admin'

    def test_cancel_requires_reason(self, filled_cart, address):
        order = place(filled_cart, address)
        with pytest.raises(Validation):
            order_service.cancel_order(filled_cart.id, order['id'], '   ')

    def test_cannot_cancel_someone_elses_order(self, filled_cart, address):
        order = place(filled_cart, address)
        with pytest.raises(Forbidden):
            order_service.cancel_order(make_user().id, order['id'], 'Nope')

    def test_admin_cannot_skip_states(self, filled_cart, address):
        order = place(filled_cart, address)
        with pytest.raises(InvalidStatusTransition):
            order_service.update_order_status(order['id'], 'COMPLETED', make_user(role='ADMIN').id)

    def test_history_follows_transitions(self, filled_cart, address):
        order = place(filled_cart, address)
        admin = make_user(role='ADMIN')
        order_service.update_order_status(order['id'], 'CONFIRMED', admin.id)
        updated = order_service.update_order_status(order['id'], 'PREPARING', admin.id)
        assert [h['status'] for h in updated['status_history']] == ['PENDING', 'CONFIRMED', 'PREPARING']
