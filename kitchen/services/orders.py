"""Order placement, order queries and order status changes."""

import secrets
import time
from datetime import datetime

import structlog
from flask import current_app
from sqlalchemy import func, or_

from kitchen.errors import (CartEmpty, Forbidden, InvalidPromoCode, NotFound,
                            OrderNumberExhausted, PromoExhausted, Unavailable)
from kitchen.extensions import db
from kitchen.models import (Address, Cart, CartItem, Order, OrderItem, OrderStatus,
                            PaymentStatus, PromoCode)
from kitchen.services import notifications
from kitchen.services.order_status import apply_customer_cancellation, apply_transition

logger = structlog.get_logger(__name__)


def price_order(subtotal, discount, delivery_fee, service_fee_rate, tax_rate):
    """Fees, tax and total for an order.

    Tax is charged on the discounted subtotal plus both fees; the discount is
    taken off the total only once, at the end.
    """
    service_fee = subtotal * service_fee_rate
    taxable_amount = subtotal - discount + service_fee + delivery_fee
    tax = taxable_amount * tax_rate
    total = subtotal + service_fee + delivery_fee + tax - discount
    return {
        'subtotal': subtotal,
        'service_fee': service_fee,
        'delivery_fee': delivery_fee,
        'discount': discount,
        'tax': tax,
        'total': total,
    }


def find_redeemable_promo(code, now=None):
    """Active, unexpired promo code with room for one more use."""
    now = now or datetime.utcnow()
    promo = PromoCode.query.filter(
        PromoCode.code == code,
        PromoCode.is_active.is_(True),
        or_(PromoCode.expires_at.is_(None), PromoCode.expires_at >= now),
    ).first()
    if promo is None:
        raise InvalidPromoCode()
    if promo.is_exhausted():
        raise PromoExhausted()
    return promo


def preview_promo(code, subtotal):
    """Validate a promo code and report the discount it would give."""
    promo = find_redeemable_promo(code)
    return {
        'code': promo.code,
        'discount_type': promo.discount_type,
        'discount_value': promo.discount_value,
        'discount': promo.calculate_discount(subtotal),
    }


def _random_suffix(width):
    return str(secrets.randbelow(10 ** width)).zfill(width)


def generate_order_number():
    """Unique order number: prefix, millisecond timestamp and a random suffix.

    Each retry widens the random suffix by one digit.
    """
    prefix = current_app.config['ORDER_NUMBER_PREFIX']
    max_attempts = current_app.config['ORDER_NUMBER_MAX_ATTEMPTS']

    for attempt in range(max_attempts):
        order_number = f'{prefix}{int(time.time() * 1000)}{_random_suffix(3 + attempt)}'
        taken = db.session.query(
            Order.query.filter_by(order_number=order_number).exists()
        ).scalar()
        if not taken:
            return order_number
        logger.warning('order_number_collision', order_number=order_number, attempt=attempt + 1)

    raise OrderNumberExhausted()


def _redeem_promo(promo):
    """Count one use of the promo, refusing if the cap has been reached meanwhile."""
    updated = PromoCode.query.filter(
        PromoCode.id == promo.id,
        or_(PromoCode.max_uses.is_(None), PromoCode.current_uses < PromoCode.max_uses),
    ).update({PromoCode.current_uses: PromoCode.current_uses + 1}, synchronize_session=False)
    if updated != 1:
        raise PromoExhausted()


def create_order(user_id, address_id, contact_number, payment_method, promo_code=None,
                 delivery_time=None, delivery_instructions=None, customer_instructions=None):
    """Turn the user's cart into an order.

    Every check runs before the first write. The order, its item snapshots,
    the promo usage and the cart clearing are committed together or not at all.
    """
    cart = Cart.query.filter_by(user_id=user_id).first()
    if cart is None or not cart.items:
        raise CartEmpty()

    address = db.session.get(Address, address_id)
    if address is None:
        raise NotFound('Delivery address not found')
    if address.user_id != user_id:
        raise Forbidden('You can only use your own addresses')

    # availability may have changed since the items were added
    for item in cart.items:
        if not item.food_item.is_available:
            raise Unavailable(f'{item.food_item.name} is no longer available',
                              details={'food_item_id': item.food_item_id})

    subtotal = sum(item.unit_price * item.quantity for item in cart.items)

    promo = None
    discount = 0
    if promo_code:
        promo = find_redeemable_promo(promo_code)
        discount = promo.calculate_discount(subtotal)

    config = current_app.config
    totals = price_order(subtotal, discount, config['DELIVERY_FEE'],
                         config['SERVICE_FEE_RATE'], config['TAX_RATE'])
    order_number = generate_order_number()

    try:
        order = Order(
            order_number=order_number,
            user_id=user_id,
            address_id=address.id,
            contact_number=contact_number,
            payment_method=payment_method,
            delivery_time=delivery_time,
            delivery_instructions=delivery_instructions,
            customer_instructions=customer_instructions,
            promo_code=promo.code if promo else None,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            **totals
        )
        db.session.add(order)

        for cart_item in cart.items:
            order.items.append(OrderItem(
                food_item_id=cart_item.food_item_id,
                food_name=cart_item.food_item.name,
                food_image=cart_item.food_item.image_url,
                quantity=cart_item.quantity,
                unit_price=cart_item.unit_price,
                total_price=cart_item.unit_price * cart_item.quantity,
                selected_protein=cart_item.selected_protein,
                selected_extra_sides=list(cart_item.selected_extra_sides or []),
                customer_message=cart_item.customer_message,
            ))

        order.add_status_history(OrderStatus.PENDING.value, 'Order placed', changed_by=user_id)

        if promo is not None:
            _redeem_promo(promo)

        CartItem.query.filter_by(cart_id=cart.id).delete()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info('order_created', order_number=order_number, user_id=user_id,
                total=order.total, promo_code=order.promo_code)

    notifications.send_order_confirmation(order.user, order)

    return get_user_order(user_id, order.id)


def _pagination(query, page, limit):
    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return pagination.items, {
        'page': page,
        'limit': limit,
        'total': pagination.total,
        'total_pages': pagination.pages,
    }


def list_user_orders(user_id, status=None, page=1, limit=10):
    query = Order.query.filter_by(user_id=user_id)
    if status:
        query = query.filter_by(status=status)

    orders, pagination = _pagination(query.order_by(Order.created_at.desc(), Order.id.desc()),
                                     page, limit)
    return {
        'orders': [order.to_dict() for order in orders],
        'pagination': pagination,
    }


def _owned_order(user_id, order):
    if order is None:
        raise NotFound('Order not found')
    if order.user_id != user_id:
        raise Forbidden('You can only view your own orders')
    return order


def get_user_order(user_id, order_id):
    order = _owned_order(user_id, db.session.get(Order, order_id))
    return order.to_dict(include_history=True)


def get_user_order_by_number(user_id, order_number):
    order = _owned_order(user_id, Order.query.filter_by(order_number=order_number).first())
    return order.to_dict(include_history=True)


def cancel_order(user_id, order_id, reason):
    """Customer cancellation, allowed only while PENDING or CONFIRMED."""
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound('Order not found')
    if order.user_id != user_id:
        raise Forbidden('You can only cancel your own orders')

    apply_customer_cancellation(order, user_id, reason)
    db.session.commit()

    logger.info('order_cancelled', order_number=order.order_number, cancelled_by='customer')
    return order.to_dict(include_history=True)


def update_order_status(order_id, status, admin_id, cancellation_reason=None):
    """Admin status change, checked against the full transition table."""
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound('Order not found')

    previous = order.status
    apply_transition(order, status, admin_id, cancellation_reason)
    db.session.commit()

    logger.info('order_status_updated', order_number=order.order_number,
                from_status=previous, to_status=order.status, admin_id=admin_id)
    return order.to_dict(include_history=True)


def list_all_orders(status=None, page=1, limit=20, start_date=None, end_date=None):
    query = Order.query
    if status:
        query = query.filter(Order.status == status)
    if start_date:
        query = query.filter(Order.created_at >= start_date)
    if end_date:
        query = query.filter(Order.created_at <= end_date)

    orders, pagination = _pagination(query.order_by(Order.created_at.desc(), Order.id.desc()),
                                     page, limit)
    data = []
    for order in orders:
        row = order.to_dict()
        row['customer'] = {
            'id': order.user.id,
            'email': order.user.email,
            'first_name': order.user.first_name,
            'last_name': order.user.last_name,
            'phone': order.user.phone,
        }
        data.append(row)
    return {'orders': data, 'pagination': pagination}


def order_statistics():
    """Order counts by status, completed revenue and today's orders."""
    counts = dict(
        db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )
    revenue = db.session.query(func.sum(Order.total)).filter(
        Order.status == OrderStatus.COMPLETED.value
    ).scalar() or 0
    today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    today_orders = Order.query.filter(Order.created_at >= today_start).count()

    return {
        'total_orders': sum(counts.values()),
        'status_breakdown': {
            status.value.lower(): counts.get(status.value, 0) for status in OrderStatus
        },
        'revenue': {'total': revenue},
        'today': {'orders': today_orders},
    }
