"""Order routes: checkout, order history, cancellation and admin management."""

from datetime import datetime

from flask import Blueprint, current_app, request
from flask_login import current_user, login_required

from kitchen.errors import Validation
from kitchen.forms.order import (CancelOrderForm, CreateOrderForm, PromoValidateForm,
                                 UpdateOrderStatusForm)
from kitchen.models import OrderStatus
from kitchen.services import cart as cart_service
from kitchen.services import orders as order_service
from kitchen.utils.decorators import admin_required
from kitchen.utils.responses import success

orders_bp = Blueprint('orders', __name__)


def _page_args(default_limit):
    page = max(request.args.get('page', 1, type=int), 1)
    limit = request.args.get('limit', default_limit, type=int)
    limit = min(max(limit, 1), current_app.config['MAX_PAGE_SIZE'])
    return page, limit


def _status_arg():
    status = request.args.get('status')
    if status and status.upper() in OrderStatus.__members__:
        return status.upper()
    return None


def _date_arg(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise Validation(f'{name} must be an ISO date', details={name: value})


@orders_bp.route('', methods=['POST'])
@login_required
def create_order():
    """Place an order from the current cart."""
    form = CreateOrderForm().validate_or_raise()
    order = order_service.create_order(
        current_user.id,
        address_id=form.address_id.data,
        contact_number=form.contact_number.data,
        payment_method=form.payment_method.data,
        promo_code=(form.promo_code.data or '').strip() or None,
        delivery_time=form.delivery_time.data,
        delivery_instructions=form.delivery_instructions.data or None,
        customer_instructions=form.customer_instructions.data or None,
    )
    return success(order, 'Order placed successfully', 201)


@orders_bp.route('/promo/validate', methods=['POST'])
@login_required
def validate_promo():
    """Check a promo code against the given subtotal, or the current cart's."""
    form = PromoValidateForm().validate_or_raise()
    subtotal = form.subtotal.data
    if subtotal is None:
        subtotal = cart_service.get_cart(current_user.id)['summary']['subtotal']
    data = order_service.preview_promo(form.code.data.strip(), subtotal)
    return success(data, 'Promo code is valid')


@orders_bp.route('/my-orders')
@login_required
def my_orders():
    page, limit = _page_args(current_app.config['ORDERS_PER_PAGE'])
    data = order_service.list_user_orders(current_user.id, status=_status_arg(),
                                          page=page, limit=limit)
    return success(data)


@orders_bp.route('/<int:order_id>')
@login_required
def order_detail(order_id):
    return success(order_service.get_user_order(current_user.id, order_id))


@orders_bp.route('/number/<order_number>')
@login_required
def order_by_number(order_number):
    return success(order_service.get_user_order_by_number(current_user.id, order_number))


@orders_bp.route('/<int:order_id>/cancel', methods=['PATCH'])
@login_required
def cancel_order(order_id):
    form = CancelOrderForm().validate_or_raise()
    order = order_service.cancel_order(current_user.id, order_id, form.reason.data)
    return success(order, 'Order cancelled successfully')


# --- Admin ---

@orders_bp.route('/admin/all')
@admin_required
def admin_orders():
    page, limit = _page_args(current_app.config['ADMIN_ORDERS_PER_PAGE'])
    data = order_service.list_all_orders(
        status=_status_arg(),
        page=page,
        limit=limit,
        start_date=_date_arg('start_date'),
        end_date=_date_arg('end_date'),
    )
    return success(data)


@orders_bp.route('/admin/<int:order_id>/status', methods=['PATCH'])
@admin_required
def update_status(order_id):
    form = UpdateOrderStatusForm().validate_or_raise()
    order = order_service.update_order_status(
        order_id, form.status.data, current_user.id,
        cancellation_reason=form.cancellation_reason.data or None,
    )
    return success(order, f'Order status updated to {order["status"]}')


@orders_bp.route('/admin/statistics')
@admin_required
def statistics():
    return success(order_service.order_statistics())
