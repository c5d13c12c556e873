"""Cart routes."""

from flask import Blueprint
from flask_login import current_user, login_required

from kitchen.forms.cart import AddToCartForm, UpdateCartItemForm
from kitchen.services import cart as cart_service
from kitchen.utils.responses import success

cart_bp = Blueprint('cart', __name__)


@cart_bp.route('')
@login_required
def view_cart():
    return success(cart_service.get_cart(current_user.id))


@cart_bp.route('', methods=['DELETE'])
@login_required
def clear_cart():
    cart_service.clear_cart(current_user.id)
    return success(message='Cart cleared successfully')


@cart_bp.route('/count')
@login_required
def cart_count():
    return success(cart_service.count(current_user.id))


@cart_bp.route('/items', methods=['POST'])
@login_required
def add_to_cart():
    form = AddToCartForm().validate_or_raise()
    data = cart_service.add_item(
        current_user.id,
        form.food_item_id.data,
        quantity=form.quantity.data,
        selected_protein=form.selected_protein.data,
        selected_extra_sides=form.selected_extra_sides.data,
        customer_message=form.customer_message.data,
    )
    return success(data, 'Item added to cart successfully', 201)


@cart_bp.route('/items/<int:item_id>', methods=['PATCH'])
@login_required
def update_cart_item(item_id):
    form = UpdateCartItemForm().validate_or_raise()
    data = cart_service.update_item(current_user.id, item_id, form.to_update())
    return success(data, 'Cart item updated successfully')


@cart_bp.route('/items/<int:item_id>', methods=['DELETE'])
@login_required
def remove_cart_item(item_id):
    data = cart_service.remove_item(current_user.id, item_id)
    return success(data, 'Item removed from cart')
