"""Cart operations.

Every public function takes the acting user's id, works inside the request's
database session and commits before returning. Cart totals are derived on
every read and never stored.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError

from kitchen.errors import NotFound, Unavailable, Validation
from kitchen.extensions import db
from kitchen.models import Cart, CartItem, FoodItem
from kitchen.services.pricing import normalize_sides, selection_signature, unit_price

logger = structlog.get_logger(__name__)

UNSET: Any = object()


@dataclass
class CartItemUpdate:
    """Partial update of a cart line. Fields left as UNSET are not touched."""
    quantity: Any = UNSET
    selected_protein: Any = UNSET
    selected_extra_sides: Any = UNSET
    customer_message: Any = UNSET

    @property
    def changes_selection(self):
        return self.selected_protein is not UNSET or self.selected_extra_sides is not UNSET


def _check_capabilities(food_item, selected_protein, selected_extra_sides, customer_message):
    if selected_protein and not food_item.allow_protein_choice:
        raise Validation('Protein selection is not available for this item')
    if selected_extra_sides and not food_item.allow_extra_sides:
        raise Validation('Extra sides are not available for this item')
    if customer_message and not food_item.allow_customer_message:
        raise Validation('Customer messages are not allowed for this item')


def _check_quantity(quantity):
    if quantity is None or quantity < 1:
        raise Validation('Quantity must be at least 1')


def _find_cart(user_id):
    return Cart.query.filter_by(user_id=user_id).first()


def _find_line(cart_id, signature):
    return CartItem.query.filter_by(cart_id=cart_id, signature=signature).first()


def get_or_create_cart(user_id):
    """Return the user's cart, creating an empty one on first access."""
    cart = _find_cart(user_id)
    if cart is not None:
        return cart

    cart = Cart(user_id=user_id)
    db.session.add(cart)
    try:
        db.session.commit()
    except IntegrityError:
        # another request created it first
        db.session.rollback()
        cart = Cart.query.filter_by(user_id=user_id).one()
    else:
        logger.info('cart_created', user_id=user_id, cart_id=cart.id)
    return cart


def serialize_cart(cart):
    """Cart with per-line totals and a freshly computed summary."""
    items = list(cart.items)
    subtotal = sum(item.total_price for item in items)
    return {
        'id': cart.id,
        'user_id': cart.user_id,
        'items': [{
            'id': item.id,
            'food_item': {
                'id': item.food_item.id,
                'name': item.food_item.name,
                'slug': item.food_item.slug,
                'image_url': item.food_item.image_url,
                'base_price': item.food_item.base_price,
                'is_available': item.food_item.is_available,
            },
            'quantity': item.quantity,
            'unit_price': item.unit_price,
            'total_price': item.total_price,
            'selected_protein': item.selected_protein,
            'selected_extra_sides': list(item.selected_extra_sides or []),
            'customer_message': item.customer_message,
        } for item in items],
        'summary': {
            'item_count': len(items),
            'total_quantity': sum(item.quantity for item in items),
            'subtotal': subtotal,
        },
    }


def get_cart(user_id):
    cart = get_or_create_cart(user_id)
    # totals must reflect writes made earlier in this request
    db.session.refresh(cart)
    return serialize_cart(cart)


def _merge_into(existing, quantity, customer_message):
    existing.quantity += quantity
    existing.customer_message = customer_message or existing.customer_message


def add_item(user_id, food_item_id, quantity=1, selected_protein=None,
             selected_extra_sides=None, customer_message=None):
    """Add a configured food item, merging with an identical line if present."""
    _check_quantity(quantity)

    food_item = db.session.get(FoodItem, food_item_id)
    if food_item is None:
        raise NotFound('Food item not found')
    if not food_item.is_available:
        raise Unavailable('This food item is currently unavailable')

    sides = normalize_sides(selected_extra_sides)
    _check_capabilities(food_item, selected_protein, sides, customer_message)

    cart = get_or_create_cart(user_id)
    signature = selection_signature(food_item.id, selected_protein, sides)

    existing = _find_line(cart.id, signature)
    if existing is not None:
        _merge_into(existing, quantity, customer_message)
        db.session.commit()
        logger.info('cart_item_merged', user_id=user_id, cart_item_id=existing.id,
                    food_item=food_item.name, quantity=existing.quantity)
        return get_cart(user_id)

    item = CartItem(
        cart_id=cart.id,
        food_item_id=food_item.id,
        quantity=quantity,
        selected_protein=selected_protein or None,
        selected_extra_sides=sides,
        customer_message=customer_message or None,
        unit_price=unit_price(food_item.base_price, selected_protein, sides),
        signature=signature,
    )
    db.session.add(item)
    try:
        db.session.commit()
    except IntegrityError:
        # lost the race against an identical insert; fold into the winner
        db.session.rollback()
        existing = CartItem.query.filter_by(cart_id=cart.id, signature=signature).one()
        _merge_into(existing, quantity, customer_message)
        db.session.commit()
        logger.info('cart_item_merged', user_id=user_id, cart_item_id=existing.id,
                    food_item=food_item.name, quantity=existing.quantity)
    else:
        logger.info('cart_item_added', user_id=user_id, cart_item_id=item.id,
                    food_item=food_item.name, quantity=quantity)
    return get_cart(user_id)


def _find_owned_item(user_id, item_id):
    """Cart line owned by the user; absent and foreign lines look the same."""
    item = (CartItem.query
            .join(Cart, CartItem.cart_id == Cart.id)
            .filter(CartItem.id == item_id, Cart.user_id == user_id)
            .first())
    if item is None:
        raise NotFound('Cart item not found')
    return item


def update_item(user_id, item_id, update):
    """Apply a CartItemUpdate to one of the user's cart lines."""
    item = _find_owned_item(user_id, item_id)

    food_item = item.food_item
    if food_item is None or not food_item.is_available:
        raise Unavailable('This food item is no longer available')

    new_sides = UNSET
    if update.selected_extra_sides is not UNSET:
        new_sides = normalize_sides(update.selected_extra_sides)

    _check_capabilities(
        food_item,
        update.selected_protein if update.selected_protein is not UNSET else None,
        new_sides if new_sides is not UNSET else None,
        update.customer_message if update.customer_message is not UNSET else None,
    )

    if update.quantity is not UNSET:
        _check_quantity(update.quantity)
        item.quantity = update.quantity
    if update.customer_message is not UNSET:
        item.customer_message = update.customer_message or None

    if update.changes_selection:
        protein = item.selected_protein
        if update.selected_protein is not UNSET:
            protein = update.selected_protein or None
        sides = list(item.selected_extra_sides or [])
        if new_sides is not UNSET:
            sides = new_sides

        price = unit_price(food_item.base_price, protein, sides)
        signature = selection_signature(food_item.id, protein, sides)

        twin = (CartItem.query
                .filter(CartItem.cart_id == item.cart_id,
                        CartItem.signature == signature,
                        CartItem.id != item.id)
                .first())
        if twin is not None:
            # keep one line per selection
            twin.quantity += item.quantity
            twin.unit_price = price
            if update.customer_message is not UNSET:
                twin.customer_message = item.customer_message
            db.session.delete(item)
            db.session.commit()
            logger.info('cart_items_merged', user_id=user_id, cart_item_id=twin.id,
                        removed_cart_item_id=item_id)
            return get_cart(user_id)

        item.selected_protein = protein
        item.selected_extra_sides = sides
        item.unit_price = price
        item.signature = signature

    db.session.commit()
    logger.info('cart_item_updated', user_id=user_id, cart_item_id=item.id,
                food_item=food_item.name)
    return get_cart(user_id)


def remove_item(user_id, item_id):
    item = _find_owned_item(user_id, item_id)
    db.session.delete(item)
    db.session.commit()
    logger.info('cart_item_removed', user_id=user_id, cart_item_id=item_id)
    return get_cart(user_id)


def clear_cart(user_id):
    """Delete every line in the user's cart. Returns False if there was no cart."""
    cart = _find_cart(user_id)
    if cart is None:
        return False

    CartItem.query.filter_by(cart_id=cart.id).delete()
    db.session.commit()
    logger.info('cart_cleared', user_id=user_id)
    return True


def count(user_id):
    """Distinct lines and total quantity, zeros when there is no cart."""
    cart = _find_cart(user_id)
    if cart is None:
        return {'item_count': 0, 'total_quantity': 0}

    quantities = [q for (q,) in db.session.query(CartItem.quantity).filter_by(cart_id=cart.id)]
    return {'item_count': len(quantities), 'total_quantity': sum(quantities)}
