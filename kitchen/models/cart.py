"""Cart models."""

from datetime import datetime
from kitchen.extensions import db


class Cart(db.Model):
    """One shopping cart per user."""
    __tablename__ = 'carts'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship(
        'CartItem',
        backref='cart',
        cascade='all, delete-orphan',
        order_by=lambda: [CartItem.created_at, CartItem.id],
    )

    def __repr__(self):
        return f'<Cart user={self.user_id}>'


class CartItem(db.Model):
    """A configured food item waiting in a cart."""
    __tablename__ = 'cart_items'
    __table_args__ = (
        db.UniqueConstraint('cart_id', 'signature', name='uq_cart_items_cart_signature'),
    )

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey('carts.id'), nullable=False, index=True)
    food_item_id = db.Column(db.Integer, db.ForeignKey('food_items.id'), nullable=False)
    quantity = db.Column(db.Integer, default=1, nullable=False)
    selected_protein = db.Column(db.String(30))
    selected_extra_sides = db.Column(db.JSON, default=list, nullable=False)
    customer_message = db.Column(db.String(500))
    unit_price = db.Column(db.Float, nullable=False)
    # food item, protein and sorted side set; see pricing.selection_signature
    signature = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def total_price(self):
        """Line total, always derived."""
        return self.unit_price * self.quantity

    def __repr__(self):
        return f'<CartItem {self.food_item_id} x {self.quantity}>'
