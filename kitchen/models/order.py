"""Order models."""

from datetime import datetime
from kitchen.extensions import db
from kitchen.models.enums import OrderStatus, PaymentStatus


def _iso(value):
    return value.isoformat() if value else None


class Order(db.Model):
    """Order model."""
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    address_id = db.Column(db.Integer, db.ForeignKey('addresses.id'))
    contact_number = db.Column(db.String(20), nullable=False)

    # Pricing
    subtotal = db.Column(db.Float, nullable=False)
    delivery_fee = db.Column(db.Float, nullable=False)
    service_fee = db.Column(db.Float, nullable=False)
    tax = db.Column(db.Float, nullable=False)
    discount = db.Column(db.Float, default=0.0)
    total = db.Column(db.Float, nullable=False)
    promo_code = db.Column(db.String(50))

    # Status
    status = db.Column(db.String(30), default=OrderStatus.PENDING.value, nullable=False, index=True)

    # Payment
    payment_method = db.Column(db.String(30), nullable=False)
    payment_status = db.Column(db.String(20), default=PaymentStatus.PENDING.value, nullable=False)

    # Additional info
    delivery_time = db.Column(db.DateTime)
    delivery_instructions = db.Column(db.String(500))
    customer_instructions = db.Column(db.String(1000))
    cancelled_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    cancellation_reason = db.Column(db.String(500))

    # Timestamps
    confirmed_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = db.relationship('OrderItem', backref='order', cascade='all, delete-orphan',
                            order_by='OrderItem.id')
    status_history = db.relationship('OrderStatusHistory', backref='order', lazy='dynamic',
                                     cascade='all, delete-orphan')
    address = db.relationship('Address', foreign_keys=[address_id])

    def add_status_history(self, status, notes=None, changed_by=None):
        """Add a status change to history."""
        self.status_history.append(OrderStatusHistory(
            status=status,
            notes=notes,
            changed_by=changed_by,
        ))

    def can_cancel(self):
        """Check if the customer may still cancel this order."""
        return self.status in (OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value)

    def to_dict(self, include_history=False):
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'address': self.address.to_dict() if self.address else None,
            'contact_number': self.contact_number,
            'items': [item.to_dict() for item in self.items],
            'subtotal': self.subtotal,
            'delivery_fee': self.delivery_fee,
            'service_fee': self.service_fee,
            'tax': self.tax,
            'discount': self.discount,
            'total': self.total,
            'promo_code': self.promo_code,
            'status': self.status,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'delivery_time': _iso(self.delivery_time),
            'delivery_instructions': self.delivery_instructions,
            'customer_instructions': self.customer_instructions,
            'cancelled_by': self.cancelled_by,
            'cancellation_reason': self.cancellation_reason,
            'confirmed_at': _iso(self.confirmed_at),
            'completed_at': _iso(self.completed_at),
            'cancelled_at': _iso(self.cancelled_at),
            'created_at': _iso(self.created_at),
        }
        if include_history:
            data['status_history'] = [
                h.to_dict() for h in self.status_history.order_by(OrderStatusHistory.id).all()
            ]
        return data

    def __repr__(self):
        return f'<Order {self.order_number}>'


class OrderItem(db.Model):
    """Frozen snapshot of a cart line taken when the order was placed."""
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    food_item_id = db.Column(db.Integer, db.ForeignKey('food_items.id', ondelete='SET NULL'))
    food_name = db.Column(db.String(150), nullable=False)  # Snapshot of food name
    food_image = db.Column(db.String(255))
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    total_price = db.Column(db.Float, nullable=False)
    selected_protein = db.Column(db.String(30))
    selected_extra_sides = db.Column(db.JSON, default=list, nullable=False)
    customer_message = db.Column(db.String(500))

    def to_dict(self):
        return {
            'id': self.id,
            'food_item_id': self.food_item_id,
            'food_name': self.food_name,
            'food_image': self.food_image,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total_price': self.total_price,
            'selected_protein': self.selected_protein,
            'selected_extra_sides': list(self.selected_extra_sides or []),
            'customer_message': self.customer_message,
        }

    def __repr__(self):
        return f'<OrderItem {self.food_name} x {self.quantity}>'


class OrderStatusHistory(db.Model):
    """Order status history model."""
    __tablename__ = 'order_status_history'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    status = db.Column(db.String(30), nullable=False)
    notes = db.Column(db.String(500))
    changed_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'status': self.status,
            'notes': self.notes,
            'changed_by': self.changed_by,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<OrderStatusHistory {self.status}>'
