"""Promo and referral code model."""

from datetime import datetime
from kitchen.extensions import db
from kitchen.models.enums import DiscountType


class PromoCode(db.Model):
    """Redeemable discount code.

    Platform promo codes have no owner. Every customer also gets a personal
    referral code in this table, with ``owner_id`` pointing at them.
    """
    __tablename__ = 'promo_codes'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    description = db.Column(db.String(255))
    discount_type = db.Column(db.String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    discount_value = db.Column(db.Float, nullable=False)
    max_uses = db.Column(db.Integer)  # Null for unlimited
    current_uses = db.Column(db.Integer, default=0, nullable=False)
    expires_at = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    owner = db.relationship('User', foreign_keys=[owner_id])

    def is_exhausted(self):
        return self.max_uses is not None and self.current_uses >= self.max_uses

    def calculate_discount(self, subtotal):
        """Discount for a subtotal, never more than the subtotal itself."""
        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = subtotal * (self.discount_value / 100)
        else:  # fixed
            discount = self.discount_value
        return min(discount, subtotal)

    def to_dict(self):
        return {
            'code': self.code,
            'discount_type': self.discount_type,
            'discount_value': self.discount_value,
            'max_uses': self.max_uses,
            'current_uses': self.current_uses,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<PromoCode {self.code}>'
