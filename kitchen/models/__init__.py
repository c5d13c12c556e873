"""Database models package."""

from .user import User, Address
from .food import FoodCategory, FoodItem
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatusHistory
from .promo import PromoCode
from .otp import OtpCode
from .enums import (UserRole, OrderStatus, PaymentStatus, PaymentMethod,
                    ProteinType, ExtraSideType, DiscountType, OtpPurpose)

__all__ = [
    'User',
    'Address',
    'FoodCategory',
    'FoodItem',
    'Cart',
    'CartItem',
    'Order',
    'OrderItem',
    'OrderStatusHistory',
    'PromoCode',
    'OtpCode',
    'UserRole',
    'OrderStatus',
    'PaymentStatus',
    'PaymentMethod',
    'ProteinType',
    'ExtraSideType',
    'DiscountType',
    'OtpPurpose',
]
