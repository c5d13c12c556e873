"""Enumerations stored as strings on the models."""

from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = 'CUSTOMER'
    ADMIN = 'ADMIN'


class OrderStatus(str, Enum):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    PREPARING = 'PREPARING'
    OUT_FOR_DELIVERY = 'OUT_FOR_DELIVERY'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class PaymentStatus(str, Enum):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'
    REFUNDED = 'REFUNDED'


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = 'CASH_ON_DELIVERY'
    CARD = 'CARD'
    BANK_TRANSFER = 'BANK_TRANSFER'
    WALLET = 'WALLET'


class ProteinType(str, Enum):
    FRIED_CHICKEN = 'FRIED_CHICKEN'
    GRILLED_FISH = 'GRILLED_FISH'
    BEEF = 'BEEF'


class ExtraSideType(str, Enum):
    FRIED_PLANTAIN = 'FRIED_PLANTAIN'
    COLESLAW = 'COLESLAW'
    EXTRA_PEPPER_SAUCE = 'EXTRA_PEPPER_SAUCE'


class DiscountType(str, Enum):
    PERCENTAGE = 'PERCENTAGE'
    FIXED = 'FIXED'



class OtpPurpose(str, Enum):
    EMAIL_VERIFICATION = 'EMAIL_VERIFICATION'
    PASSWORD_RESET = 'PASSWORD_RESET'
