"""Registration, credentials, profile and address book."""

import secrets
import string
from datetime import datetime, timedelta

import structlog
from flask import current_app

from kitchen.errors import (AccountDisabled, CannotDelete, Conflict, EmailNotVerified,
                            InvalidAdminSecret, InvalidCredentials, InvalidOtp,
                            InvalidReferralCode, NotFound, PasswordMismatch, TooManyOtpRequests)
from kitchen.extensions import db
from kitchen.models import Address, DiscountType, Order, OtpPurpose, PromoCode, User, UserRole
from kitchen.services import notifications, otp

logger = structlog.get_logger(__name__)

# Discount a friend gets when ordering with someone's referral code
REFERRAL_DISCOUNT_PERCENT = 10
REFERRAL_CODE_LENGTH = 8


def _normalize_email(email):
    return email.strip().lower()


def _new_referral_code():
    alphabet = string.ascii_uppercase + string.digits
    while True:
        code = 'CK' + ''.join(secrets.choice(alphabet) for _ in range(REFERRAL_CODE_LENGTH - 2))
        if PromoCode.query.filter_by(code=code).first() is None:
            return code


def _user_by_email(email):
    user = User.query.filter_by(email=_normalize_email(email)).first()
    if user is None:
        raise NotFound('User not found')
    return user


def _discard_unverified(user):
    """Remove an abandoned sign-up so its email can be registered again."""
    user_id = user.id
    User.query.filter_by(referred_by_id=user_id).update({'referred_by_id': None})
    PromoCode.query.filter_by(owner_id=user_id).delete()
    db.session.delete(user)
    db.session.flush()
    logger.info('unverified_user_discarded', user_id=user_id)


def _check_email_free(email, now):
    existing = User.query.filter_by(email=email).first()
    if existing is None:
        return
    if existing.is_email_verified:
        raise Conflict('This email is already registered.', details={'field': 'email'})

    ttl = timedelta(hours=current_app.config['UNVERIFIED_ACCOUNT_TTL_HOURS'])
    if existing.created_at and now - existing.created_at > ttl:
        _discard_unverified(existing)
    else:
        raise EmailNotVerified('Please check your email for the verification code '
                               'or request a new one')


def register_customer(email, password, first_name, last_name, phone=None, referral_code=None,
                      now=None):
    """Create an unverified customer and email them a verification code."""
    now = now or datetime.utcnow()
    email = _normalize_email(email)
    _check_email_free(email, now)
    if phone and User.query.filter_by(phone=phone).first():
        raise Conflict('This phone number is already registered.', details={'field': 'phone'})

    referrer = None
    if referral_code:
        referrer = User.query.filter_by(referral_code=referral_code.strip()).first()
        if referrer is None:
            raise InvalidReferralCode()

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phone or None,
        role=UserRole.CUSTOMER.value,
        referral_code=_new_referral_code(),
        referred_by=referrer,
        created_at=now,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()  # Get user ID

    db.session.add(PromoCode(
        code=user.referral_code,
        owner_id=user.id,
        description=f'Referral code of {user.full_name}',
        discount_type=DiscountType.PERCENTAGE.value,
        discount_value=REFERRAL_DISCOUNT_PERCENT,
    ))
    code = otp.generate_otp(user.id, OtpPurpose.EMAIL_VERIFICATION, now=now)
    db.session.commit()

    logger.info('user_registered', user_id=user.id, referred_by=referrer.id if referrer else None)
    notifications.send_verification_code(user, code)
    return user


def verify_email(email, code):
    """Mark the email verified with a code from ``register_customer``."""
    user = _user_by_email(email)
    if user.is_email_verified:
        raise Conflict('Email already verified')

    if not otp.verify_otp(user.id, code, OtpPurpose.EMAIL_VERIFICATION):
        db.session.commit()  # an expired code stays burnt
        raise InvalidOtp()

    user.is_email_verified = True
    user.last_login_at = datetime.utcnow()
    db.session.commit()

    logger.info('email_verified', user_id=user.id)
    notifications.send_welcome_email(user)
    return user


def _issue_code(user, purpose):
    if not otp.can_request_otp(user.id, purpose):
        minutes = current_app.config['OTP_RESEND_COOLDOWN_MINUTES']
        raise TooManyOtpRequests(f'Please wait {minutes} minutes before requesting another code')
    code = otp.generate_otp(user.id, purpose)
    db.session.commit()
    return code


def resend_verification_code(email):
    user = _user_by_email(email)
    if user.is_email_verified:
        raise Conflict('Email already verified')
    code = _issue_code(user, OtpPurpose.EMAIL_VERIFICATION)
    notifications.send_verification_code(user, code)


def request_password_reset(email):
    """Email a reset code. Unknown addresses succeed silently."""
    user = User.query.filter_by(email=_normalize_email(email)).first()
    if user is None:
        logger.info('password_reset_unknown_email')
        return
    code = _issue_code(user, OtpPurpose.PASSWORD_RESET)
    notifications.send_password_reset_code(user, code)
    logger.info('password_reset_requested', user_id=user.id)


def reset_password(email, code, new_password):
    user = _user_by_email(email)
    if not otp.verify_otp(user.id, code, OtpPurpose.PASSWORD_RESET):
        db.session.commit()
        raise InvalidOtp()
    user.set_password(new_password)
    db.session.commit()
    logger.info('password_reset', user_id=user.id)


def _check_credentials(email, password):
    user = User.query.filter_by(email=_normalize_email(email)).first()
    if user is None or not user.check_password(password):
        logger.info('login_failed', email=email)
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountDisabled()
    if not user.is_email_verified:
        raise EmailNotVerified()
    return user


def _record_login(user):
    user.last_login_at = datetime.utcnow()
    db.session.commit()
    return user


def authenticate(email, password):
    """User for valid credentials; raises otherwise."""
    return _record_login(_check_credentials(email, password))


def authenticate_admin(email, password):
    user = _check_credentials(email, password)
    if not user.is_admin():
        logger.info('admin_login_refused', user_id=user.id)
        raise InvalidCredentials('Invalid credentials or not an admin')
    return _record_login(user)


def register_admin(email, password, first_name, last_name, admin_secret):
    """Create a verified admin account, gated by ADMIN_REGISTRATION_SECRET."""
    expected = current_app.config.get('ADMIN_REGISTRATION_SECRET') or ''
    if not expected or not secrets.compare_digest(admin_secret.encode(), expected.encode()):
        logger.warning('admin_register_refused', email=email)
        raise InvalidAdminSecret()

    email = _normalize_email(email)
    if User.query.filter_by(email=email).first():
        raise Conflict('This email is already registered.', details={'field': 'email'})

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=UserRole.ADMIN.value,
        is_email_verified=True,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info('admin_registered', user_id=user.id)
    return user


def update_profile(user, first_name=None, last_name=None, phone=None):
    if phone and phone != user.phone:
        if User.query.filter(User.phone == phone, User.id != user.id).first():
            raise Conflict('This phone number is already registered.', details={'field': 'phone'})
        user.phone = phone
    if first_name:
        user.first_name = first_name
    if last_name:
        user.last_name = last_name
    db.session.commit()
    logger.info('profile_updated', user_id=user.id)
    return user.to_dict()


def change_password(user, current_password, new_password):
    if not user.check_password(current_password):
        raise PasswordMismatch()
    user.set_password(new_password)
    db.session.commit()
    logger.info('password_changed', user_id=user.id)


def referral_info(user):
    promo = PromoCode.query.filter_by(code=user.referral_code).first()
    return {
        'referral_code': user.referral_code,
        'total_referrals': user.referrals.count(),
        'times_used': promo.current_uses if promo else 0,
    }


# --- Addresses ---

def list_addresses(user_id):
    addresses = (Address.query.filter_by(user_id=user_id)
                 .order_by(Address.is_default.desc(), Address.created_at.desc())
                 .all())
    return [address.to_dict() for address in addresses]


def _owned_address(user_id, address_id):
    address = Address.query.filter_by(id=address_id, user_id=user_id).first()
    if address is None:
        raise NotFound('Address not found')
    return address


def create_address(user_id, data):
    # If this is the first address, make it default
    is_first = Address.query.filter_by(user_id=user_id).count() == 0
    is_default = bool(data.get('is_default')) or is_first
    if is_default:
        Address.query.filter_by(user_id=user_id).update({'is_default': False})

    address = Address(
        user_id=user_id,
        label=data.get('label') or 'Home',
        street=data['street'],
        city=data['city'],
        state=data['state'],
        landmark=data.get('landmark'),
        is_default=is_default,
    )
    db.session.add(address)
    db.session.commit()
    logger.info('address_created', user_id=user_id, address_id=address.id)
    return address.to_dict()


def update_address(user_id, address_id, data):
    address = _owned_address(user_id, address_id)

    for field in ('label', 'street', 'city', 'state', 'landmark'):
        if data.get(field) is not None:
            setattr(address, field, data[field])

    if data.get('is_default'):
        Address.query.filter(Address.user_id == user_id, Address.id != address.id).update(
            {'is_default': False}, synchronize_session=False
        )
        address.is_default = True

    db.session.commit()
    logger.info('address_updated', user_id=user_id, address_id=address.id)
    return address.to_dict()


def delete_address(user_id, address_id):
    address = _owned_address(user_id, address_id)
    if Order.query.filter_by(address_id=address.id).first() is not None:
        raise CannotDelete('This address is used by existing orders')

    was_default = address.is_default
    db.session.delete(address)
    db.session.flush()

    if was_default:
        replacement = (Address.query.filter_by(user_id=user_id)
                       .order_by(Address.created_at.desc()).first())
        if replacement is not None:
            replacement.is_default = True

    db.session.commit()
    logger.info('address_deleted', user_id=user_id, address_id=address_id)
