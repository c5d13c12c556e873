"""One-time codes stored in the database.

A code is single use: a successful check marks it used, and so does a check
that finds it expired.
"""

import secrets
from datetime import datetime, timedelta

import structlog
from flask import current_app
from sqlalchemy import or_

from kitchen.extensions import db
from kitchen.models import OtpCode

logger = structlog.get_logger(__name__)


def _value(purpose):
    return getattr(purpose, 'value', purpose)


def generate_otp(user_id, purpose, now=None):
    """Store a fresh numeric code for the user and return it. The caller commits."""
    length = current_app.config['OTP_LENGTH']
    now = now or datetime.utcnow()
    code = ''.join(secrets.choice('0123456789') for _ in range(length))
    db.session.add(OtpCode(
        user_id=user_id,
        code=code,
        purpose=_value(purpose),
        expires_at=now + timedelta(minutes=current_app.config['OTP_EXPIRY_MINUTES']),
        created_at=now,
    ))
    logger.info('otp_generated', user_id=user_id, purpose=_value(purpose))
    return code


def verify_otp(user_id, code, purpose, now=None):
    """True if ``code`` is an unused, unexpired code for this purpose."""
    otp = OtpCode.query.filter_by(user_id=user_id, code=code, purpose=_value(purpose),
                                  is_used=False).first()
    if otp is None:
        return False

    otp.is_used = True
    if otp.is_expired(now):
        logger.info('otp_expired', user_id=user_id, purpose=_value(purpose))
        return False
    return True


def can_request_otp(user_id, purpose, now=None):
    """False while the last code for this purpose is inside the resend cooldown."""
    now = now or datetime.utcnow()
    cooldown = timedelta(minutes=current_app.config['OTP_RESEND_COOLDOWN_MINUTES'])
    recent = OtpCode.query.filter(
        OtpCode.user_id == user_id,
        OtpCode.purpose == _value(purpose),
        OtpCode.created_at >= now - cooldown,
    ).first()
    return recent is None


def cleanup_expired(now=None):
    """Delete used and expired codes. Returns how many were removed."""
    now = now or datetime.utcnow()
    removed = OtpCode.query.filter(
        or_(OtpCode.is_used.is_(True), OtpCode.expires_at < now)
    ).delete(synchronize_session=False)
    db.session.commit()
    logger.info('otp_cleanup', removed=removed)
    return removed
