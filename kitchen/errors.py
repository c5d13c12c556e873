"""Application error taxonomy and the JSON error handlers that render it."""

import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

from kitchen.extensions import db

logger = structlog.get_logger(__name__)


class KitchenError(Exception):
    """Base class for errors that map to a stable API error code."""
    code = 'INTERNAL_ERROR'
    status_code = 500
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        return {
            'success': False,
            'message': self.message,
            'error': {
                'code': self.code,
                'details': self.details,
            },
        }


class NotFound(KitchenError):
    code = 'RESOURCE_NOT_FOUND'
    status_code = 404
    default_message = 'Resource not found'


class Validation(KitchenError):
    code = 'VALIDATION_ERROR'
    status_code = 400
    default_message = 'Invalid request'


class Unavailable(KitchenError):
    code = 'RESOURCE_UNAVAILABLE'
    status_code = 400
    default_message = 'This food item is currently unavailable'


class CartEmpty(KitchenError):
    code = 'CART_EMPTY'
    status_code = 400
    default_message = 'Cannot create order from empty cart'


class Unauthorized(KitchenError):
    code = 'UNAUTHORIZED'
    status_code = 401
    default_message = 'Please log in to access this resource'


class Forbidden(KitchenError):
    code = 'FORBIDDEN'
    status_code = 403
    default_message = 'You do not have access to this resource'


class InvalidPromoCode(KitchenError):
    code = 'INVALID_PROMO_CODE'
    status_code = 400
    default_message = 'Invalid or expired promo code'


class PromoExhausted(KitchenError):
    code = 'PROMO_CODE_EXHAUSTED'
    status_code = 400
    default_message = 'This promo code has reached its usage limit'


class InvalidStatusTransition(KitchenError):
    code = 'INVALID_STATUS_TRANSITION'
    status_code = 400

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(
            f'Cannot transition from {current} to {requested}',
            details={'current_status': current, 'requested_status': requested},
        )


class InvalidOrderStatus(KitchenError):
    code = 'INVALID_ORDER_STATUS'
    status_code = 400
    default_message = 'Cannot cancel order in current status'


class Conflict(KitchenError):
    code = 'RESOURCE_ALREADY_EXISTS'
    status_code = 409
    default_message = 'Resource already exists'


class CannotDelete(KitchenError):
    code = 'CANNOT_DELETE_RESOURCE'
    status_code = 400
    default_message = 'Resource cannot be deleted'


class InvalidCredentials(KitchenError):
    code = 'INVALID_CREDENTIALS'
    status_code = 401
    default_message = 'Invalid email or password'


class AccountDisabled(KitchenError):
    code = 'ACCOUNT_DISABLED'
    status_code = 403
    default_message = 'Your account has been deactivated. Please contact support.'


class PasswordMismatch(KitchenError):
    code = 'PASSWORD_MISMATCH'
    status_code = 400
    default_message = 'Current password is incorrect'


class InvalidReferralCode(KitchenError):
    code = 'INVALID_REFERRAL_CODE'
    status_code = 400
    default_message = 'Invalid referral code'


class EmailNotVerified(KitchenError):
    code = 'EMAIL_NOT_VERIFIED'
    status_code = 403
    default_message = 'Please verify your email before logging in'


class InvalidOtp(KitchenError):
    code = 'INVALID_OTP'
    status_code = 400
    default_message = 'Invalid or expired OTP'


class TooManyOtpRequests(KitchenError):
    code = 'TOO_MANY_OTP_REQUESTS'
    status_code = 429
    default_message = 'Please wait before requesting another code'


class InvalidAdminSecret(KitchenError):
    code = 'INVALID_ADMIN_SECRET'
    status_code = 401
    default_message = 'Invalid admin secret key'


class OrderNumberExhausted(KitchenError):
    code = 'ORDER_NUMBER_EXHAUSTED'
    status_code = 500
    default_message = 'Could not allocate a unique order number'


def register_error_handlers(app):
    """Render every failure as the JSON error envelope."""

    @app.errorhandler(KitchenError)
    def handle_kitchen_error(error):
        if error.status_code >= 500:
            logger.error('request_failed', code=error.code, message=error.message)
        else:
            logger.info('request_rejected', code=error.code, message=error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'success': False,
            'message': error.description,
            'error': {
                'code': f'HTTP_{error.code}',
                'details': None,
            },
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('unhandled_exception', error=str(error))
        return jsonify(KitchenError().to_dict()), 500
