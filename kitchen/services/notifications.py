"""Outbound email."""

from datetime import datetime

import structlog
from flask import current_app
from flask_mail import Message

from kitchen.extensions import mail

logger = structlog.get_logger(__name__)


def send_email(to, subject, body):
    """Send a plain-text email. Delivery failures are logged, not raised."""
    try:
        mail.send(Message(subject=subject, recipients=[to], body=body))
    except Exception as exc:  # smtplib and socket errors
        logger.error('email_send_failed', to=to, subject=subject, error=str(exc))
        return False
    logger.info('email_sent', to=to, subject=subject)
    return True


def _footer():
    return f'\n\n© {datetime.utcnow().year} Chuks Kitchen. All rights reserved.\n'


def send_welcome_email(user):
    body = (
        f'Hello {user.first_name},\n\n'
        'Welcome to Chuks Kitchen, your gateway to delicious Nigerian cuisine!\n\n'
        '- Browse our menu and discover amazing dishes\n'
        '- Place your first order and enjoy fast delivery\n'
        '- Track your orders in real-time\n'
        f'- Share your referral code {user.referral_code} with friends\n\n'
        'We are excited to serve you!'
    )
    return send_email(user.email, 'Welcome to Chuks Kitchen!', body + _footer())


def send_order_confirmation(user, order):
    lines = '\n'.join(
        f'  {item.quantity} x {item.food_name} ... ₦{item.total_price:,.2f}'
        for item in order.items
    )
    body = (
        f'Hello {user.first_name},\n\n'
        f'Thank you for your order #{order.order_number}.\n\n'
        f'{lines}\n\n'
        f'Subtotal:     ₦{order.subtotal:,.2f}\n'
        f'Service fee:  ₦{order.service_fee:,.2f}\n'
        f'Delivery fee: ₦{order.delivery_fee:,.2f}\n'
        f'Tax:          ₦{order.tax:,.2f}\n'
        f'Discount:    -₦{order.discount:,.2f}\n'
        f'Total:        ₦{order.total:,.2f}\n\n'
        f'Track your order at {current_app.config["FRONTEND_URL"]}/orders/{order.order_number}'
    )
    return send_email(user.email, f'Order Confirmation - {order.order_number}', body + _footer())


def send_verification_code(user, code):
    minutes = current_app.config['OTP_EXPIRY_MINUTES']
    body = (
        f'Hello {user.first_name},\n\n'
        'Thank you for registering with Chuks Kitchen. Please use the following code '
        'to verify your email address:\n\n'
        f'    {code}\n\n'
        f'This code will expire in {minutes} minutes.\n\n'
        "If you didn't request this code, please ignore this email."
    )
    return send_email(user.email, 'Verify Your Email - Chuks Kitchen', body + _footer())


def send_password_reset_code(user, code):
    minutes = current_app.config['OTP_EXPIRY_MINUTES']
    body = (
        'Hello,\n\n'
        'We received a request to reset your password. Use this code to continue:\n\n'
        f'    {code}\n\n'
        f'This code will expire in {minutes} minutes.\n\n'
        "If you didn't ask to reset your password, you can ignore this email."
    )
    return send_email(user.email, 'Reset Your Password - Chuks Kitchen', body + _footer())
