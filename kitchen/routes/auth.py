"""Authentication routes."""

from flask import Blueprint
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from kitchen.forms.auth import (AdminRegistrationForm, EmailForm, LoginForm, RegistrationForm,
                                ResetPasswordForm, VerifyEmailForm)
from kitchen.services import accounts
from kitchen.utils.responses import success

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Customer registration. The account stays locked until the email is verified."""
    form = RegistrationForm().validate_or_raise()
    user = accounts.register_customer(
        email=form.email.data,
        password=form.password.data,
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        phone=form.phone.data,
        referral_code=form.referral_code.data,
    )
    data = {'email': user.email, 'requires_verification': True}
    return success(data, 'Registration successful. Please verify your email.', 201)


@auth_bp.route('/verify-email', methods=['POST'])
def verify_email():
    form = VerifyEmailForm().validate_or_raise()
    user = accounts.verify_email(form.email.data, form.code.data)
    login_user(user)
    return success(user.to_dict(), 'Email verified successfully')


@auth_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    form = EmailForm().validate_or_raise()
    accounts.resend_verification_code(form.email.data)
    return success({'email': form.email.data}, 'OTP sent successfully')


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    form = EmailForm().validate_or_raise()
    accounts.request_password_reset(form.email.data)
    return success(message='If the email exists, a reset code has been sent')


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    form = ResetPasswordForm().validate_or_raise()
    accounts.reset_password(form.email.data, form.code.data, form.new_password.data)
    return success(message='Password reset successfully')


@auth_bp.route('/login', methods=['POST'])
def login():
    """User login."""
    form = LoginForm().validate_or_raise()
    user = accounts.authenticate(form.email.data, form.password.data)
    login_user(user, remember=form.remember.data)
    return success(user.to_dict(), f'Welcome back, {user.first_name}!')


@auth_bp.route('/admin/register', methods=['POST'])
def admin_register():
    form = AdminRegistrationForm().validate_or_raise()
    user = accounts.register_admin(
        email=form.email.data,
        password=form.password.data,
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        admin_secret=form.admin_secret.data,
    )
    login_user(user)
    return success(user.to_dict(), 'Admin registered successfully', 201)


@auth_bp.route('/admin/login', methods=['POST'])
def admin_login():
    form = LoginForm().validate_or_raise()
    user = accounts.authenticate_admin(form.email.data, form.password.data)
    login_user(user, remember=form.remember.data)
    return success(user.to_dict(), f'Welcome back, {user.first_name}!')


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return success(message='You have been logged out')


@auth_bp.route('/me')
@login_required
def me():
    return success(current_user.to_dict())


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header of mutating requests."""
    return success({'csrf_token': generate_csrf()})
