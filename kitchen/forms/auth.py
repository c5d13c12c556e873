"""Authentication, profile and address forms."""

from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Regexp

from kitchen.forms.base import ApiForm, Nullable

PASSWORD_RULES = Regexp(
    r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$',
    message='Password must be at least 8 characters and include upper and lower case '
            'letters, a number and a special character',
)
PHONE_RULES = Regexp(r'^\+?[0-9]{10,14}$', message='Please enter a valid phone number')


class LoginForm(ApiForm):
    """Login form."""
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    remember = BooleanField('Remember Me')


class RegistrationForm(ApiForm):
    """Customer registration form."""
    first_name = StringField('First Name', validators=[
        DataRequired(message='First name is required'),
        Length(min=2, max=50)
    ])
    last_name = StringField('Last Name', validators=[
        DataRequired(message='Last name is required'),
        Length(min=2, max=50)
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    phone = StringField('Phone Number', validators=[Nullable(), PHONE_RULES])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        PASSWORD_RULES
    ])
    referral_code = StringField('Referral Code', validators=[Nullable(), Length(max=20)])


class ProfileForm(ApiForm):
    first_name = StringField('First Name', validators=[Nullable(), Length(min=2, max=50)])
    last_name = StringField('Last Name', validators=[Nullable(), Length(min=2, max=50)])
    phone = StringField('Phone Number', validators=[Nullable(), PHONE_RULES])


class ChangePasswordForm(ApiForm):
    current_password = PasswordField('Current Password', validators=[
        DataRequired(message='Current password is required')
    ])
    new_password = PasswordField('New Password', validators=[
        DataRequired(message='New password is required'),
        PASSWORD_RULES
    ])
    confirm_password = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('new_password', message='Passwords must match')
    ])


class AddressForm(ApiForm):
    """Delivery address; every field optional for partial updates."""
    label = StringField('Label', validators=[Nullable(), Length(max=50)])
    street = StringField('Street', validators=[Nullable(), Length(max=500)])
    city = StringField('City', validators=[Nullable(), Length(max=100)])
    state = StringField('State', validators=[Nullable(), Length(max=100)])
    landmark = StringField('Landmark', validators=[Nullable(), Length(max=200)])
    is_default = BooleanField('Default Address')


class NewAddressForm(AddressForm):
    street = StringField('Street', validators=[
        DataRequired(message='Street address is required'),
        Length(max=500)
    ])
    city = StringField('City', validators=[
        DataRequired(message='City is required'),
        Length(max=100)
    ])
    state = StringField('State', validators=[
        DataRequired(message='State is required'),
        Length(max=100)
    ])


OTP_RULES = Regexp(r'^\d{4,10}$', message='Code must be 4 to 10 digits')


class EmailForm(ApiForm):
    """Just an email address, for resending codes and password resets."""
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])


class VerifyEmailForm(EmailForm):
    code = StringField('Code', validators=[DataRequired(message='Code is required'), OTP_RULES])


class ResetPasswordForm(VerifyEmailForm):
    new_password = PasswordField('New Password', validators=[
        DataRequired(message='New password is required'),
        PASSWORD_RULES
    ])


class AdminRegistrationForm(ApiForm):
    first_name = StringField('First Name', validators=[
        DataRequired(message='First name is required'),
        Length(min=2, max=50)
    ])
    last_name = StringField('Last Name', validators=[
        DataRequired(message='Last name is required'),
        Length(min=2, max=50)
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        PASSWORD_RULES
    ])
    confirm_password = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords do not match')
    ])
    admin_secret = PasswordField('Admin Secret', validators=[
        DataRequired(message='Admin secret is required')
    ])
