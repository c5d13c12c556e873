"""Order forms."""

from wtforms import DateTimeField, FloatField, IntegerField, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, NumberRange, Regexp

from kitchen.forms.base import ApiForm, Nullable
from kitchen.models.enums import OrderStatus, PaymentMethod

ISO_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M:%SZ', '%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M']


class CreateOrderForm(ApiForm):
    address_id = IntegerField('Delivery Address', validators=[
        InputRequired(message='Delivery address is required')
    ])
    contact_number = StringField('Contact Number', validators=[
        DataRequired(message='Contact number is required'),
        Regexp(r'^(\+234|0)[789][01]\d{8}$', message='Please provide a valid Nigerian phone number')
    ])
    payment_method = StringField('Payment Method', validators=[
        DataRequired(message='Payment method is required'),
        AnyOf([m.value for m in PaymentMethod], message='Invalid payment method')
    ])
    delivery_time = DateTimeField('Delivery Time', format=ISO_FORMATS, validators=[Nullable()])
    delivery_instructions = StringField('Delivery Instructions', validators=[
        Nullable(), Length(max=500)
    ])
    customer_instructions = StringField('Customer Instructions', validators=[
        Nullable(), Length(max=1000)
    ])
    promo_code = StringField('Promo Code', validators=[Nullable(), Length(max=50)])


class CancelOrderForm(ApiForm):
    reason = StringField('Reason', validators=[
        DataRequired(message='Cancellation reason is required'),
        Length(max=500, message='Cancellation reason must not exceed 500 characters')
    ])


class UpdateOrderStatusForm(ApiForm):
    status = StringField('Status', validators=[
        DataRequired(message='Status is required'),
        AnyOf([s.value for s in OrderStatus], message='Invalid order status')
    ])
    cancellation_reason = StringField('Cancellation Reason', validators=[
        Nullable(), Length(max=500)
    ])


class PromoValidateForm(ApiForm):
    code = StringField('Promo Code', validators=[
        DataRequired(message='Promo code is required'),
        Length(max=50)
    ])
    subtotal = FloatField('Subtotal', validators=[Nullable(), NumberRange(min=0)])
