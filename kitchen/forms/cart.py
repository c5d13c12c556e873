"""Cart forms."""

from wtforms import IntegerField, StringField
from wtforms.validators import AnyOf, InputRequired, Length, NumberRange

from kitchen.forms.base import ApiForm, EachIn, ListField, Nullable
from kitchen.models.enums import ExtraSideType, ProteinType
from kitchen.services.cart import CartItemUpdate

PROTEINS = [p.value for p in ProteinType]
EXTRA_SIDES = [s.value for s in ExtraSideType]


class AddToCartForm(ApiForm):
    food_item_id = IntegerField('Food Item', validators=[
        InputRequired(message='Food item is required')
    ])
    quantity = IntegerField('Quantity', default=1, validators=[
        NumberRange(min=1, message='Quantity must be at least 1')
    ])
    selected_protein = StringField('Protein', validators=[
        Nullable(), AnyOf(PROTEINS, message='Invalid protein type')
    ])
    selected_extra_sides = ListField('Extra Sides', validators=[
        EachIn(EXTRA_SIDES, message='Invalid extra side type')
    ])
    customer_message = StringField('Message', validators=[
        Nullable(), Length(max=500, message='Message must not exceed 500 characters')
    ])


class UpdateCartItemForm(ApiForm):
    quantity = IntegerField('Quantity', validators=[
        Nullable(), NumberRange(min=1, message='Quantity must be at least 1')
    ])
    selected_protein = StringField('Protein', validators=[
        Nullable(), AnyOf(PROTEINS, message='Invalid protein type')
    ])
    selected_extra_sides = ListField('Extra Sides', validators=[
        EachIn(EXTRA_SIDES, message='Invalid extra side type')
    ])
    customer_message = StringField('Message', validators=[
        Nullable(), Length(max=500, message='Message must not exceed 500 characters')
    ])

    def to_update(self):
        """CartItemUpdate holding only the fields the client sent."""
        update = CartItemUpdate()
        for name, value in self.payload().items():
            if name == 'quantity' and value is None:
                continue
            setattr(update, name, value)
        return update
