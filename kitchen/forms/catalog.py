"""Catalog management forms."""

from flask_wtf.file import FileAllowed, FileField
from wtforms import BooleanField, FloatField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange

from kitchen.forms.base import ApiForm, Nullable

IMAGE_TYPES = ['jpg', 'jpeg', 'png', 'webp']


class CategoryForm(ApiForm):
    """Category fields; all optional so the same form serves updates."""
    name = StringField('Name', validators=[Nullable(), Length(min=2, max=100)])
    description = TextAreaField('Description', validators=[Nullable(), Length(max=500)])
    display_order = IntegerField('Display Order', validators=[Nullable()])
    is_active = BooleanField('Active')
    image = FileField('Image', validators=[FileAllowed(IMAGE_TYPES, 'Images only')])


class NewCategoryForm(CategoryForm):
    name = StringField('Name', validators=[
        DataRequired(message='Category name is required'),
        Length(min=2, max=100)
    ])


class FoodItemForm(ApiForm):
    """Food item fields; all optional so the same form serves updates."""
    category_id = IntegerField('Category', validators=[Nullable()])
    name = StringField('Name', validators=[Nullable(), Length(min=2, max=150)])
    description = TextAreaField('Description', validators=[Nullable(), Length(max=2000)])
    base_price = FloatField('Base Price', validators=[
        Nullable(), NumberRange(min=0, message='Base price cannot be negative')
    ])
    is_available = BooleanField('Available')
    is_featured = BooleanField('Featured')
    allow_protein_choice = BooleanField('Allow Protein Choice')
    allow_extra_sides = BooleanField('Allow Extra Sides')
    allow_customer_message = BooleanField('Allow Customer Message')
    image = FileField('Image', validators=[FileAllowed(IMAGE_TYPES, 'Images only')])


class NewFoodItemForm(FoodItemForm):
    category_id = IntegerField('Category', validators=[
        InputRequired(message='Category is required')
    ])
    name = StringField('Name', validators=[
        DataRequired(message='Food name is required'),
        Length(min=2, max=150)
    ])
    base_price = FloatField('Base Price', validators=[
        InputRequired(message='Base price is required'),
        NumberRange(min=0, message='Base price cannot be negative')
    ])
