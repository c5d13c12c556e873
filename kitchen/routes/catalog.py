"""Food catalog routes: categories and food items.

Reads are public; every write needs an admin session.
"""

from flask import Blueprint, request
from flask_login import current_user

from kitchen.forms.catalog import CategoryForm, FoodItemForm, NewCategoryForm, NewFoodItemForm
from kitchen.services import catalog
from kitchen.utils.decorators import admin_required
from kitchen.utils.responses import query_bool, success

catalog_bp = Blueprint('catalog', __name__)


def _is_admin():
    return current_user.is_authenticated and current_user.is_admin()


# --- Categories ---

@catalog_bp.route('/categories')
def list_categories():
    return success(catalog.list_categories(active_only=not _is_admin()))


@catalog_bp.route('/categories', methods=['POST'])
@admin_required
def create_category():
    form = NewCategoryForm().validate_or_raise()
    category = catalog.create_category(form.payload(), form.image.data)
    return success(category, 'Category created successfully', 201)


@catalog_bp.route('/categories/<identifier>')
def get_category(identifier):
    return success(catalog.get_category(identifier))


@catalog_bp.route('/categories/<int:category_id>', methods=['PATCH'])
@admin_required
def update_category(category_id):
    form = CategoryForm().validate_or_raise()
    category = catalog.update_category(category_id, form.payload(), form.image.data)
    return success(category, 'Category updated successfully')


@catalog_bp.route('/categories/<int:category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    catalog.delete_category(category_id)
    return success(message='Category deleted successfully')


@catalog_bp.route('/categories/<int:category_id>/toggle-active', methods=['PATCH'])
@admin_required
def toggle_category_active(category_id):
    category = catalog.toggle_category_active(category_id)
    state = 'activated' if category['is_active'] else 'deactivated'
    return success(category, f'Category {state} successfully')


# --- Food items ---

@catalog_bp.route('/items')
def list_food_items():
    data = catalog.list_food_items(
        category_id=request.args.get('category_id', type=int),
        available=query_bool(request.args, 'available'),
        featured=query_bool(request.args, 'featured'),
        search=request.args.get('search', '').strip() or None,
    )
    return success(data)


@catalog_bp.route('/items', methods=['POST'])
@admin_required
def create_food_item():
    form = NewFoodItemForm().validate_or_raise()
    food_item = catalog.create_food_item(form.payload(), form.image.data)
    return success(food_item, 'Food item created successfully', 201)


@catalog_bp.route('/items/category/<identifier>')
def list_food_items_by_category(identifier):
    return success(catalog.list_food_items_by_category(identifier))


@catalog_bp.route('/items/<identifier>')
def get_food_item(identifier):
    return success(catalog.get_food_item(identifier))


@catalog_bp.route('/items/<int:food_item_id>', methods=['PATCH'])
@admin_required
def update_food_item(food_item_id):
    form = FoodItemForm().validate_or_raise()
    food_item = catalog.update_food_item(food_item_id, form.payload(), form.image.data)
    return success(food_item, 'Food item updated successfully')


@catalog_bp.route('/items/<int:food_item_id>', methods=['DELETE'])
@admin_required
def delete_food_item(food_item_id):
    catalog.delete_food_item(food_item_id)
    return success(message='Food item deleted successfully')


@catalog_bp.route('/items/<int:food_item_id>/toggle-availability', methods=['PATCH'])
@admin_required
def toggle_availability(food_item_id):
    food_item = catalog.toggle_availability(food_item_id)
    state = 'available' if food_item['is_available'] else 'unavailable'
    return success(food_item, f'Food item is now {state}')


@catalog_bp.route('/items/<int:food_item_id>/toggle-featured', methods=['PATCH'])
@admin_required
def toggle_featured(food_item_id):
    food_item = catalog.toggle_featured(food_item_id)
    state = 'featured' if food_item['is_featured'] else 'no longer featured'
    return success(food_item, f'Food item is {state}')
