"""Food categories and food items."""

import os
from datetime import datetime

import structlog
from flask import current_app
from sqlalchemy import or_
from slugify import slugify
from werkzeug.utils import secure_filename

from kitchen.errors import CannotDelete, Conflict, NotFound, Validation
from kitchen.extensions import db
from kitchen.models import FoodCategory, FoodItem, OrderItem

logger = structlog.get_logger(__name__)

CATEGORY_FIELDS = ('name', 'description', 'display_order', 'is_active')
FOOD_ITEM_FIELDS = ('category_id', 'name', 'description', 'base_price', 'is_available',
                    'is_featured', 'allow_protein_choice', 'allow_extra_sides',
                    'allow_customer_message')


def allowed_file(filename):
    """Check if file extension is allowed."""
    allowed = current_app.config['ALLOWED_EXTENSIONS']
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def save_image(file, folder):
    """Save an uploaded image under UPLOAD_FOLDER/folder and return its relative path."""
    if not file or not file.filename:
        return None
    if not allowed_file(file.filename):
        raise Validation('Unsupported image type')

    filename = secure_filename(file.filename)
    timestamp = datetime.utcnow().strftime('%Y%m%d%H%M%S')
    filename = f'{timestamp}_{filename}'
    directory = os.path.join(current_app.config['UPLOAD_FOLDER'], folder)
    os.makedirs(directory, exist_ok=True)
    file.save(os.path.join(directory, filename))
    logger.info('image_saved', folder=folder, filename=filename)
    return f'{folder}/{filename}'


def _by_id_or_slug(model, identifier):
    query = model.query
    if str(identifier).isdigit():
        return query.filter(or_(model.id == int(identifier), model.slug == str(identifier))).first()
    return query.filter_by(slug=identifier).first()


# --- Categories ---

def _category_or_404(category_id):
    category = db.session.get(FoodCategory, category_id)
    if category is None:
        raise NotFound('Category not found')
    return category


def _ensure_unique_slug(model, slug, exclude_id=None):
    query = model.query.filter_by(slug=slug)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise Conflict(f'{"Category" if model is FoodCategory else "Food item"} with this name already exists')


def create_category(data, image=None):
    slug = slugify(data['name'])
    _ensure_unique_slug(FoodCategory, slug)

    category = FoodCategory(slug=slug, **{k: data[k] for k in CATEGORY_FIELDS if data.get(k) is not None})
    category.image_url = save_image(image, 'categories')
    db.session.add(category)
    db.session.commit()
    logger.info('category_created', category_id=category.id, name=category.name)
    return category.to_dict()


def list_categories(active_only=False):
    query = FoodCategory.query
    if active_only:
        query = query.filter_by(is_active=True)
    categories = query.order_by(FoodCategory.display_order, FoodCategory.name).all()
    return [category.to_dict(include_counts=True) for category in categories]


def get_category(identifier):
    category = _by_id_or_slug(FoodCategory, identifier)
    if category is None:
        raise NotFound('Category not found')
    return category.to_dict(include_counts=True)


def update_category(category_id, data, image=None):
    category = _category_or_404(category_id)

    if data.get('name') and data['name'] != category.name:
        slug = slugify(data['name'])
        _ensure_unique_slug(FoodCategory, slug, exclude_id=category.id)
        category.slug = slug

    for field in CATEGORY_FIELDS:
        if data.get(field) is not None:
            setattr(category, field, data[field])

    image_url = save_image(image, 'categories')
    if image_url:
        category.image_url = image_url

    db.session.commit()
    logger.info('category_updated', category_id=category.id)
    return category.to_dict()


def delete_category(category_id):
    category = _category_or_404(category_id)
    if category.food_items.count() > 0:
        raise CannotDelete('Cannot delete category with existing food items')

    db.session.delete(category)
    db.session.commit()
    logger.info('category_deleted', category_id=category_id)


def toggle_category_active(category_id):
    category = _category_or_404(category_id)
    category.is_active = not category.is_active
    db.session.commit()
    logger.info('category_toggled', category_id=category.id, is_active=category.is_active)
    return category.to_dict()


# --- Food items ---

def _food_item_or_404(food_item_id):
    food_item = db.session.get(FoodItem, food_item_id)
    if food_item is None:
        raise NotFound('Food item not found')
    return food_item


def create_food_item(data, image=None):
    _category_or_404(data['category_id'])
    if data['base_price'] < 0:
        raise Validation('Base price cannot be negative')

    slug = FoodItem.slug_for(data['name'])
    _ensure_unique_slug(FoodItem, slug)

    food_item = FoodItem(slug=slug, **{k: data[k] for k in FOOD_ITEM_FIELDS if data.get(k) is not None})
    food_item.image_url = save_image(image, 'food-items')
    db.session.add(food_item)
    db.session.commit()
    logger.info('food_item_created', food_item_id=food_item.id, name=food_item.name)
    return food_item.to_dict()


def list_food_items(category_id=None, available=None, featured=None, search=None):
    query = FoodItem.query
    if category_id is not None:
        query = query.filter(FoodItem.category_id == category_id)
    if available is not None:
        query = query.filter(FoodItem.is_available.is_(available))
    if featured is not None:
        query = query.filter(FoodItem.is_featured.is_(featured))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(FoodItem.name.ilike(pattern), FoodItem.description.ilike(pattern)))

    food_items = query.order_by(FoodItem.is_featured.desc(), FoodItem.created_at.desc()).all()
    return {
        'food_items': [food_item.to_dict() for food_item in food_items],
        'total': len(food_items),
    }


def list_food_items_by_category(identifier):
    category = _by_id_or_slug(FoodCategory, identifier)
    if category is None:
        raise NotFound('Category not found')

    food_items = (category.food_items
                  .filter_by(is_available=True)
                  .order_by(FoodItem.is_featured.desc(), FoodItem.name)
                  .all())
    return {
        'category': category.to_dict(),
        'food_items': [food_item.to_dict() for food_item in food_items],
        'total': len(food_items),
    }


def get_food_item(identifier):
    food_item = _by_id_or_slug(FoodItem, identifier)
    if food_item is None:
        raise NotFound('Food item not found')
    return food_item.to_dict()


def update_food_item(food_item_id, data, image=None):
    food_item = _food_item_or_404(food_item_id)

    if data.get('category_id') is not None:
        _category_or_404(data['category_id'])
    if data.get('base_price') is not None and data['base_price'] < 0:
        raise Validation('Base price cannot be negative')
    if data.get('name') and data['name'] != food_item.name:
        slug = FoodItem.slug_for(data['name'])
        _ensure_unique_slug(FoodItem, slug, exclude_id=food_item.id)
        food_item.slug = slug

    for field in FOOD_ITEM_FIELDS:
        if data.get(field) is not None:
            setattr(food_item, field, data[field])

    image_url = save_image(image, 'food-items')
    if image_url:
        food_item.image_url = image_url

    db.session.commit()
    logger.info('food_item_updated', food_item_id=food_item.id)
    return food_item.to_dict()


def delete_food_item(food_item_id):
    """Delete a food item; cart lines go with it, order snapshots stay."""
    food_item = _food_item_or_404(food_item_id)

    OrderItem.query.filter_by(food_item_id=food_item.id).update(
        {OrderItem.food_item_id: None}, synchronize_session=False
    )
    db.session.delete(food_item)
    db.session.commit()
    logger.info('food_item_deleted', food_item_id=food_item_id)


def toggle_availability(food_item_id):
    food_item = _food_item_or_404(food_item_id)
    food_item.is_available = not food_item.is_available
    db.session.commit()
    logger.info('food_item_availability_toggled', food_item_id=food_item.id,
                is_available=food_item.is_available)
    return food_item.to_dict()


def toggle_featured(food_item_id):
    food_item = _food_item_or_404(food_item_id)
    food_item.is_featured = not food_item.is_featured
    db.session.commit()
    logger.info('food_item_featured_toggled', food_item_id=food_item.id,
                is_featured=food_item.is_featured)
    return food_item.to_dict()
