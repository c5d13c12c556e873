"""Food category and food item models."""

from datetime import datetime
from slugify import slugify
from kitchen.extensions import db


class FoodCategory(db.Model):
    """Menu category model."""
    __tablename__ = 'food_categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    image_url = db.Column(db.String(255))
    display_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    food_items = db.relationship('FoodItem', backref='category', lazy='dynamic')

    def to_dict(self, include_counts=False):
        data = {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'image_url': self.image_url,
            'display_order': self.display_order,
            'is_active': self.is_active,
        }
        if include_counts:
            data['item_count'] = self.food_items.count()
        return data

    def __repr__(self):
        return f'<FoodCategory {self.name}>'


class FoodItem(db.Model):
    """A dish on the menu."""
    __tablename__ = 'food_items'

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('food_categories.id'), nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    slug = db.Column(db.String(170), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)
    base_price = db.Column(db.Float, nullable=False)
    image_url = db.Column(db.String(255))
    is_available = db.Column(db.Boolean, default=True)
    is_featured = db.Column(db.Boolean, default=False)

    # Capability flags
    allow_protein_choice = db.Column(db.Boolean, default=False)
    allow_extra_sides = db.Column(db.Boolean, default=False)
    allow_customer_message = db.Column(db.Boolean, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    cart_items = db.relationship('CartItem', backref='food_item', lazy='dynamic', cascade='all, delete-orphan')

    @staticmethod
    def slug_for(name):
        return slugify(name) if name else 'food-item'

    def to_dict(self):
        return {
            'id': self.id,
            'category': {
                'id': self.category.id,
                'name': self.category.name,
                'slug': self.category.slug,
            } if self.category else None,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'base_price': self.base_price,
            'image_url': self.image_url,
            'is_available': self.is_available,
            'is_featured': self.is_featured,
            'allow_protein_choice': self.allow_protein_choice,
            'allow_extra_sides': self.allow_extra_sides,
            'allow_customer_message': self.allow_customer_message,
        }

    def __repr__(self):
        return f'<FoodItem {self.name}>'
