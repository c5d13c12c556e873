"""Seed script to populate database with sample data."""

from kitchen import create_app, db
from kitchen.models import DiscountType, FoodCategory, FoodItem, PromoCode, User, UserRole


MENU = {
    'Rice Dishes': [
        {'name': 'Jollof Rice', 'base_price': 2500, 'is_featured': True,
         'description': 'Smoky party jollof cooked in a rich tomato and pepper base.',
         'allow_protein_choice': True, 'allow_extra_sides': True, 'allow_customer_message': True},
        {'name': 'Fried Rice', 'base_price': 2500,
         'description': 'Stir-fried rice with mixed vegetables, liver and prawns.',
         'allow_protein_choice': True, 'allow_extra_sides': True, 'allow_customer_message': True},
        {'name': 'Ofada Rice and Ayamase', 'base_price': 3200,
         'description': 'Local ofada rice with green pepper ayamase sauce.',
         'allow_protein_choice': True, 'allow_customer_message': True},
    ],
    'Swallow and Soups': [
        {'name': 'Pounded Yam and Egusi', 'base_price': 3500, 'is_featured': True,
         'description': 'Smooth pounded yam with melon seed soup and assorted meat.',
         'allow_protein_choice': True, 'allow_customer_message': True},
        {'name': 'Amala and Ewedu', 'base_price': 3000,
         'description': 'Yam flour swallow with ewedu, gbegiri and stew.',
         'allow_protein_choice': True},
    ],
    'Sides': [
        {'name': 'Moi Moi', 'base_price': 800,
         'description': 'Steamed bean pudding with egg and fish.'},
        {'name': 'Small Chops Platter', 'base_price': 4000,
         'description': 'Puff-puff, samosa, spring rolls and peppered gizzard.',
         'allow_customer_message': True},
    ],
    'Drinks': [
        {'name': 'Zobo', 'base_price': 700, 'description': 'Chilled hibiscus drink with ginger.'},
        {'name': 'Chapman', 'base_price': 1200, 'description': 'Classic Nigerian fruity cocktail.'},
    ],
}


def seed_database():
    """Seed the database with sample data."""
    app = create_app()

    with app.app_context():
        # Create tables
        db.create_all()

        # Check if already seeded
        if User.query.filter_by(email='admin@chukskitchen.com').first():
            print('Database already seeded!')
            return

        print('Seeding database...')

        # Create Admin
        admin = User(
            email='admin@chukskitchen.com',
            first_name='Chuks',
            last_name='Admin',
            phone='08000000000',
            role=UserRole.ADMIN.value,
            is_email_verified=True,
        )
        admin.set_password('Admin@123')
        db.session.add(admin)

        # Create categories and food items
        for order, (category_name, items) in enumerate(MENU.items()):
            category = FoodCategory(
                name=category_name,
                slug=FoodItem.slug_for(category_name),
                display_order=order,
            )
            db.session.add(category)
            db.session.flush()

            for item in items:
                db.session.add(FoodItem(
                    category_id=category.id,
                    slug=FoodItem.slug_for(item['name']),
                    is_available=True,
                    **item
                ))

        # Create sample customer
        customer = User(
            email='ada@example.com',
            first_name='Ada',
            last_name='Obi',
            phone='08012345678',
            role=UserRole.CUSTOMER.value,
            referral_code='CKADA001',
            is_email_verified=True,
        )
        customer.set_password('Customer@123')
        db.session.add(customer)
        db.session.flush()

        db.session.add(PromoCode(
            code=customer.referral_code,
            owner_id=customer.id,
            description=f'Referral code of {customer.full_name}',
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=10,
        ))

        # Create platform promo codes
        db.session.add(PromoCode(
            code='WELCOME10',
            description='10% off your first order',
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=10,
            max_uses=100,
        ))
        db.session.add(PromoCode(
            code='CHUKS500',
            description='N500 off any order',
            discount_type=DiscountType.FIXED.value,
            discount_value=500,
            max_uses=50,
        ))

        db.session.commit()
        print('Database seeded successfully!')
        print('\nTest Accounts:')
        print('  Admin: admin@chukskitchen.com / Admin@123')
        print('  Customer: ada@example.com / Customer@123')
        print('\nPromo Codes: WELCOME10 (10% off), CHUKS500 (N500 off)')


if __name__ == '__main__':
    seed_database()
