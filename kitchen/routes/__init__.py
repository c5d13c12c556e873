"""Routes package - register all blueprints."""

from flask import Flask


def register_blueprints(app: Flask):
    """Register all blueprints with the application."""
    from .auth import auth_bp
    from .users import users_bp
    from .catalog import catalog_bp
    from .cart import cart_bp
    from .orders import orders_bp
    from .health import health_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(catalog_bp, url_prefix='/api/food')
    app.register_blueprint(cart_bp, url_prefix='/api/cart')
    app.register_blueprint(orders_bp, url_prefix='/api/orders')
    app.register_blueprint(health_bp, url_prefix='/api')
