from flask import Flask

from storefront.modules.auth.routes import bp as auth_bp
from storefront.modules.catalog.routes import bp as catalog_bp
from storefront.modules.cart.routes import bp as cart_bp
from storefront.modules.checkout.routes import bp as checkout_bp


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(checkout_bp)

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Storefront",
            "version": "0.1.0",
            "backend": app.config["BACKEND_ENDPOINT"],
            "endpoints": {
                "catalog": ["/api/products/search"],
                "cart": ["/api/cart"],
            },
        }, 200
