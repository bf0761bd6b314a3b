from flask import Flask

from srcmarket.modules.marketplace.routes import bp as marketplace_bp
from srcmarket.modules.badges.routes import bp as badges_bp
from srcmarket.modules.history.routes import bp as history_bp
from srcmarket.modules.cart.routes import bp as cart_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(marketplace_bp, url_prefix="/api")
    app.register_blueprint(badges_bp, url_prefix="/api")
    app.register_blueprint(history_bp, url_prefix="/api")
    app.register_blueprint(cart_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "SRC Market API",
            "version": "0.1.0",
            "endpoints": {
                "marketplace": ["/marketplace?status=<status>"],
                "badges": ["/badges", "/badges/trending"],
                "history": ["/history/<username>"],
                "cart": ["/cart", "/cart/add", "/cart/remove"],
            },
        }, 200
