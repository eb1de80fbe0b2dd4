"""Template helpers shared by every page."""

from datetime import datetime

from flask import Flask, session

from storefront.modules.cart.service import get_session_cart


def init_ui(app: Flask) -> None:
    @app.context_processor
    def inject_nav():
        """Inject navbar data (user + guest cart badge) into all templates."""
        return {
            "nav_user": session.get("username"),
            "nav_balance": session.get("balance"),
            "nav_guest_cart_count": sum(get_session_cart().values()),
            "current_year": datetime.now().year,
        }

    @app.template_filter("money")
    def money(value) -> str:
        return f"${value}"
