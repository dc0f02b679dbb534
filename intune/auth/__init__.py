#!/usr/bin/env python
"""Authentication utilities and Flask-Login integration."""

from __future__ import annotations

from functools import wraps

from flask import jsonify
from flask_login import LoginManager, current_user

login_manager = LoginManager()
login_manager.session_protection = "strong"
login_manager.login_message = None


def admin_required(view):
    """Allow only authenticated admins; anonymous callers get the 401 handler."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not getattr(current_user, "is_authenticated", False):
            return login_manager.unauthorized()
        if not getattr(current_user, "is_admin", False):
            return jsonify({"message": "Not authorized as an admin"}), 403
        return view(*args, **kwargs)

    return wrapper


def init_auth(app):
    """Attach Flask-Login to the Flask app and register the auth blueprint."""
    from intune.database.db_manager import User, db
    from intune.interfaces.http.routes.auth import auth_bp

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "authentication_required"}), 401

    app.register_blueprint(auth_bp)

    return login_manager


__all__ = ["login_manager", "init_auth", "admin_required"]
