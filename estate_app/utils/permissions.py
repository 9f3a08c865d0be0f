# estate_app/utils/permissions.py

from functools import wraps
from http import HTTPStatus

from flask import current_app, jsonify
from flask_login import current_user


def has_permission(user, feature):
    """Check if an admin may use a console feature"""
    if not user or not user.is_authenticated:
        return False
    return user.has_permission(feature)


def permission_required(feature):
    """
    Decorator to require a console feature permission.

    Unauthenticated requests get 401 and admins without the feature get 403,
    both as JSON. The chairman passes every check.
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({"error": "Authentication required."}), HTTPStatus.UNAUTHORIZED

            if not has_permission(current_user, feature):
                current_app.logger.warning(
                    "Admin %s denied access to %s",
                    current_user.id,
                    feature,
                    extra={"admin_id": current_user.id, "feature": feature},
                )
                return jsonify({"error": "You do not have permission to perform this action."}), HTTPStatus.FORBIDDEN

            return f(*args, **kwargs)

        return decorated_function

    return decorator
