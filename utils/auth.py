from functools import wraps
from flask import session, jsonify, g

from models import User


# Only logged-in users get through; the user document is left on flask.g
def login_required(view_function):
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        user_id = session.get("user_id")
        if not user_id:
            return jsonify({"message": "Authentication required"}), 401

        user = User.find_by_id(user_id)
        if not user or not user.get("is_active", False):
            session.clear()
            return jsonify({"message": "Authentication required"}), 401

        g.current_user = user
        return view_function(*args, **kwargs)
    return decorated_function


# Restrict a route to the given roles, e.g. @role_required("admin")
def role_required(*roles):
    def decorator(view_function):
        @wraps(view_function)
        @login_required
        def decorated_function(*args, **kwargs):
            if g.current_user.get("role") not in roles:
                return jsonify({"message": "Access denied"}), 403
            return view_function(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required("admin")


def login_user(user):
    session.clear()
    session["user_id"] = str(user["_id"])
    session["role"] = user["role"]
    User.touch_last_login(user["_id"])


def logout_user():
    session.clear()
    return jsonify({"message": "You have been logged out successfully."})
