from flask import Blueprint, request, jsonify, g
from models import User, find_profile
from utils.auth import login_required, login_user, logout_user

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# Login
@auth_bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or {}
    email = payload.get("email")
    password = payload.get("password")

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    user = User.verify_password(email, password)
    if not user:
        return jsonify({"message": "Invalid email or password"}), 401

    if not user.get("is_active", False):
        return jsonify({"message": "Account is deactivated"}), 403

    login_user(user)
    return jsonify({
        "message": "Login successful",
        "user": User.public(user),
        "profile": find_profile(user),
    })


# Logout
@auth_bp.route("/logout", methods=["POST"])
def logout():
    return logout_user()


# Current user and profile
@auth_bp.route("/me")
@login_required
def me():
    user = g.current_user
    return jsonify({"user": User.public(user), "profile": find_profile(user)})
