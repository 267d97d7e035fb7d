import re
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request
from pymongo import ReturnDocument

from models import (
    Admin,
    Attendance,
    Group,
    LeaveRequest,
    Mentee,
    Mentor,
    ROLES,
    User,
    find_profile,
    profile_model,
)
from utils.auth import admin_required
from utils.helpers import is_valid_email, to_object_id

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

# Profile fields an admin may edit through the API; ids and counters are not among them
PROFILE_FIELDS = {
    "admin": ("full_name", "phone", "department", "position"),
    "mentor": ("full_name", "phone", "department"),
    "mentee": ("full_name", "student_id", "phone", "class", "section", "academic_year", "parent_info"),
}


def _mentor_reference(value):
    """Empty or null clears the assignment; anything else must name an existing mentor."""
    if not value:
        return None
    mentor_id = to_object_id(value)
    if mentor_id is None:
        raise ValueError(f"Invalid mentor_id: {value}")
    if not Mentor.collection().find_one({"_id": mentor_id}):
        raise LookupError("Mentor not found")
    return mentor_id


def _reference_error(error):
    status = 404 if isinstance(error, LookupError) else 400
    return jsonify({"message": str(error)}), status


def _profile_changes(role, payload):
    changes = {k: payload[k] for k in PROFILE_FIELDS[role] if k in payload}
    if role == "mentee" and "mentor_id" in payload:
        changes["mentor_id"] = _mentor_reference(payload["mentor_id"])
    changes["updated_at"] = datetime.utcnow()
    return changes


def _with_names(leaves):
    for leave in leaves:
        mentee = Mentee.collection().find_one({"_id": leave.get("mentee_id")}, {"full_name": 1, "student_id": 1})
        mentor = Mentor.collection().find_one({"_id": leave.get("mentor_id")}, {"full_name": 1})
        leave["mentee"] = mentee
        leave["mentor"] = mentor
    return leaves


# ==========================================================
# DASHBOARD
# ==========================================================
@admin_bp.route("/dashboard")
@admin_required
def dashboard():
    stats = {
        "total_users": User.collection().count_documents({}),
        "total_mentors": Mentor.collection().count_documents({}),
        "total_mentees": Mentee.collection().count_documents({}),
        "total_groups": Group.collection().count_documents({"is_archived": False}),
        "pending_leaves": LeaveRequest.collection().count_documents({"status": "pending"}),
        "active_users": User.collection().count_documents({"is_active": True}),
    }

    recent_users = list(
        User.collection()
        .find({}, {"email": 1, "role": 1, "created_at": 1})
        .sort("created_at", -1)
        .limit(5)
    )
    recent_leaves = _with_names(list(LeaveRequest.collection().find().sort("created_at", -1).limit(5)))

    return jsonify({"stats": stats, "recent_users": recent_users, "recent_leaves": recent_leaves})


# ==========================================================
# USERS
# ==========================================================
@admin_bp.route("/users")
@admin_required
def list_users():
    page = max(request.args.get("page", 1, type=int), 1)
    limit = max(request.args.get("limit", 10, type=int), 1)
    role = request.args.get("role")
    search = request.args.get("search")

    query = {}
    if role and role != "all":
        query["role"] = role
    if search:
        query["email"] = {"$regex": re.escape(search), "$options": "i"}

    users = list(
        User.collection()
        .find(query, {"password": 0})
        .sort("created_at", -1)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    total = User.collection().count_documents(query)

    for user in users:
        user["profile"] = find_profile(user)

    return jsonify({
        "users": users,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "total": total,
    })


@admin_bp.route("/users", methods=["POST"])
@admin_required
def add_user():
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip()
    password = payload.get("password")
    role = payload.get("role")

    if not is_valid_email(email) or not password:
        return jsonify({"message": "Valid email and password are required"}), 400
    if role not in ROLES:
        return jsonify({"message": f"Role must be one of: {', '.join(ROLES)}"}), 400
    if User.find_by_email(email):
        return jsonify({"message": "User with this email already exists"}), 409
    if role == "mentee" and "mentor_id" in payload:
        try:
            payload["mentor_id"] = _mentor_reference(payload["mentor_id"])
        except (ValueError, LookupError) as e:
            return _reference_error(e)

    result = User(email=email, password=password, role=role).save()
    profile_model(role).from_payload(result.inserted_id, payload).save()

    user = User.find_by_id(result.inserted_id)
    current_app.logger.info("Created %s account %s", role, user["email"])
    return jsonify({
        "message": "User created successfully",
        "user": User.public(user),
        "profile": find_profile(user),
    }), 201


@admin_bp.route("/users/<ObjectId:user_id>", methods=["PUT"])
@admin_required
def update_user(user_id):
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip().lower()
    if not is_valid_email(email):
        return jsonify({"message": "Valid email is required"}), 400

    clash = User.find_by_email(email)
    if clash and clash["_id"] != user_id:
        return jsonify({"message": "User with this email already exists"}), 409

    user = User.collection().find_one_and_update(
        {"_id": user_id},
        {"$set": {"email": email, "updated_at": datetime.utcnow()}},
        projection={"password": 0},
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        return jsonify({"message": "User not found"}), 404

    return jsonify({"message": "User updated successfully", "user": user})


@admin_bp.route("/users/<ObjectId:user_id>/toggle-status", methods=["PUT"])
@admin_required
def toggle_status(user_id):
    user = User.find_by_id(user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    is_active = not user.get("is_active", False)
    User.collection().update_one(
        {"_id": user_id},
        {"$set": {"is_active": is_active, "updated_at": datetime.utcnow()}}
    )
    user["is_active"] = is_active

    return jsonify({
        "message": f"User {'activated' if is_active else 'deactivated'} successfully",
        "user": User.public(user),
    })


@admin_bp.route("/users/<ObjectId:user_id>/profile", methods=["PUT"])
@admin_required
def update_profile(user_id):
    user = User.find_by_id(user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    payload = request.get_json(silent=True) or {}
    try:
        changes = _profile_changes(user["role"], payload)
    except (ValueError, LookupError) as e:
        return _reference_error(e)

    profile = profile_model(user["role"]).collection().find_one_and_update(
        {"user_id": user_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not profile:
        return jsonify({"message": "Profile not found"}), 404

    return jsonify({"message": "Profile updated successfully", "profile": profile})


@admin_bp.route("/users/<ObjectId:user_id>/details")
@admin_required
def user_details(user_id):
    user = User.find_by_id(user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    return jsonify({"user": User.public(user), "profile": find_profile(user)})


@admin_bp.route("/users/<ObjectId:user_id>/details", methods=["PUT"])
@admin_required
def update_user_details(user_id):
    user = User.find_by_id(user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    payload = request.get_json(silent=True) or {}
    model = profile_model(user["role"])
    profile = find_profile(user)

    try:
        changes = _profile_changes(user["role"], payload)
    except (ValueError, LookupError) as e:
        return _reference_error(e)

    if profile:
        profile = model.collection().find_one_and_update(
            {"_id": profile["_id"]},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    else:
        # details for an account that never had a profile
        if "mentor_id" in changes:
            payload["mentor_id"] = changes["mentor_id"]
        result = model.from_payload(user_id, payload).save()
        profile = model.collection().find_one({"_id": result.inserted_id})

    return jsonify({"user": User.public(user), "profile": profile})


@admin_bp.route("/users/<ObjectId:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    user = User.find_by_id(user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404

    if user_id == g.current_user["_id"]:
        return jsonify({"message": "You cannot delete your own account"}), 400

    profile = find_profile(user)
    if profile:
        if user["role"] == "mentor":
            Mentee.clear_mentor(profile["_id"])
        elif user["role"] == "mentee":
            Attendance.collection().delete_many({"mentee_id": profile["_id"]})
        profile_model(user["role"]).collection().delete_one({"_id": profile["_id"]})

    User.collection().delete_one({"_id": user_id})
    current_app.logger.info("Deleted %s account %s", user["role"], user["email"])

    return jsonify({"message": "User deleted successfully"})


# ==========================================================
# MENTORS / MENTEES
# ==========================================================
@admin_bp.route("/mentors")
@admin_required
def list_mentors():
    mentors = list(Mentor.collection().find().sort("full_name", 1))
    for mentor in mentors:
        mentor["user"] = User.collection().find_one(
            {"_id": mentor["user_id"]}, {"email": 1, "is_active": 1, "last_login": 1}
        )
        mentor["stats"] = {
            "mentee_count": Mentee.collection().count_documents({"mentor_id": mentor["_id"]}),
            "group_count": Group.collection().count_documents({"mentor_id": mentor["_id"], "is_archived": False}),
        }
    return jsonify(mentors)


@admin_bp.route("/mentees")
@admin_required
def list_mentees():
    mentees = list(Mentee.collection().find().sort("full_name", 1))
    for mentee in mentees:
        mentee["user"] = User.collection().find_one(
            {"_id": mentee["user_id"]}, {"email": 1, "is_active": 1, "last_login": 1}
        )
        mentee["mentor"] = (
            Mentor.collection().find_one({"_id": mentee["mentor_id"]}, {"full_name": 1})
            if mentee.get("mentor_id") else None
        )
    return jsonify(mentees)


@admin_bp.route("/assign-mentor", methods=["PUT"])
@admin_required
def assign_mentor():
    payload = request.get_json(silent=True) or {}
    mentee_id = to_object_id(payload.get("mentee_id"))
    if mentee_id is None:
        return jsonify({"message": "Valid mentee_id is required"}), 400

    try:
        mentor_id = _mentor_reference(payload.get("mentor_id"))
    except (ValueError, LookupError) as e:
        return _reference_error(e)

    mentee = Mentee.collection().find_one_and_update(
        {"_id": mentee_id},
        {"$set": {"mentor_id": mentor_id, "updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not mentee:
        return jsonify({"message": "Mentee not found"}), 404

    return jsonify({"message": "Mentor assigned successfully", "mentee": mentee})


# ==========================================================
# REPORTS
# ==========================================================
@admin_bp.route("/reports/overview")
@admin_required
def reports_overview():
    thirty_days_ago = datetime.utcnow() - timedelta(days=30)

    user_trends = list(User.collection().aggregate([
        {"$match": {"created_at": {"$gte": thirty_days_ago}}},
        {"$group": {
            "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$created_at"}},
            "count": {"$sum": 1},
        }},
        {"$sort": {"_id": 1}},
    ]))

    leave_stats = list(LeaveRequest.collection().aggregate([
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
    ]))

    attendance_stats = list(Mentee.collection().aggregate([
        {"$group": {
            "_id": None,
            "avg_attendance": {"$avg": "$attendance.percentage"},
            "total_students": {"$sum": 1},
        }},
    ]))
    if attendance_stats:
        attendance_stats = {
            "avg_attendance": attendance_stats[0]["avg_attendance"] or 0,
            "total_students": attendance_stats[0]["total_students"],
        }
    else:
        attendance_stats = {"avg_attendance": 0, "total_students": 0}

    return jsonify({
        "user_trends": user_trends,
        "leave_stats": leave_stats,
        "attendance_stats": attendance_stats,
    })


# ==========================================================
# OWN ADMIN PROFILE
# ==========================================================
@admin_bp.route("/profile", methods=["PUT"])
@admin_required
def update_own_profile():
    payload = request.get_json(silent=True) or {}
    admin = Admin.find_by_user_id(g.current_user["_id"])
    if not admin:
        return jsonify({"message": "Admin profile not found"}), 404

    email = (payload.get("email") or "").strip().lower()
    change_email = bool(email) and email != g.current_user["email"]
    if change_email:
        if not is_valid_email(email):
            return jsonify({"message": "Valid email is required"}), 400
        if User.find_by_email(email):
            return jsonify({"message": "User with this email already exists"}), 409

    changes = {k: payload[k] for k in PROFILE_FIELDS["admin"] if payload.get(k)}
    changes["updated_at"] = datetime.utcnow()
    Admin.collection().update_one({"_id": admin["_id"]}, {"$set": changes})

    if change_email:
        User.collection().update_one(
            {"_id": g.current_user["_id"]},
            {"$set": {"email": email, "updated_at": datetime.utcnow()}}
        )

    return jsonify({
        "message": "Profile updated successfully",
        "admin": Admin.find_by_user_id(g.current_user["_id"]),
    })
