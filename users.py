# users.py
import logging

from bson.errors import InvalidId
from bson.objectid import ObjectId
from flask import Blueprint, jsonify
from pymongo.errors import PyMongoError

from errors import NotFound, PersistenceError, ValidationError
from models.db import USERS, get_db, serialize
from models.user import PUBLIC_PROJECTION

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/v1/users")


def list_users(db):
    try:
        return list(db[USERS].find({}, PUBLIC_PROJECTION))
    except PyMongoError as e:
        logger.exception("Error fetching users")
        raise PersistenceError(str(e))


def get_user(db, user_id):
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        raise ValidationError("Invalid user id")

    try:
        user = db[USERS].find_one({"_id": oid}, PUBLIC_PROJECTION)
    except PyMongoError as e:
        logger.exception("Error fetching user %s", user_id)
        raise PersistenceError(str(e))

    if not user:
        raise NotFound("User not found")
    return user


# -----------------------------
# USER ROUTES
# -----------------------------
# GET /v1/users/ - Get all user profiles
@users_bp.route("/", methods=["GET"])
def get_users():
    users = list_users(get_db())

    return jsonify({
        "success": True,
        "count": len(users),
        "users": [serialize(u) for u in users]
    }), 200


# GET /v1/users/<id> - Get single user profile
@users_bp.route("/<user_id>", methods=["GET"])
def get_single_user(user_id):
    user = get_user(get_db(), user_id)
    return jsonify({"success": True, "user": serialize(user)}), 200
