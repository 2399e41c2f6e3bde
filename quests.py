# quests.py
import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from errors import NotFound, PersistenceError, ValidationError
from models.db import QUESTS, get_db, serialize
from models.quest import (
    ALLOWED_UPDATES,
    DATE_PATTERN,
    DEFAULTS,
    REQUIRED_FIELDS,
    TITLE_MAX_LENGTH,
    QuestStatus,
    Visibility,
    generate_quest_id,
)

logger = logging.getLogger(__name__)

quests_bp = Blueprint("quests", __name__, url_prefix="/v1/quest")

LIST_FILTERS = ["status", "subject", "visibility"]

# stored minutes are 32-bit ints in the collection validator
INT32_MAX = 2**31 - 1


def today():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")  # YYYY-MM-DD


# -----------------------------
# Field checks
# -----------------------------
def _check_enum(field, value, enum_cls):
    allowed = [e.value for e in enum_cls]
    if value not in allowed:
        raise ValidationError(f"Invalid {field}: must be one of {', '.join(allowed)}")
    return value


def _check_int(field, value, minimum):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    if number > INT32_MAX:
        raise ValidationError(f"{field} must be at most {INT32_MAX}")
    return number


def _check_date(field, value):
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date")
    return value


def _check_string(field, value):
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def _check_title(field, value):
    _check_string(field, value)
    if not value.strip():
        raise ValidationError("title must not be empty")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValidationError(f"title must be at most {TITLE_MAX_LENGTH} characters")
    return value


FIELD_CHECKS = {
    "title": _check_title,
    "description": _check_string,
    "subject": _check_string,
    "topic": _check_string,
    "effort_type": _check_string,
    "studied_minutes": lambda f, v: _check_int(f, v, 0),
    "suggested_minutes": lambda f, v: _check_int(f, v, 1),
    "deadline": _check_date,
    "visibility": lambda f, v: _check_enum(f, v, Visibility),
    "status": lambda f, v: _check_enum(f, v, QuestStatus),
}


def clean_fields(fields):
    """Run every supplied field through its check, returning coerced values."""
    return {key: FIELD_CHECKS[key](key, value) for key, value in fields.items()}


# -----------------------------
# Service
# -----------------------------
def create_quest(db, data, id_factory=generate_quest_id):
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    # id and created_at are never taken from the client
    fields = dict(DEFAULTS)
    for key in ALLOWED_UPDATES:
        if data.get(key) not in (None, ""):
            fields[key] = data[key]
    fields = clean_fields(fields)

    new_quest = {
        "id": id_factory(),
        **fields,
        "created_at": today(),
    }

    try:
        result = db[QUESTS].insert_one(new_quest)
    except PyMongoError as e:
        logger.exception("Error creating quest")
        raise PersistenceError(str(e))

    logger.info("Created quest %s", new_quest["id"])
    return {**new_quest, "_id": result.inserted_id}


def build_filter(params):
    """
    Exact matches plus an inclusive deadline range, skipping empty values.
    Enumerated filters and deadline bounds are checked like quest fields.
    """
    query = {}
    for key in LIST_FILTERS:
        if params.get(key):
            query[key] = FIELD_CHECKS[key](key, params[key])

    deadline_before = params.get("deadline_before")
    deadline_after = params.get("deadline_after")
    if deadline_before or deadline_after:
        query["deadline"] = {}
        if deadline_before:
            query["deadline"]["$lte"] = _check_date("deadline_before", deadline_before)
        if deadline_after:
            query["deadline"]["$gte"] = _check_date("deadline_after", deadline_after)

    return query


def list_quests(db, params=None):
    query = build_filter(params or {})
    try:
        return list(db[QUESTS].find(query).sort("created_at", DESCENDING))
    except PyMongoError as e:
        logger.exception("Error fetching quests")
        raise PersistenceError(str(e))


def get_quest(db, quest_id):
    try:
        quest = db[QUESTS].find_one({"id": quest_id})
    except PyMongoError as e:
        logger.exception("Error fetching quest %s", quest_id)
        raise PersistenceError(str(e))

    if not quest:
        raise NotFound("Quest not found")
    return quest


def update_quest(db, quest_id, data):
    # only allow-listed keys survive; everything else is dropped silently
    updates = {key: data[key] for key in ALLOWED_UPDATES if key in data}
    if not updates:
        raise ValidationError("No valid fields to update")
    updates = clean_fields(updates)

    try:
        quest = db[QUESTS].find_one_and_update(
            {"id": quest_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
    except PyMongoError as e:
        logger.exception("Error updating quest %s", quest_id)
        raise PersistenceError(str(e))

    if not quest:
        raise NotFound("Quest not found")

    logger.info("Updated quest %s: %s", quest_id, ", ".join(sorted(updates)))
    return quest


def delete_quest(db, quest_id):
    try:
        result = db[QUESTS].delete_one({"id": quest_id})
    except PyMongoError as e:
        logger.exception("Error deleting quest %s", quest_id)
        raise PersistenceError(str(e))

    if result.deleted_count == 0:
        raise NotFound("Quest not found")

    logger.info("Deleted quest %s", quest_id)
    return {"id": quest_id}


# -----------------------------
# QUEST ROUTES
# -----------------------------
def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# POST /v1/quest/ - Add new quest
@quests_bp.route("/", methods=["POST"])
def add_quest():
    id_factory = current_app.config["QUEST_ID_FACTORY"]
    quest = create_quest(get_db(), json_body(), id_factory=id_factory)

    return jsonify({
        "success": True,
        "message": "Quest created successfully",
        "quest": serialize(quest)
    }), 201


# GET /v1/quest/ - Get all quests (with optional filters)
@quests_bp.route("/", methods=["GET"])
def get_quests():
    quests = list_quests(get_db(), request.args)

    return jsonify({
        "success": True,
        "count": len(quests),
        "quests": [serialize(q) for q in quests]
    }), 200


# GET /v1/quest/<id> - Get single quest
@quests_bp.route("/<quest_id>", methods=["GET"])
def get_single_quest(quest_id):
    quest = get_quest(get_db(), quest_id)
    return jsonify({"success": True, "quest": serialize(quest)}), 200


# PATCH /v1/quest/<id> - Update quest
@quests_bp.route("/<quest_id>", methods=["PATCH"])
def patch_quest(quest_id):
    quest = update_quest(get_db(), quest_id, json_body())

    return jsonify({
        "success": True,
        "message": "Quest updated successfully",
        "quest": serialize(quest)
    }), 200


# DELETE /v1/quest/<id> - Delete quest
@quests_bp.route("/<quest_id>", methods=["DELETE"])
def remove_quest(quest_id):
    deleted = delete_quest(get_db(), quest_id)

    return jsonify({
        "success": True,
        "message": "Quest deleted successfully",
        "id": deleted["id"]
    }), 200
