import logging

from flask import Blueprint, jsonify
from pymongo.errors import PyMongoError

from errors import PersistenceError
from models.db import QUESTS, get_db
from models.quest import QuestStatus

logger = logging.getLogger(__name__)

stats_bp = Blueprint("stats", __name__, url_prefix="/v1/quest")


def completion_rate(studied, suggested):
    if suggested <= 0:
        return "0%"
    return f"{studied / suggested * 100:.2f}%"


# -------------------------
# Stats over the whole quest collection
# -------------------------
def compute_stats(db):
    quests = db[QUESTS]
    try:
        total = quests.count_documents({})
        per_status = {
            s.value: quests.count_documents({"status": s.value})
            for s in QuestStatus
        }
        totals = list(quests.aggregate([
            {"$group": {
                "_id": None,
                "studied": {"$sum": "$studied_minutes"},
                "suggested": {"$sum": "$suggested_minutes"},
            }}
        ]))
    except PyMongoError as e:
        logger.exception("Error fetching stats")
        raise PersistenceError(str(e))

    studied = totals[0]["studied"] if totals else 0
    suggested = totals[0]["suggested"] if totals else 0

    return {
        "total_quests": total,
        "prepare_quests": per_status[QuestStatus.PREPARE.value],
        "active_quests": per_status[QuestStatus.ACTIVE.value],
        "completed_quests": per_status[QuestStatus.DONE.value],
        "total_minutes_studied": studied,
        "total_minutes_suggested": suggested,
        "completion_rate": completion_rate(studied, suggested),
    }


# GET /v1/quest/stats - Get quest statistics
@stats_bp.route("/stats", methods=["GET"])
def quest_stats():
    return jsonify({"success": True, "stats": compute_stats(get_db())}), 200
