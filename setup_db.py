# setup_db.py
# One-shot database setup: python setup_db.py [--seed] [--drop]
import argparse
import logging
import sys

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

import config
from models.db import QUESTS, USERS, connect
from models.quest import DATE_PATTERN, ID_PREFIX, TITLE_MAX_LENGTH, QuestStatus, Visibility
from models.user import EMAIL_PATTERN, UserRole

logger = logging.getLogger("setup_db")

USERS_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["email", "name", "role", "created_at"],
        "properties": {
            "email": {"bsonType": "string", "pattern": EMAIL_PATTERN.pattern,
                      "description": "Valid email address required"},
            "name": {"bsonType": "string", "minLength": 1, "description": "User name required"},
            "role": {"enum": [r.value for r in UserRole],
                     "description": "Role must be student, parent, or admin"},
            "password": {"bsonType": "string", "description": "Hashed password"},
            "created_at": {"bsonType": "string", "description": "Creation date in YYYY-MM-DD format"},
        },
    }
}

QUESTS_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["id", "title", "subject", "suggested_minutes", "deadline", "status", "created_at"],
        "properties": {
            "id": {"bsonType": "string", "pattern": f"^{ID_PREFIX}"},
            "title": {"bsonType": "string", "minLength": 1, "maxLength": TITLE_MAX_LENGTH},
            "description": {"bsonType": "string"},
            "subject": {"bsonType": "string"},
            "topic": {"bsonType": "string"},
            "effort_type": {"bsonType": "string"},
            "studied_minutes": {"bsonType": "int", "minimum": 0},
            "suggested_minutes": {"bsonType": "int", "minimum": 1},
            "deadline": {"bsonType": "string", "pattern": DATE_PATTERN.pattern},
            "visibility": {"enum": [v.value for v in Visibility]},
            "status": {"enum": [s.value for s in QuestStatus]},
            "created_at": {"bsonType": "string", "pattern": DATE_PATTERN.pattern},
        },
    }
}

SAMPLE_USERS = [
    {
        "email": "student1@effortee.com",
        "name": "Alice Student",
        "role": "student",
        "password": "hashed_password_here",
        "created_at": "2025-01-15",
    },
    {
        "email": "parent1@effortee.com",
        "name": "Bob Parent",
        "role": "parent",
        "password": "hashed_password_here",
        "created_at": "2025-01-15",
    },
]

SAMPLE_QUESTS = [
    {
        "id": "quest_001",
        "title": "Just get started",
        "description": "Spend a short focused time. It doesn't have to be perfect.",
        "subject": "Math",
        "topic": "Algebra basics",
        "effort_type": "focus_time",
        "studied_minutes": 10,
        "suggested_minutes": 20,
        "deadline": "2025-02-20",
        "visibility": "shared",
        "status": "active",
        "created_at": "2025-02-18",
    },
    {
        "id": "quest_002",
        "title": "Complete Chapter 3",
        "description": "Read and take notes on Chapter 3",
        "subject": "Science",
        "topic": "Biology - Cell Structure",
        "effort_type": "reading",
        "studied_minutes": 0,
        "suggested_minutes": 45,
        "deadline": "2025-02-25",
        "visibility": "shared",
        "status": "prepare",
        "created_at": "2025-02-18",
    },
    {
        "id": "quest_003",
        "title": "Practice Problems",
        "description": "Complete 20 practice problems from workbook",
        "subject": "Math",
        "topic": "Quadratic Equations",
        "effort_type": "practice",
        "studied_minutes": 30,
        "suggested_minutes": 60,
        "deadline": "2025-02-22",
        "visibility": "private",
        "status": "active",
        "created_at": "2025-02-17",
    },
]


def create_collections(db):
    existing = set(db.list_collection_names())
    for name, validator in [(USERS, USERS_VALIDATOR), (QUESTS, QUESTS_VALIDATOR)]:
        if name in existing:
            logger.info("Collection %s already exists, skipping", name)
            continue
        db.create_collection(name, validator=validator)
        logger.info("Created collection %s", name)


def create_indexes(db):
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[USERS].create_index([("role", ASCENDING)])

    db[QUESTS].create_index([("id", ASCENDING)], unique=True)
    db[QUESTS].create_index([("status", ASCENDING)])
    db[QUESTS].create_index([("subject", ASCENDING)])
    db[QUESTS].create_index([("deadline", ASCENDING)])
    db[QUESTS].create_index([("created_at", DESCENDING)])
    db[QUESTS].create_index([("status", ASCENDING), ("deadline", ASCENDING)])
    logger.info("Indexes created")


def seed(db):
    # insert_many mutates its input with _id
    db[USERS].insert_many([dict(u) for u in SAMPLE_USERS])
    db[QUESTS].insert_many([dict(q) for q in SAMPLE_QUESTS])
    logger.info("Inserted %d sample users, %d sample quests", len(SAMPLE_USERS), len(SAMPLE_QUESTS))


def summary(db):
    return {
        "users": db[USERS].count_documents({}),
        "quests": db[QUESTS].count_documents({}),
    }


def setup(db, with_seed=False, drop=False):
    if drop:
        db.drop_collection(USERS)
        db.drop_collection(QUESTS)
        logger.info("Dropped users and quests")

    create_collections(db)
    create_indexes(db)
    if with_seed:
        seed(db)
    return summary(db)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create Effortee collections, validators and indexes.")
    parser.add_argument("--seed", action="store_true", help="insert sample users and quests")
    parser.add_argument("--drop", action="store_true", help="drop users and quests first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(message)s")

    db = connect(config.MONGO_URL, config.MONGO_DB)
    try:
        try:
            db.client.admin.command("ping")
        except PyMongoError as e:
            logger.error("Connection failed: %s", e)
            return 1
        logger.info("Database connected successfully")

        counts = setup(db, with_seed=args.seed, drop=args.drop)
        logger.info("Users count: %d", counts["users"])
        logger.info("Quests count: %d", counts["quests"])
        return 0
    finally:
        db.client.close()


if __name__ == "__main__":
    sys.exit(main())
