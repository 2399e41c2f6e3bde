# models/db.py
# One MongoClient per process; the Database handle is passed to the app.

from flask import current_app
from pymongo import MongoClient

QUESTS = "quests"
USERS = "users"


def connect(mongo_url, db_name):
    client = MongoClient(mongo_url)  # connect to MongoDB
    return client[db_name]           # database


def get_db():
    """Database handle injected into the running app by create_app()."""
    return current_app.config["DB"]


def serialize(doc):
    """Render the ObjectId row identity as a string so the doc is JSON-safe."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc
