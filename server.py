import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

import config
from auth import require_token
from errors import EffortError
from models.db import connect
from models.quest import generate_quest_id
from quests import quests_bp
from stats import stats_bp
from users import users_bp


def create_app(db=None, api_token=None, id_factory=None):
    """
    Build the Flask app.
    db: pymongo Database handle; connects with MONGO_URL / MONGO_DB when omitted.
    api_token: bearer secret; defaults to API_TOKEN from the environment.
    id_factory: zero-arg callable returning a new quest id.
    """
    app = Flask(__name__)
    CORS(app)  # allows all origins

    if db is None:
        db = connect(config.MONGO_URL, config.MONGO_DB)

    app.config["DB"] = db
    app.config["API_TOKEN"] = api_token if api_token is not None else config.API_TOKEN
    app.config["QUEST_ID_FACTORY"] = id_factory or generate_quest_id

    app.before_request(require_token)

    app.register_blueprint(stats_bp)
    app.register_blueprint(quests_bp)
    app.register_blueprint(users_bp)

    # -----------------------------
    # ERROR ENVELOPE
    # -----------------------------
    @app.errorhandler(EffortError)
    def handle_effort_error(e):
        if e.status_code >= 500:
            app.logger.error("Request failed: %s", e.message)
        return jsonify({"success": False, "error": e.message}), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": e.description}), e.code
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "error": str(e) or "Internal server error"}), 500

    # -----------------------------
    # HEALTH CHECK
    # -----------------------------
    @app.route("/health", methods=["GET"])
    def health():
        try:
            app.config["DB"].client.admin.command("ping")
            mongodb = "connected"
        except PyMongoError as e:
            app.logger.warning("MongoDB ping failed: %s", e)
            mongodb = "disconnected"

        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "mongodb": mongodb
        }), 200

    return app


# -----------------------------
# RUN SERVER
# -----------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = create_app()
    app.logger.info(
        "Effortee backend running | port: %s | database: %s | environment: %s",
        config.PORT, config.MONGO_DB, config.APP_ENV
    )
    app.run(host=config.HOST, port=config.PORT, debug=config.APP_ENV == "development")
