# auth.py
import hmac
import logging

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "/v1/"


def bearer_token(header):
    if header and header.startswith("Bearer "):
        return header[len("Bearer "):]
    return None


def require_token():
    """
    before_request hook.
    Rejects /v1/ requests whose bearer token is missing or differs from API_TOKEN.
    With no API_TOKEN configured every /v1/ request is rejected.
    """
    # CORS preflight carries no Authorization header
    if request.method == "OPTIONS" or not request.path.startswith(PROTECTED_PREFIX):
        return None

    expected = current_app.config.get("API_TOKEN")
    token = bearer_token(request.headers.get("Authorization", ""))

    if not token or not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        logger.warning("Rejected %s %s: missing or invalid token", request.method, request.path)
        return jsonify({
            "code": 10306,
            "message": "There is no authorization",
            "detail": "Missing or invalid Bearer token"
        }), 403

    return None
