from flask import Blueprint, jsonify

bp = Blueprint("health", __name__)


@bp.route("/health", methods=["GET"])
def health():
    """Liveness check. Does not call Stripe."""
    return jsonify({"status": "ok"}), 200
