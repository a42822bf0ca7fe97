from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    coordinator = current_app.extensions["imposter"]
    return jsonify({"ok": True, "rooms": len(coordinator.list_rooms())})
