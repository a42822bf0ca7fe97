from __future__ import annotations

from flask import Blueprint, jsonify

from ..game import words
from ..game.models import GAME_MODES, RANDOM_CATEGORY

bp = Blueprint("words", __name__)


@bp.get("/categories")
def get_categories():
    return jsonify(
        {
            "categories": list(words.CATEGORIES),
            "random": RANDOM_CATEGORY,
            "modes": list(GAME_MODES),
        }
    )
