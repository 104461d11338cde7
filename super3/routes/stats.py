"""Statistics and recommendation routes."""

from __future__ import annotations

from flask import Blueprint, request

from super3.errors import ValidationError
from super3.schemas.stats import BalanceSchema, GameStatsSchema, RecommendationSchema
from super3.services.game_coordinator import get_coordinator
from super3.utils.responses import ok

stats_bp = Blueprint("stats", __name__)

_stats_schema = GameStatsSchema()
_balance_schema = BalanceSchema()
_recommendations_schema = RecommendationSchema(many=True)


@stats_bp.get("/stats")
def game_stats():
    return ok(_stats_schema.dump(get_coordinator().statistics()))


@stats_bp.get("/stats/balance")
def balance():
    return ok(_balance_schema.dump(get_coordinator().balance()))


@stats_bp.get("/recommendations")
def recommendations():
    count = request.args.get("count", type=int)
    if count is not None and count <= 0:
        raise ValidationError("count must be positive")

    coordinator = get_coordinator()
    if not coordinator.has_statistical_data():
        return ok({"available": False, "numbers": [], "scores": []})

    scored = coordinator.recommendations(count)
    return ok(
        {
            "available": True,
            "numbers": sorted(r.number for r in scored),
            "scores": _recommendations_schema.dump(scored),
        }
    )
