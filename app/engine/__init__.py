from app.engine.state import Ball, Match, MatchPhase, Player, PlayerStats, TeamInnings, TossDecision, WicketKind
from app.engine.deliveries import build_delivery
from app.engine.rules import process_ball, undo_last_ball, is_innings_complete, get_match_result
from app.engine.innings import (
    create_match, record_delivery, continue_to_second_innings, set_man_of_the_match, BoundaryStatus,
)
from app.engine.stats import update_player_stats, leaderboard
from app.engine.performance import calculate_man_of_the_match

__all__ = [
    "Ball",
    "Match",
    "MatchPhase",
    "Player",
    "PlayerStats",
    "TeamInnings",
    "TossDecision",
    "WicketKind",
    "build_delivery",
    "process_ball",
    "undo_last_ball",
    "is_innings_complete",
    "get_match_result",
    "create_match",
    "record_delivery",
    "continue_to_second_innings",
    "set_man_of_the_match",
    "BoundaryStatus",
    "update_player_stats",
    "leaderboard",
    "calculate_man_of_the_match",
]
