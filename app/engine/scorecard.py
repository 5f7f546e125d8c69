"""
Live figures and scorecards derived from the ball log
"""
from dataclasses import dataclass
from typing import List, Optional

from app.engine.rules import apply_ball_counters, target
from app.engine.state import Ball, Match, Player, TeamInnings, BALLS_PER_OVER
from app.engine.stats import BattingFigures, BowlingSpell, batting_figures, bowling_spell


@dataclass
class BatterCard:
    player: Player
    figures: BattingFigures


@dataclass
class BowlerCard:
    player: Player
    spell: BowlingSpell


def run_rate(runs: int, legal_balls: int) -> float:
    if legal_balls == 0:
        return 0.0
    return round((runs / legal_balls) * BALLS_PER_OVER, 2)


def current_run_rate(match: Match) -> float:
    team = match.batting_team
    return run_rate(team.score, team.legal_balls)


def balls_remaining(match: Match) -> int:
    return max(0, match.total_overs * BALLS_PER_OVER - match.batting_team.legal_balls)


def runs_required(match: Match) -> Optional[int]:
    chase_target = target(match)
    if chase_target is None or not match.is_second_innings:
        return None
    return max(0, chase_target - match.batting_team.score)


def required_run_rate(match: Match) -> Optional[float]:
    required = runs_required(match)
    if required is None:
        return None
    remaining = balls_remaining(match)
    if remaining == 0:
        return None
    return round((required / remaining) * BALLS_PER_OVER, 2)


def innings_balls(match: Match, innings: int) -> List[Ball]:
    return [b for b in match.balls if b.innings == innings]


def _appearance_order(balls: List[Ball], attrs: tuple) -> List[str]:
    order = []
    for ball in balls:
        for attr in attrs:
            player_id = getattr(ball, attr)
            if player_id not in order:
                order.append(player_id)
    return order


def batting_card(match: Match, innings: int) -> List[BatterCard]:
    """Batsmen in the order they came to the crease"""
    balls = innings_balls(match, innings)
    cards = []
    for player_id in _appearance_order(balls, ("striker_id", "non_striker_id")):
        player = match.find_player(player_id)
        if player is not None:
            cards.append(BatterCard(player=player, figures=batting_figures(balls, player_id)))
    return cards


def bowling_card(match: Match, innings: int) -> List[BowlerCard]:
    balls = innings_balls(match, innings)
    cards = []
    for player_id in _appearance_order(balls, ("bowler_id",)):
        player = match.find_player(player_id)
        if player is not None:
            cards.append(BowlerCard(player=player, spell=bowling_spell(balls, player_id)))
    return cards


def replay_innings(name: str, balls: List[Ball]) -> TeamInnings:
    """Re-fold a ball log into fresh team counters"""
    team = TeamInnings(name=name)
    for ball in balls:
        apply_ball_counters(team, ball)
    return team
