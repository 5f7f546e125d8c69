"""
Performance scorer - ranks every player in a completed match and picks the
Man of the Match from that match's ball log alone.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.engine.state import Match, Player
from app.engine.stats import batting_figures, bowling_spell, fielding_figures

logger = logging.getLogger(__name__)


@dataclass
class PlayerPerformance:
    player_id: str
    batting_score: float = 0.0
    bowling_score: float = 0.0
    fielding_score: float = 0.0
    runs_scored: int = 0
    balls_faced: int = 0
    wickets_taken: int = 0
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0

    @property
    def total_score(self) -> float:
        return self.batting_score + self.bowling_score + self.fielding_score


def _batting_score(runs: int, balls: int, fours: int, sixes: int, is_out: bool) -> float:
    if balls == 0:
        return 0.0

    score = runs * 1.5

    strike_rate = (runs / balls) * 100
    if strike_rate >= 150:
        score += runs * 0.4
    elif strike_rate >= 120:
        score += runs * 0.2
    elif strike_rate < 80 and balls >= 10:
        score -= runs * 0.1

    if runs >= 100:
        score += 50
    elif runs >= 50:
        score += 25
    elif runs >= 30:
        score += 10

    score += fours * 2
    score += sixes * 4

    if not is_out and runs >= 20:
        score += 10
    if is_out and runs == 0:
        score -= 10
    return score


def _bowling_score(balls: int, runs: int, wickets: int, dot_balls: int) -> float:
    if balls == 0:
        return 0.0

    score = wickets * 25.0

    economy = (runs / balls) * 6
    if economy <= 4:
        score += 20
    elif economy <= 6:
        score += 10
    elif economy >= 10:
        score -= 10

    dot_percentage = (dot_balls / balls) * 100
    if dot_percentage >= 60:
        score += 15
    elif dot_percentage >= 40:
        score += 8

    if wickets >= 5:
        score += 30
    elif wickets >= 3:
        score += 15
    return score


def calculate_player_performance(player: Player, match: Match) -> PlayerPerformance:
    batting = batting_figures(match.balls, player.id)
    spell = bowling_spell(match.balls, player.id)
    fielding = fielding_figures(match.balls, player.id)

    return PlayerPerformance(
        player_id=player.id,
        batting_score=_batting_score(batting.runs, batting.balls, batting.fours, batting.sixes, batting.is_out),
        bowling_score=_bowling_score(spell.balls, spell.runs, spell.wickets, spell.dot_balls),
        fielding_score=fielding.catches * 8 + fielding.run_outs * 12 + fielding.stumpings * 10,
        runs_scored=batting.runs,
        balls_faced=batting.balls,
        wickets_taken=spell.wickets,
        catches=fielding.catches,
        run_outs=fielding.run_outs,
        stumpings=fielding.stumpings,
    )


def rank_performances(match: Match) -> List[PlayerPerformance]:
    """Best first; equal totals keep roster order (team1 then team2)"""
    performances = [calculate_player_performance(p, match) for p in match.all_players]
    return sorted(performances, key=lambda perf: perf.total_score, reverse=True)


def calculate_man_of_the_match(match: Match) -> Optional[Player]:
    if not match.is_completed:
        return None

    ranked = [perf for perf in rank_performances(match) if perf.total_score > 0]
    if not ranked:
        return None

    top = ranked[0]
    player = match.find_player(top.player_id)
    logger.debug(
        "Man of the Match: %s (total %.1f, batting %.1f, bowling %.1f, fielding %.1f)",
        player.name, top.total_score, top.batting_score, top.bowling_score, top.fielding_score,
    )
    return player
