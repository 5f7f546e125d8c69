"""
Statistics aggregator.

Folds a match's ball log into per-player batting, bowling and fielding
figures and turns them into an additive PlayerStats delta.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, List, Optional

from app.engine.state import Ball, Match, Player, PlayerStats, BowlingFigures, WicketKind, BALLS_PER_OVER

logger = logging.getLogger(__name__)


@dataclass
class BattingFigures:
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    dot_balls: int = 0
    is_out: bool = False
    dismissal: Optional[WicketKind] = None

    @property
    def strike_rate(self) -> float:
        if self.balls == 0:
            return 0.0
        return (self.runs / self.balls) * 100


@dataclass
class BowlingSpell:
    balls: int = 0
    runs: int = 0
    wickets: int = 0
    dot_balls: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0

    @property
    def overs_display(self) -> str:
        return f"{self.balls // BALLS_PER_OVER}.{self.balls % BALLS_PER_OVER}"

    @property
    def economy(self) -> float:
        if self.balls == 0:
            return 0.0
        return (self.runs / self.balls) * BALLS_PER_OVER


@dataclass
class FieldingFigures:
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0


def batting_figures(balls: Iterable[Ball], player_id: str) -> BattingFigures:
    figures = BattingFigures()
    for ball in balls:
        if ball.is_wicket and ball.dismissed_id == player_id:
            figures.is_out = True
            figures.dismissal = ball.wicket_kind
        if ball.striker_id != player_id:
            continue
        figures.runs += ball.runs_off_bat
        if ball.is_legal:
            figures.balls += 1
            if ball.runs == 0:
                figures.dot_balls += 1
        if ball.runs_off_bat == 4:
            figures.fours += 1
        elif ball.runs_off_bat == 6:
            figures.sixes += 1
    return figures


def bowling_spell(balls: Iterable[Ball], player_id: str) -> BowlingSpell:
    spell = BowlingSpell()
    overs = defaultdict(lambda: [0, 0])  # (innings, over) -> [legal balls, runs]

    for ball in balls:
        if ball.bowler_id != player_id:
            continue
        # Every run off this bowler's deliveries counts against them, extras included
        spell.runs += ball.runs
        if ball.is_legal:
            spell.balls += 1
            if ball.runs == 0:
                spell.dot_balls += 1
        if ball.is_wide:
            spell.wides += 1
        elif ball.is_no_ball:
            spell.no_balls += 1
        if ball.credited_to_bowler:
            spell.wickets += 1

        over = overs[(ball.innings, ball.over_number)]
        if ball.is_legal:
            over[0] += 1
        over[1] += ball.runs

    spell.maidens = sum(1 for legal, runs in overs.values() if legal == BALLS_PER_OVER and runs == 0)
    return spell


def fielding_figures(balls: Iterable[Ball], player_id: str) -> FieldingFigures:
    figures = FieldingFigures()
    for ball in balls:
        if not ball.is_wicket or ball.fielder_id != player_id:
            continue
        if ball.wicket_kind == WicketKind.CAUGHT:
            figures.catches += 1
        elif ball.wicket_kind == WicketKind.RUN_OUT:
            figures.run_outs += 1
        elif ball.wicket_kind == WicketKind.STUMPED:
            figures.stumpings += 1
    return figures


def match_stats_delta(player: Player, match: Match) -> PlayerStats:
    """This match's contribution for a player, ready to be added to their career totals"""
    batting = batting_figures(match.balls, player.id)
    spell = bowling_spell(match.balls, player.id)
    fielding = fielding_figures(match.balls, player.id)

    delta = PlayerStats(
        matches_played=1,
        runs_scored=batting.runs,
        balls_faced=batting.balls,
        fours=batting.fours,
        sixes=batting.sixes,
        fifties=1 if 50 <= batting.runs < 100 else 0,
        hundreds=1 if batting.runs >= 100 else 0,
        highest_score=batting.runs,
        times_out=1 if batting.is_out else 0,
        ducks=1 if batting.is_out and batting.runs == 0 else 0,
        dot_balls=batting.dot_balls,
        wickets_taken=spell.wickets,
        balls_bowled=spell.balls,
        runs_conceded=spell.runs,
        maiden_overs=spell.maidens,
        catches=fielding.catches,
        run_outs=fielding.run_outs,
        stumpings=fielding.stumpings,
        motm_awards=1 if match.man_of_the_match and match.man_of_the_match.id == player.id else 0,
    )
    if spell.wickets > 0:
        delta.best_bowling = BowlingFigures(spell.wickets, spell.runs)
    return delta


def update_player_stats(player: Player, match: Match) -> PlayerStats:
    """Career stats after adding this match; the player's own stats are left untouched"""
    delta = match_stats_delta(player, match)
    logger.debug(
        "Stats delta for %s: %d runs off %d, %d wickets, %d catches, %d run outs",
        player.name, delta.runs_scored, delta.balls_faced, delta.wickets_taken, delta.catches, delta.run_outs,
    )
    return player.stats.merged(delta)


def batting_average(stats: PlayerStats) -> str:
    if stats.times_out == 0:
        return f"{stats.runs_scored:.2f}"
    return f"{stats.runs_scored / stats.times_out:.2f}"


def strike_rate(stats: PlayerStats) -> str:
    if stats.balls_faced == 0:
        return "0.00"
    return f"{(stats.runs_scored / stats.balls_faced) * 100:.2f}"


def bowling_average(stats: PlayerStats) -> str:
    if stats.wickets_taken == 0:
        return "0.00"
    return f"{stats.runs_conceded / stats.wickets_taken:.2f}"


def economy_rate(stats: PlayerStats) -> str:
    if stats.balls_bowled == 0:
        return "0.00"
    return f"{(stats.runs_conceded / stats.balls_bowled) * BALLS_PER_OVER:.2f}"


# Ranking key per leaderboard; only players with a match behind them are listed
LEADERBOARDS = {
    "runs": lambda s: s.runs_scored,
    "wickets": lambda s: s.wickets_taken,
    "batting_average": lambda s: s.runs_scored / s.times_out,
    "motm": lambda s: s.motm_awards,
}


def leaderboard(players: Iterable[Player], stat: str, limit: int = 10) -> List[Player]:
    """
    Top players for one leaderboard, best first. Ties keep the input order.
    The batting average board only lists players who have been dismissed.
    """
    if stat not in LEADERBOARDS:
        raise ValueError(f"Unknown leaderboard {stat!r}, expected one of {', '.join(LEADERBOARDS)}")

    eligible = [p for p in players if p.stats.matches_played > 0]
    if stat == "batting_average":
        eligible = [p for p in eligible if p.stats.times_out > 0]

    key = LEADERBOARDS[stat]
    return sorted(eligible, key=lambda p: key(p.stats), reverse=True)[:limit]
