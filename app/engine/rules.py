"""
Rules engine: legality queries and the ball-by-ball state transition.

Every function here is pure with respect to its Match argument. Transitions
return a new Match and never touch the one they were given.
"""
import copy
from typing import List, Optional, Set

from app.engine.errors import MatchStateError
from app.engine.state import (
    Ball, Match, MatchPhase, Player, TeamInnings, BALLS_PER_OVER, MAX_WICKETS,
)

SCORING_PHASES = (MatchPhase.FIRST_INNINGS, MatchPhase.SECOND_INNINGS)


def _swap_strike(match: Match):
    match.current_striker, match.current_non_striker = match.current_non_striker, match.current_striker


def _bowlers_of_over(match: Match, over_number: int) -> Set[str]:
    return {b.bowler_id for b in match.innings_balls if b.over_number == over_number}


def apply_ball_counters(team: TeamInnings, ball: Ball) -> bool:
    """
    Add one delivery's effect to a team's counters.
    Returns True when the delivery completed an over.
    """
    team.score += ball.runs

    # Wides and no-balls count occurrences, byes and leg-byes count runs
    if ball.is_wide:
        team.extras.wides += 1
    elif ball.is_no_ball:
        team.extras.no_balls += 1
    elif ball.is_bye:
        team.extras.byes += ball.runs
    elif ball.is_leg_bye:
        team.extras.leg_byes += ball.runs

    if ball.is_wicket:
        team.wickets += 1

    if not ball.is_legal:
        return False

    team.balls += 1
    if team.balls >= BALLS_PER_OVER:
        team.overs += 1
        team.balls = 0
        return True
    return False


def should_rotate_strike(ball: Ball, over_completed: bool) -> bool:
    if not ball.is_legal:
        # Only runs actually run beyond the automatic penalty change ends
        return ball.runs > 1
    return over_completed or ball.runs % 2 == 1


def is_over_complete(match: Match) -> bool:
    """Six legal deliveries tagged with the batting side's current over"""
    current_over = match.batting_team.overs + 1
    legal = [b for b in match.innings_balls if b.over_number == current_over and b.is_legal]
    return len(legal) >= BALLS_PER_OVER


def can_bowler_bowl_next_over(bowler: Player, match: Match) -> bool:
    """A bowler may not bowl two consecutive overs"""
    previous_over = match.batting_team.overs
    if previous_over <= 0:
        return True
    return bowler.id not in _bowlers_of_over(match, previous_over)


def get_available_bowlers(match: Match, next_over: int) -> List[Player]:
    """Bowling roster minus the previous over's bowler and both active batsmen, in roster order"""
    excluded = set()
    if next_over > 1:
        excluded |= _bowlers_of_over(match, next_over - 1)
    for batsman in (match.current_striker, match.current_non_striker):
        if batsman is not None:
            excluded.add(batsman.id)
    return [p for p in match.bowling_team.players if p.id not in excluded]


def dismissed_player_ids(match: Match) -> Set[str]:
    return {b.dismissed_id for b in match.innings_balls if b.is_wicket and b.dismissed_id}


def get_available_batsmen(match: Match) -> List[Player]:
    """Batting roster minus the two active batsmen and anyone already out this innings"""
    excluded = dismissed_player_ids(match)
    for batsman in (match.current_striker, match.current_non_striker):
        if batsman is not None:
            excluded.add(batsman.id)
    return [p for p in match.batting_team.players if p.id not in excluded]


def process_ball(match: Match, ball: Ball) -> Match:
    """
    Apply one pre-validated delivery and return the updated match.

    The ball is appended to the log, its runs and extras are added to the
    batting side, the over counter advances on legal deliveries and strike
    rotates on odd runs mid-over or unconditionally at the end of an over.
    """
    updated = copy.deepcopy(match)
    updated.balls.append(ball)

    over_completed = apply_ball_counters(updated.batting_team, ball)
    if should_rotate_strike(ball, over_completed):
        _swap_strike(updated)

    return updated


def undo_last_ball(match: Match) -> Match:
    """Remove the newest delivery of the current innings and reverse its effects"""
    if match.phase not in SCORING_PHASES:
        raise MatchStateError(f"Cannot undo during {match.phase.value}")
    if not match.balls or match.balls[-1].innings != match.innings_number:
        raise MatchStateError("No deliveries to undo in this innings")

    updated = copy.deepcopy(match)
    ball = updated.balls.pop()
    team = updated.batting_team

    team.score -= ball.runs
    if ball.is_wide:
        team.extras.wides -= 1
    elif ball.is_no_ball:
        team.extras.no_balls -= 1
    elif ball.is_bye:
        team.extras.byes -= ball.runs
    elif ball.is_leg_bye:
        team.extras.leg_byes -= ball.runs

    if ball.is_wicket:
        team.wickets -= 1

    if ball.is_legal:
        if team.balls == 0:
            team.overs -= 1
            team.balls = BALLS_PER_OVER - 1
        else:
            team.balls -= 1

    updated.current_striker = team.find_player(ball.striker_id)
    updated.current_non_striker = team.find_player(ball.non_striker_id)

    if updated.current_bowler is None or updated.current_bowler.id != ball.bowler_id:
        # The next over's bowler was already chosen; hand the over back
        bowling = updated.bowling_team
        updated.current_bowler = bowling.find_player(ball.bowler_id)
        previous = next((b for b in reversed(updated.innings_balls)
                         if b.over_number == ball.over_number - 1), None)
        updated.previous_bowler = bowling.find_player(previous.bowler_id) if previous else None

    return updated


def is_innings_complete(match: Match) -> bool:
    team = match.batting_team
    if team.overs >= match.total_overs:
        return True
    if team.wickets >= MAX_WICKETS:
        return True
    # The chase ends on the winning run, not at the end of the over
    if match.is_second_innings and match.first_innings_score is not None and team.score > match.first_innings_score:
        return True
    return False


def target(match: Match) -> Optional[int]:
    if match.first_innings_score is None:
        return None
    return match.first_innings_score + 1


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def get_match_result(match: Match) -> str:
    if not match.is_completed:
        return "Match in progress"

    chasing = match.batting_team
    defending = match.bowling_team
    first = match.first_innings_score or 0

    if chasing.score > first:
        return f"{chasing.name} won by {_plural(MAX_WICKETS - chasing.wickets, 'wicket')}"
    if chasing.score < first:
        return f"{defending.name} won by {_plural(first - chasing.score, 'run')}"
    return "Match tied"
