"""
Innings state machine and the player-selection sub-flow.

    first_innings -> innings_break -> second_innings -> completed

The break is left only by an explicit continue_to_second_innings call;
the other two transitions fire automatically after a delivery.
"""
import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from app.engine.errors import MatchStateError
from app.engine.performance import calculate_man_of_the_match
from app.engine.rules import (
    SCORING_PHASES, get_match_result, is_innings_complete, process_ball,
)
from app.engine.state import (
    Ball, Match, MatchPhase, Player, TeamInnings, TossDecision, MAX_WICKETS, new_id,
)


@dataclass
class BoundaryStatus:
    """What the scorer has to do before the next delivery can be recorded"""
    over_complete: bool = False
    innings_complete: bool = False
    match_complete: bool = False
    needs_bowler: bool = False
    needs_batsman: bool = False


def create_match(
    team1_name: str,
    team2_name: str,
    total_overs: int,
    toss_winner: str,
    toss_decision: TossDecision,
    team1_players: list = None,
    team2_players: list = None,
) -> Match:
    """Set up a new match; the toss decides which side bats first"""
    if total_overs < 1:
        raise ValueError("A match needs at least one over per innings")
    if toss_winner not in (team1_name, team2_name):
        raise ValueError(f"Toss winner must be {team1_name} or {team2_name}")

    team1 = TeamInnings(name=team1_name, players=list(team1_players or []))
    team2 = TeamInnings(name=team2_name, players=list(team2_players or []))

    toss_winner_bats = toss_decision == TossDecision.BAT
    team1_bats_first = (toss_winner == team1_name) == toss_winner_bats

    return Match(
        id=new_id("match"),
        team1=team1,
        team2=team2,
        total_overs=total_overs,
        toss_winner=toss_winner,
        toss_decision=toss_decision,
        batting_side="team1" if team1_bats_first else "team2",
    )


def advance(match: Match) -> Match:
    """Fire whichever automatic transition the current counters call for"""
    if match.phase not in SCORING_PHASES or not is_innings_complete(match):
        return match

    updated = copy.deepcopy(match)
    if updated.phase == MatchPhase.FIRST_INNINGS:
        updated.phase = MatchPhase.INNINGS_BREAK
        return updated

    updated.phase = MatchPhase.COMPLETED
    updated.end_time = datetime.utcnow()
    updated.winner = get_match_result(updated)
    updated.man_of_the_match = calculate_man_of_the_match(updated)
    return updated


def check_boundaries(match: Match) -> BoundaryStatus:
    innings_balls = match.innings_balls
    last = innings_balls[-1] if innings_balls else None
    team = match.batting_team

    status = BoundaryStatus(
        over_complete=bool(last and last.is_legal and team.balls == 0 and team.overs > 0),
        innings_complete=match.phase == MatchPhase.INNINGS_BREAK or match.is_completed,
        match_complete=match.is_completed,
    )
    if match.phase not in SCORING_PHASES:
        return status

    bowler = match.current_bowler
    status.needs_bowler = bowler is None or (status.over_complete and bowler.id == last.bowler_id)

    if last is not None and last.is_wicket and team.wickets < MAX_WICKETS:
        active = {p.id for p in (match.current_striker, match.current_non_striker) if p is not None}
        status.needs_batsman = last.dismissed_id in active
    return status


def record_delivery(match: Match, ball: Ball) -> Tuple[Match, BoundaryStatus]:
    """Apply a delivery, run the automatic transitions and report what is needed next"""
    if match.phase not in SCORING_PHASES:
        raise MatchStateError(f"Cannot record a delivery during {match.phase.value}")
    updated = advance(process_ball(match, ball))
    return updated, check_boundaries(updated)


def continue_to_second_innings(match: Match) -> Match:
    if match.phase != MatchPhase.INNINGS_BREAK:
        raise MatchStateError("The second innings can only start from the innings break")

    updated = copy.deepcopy(match)
    updated.first_innings_score = updated.batting_team.score
    updated.batting_side = "team2" if updated.batting_side == "team1" else "team1"
    updated.batting_team.reset()

    # Everyone is re-selected for the new innings
    updated.current_striker = None
    updated.current_non_striker = None
    updated.current_bowler = None
    updated.previous_bowler = None
    updated.phase = MatchPhase.SECOND_INNINGS
    return updated


def select_opening_batsmen(match: Match, striker: Player, non_striker: Player) -> Match:
    updated = copy.deepcopy(match)
    team = updated.batting_team
    team.add_player(striker)
    team.add_player(non_striker)
    updated.current_striker = team.find_player(striker.id)
    updated.current_non_striker = team.find_player(non_striker.id)
    return updated


def select_bowler(match: Match, bowler: Player) -> Match:
    updated = copy.deepcopy(match)
    team = updated.bowling_team
    team.add_player(bowler)
    if updated.current_bowler is not None and updated.current_bowler.id != bowler.id:
        updated.previous_bowler = updated.current_bowler
    updated.current_bowler = team.find_player(bowler.id)
    return updated


def set_new_batsman(match: Match, batsman: Player) -> Match:
    """
    The new batsman takes the dismissed batsman's place; the partner keeps their end.
    This departs from always handing the newcomer the strike: after a wicket on
    the last ball of an over the newcomer starts at the non-striker's end.
    """
    innings_balls = match.innings_balls
    last = innings_balls[-1] if innings_balls else None
    if last is None or not last.is_wicket:
        raise MatchStateError("No wicket has fallen on the last delivery")

    updated = copy.deepcopy(match)
    team = updated.batting_team
    team.add_player(batsman)
    incoming = team.find_player(batsman.id)

    if updated.current_non_striker is not None and updated.current_non_striker.id == last.dismissed_id:
        updated.current_non_striker = incoming
    else:
        updated.current_striker = incoming
    return updated


def set_man_of_the_match(match: Match, player: Optional[Player] = None) -> Match:
    """
    Confirm the award of a completed match. Passing a player overrides the
    computed pick; passing None keeps it. The award is final once confirmed.
    """
    if not match.is_completed:
        raise MatchStateError("Man of the Match is awarded once the match is completed")
    if match.man_of_the_match_confirmed:
        raise MatchStateError("Man of the Match has already been confirmed")

    updated = copy.deepcopy(match)
    if player is not None:
        chosen = updated.find_player(player.id)
        if chosen is None:
            raise MatchStateError(f"{player.name} did not play in this match")
        updated.man_of_the_match = chosen
    updated.man_of_the_match_confirmed = True
    return updated
