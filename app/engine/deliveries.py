"""
Delivery construction for the scoring engine.
Stamps a ball with its innings/over position and the players in the middle,
and writes the one-line commentary shown in the ball-by-ball feed.
"""
from datetime import datetime
from typing import Optional

from app.engine.errors import MatchStateError
from app.engine.state import Ball, Match, Player, WicketKind, new_id

RUN_COMMENTARY = {
    0: "Dot ball",
    1: "Single",
    2: "Two runs",
    3: "Three runs",
    4: "Four!",
    6: "Six!",
}

WICKET_VERBS = {
    WicketKind.BOWLED: "bowled",
    WicketKind.CAUGHT: "caught",
    WicketKind.LBW: "lbw",
    WicketKind.RUN_OUT: "run out",
    WicketKind.STUMPED: "stumped",
    WicketKind.HIT_WICKET: "hit wicket",
}


def _plural_extra(runs: int, label: str) -> str:
    return f"{runs} {label}{'s' if runs != 1 else ''}"


def generate_commentary(
    runs: int,
    is_wide: bool = False,
    is_no_ball: bool = False,
    is_bye: bool = False,
    is_leg_bye: bool = False,
    wicket_kind: Optional[WicketKind] = None,
    dismissed: Optional[Player] = None,
    fielder: Optional[Player] = None,
) -> str:
    if wicket_kind is not None:
        name = dismissed.name if dismissed else "Batsman"
        by = f" by {fielder.name}" if fielder else ""
        return f"{name} {WICKET_VERBS[wicket_kind]}{by} for {runs}"
    if is_wide:
        return f"Wide, {runs} runs"
    if is_no_ball:
        return f"No ball, {runs} runs"
    if is_bye:
        return _plural_extra(runs, "bye")
    if is_leg_bye:
        return _plural_extra(runs, "leg bye")
    return RUN_COMMENTARY.get(runs, f"{runs} runs")


def build_delivery(
    match: Match,
    runs: int = 0,
    is_wide: bool = False,
    is_no_ball: bool = False,
    is_bye: bool = False,
    is_leg_bye: bool = False,
    wicket_kind: Optional[WicketKind] = None,
    dismissed: Optional[Player] = None,
    fielder: Optional[Player] = None,
    timestamp: Optional[datetime] = None,
) -> Ball:
    """Create the next delivery for the match's current striker, non-striker and bowler"""
    striker = match.current_striker
    non_striker = match.current_non_striker
    bowler = match.current_bowler
    if striker is None or non_striker is None or bowler is None:
        raise MatchStateError("Please select striker, non-striker, and bowler first")

    is_wicket = wicket_kind is not None
    if is_wicket and dismissed is None:
        dismissed = striker

    team = match.batting_team
    return Ball(
        id=new_id("ball"),
        innings=match.innings_number,
        over_number=team.overs + 1,
        ball_number=team.balls + 1,
        runs=runs,
        striker_id=striker.id,
        non_striker_id=non_striker.id,
        bowler_id=bowler.id,
        is_wide=is_wide,
        is_no_ball=is_no_ball,
        is_bye=is_bye,
        is_leg_bye=is_leg_bye,
        is_wicket=is_wicket,
        wicket_kind=wicket_kind,
        dismissed_id=dismissed.id if dismissed else None,
        fielder_id=fielder.id if fielder else None,
        commentary=generate_commentary(
            runs, is_wide, is_no_ball, is_bye, is_leg_bye, wicket_kind, dismissed, fielder,
        ),
        timestamp=timestamp or datetime.utcnow(),
    )
