import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from app.database import get_db, get_session_factory
from app.engine.deliveries import build_delivery
from app.engine.errors import ScoringError
from app.engine.innings import (
    check_boundaries, continue_to_second_innings, create_match, record_delivery,
    select_bowler, select_opening_batsmen, set_man_of_the_match, set_new_batsman,
)
from app.engine.performance import rank_performances
from app.engine.rules import get_available_batsmen, get_available_bowlers, get_match_result, undo_last_ball
from app.engine.rules import target as chase_target
from app.engine.scorecard import (
    balls_remaining, batting_card, bowling_card, current_run_rate, required_run_rate, runs_required,
)
from app.engine.state import Ball, Match, Player, TeamInnings, TossDecision, WicketKind
from app.store import MatchStore, PlayerStore, commit_player_stats, persist_match_snapshot
from app.validators import DeliveryValidator, SelectionValidator, ValidationResult
from app.api.schemas import (
    CreateMatchRequest, OpenersRequest, BowlerRequest, BatsmanRequest, BallRequest, ExtraTypeEnum, ManOfTheMatchRequest,
    MatchStateResponse, BallResultResponse, BallResponse, BoundaryStatusResponse, TeamScoreResponse,
    ExtrasResponse, PlayerBrief, MatchSummaryResponse, ScorecardResponse, InningsCardResponse,
    BatterCardResponse, BowlerCardResponse, PerformanceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["Live Scoring"])

# In-memory store for active matches; snapshots are mirrored to the database
active_matches: Dict[str, Match] = {}


def _brief(player: Optional[Player]) -> Optional[PlayerBrief]:
    if player is None:
        return None
    return PlayerBrief(id=player.id, name=player.name, short_id=player.short_id, photo_url=player.photo_url)


def _outcome_string(ball: Ball) -> str:
    if ball.is_wicket: return "W"
    if ball.is_wide: return f"Wd+{ball.runs - 1}" if ball.runs > 1 else "Wd"
    if ball.is_no_ball: return f"Nb+{ball.runs - 1}" if ball.runs > 1 else "Nb"
    if ball.is_bye: return f"{ball.runs}b"
    if ball.is_leg_bye: return f"{ball.runs}lb"
    return str(ball.runs)


def _team_response(team: TeamInnings) -> TeamScoreResponse:
    return TeamScoreResponse(
        name=team.name,
        score=team.score,
        wickets=team.wickets,
        overs=team.overs_display,
        extras=ExtrasResponse(**team.extras.to_dict(), total=team.extras.total),
        players=[_brief(p) for p in team.players],
    )


def _match_state_response(match: Match) -> MatchStateResponse:
    innings_balls = match.innings_balls
    team = match.batting_team
    # Deliveries of the over in progress, or of the over just finished
    over_number = team.overs + 1 if team.balls or not innings_balls else innings_balls[-1].over_number
    this_over = [b for b in innings_balls if b.over_number == over_number]
    status = check_boundaries(match)

    return MatchStateResponse(
        id=match.id,
        phase=match.phase.value,
        innings=match.innings_number,
        total_overs=match.total_overs,
        toss_winner=match.toss_winner,
        toss_decision=match.toss_decision.value,
        batting_team=_team_response(match.batting_team),
        bowling_team=_team_response(match.bowling_team),
        striker=_brief(match.current_striker),
        non_striker=_brief(match.current_non_striker),
        bowler=_brief(match.current_bowler),
        previous_bowler=_brief(match.previous_bowler),
        run_rate=current_run_rate(match),
        target=chase_target(match),
        runs_required=runs_required(match),
        required_rate=required_run_rate(match),
        balls_remaining=balls_remaining(match),
        first_innings_score=match.first_innings_score,
        this_over=[_outcome_string(b) for b in this_over],
        last_ball_commentary=innings_balls[-1].commentary if innings_balls else None,
        status=BoundaryStatusResponse(**status.__dict__),
        winner=match.winner,
        man_of_the_match=_brief(match.man_of_the_match),
        man_of_the_match_confirmed=match.man_of_the_match_confirmed,
    )


def _get_match(match_id: str, db: Session) -> Match:
    match = active_matches.get(match_id)
    if match is None:
        match = MatchStore(db).get(match_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Match not found")
        logger.info("Restored match %s from storage", match_id)
        active_matches[match_id] = match
    return match


def _get_player(match: Match, player_id: str, db: Session) -> Player:
    player = match.find_player(player_id) or PlayerStore(db).get(player_id)
    if player is None:
        raise HTTPException(status_code=404, detail=f"Player {player_id} not found")
    return player


def _require(result: ValidationResult):
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.reason)


def _save(match: Match, background_tasks: BackgroundTasks, session_factory, commit_stats: bool = False):
    match.revision += 1
    active_matches[match.id] = match
    background_tasks.add_task(persist_match_snapshot, match, session_factory)
    if commit_stats:
        background_tasks.add_task(commit_player_stats, match, session_factory)


@router.post("", response_model=MatchStateResponse, status_code=201)
def start_match(
    request: CreateMatchRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """Set up a match: teams, format and toss"""
    players = PlayerStore(db)

    def roster(ids: List[str]) -> List[Player]:
        found = []
        for player_id in ids:
            player = players.get(player_id)
            if player is None:
                raise HTTPException(status_code=404, detail=f"Player {player_id} not found")
            found.append(player)
        return found

    try:
        match = create_match(
            team1_name=request.team1_name.strip(),
            team2_name=request.team2_name.strip(),
            total_overs=request.total_overs,
            toss_winner=request.toss_winner.strip(),
            toss_decision=TossDecision(request.toss_decision.value),
            team1_players=roster(request.team1_player_ids),
            team2_players=roster(request.team2_player_ids),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.get("", response_model=List[MatchSummaryResponse])
def list_matches(completed: Optional[bool] = None, db: Session = Depends(get_db)):
    return MatchStore(db).list(completed)


@router.get("/{match_id}", response_model=MatchStateResponse)
def get_match_state(match_id: str, db: Session = Depends(get_db)):
    return _match_state_response(_get_match(match_id, db))


@router.post("/{match_id}/openers", response_model=MatchStateResponse)
def choose_openers(
    match_id: str,
    request: OpenersRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    match = _get_match(match_id, db)
    striker = _get_player(match, request.striker_id, db)
    non_striker = _get_player(match, request.non_striker_id, db)
    _require(SelectionValidator.validate_openers(match, striker, non_striker))

    match = select_opening_batsmen(match, striker, non_striker)
    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.post("/{match_id}/bowler", response_model=MatchStateResponse)
def choose_bowler(
    match_id: str,
    request: BowlerRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    match = _get_match(match_id, db)
    bowler = _get_player(match, request.bowler_id, db)
    _require(SelectionValidator.validate_bowler(match, bowler))

    match = select_bowler(match, bowler)
    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.post("/{match_id}/new-batsman", response_model=MatchStateResponse)
def choose_new_batsman(
    match_id: str,
    request: BatsmanRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    match = _get_match(match_id, db)
    if not check_boundaries(match).needs_batsman:
        raise HTTPException(status_code=400, detail="No new batsman is needed")
    batsman = _get_player(match, request.player_id, db)
    _require(SelectionValidator.validate_batsman(match, batsman))

    match = set_new_batsman(match, batsman)
    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.get("/{match_id}/available-bowlers", response_model=List[PlayerBrief])
def available_bowlers(match_id: str, db: Session = Depends(get_db)):
    match = _get_match(match_id, db)
    return [_brief(p) for p in get_available_bowlers(match, match.batting_team.overs + 1)]


@router.get("/{match_id}/available-batsmen", response_model=List[PlayerBrief])
def available_batsmen(match_id: str, db: Session = Depends(get_db)):
    match = _get_match(match_id, db)
    return [_brief(p) for p in get_available_batsmen(match)]


@router.post("/{match_id}/ball", response_model=BallResultResponse)
def record_ball(
    match_id: str,
    request: BallRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """Record one delivery"""
    match = _get_match(match_id, db)
    _require(SelectionValidator.validate_ready(match))

    dismissed = None
    if request.dismissed_id:
        dismissed = match.batting_team.find_player(request.dismissed_id)
        if dismissed is None:
            raise HTTPException(status_code=400, detail="The dismissed batsman is not in the batting side")
    fielder = None
    if request.fielder_id:
        fielder = match.bowling_team.find_player(request.fielder_id)
        if fielder is None:
            raise HTTPException(status_code=400, detail="The fielder is not in the fielding side")

    try:
        ball = build_delivery(
            match,
            runs=request.runs,
            is_wide=request.extra == ExtraTypeEnum.WIDE,
            is_no_ball=request.extra == ExtraTypeEnum.NO_BALL,
            is_bye=request.extra == ExtraTypeEnum.BYE,
            is_leg_bye=request.extra == ExtraTypeEnum.LEG_BYE,
            wicket_kind=WicketKind(request.wicket_kind.value) if request.wicket_kind else None,
            dismissed=dismissed,
            fielder=fielder,
        )
        _require(DeliveryValidator.validate(ball))
        match, _ = record_delivery(match, ball)
    except ScoringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(match, background_tasks, session_factory)
    return BallResultResponse(
        ball=BallResponse(
            id=ball.id,
            innings=ball.innings,
            over_number=ball.over_number,
            ball_number=ball.ball_number,
            runs=ball.runs,
            outcome=_outcome_string(ball),
            commentary=ball.commentary,
            timestamp=ball.timestamp,
        ),
        match_state=_match_state_response(match),
    )


@router.post("/{match_id}/undo", response_model=MatchStateResponse)
def undo_ball(
    match_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """Remove the last delivery of the current innings"""
    match = _get_match(match_id, db)
    try:
        match = undo_last_ball(match)
    except ScoringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.post("/{match_id}/continue", response_model=MatchStateResponse)
def start_second_innings(
    match_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """Leave the innings break; openers and bowler must be selected again"""
    match = _get_match(match_id, db)
    try:
        match = continue_to_second_innings(match)
    except ScoringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(match, background_tasks, session_factory)
    return _match_state_response(match)


@router.post("/{match_id}/man-of-the-match", response_model=MatchStateResponse)
def confirm_man_of_the_match(
    match_id: str,
    request: ManOfTheMatchRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """Keep or override the computed award, then commit career stats"""
    match = _get_match(match_id, db)
    player = _get_player(match, request.player_id, db) if request.player_id else None
    try:
        match = set_man_of_the_match(match, player)
    except ScoringError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(match, background_tasks, session_factory, commit_stats=True)
    return _match_state_response(match)


@router.get("/{match_id}/scorecard", response_model=ScorecardResponse)
def get_scorecard(match_id: str, db: Session = Depends(get_db)):
    match = _get_match(match_id, db)

    # After the break the side that batted first is the bowling side
    first_side = match.bowling_team if match.is_second_innings else match.batting_team
    innings_cards = []
    for innings in range(1, match.innings_number + 1):
        side = first_side if innings == 1 else match.batting_team
        innings_cards.append(InningsCardResponse(
            innings=innings,
            batting_team=side.name,
            batting=[
                BatterCardResponse(
                    player=_brief(card.player),
                    runs=card.figures.runs,
                    balls=card.figures.balls,
                    fours=card.figures.fours,
                    sixes=card.figures.sixes,
                    strike_rate=round(card.figures.strike_rate, 2),
                    is_out=card.figures.is_out,
                    dismissal=card.figures.dismissal.value if card.figures.dismissal else None,
                )
                for card in batting_card(match, innings)
            ],
            bowling=[
                BowlerCardResponse(
                    player=_brief(card.player),
                    overs=card.spell.overs_display,
                    maidens=card.spell.maidens,
                    runs=card.spell.runs,
                    wickets=card.spell.wickets,
                    economy=round(card.spell.economy, 2),
                    dot_balls=card.spell.dot_balls,
                    wides=card.spell.wides,
                    no_balls=card.spell.no_balls,
                )
                for card in bowling_card(match, innings)
            ],
        ))

    performances = []
    if match.is_completed:
        for perf in rank_performances(match):
            performances.append(PerformanceResponse(
                player=_brief(match.find_player(perf.player_id)),
                batting_score=perf.batting_score,
                bowling_score=perf.bowling_score,
                fielding_score=perf.fielding_score,
                total_score=perf.total_score,
            ))

    return ScorecardResponse(
        match_id=match.id,
        innings=innings_cards,
        result=get_match_result(match),
        performances=performances,
    )
