"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


# Enums
class TossDecisionEnum(str, Enum):
    BAT = "bat"
    BOWL = "bowl"


class WicketKindEnum(str, Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"


class ExtraTypeEnum(str, Enum):
    WIDE = "wide"
    NO_BALL = "no_ball"
    BYE = "bye"
    LEG_BYE = "leg_bye"


class LeaderboardEnum(str, Enum):
    RUNS = "runs"
    WICKETS = "wickets"
    BATTING_AVERAGE = "batting_average"
    MOTM = "motm"


# Player Schemas
class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    short_id: Optional[str] = None
    photo_url: Optional[str] = None
    is_group_member: bool = False


class PlayerBrief(BaseModel):
    id: str
    name: str
    short_id: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


class PlayerStatsResponse(BaseModel):
    matches_played: int
    runs_scored: int
    balls_faced: int
    fours: int
    sixes: int
    fifties: int
    hundreds: int
    highest_score: int
    times_out: int
    ducks: int
    dot_balls: int
    wickets_taken: int
    balls_bowled: int
    runs_conceded: int
    maiden_overs: int
    best_bowling: Optional[str] = None
    catches: int
    run_outs: int
    stumpings: int
    motm_awards: int

    # Derived rates, two decimal places
    batting_average: str
    strike_rate: str
    bowling_average: str
    economy_rate: str


class PlayerResponse(PlayerBrief):
    is_group_member: bool
    stats: PlayerStatsResponse


# Match Schemas
class CreateMatchRequest(BaseModel):
    team1_name: str = Field(min_length=1, max_length=100)
    team2_name: str = Field(min_length=1, max_length=100)
    total_overs: int = Field(ge=1, le=50)
    toss_winner: str
    toss_decision: TossDecisionEnum
    team1_player_ids: list[str] = []
    team2_player_ids: list[str] = []


class OpenersRequest(BaseModel):
    striker_id: str
    non_striker_id: str


class BowlerRequest(BaseModel):
    bowler_id: str


class BatsmanRequest(BaseModel):
    player_id: str


class ManOfTheMatchRequest(BaseModel):
    player_id: Optional[str] = None  # None keeps the computed pick


class BallRequest(BaseModel):
    runs: int = Field(default=0, ge=0, le=10)
    extra: Optional[ExtraTypeEnum] = None
    wicket_kind: Optional[WicketKindEnum] = None
    dismissed_id: Optional[str] = None  # run outs only; defaults to the striker
    fielder_id: Optional[str] = None


class ExtrasResponse(BaseModel):
    wides: int
    no_balls: int
    byes: int
    leg_byes: int
    total: int


class TeamScoreResponse(BaseModel):
    name: str
    score: int
    wickets: int
    overs: str
    extras: ExtrasResponse
    players: list[PlayerBrief]


class BallResponse(BaseModel):
    id: str
    innings: int
    over_number: int
    ball_number: int
    runs: int
    outcome: str
    commentary: str
    timestamp: datetime


class BoundaryStatusResponse(BaseModel):
    over_complete: bool
    innings_complete: bool
    match_complete: bool
    needs_bowler: bool
    needs_batsman: bool


class MatchStateResponse(BaseModel):
    id: str
    phase: str
    innings: int
    total_overs: int
    toss_winner: str
    toss_decision: str

    batting_team: TeamScoreResponse
    bowling_team: TeamScoreResponse

    striker: Optional[PlayerBrief] = None
    non_striker: Optional[PlayerBrief] = None
    bowler: Optional[PlayerBrief] = None
    previous_bowler: Optional[PlayerBrief] = None

    run_rate: float
    target: Optional[int] = None
    runs_required: Optional[int] = None
    required_rate: Optional[float] = None
    balls_remaining: int
    first_innings_score: Optional[int] = None

    this_over: list[str]
    last_ball_commentary: Optional[str] = None

    status: BoundaryStatusResponse
    winner: Optional[str] = None
    man_of_the_match: Optional[PlayerBrief] = None
    man_of_the_match_confirmed: bool = False


class BallResultResponse(BaseModel):
    ball: BallResponse
    match_state: MatchStateResponse


class MatchSummaryResponse(BaseModel):
    id: str
    team1_name: str
    team2_name: str
    phase: str
    is_completed: bool
    winner: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class BatterCardResponse(BaseModel):
    player: PlayerBrief
    runs: int
    balls: int
    fours: int
    sixes: int
    strike_rate: float
    is_out: bool
    dismissal: Optional[str] = None


class BowlerCardResponse(BaseModel):
    player: PlayerBrief
    overs: str
    maidens: int
    runs: int
    wickets: int
    economy: float
    dot_balls: int
    wides: int
    no_balls: int


class InningsCardResponse(BaseModel):
    innings: int
    batting_team: str
    batting: list[BatterCardResponse]
    bowling: list[BowlerCardResponse]


class PerformanceResponse(BaseModel):
    player: PlayerBrief
    batting_score: float
    bowling_score: float
    fielding_score: float
    total_score: float


class ScorecardResponse(BaseModel):
    match_id: str
    innings: list[InningsCardResponse]
    result: str
    performances: list[PerformanceResponse]
