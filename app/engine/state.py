"""
Match state dataclasses for the scoring engine.
Ball, TeamInnings, Match, Player and PlayerStats with serialization support.
"""
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from app.engine.errors import InvalidDeliveryError

BALLS_PER_OVER = 6
MAX_WICKETS = 10


class WicketKind(str, enum.Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"


class MatchPhase(str, enum.Enum):
    FIRST_INNINGS = "first_innings"
    INNINGS_BREAK = "innings_break"
    SECOND_INNINGS = "second_innings"
    COMPLETED = "completed"


class TossDecision(str, enum.Enum):
    BAT = "bat"
    BOWL = "bowl"


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class BowlingFigures:
    """Wickets/runs pair, e.g. 3/24"""
    wickets: int = 0
    runs: int = 0

    def is_better_than(self, other: Optional["BowlingFigures"]) -> bool:
        # More wickets wins; equal wickets with fewer runs wins
        if other is None:
            return True
        if self.wickets != other.wickets:
            return self.wickets > other.wickets
        return self.runs < other.runs

    def __str__(self) -> str:
        return f"{self.wickets}/{self.runs}"

    def to_dict(self) -> dict:
        return {"wickets": self.wickets, "runs": self.runs}

    @classmethod
    def from_dict(cls, d: dict) -> "BowlingFigures":
        return cls(wickets=d.get("wickets", 0), runs=d.get("runs", 0))


# Counters that are summed when two PlayerStats are merged
_ADDITIVE_COUNTERS = (
    "matches_played",
    "runs_scored",
    "balls_faced",
    "fours",
    "sixes",
    "fifties",
    "hundreds",
    "times_out",
    "ducks",
    "dot_balls",
    "wickets_taken",
    "balls_bowled",
    "runs_conceded",
    "maiden_overs",
    "catches",
    "run_outs",
    "stumpings",
    "motm_awards",
)


@dataclass
class PlayerStats:
    """Cumulative career counters for a player"""
    matches_played: int = 0

    # Batting
    runs_scored: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    fifties: int = 0
    hundreds: int = 0
    highest_score: int = 0
    times_out: int = 0
    ducks: int = 0
    dot_balls: int = 0

    # Bowling
    wickets_taken: int = 0
    balls_bowled: int = 0
    runs_conceded: int = 0
    maiden_overs: int = 0
    best_bowling: Optional[BowlingFigures] = None

    # Fielding
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0

    motm_awards: int = 0

    def merged(self, delta: "PlayerStats") -> "PlayerStats":
        """Return a new PlayerStats with a single match's delta added on top"""
        combined = PlayerStats(**{name: getattr(self, name) + getattr(delta, name) for name in _ADDITIVE_COUNTERS})
        combined.highest_score = max(self.highest_score, delta.highest_score)
        best = self.best_bowling
        if delta.best_bowling is not None and delta.best_bowling.is_better_than(best):
            best = delta.best_bowling
        combined.best_bowling = BowlingFigures(best.wickets, best.runs) if best else None
        return combined

    def to_dict(self) -> dict:
        d = {name: getattr(self, name) for name in _ADDITIVE_COUNTERS}
        d["highest_score"] = self.highest_score
        d["best_bowling"] = self.best_bowling.to_dict() if self.best_bowling else None
        return d

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "PlayerStats":
        if not d:
            return cls()
        stats = cls(**{name: d.get(name, 0) for name in _ADDITIVE_COUNTERS})
        stats.highest_score = d.get("highest_score", 0)
        if d.get("best_bowling"):
            stats.best_bowling = BowlingFigures.from_dict(d["best_bowling"])
        return stats


@dataclass
class Player:
    id: str
    name: str
    short_id: Optional[str] = None
    photo_url: Optional[str] = None
    is_group_member: bool = False
    stats: PlayerStats = field(default_factory=PlayerStats)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "short_id": self.short_id,
            "photo_url": self.photo_url,
            "is_group_member": self.is_group_member,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Player":
        return cls(
            id=d["id"],
            name=d["name"],
            short_id=d.get("short_id"),
            photo_url=d.get("photo_url"),
            is_group_member=d.get("is_group_member", False),
            stats=PlayerStats.from_dict(d.get("stats")),
        )


@dataclass
class Ball:
    """A single recorded delivery. Immutable once appended to the log."""
    id: str
    innings: int
    over_number: int  # 1-based
    ball_number: int  # position within the over, extras share the next legal ball's slot
    runs: int
    striker_id: str
    non_striker_id: str
    bowler_id: str
    is_wide: bool = False
    is_no_ball: bool = False
    is_bye: bool = False
    is_leg_bye: bool = False
    is_wicket: bool = False
    wicket_kind: Optional[WicketKind] = None
    dismissed_id: Optional[str] = None
    fielder_id: Optional[str] = None
    commentary: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        flags = [self.is_wide, self.is_no_ball, self.is_bye, self.is_leg_bye]
        if sum(1 for f in flags if f) > 1:
            raise InvalidDeliveryError("A delivery can carry at most one of wide, no-ball, bye and leg-bye")
        if self.wicket_kind is not None and not isinstance(self.wicket_kind, WicketKind):
            self.wicket_kind = WicketKind(self.wicket_kind)
        if self.is_wicket and self.dismissed_id is None:
            self.dismissed_id = self.striker_id

    @property
    def is_legal(self) -> bool:
        return not self.is_wide and not self.is_no_ball

    @property
    def runs_off_bat(self) -> int:
        if self.is_wide or self.is_no_ball or self.is_bye or self.is_leg_bye:
            return 0
        return self.runs

    @property
    def credited_to_bowler(self) -> bool:
        return self.is_wicket and self.wicket_kind != WicketKind.RUN_OUT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "innings": self.innings,
            "over_number": self.over_number,
            "ball_number": self.ball_number,
            "runs": self.runs,
            "striker_id": self.striker_id,
            "non_striker_id": self.non_striker_id,
            "bowler_id": self.bowler_id,
            "is_wide": self.is_wide,
            "is_no_ball": self.is_no_ball,
            "is_bye": self.is_bye,
            "is_leg_bye": self.is_leg_bye,
            "is_wicket": self.is_wicket,
            "wicket_kind": self.wicket_kind.value if self.wicket_kind else None,
            "dismissed_id": self.dismissed_id,
            "fielder_id": self.fielder_id,
            "commentary": self.commentary,
            "timestamp": _format_time(self.timestamp),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Ball":
        return cls(
            id=d["id"],
            innings=d.get("innings", 1),
            over_number=d["over_number"],
            ball_number=d["ball_number"],
            runs=d["runs"],
            striker_id=d["striker_id"],
            non_striker_id=d["non_striker_id"],
            bowler_id=d["bowler_id"],
            is_wide=d.get("is_wide", False),
            is_no_ball=d.get("is_no_ball", False),
            is_bye=d.get("is_bye", False),
            is_leg_bye=d.get("is_leg_bye", False),
            is_wicket=d.get("is_wicket", False),
            wicket_kind=WicketKind(d["wicket_kind"]) if d.get("wicket_kind") else None,
            dismissed_id=d.get("dismissed_id"),
            fielder_id=d.get("fielder_id"),
            commentary=d.get("commentary", ""),
            timestamp=_parse_time(d.get("timestamp")) or datetime.utcnow(),
        )


@dataclass
class Extras:
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes

    def to_dict(self) -> dict:
        return {"wides": self.wides, "no_balls": self.no_balls, "byes": self.byes, "leg_byes": self.leg_byes}

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "Extras":
        d = d or {}
        return cls(
            wides=d.get("wides", 0),
            no_balls=d.get("no_balls", 0),
            byes=d.get("byes", 0),
            leg_byes=d.get("leg_byes", 0),
        )


@dataclass
class TeamInnings:
    """One team's side of the match: roster plus its batting counters"""
    name: str
    players: List[Player] = field(default_factory=list)
    score: int = 0
    wickets: int = 0
    overs: int = 0  # completed overs
    balls: int = 0  # legal balls into the current over, 0-5
    extras: Extras = field(default_factory=Extras)

    @property
    def overs_display(self) -> str:
        return f"{self.overs}.{self.balls}"

    @property
    def legal_balls(self) -> int:
        return self.overs * BALLS_PER_OVER + self.balls

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        return next((p for p in self.players if p.id == player_id), None)

    def add_player(self, player: Player):
        if self.find_player(player.id) is None:
            self.players.append(player)

    def reset(self):
        self.score = 0
        self.wickets = 0
        self.overs = 0
        self.balls = 0
        self.extras = Extras()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "players": [p.to_dict() for p in self.players],
            "score": self.score,
            "wickets": self.wickets,
            "overs": self.overs,
            "balls": self.balls,
            "extras": self.extras.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TeamInnings":
        return cls(
            name=d["name"],
            players=[Player.from_dict(p) for p in d.get("players", [])],
            score=d.get("score", 0),
            wickets=d.get("wickets", 0),
            overs=d.get("overs", 0),
            balls=d.get("balls", 0),
            extras=Extras.from_dict(d.get("extras")),
        )


@dataclass
class Match:
    """Root aggregate: both sides, the format, the phase and the full ball log"""
    id: str
    team1: TeamInnings
    team2: TeamInnings
    total_overs: int
    toss_winner: str
    toss_decision: TossDecision
    batting_side: str = "team1"  # "team1" or "team2"
    phase: MatchPhase = MatchPhase.FIRST_INNINGS
    first_innings_score: Optional[int] = None

    current_striker: Optional[Player] = None
    current_non_striker: Optional[Player] = None
    current_bowler: Optional[Player] = None
    previous_bowler: Optional[Player] = None

    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None
    winner: Optional[str] = None
    man_of_the_match: Optional[Player] = None
    man_of_the_match_confirmed: bool = False

    balls: List[Ball] = field(default_factory=list)

    # Bumped on every saved change; the store never overwrites a higher revision
    revision: int = 0

    @property
    def batting_team(self) -> TeamInnings:
        return self.team1 if self.batting_side == "team1" else self.team2

    @property
    def bowling_team(self) -> TeamInnings:
        return self.team2 if self.batting_side == "team1" else self.team1

    @property
    def is_second_innings(self) -> bool:
        return self.phase in (MatchPhase.SECOND_INNINGS, MatchPhase.COMPLETED)

    @property
    def is_completed(self) -> bool:
        return self.phase == MatchPhase.COMPLETED

    @property
    def innings_number(self) -> int:
        return 2 if self.is_second_innings else 1

    @property
    def innings_balls(self) -> List[Ball]:
        """Deliveries of the innings currently in play"""
        return [b for b in self.balls if b.innings == self.innings_number]

    @property
    def all_players(self) -> List[Player]:
        """Both rosters, team1 first, without duplicates"""
        seen = set()
        players = []
        for p in self.team1.players + self.team2.players:
            if p.id not in seen:
                seen.add(p.id)
                players.append(p)
        return players

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        return next((p for p in self.all_players if p.id == player_id), None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "total_overs": self.total_overs,
            "toss_winner": self.toss_winner,
            "toss_decision": self.toss_decision.value,
            "batting_side": self.batting_side,
            "phase": self.phase.value,
            "first_innings_score": self.first_innings_score,
            "current_striker_id": self.current_striker.id if self.current_striker else None,
            "current_non_striker_id": self.current_non_striker.id if self.current_non_striker else None,
            "current_bowler_id": self.current_bowler.id if self.current_bowler else None,
            "previous_bowler_id": self.previous_bowler.id if self.previous_bowler else None,
            "start_time": _format_time(self.start_time),
            "end_time": _format_time(self.end_time),
            "winner": self.winner,
            "man_of_the_match_id": self.man_of_the_match.id if self.man_of_the_match else None,
            "man_of_the_match_confirmed": self.man_of_the_match_confirmed,
            "balls": [b.to_dict() for b in self.balls],
            "revision": self.revision,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Match":
        match = cls(
            id=d["id"],
            team1=TeamInnings.from_dict(d["team1"]),
            team2=TeamInnings.from_dict(d["team2"]),
            total_overs=d["total_overs"],
            toss_winner=d.get("toss_winner", ""),
            toss_decision=TossDecision(d.get("toss_decision", "bat")),
            batting_side=d.get("batting_side", "team1"),
            phase=MatchPhase(d.get("phase", MatchPhase.FIRST_INNINGS.value)),
            first_innings_score=d.get("first_innings_score"),
            start_time=_parse_time(d.get("start_time")) or datetime.utcnow(),
            end_time=_parse_time(d.get("end_time")),
            winner=d.get("winner"),
            balls=[Ball.from_dict(b) for b in d.get("balls", [])],
            man_of_the_match_confirmed=d.get("man_of_the_match_confirmed", False),
            revision=d.get("revision", 0),
        )
        # Player references resolve against the rosters
        match.current_striker = match.batting_team.find_player(d.get("current_striker_id"))
        match.current_non_striker = match.batting_team.find_player(d.get("current_non_striker_id"))
        match.current_bowler = match.bowling_team.find_player(d.get("current_bowler_id"))
        match.previous_bowler = match.bowling_team.find_player(d.get("previous_bowler_id"))
        match.man_of_the_match = match.find_player(d.get("man_of_the_match_id"))
        return match
