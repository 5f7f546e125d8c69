from app.engine.innings import check_boundaries
from app.engine.rules import SCORING_PHASES, can_bowler_bowl_next_over, dismissed_player_ids
from app.engine.state import Match, Player
from app.validators.result import ValidationResult


def _active_ids(match: Match) -> set:
    return {p.id for p in (match.current_striker, match.current_non_striker) if p is not None}


class SelectionValidator:
    @staticmethod
    def validate_ready(match: Match) -> ValidationResult:
        """A delivery can only be recorded with both batsmen and a bowler selected"""
        errors = []
        if match.phase not in SCORING_PHASES:
            errors.append(f"Scoring is closed during {match.phase.value.replace('_', ' ')}")
        if match.current_striker is None or match.current_non_striker is None:
            errors.append("Please select striker and non-striker first")
        if match.current_bowler is None:
            errors.append("Please select a bowler first")
        if errors:
            return ValidationResult.from_errors(errors)

        status = check_boundaries(match)
        if status.needs_bowler:
            errors.append("The over is complete, select a new bowler")
        if status.needs_batsman:
            errors.append("A wicket has fallen, select the new batsman")
        return ValidationResult.from_errors(errors)

    @staticmethod
    def validate_bowler(match: Match, bowler: Player) -> ValidationResult:
        errors = []
        if bowler.id in _active_ids(match):
            errors.append(f"{bowler.name} is batting and cannot bowl")
        if not can_bowler_bowl_next_over(bowler, match):
            errors.append(f"{bowler.name} cannot bowl consecutive overs")
        if match.batting_team.find_player(bowler.id) is not None:
            errors.append(f"{bowler.name} plays for {match.batting_team.name}")
        return ValidationResult.from_errors(errors)

    @staticmethod
    def validate_batsman(match: Match, batsman: Player) -> ValidationResult:
        errors = []
        if batsman.id in _active_ids(match):
            errors.append(f"{batsman.name} is already batting")
        if batsman.id in dismissed_player_ids(match):
            errors.append(f"{batsman.name} is already out")
        if match.bowling_team.find_player(batsman.id) is not None:
            errors.append(f"{batsman.name} plays for {match.bowling_team.name}")
        return ValidationResult.from_errors(errors)

    @staticmethod
    def validate_openers(match: Match, striker: Player, non_striker: Player) -> ValidationResult:
        errors = []
        if striker.id == non_striker.id:
            errors.append("Striker and non-striker must be different players")
        if match.innings_balls:
            errors.append("Openers can only be chosen before the first delivery of the innings")
        for batsman in (striker, non_striker):
            if match.bowling_team.find_player(batsman.id) is not None:
                errors.append(f"{batsman.name} plays for {match.bowling_team.name}")
        return ValidationResult.from_errors(errors)
