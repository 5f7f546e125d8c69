from app.engine.state import Ball, WicketKind
from app.validators.result import ValidationResult

ALL_KINDS = frozenset(WicketKind)

# Dismissals that can happen off each kind of delivery
LEGAL_DISMISSALS = {
    "legal": ALL_KINDS,
    "wide": frozenset({WicketKind.STUMPED, WicketKind.RUN_OUT, WicketKind.HIT_WICKET}),
    "no_ball": frozenset({WicketKind.RUN_OUT}),
    "bye": frozenset({WicketKind.RUN_OUT}),
    "leg_bye": frozenset({WicketKind.RUN_OUT}),
}

NEEDS_FIELDER = frozenset({WicketKind.CAUGHT, WicketKind.RUN_OUT, WicketKind.STUMPED})


def delivery_type(ball: Ball) -> str:
    if ball.is_wide:
        return "wide"
    if ball.is_no_ball:
        return "no_ball"
    if ball.is_bye:
        return "bye"
    if ball.is_leg_bye:
        return "leg_bye"
    return "legal"


class DeliveryValidator:
    @staticmethod
    def validate(ball: Ball) -> ValidationResult:
        """
        Validate a delivery record before it is processed.

        Rules:
        1. Runs are never negative; wides and no-balls carry at least their 1-run penalty
        2. Byes and leg-byes carry at least one run
        3. A wicket needs a kind, and the kind must be possible off that delivery type
        4. Caught, run out and stumped need a fielder; other dismissals must not name one
        5. Only a run out can dismiss the non-striker or come with runs off the delivery
        """
        errors = []
        kind = delivery_type(ball)

        if ball.runs < 0:
            errors.append("Runs cannot be negative")
        if kind in ("wide", "no_ball") and ball.runs < 1:
            errors.append(f"A {kind.replace('_', '-')} carries at least the 1-run penalty")
        if kind in ("bye", "leg_bye") and ball.runs < 1:
            errors.append(f"A {kind.replace('_', ' ')} needs at least one run")

        if not ball.is_wicket:
            if ball.wicket_kind is not None:
                errors.append("A dismissal kind was given without a wicket")
            if ball.fielder_id is not None:
                errors.append("A fielder was given without a wicket")
            return ValidationResult.from_errors(errors)

        wicket = ball.wicket_kind
        if wicket is None:
            errors.append("A wicket needs a dismissal kind")
            return ValidationResult.from_errors(errors)

        if wicket not in LEGAL_DISMISSALS[kind]:
            errors.append(f"A batsman cannot be {wicket.value.replace('_', ' ')} off a {kind.replace('_', ' ')}")

        if wicket in NEEDS_FIELDER and ball.fielder_id is None:
            errors.append(f"A {wicket.value.replace('_', ' ')} dismissal needs a fielder")
        if wicket not in NEEDS_FIELDER and ball.fielder_id is not None:
            errors.append(f"A {wicket.value.replace('_', ' ')} dismissal does not credit a fielder")

        if wicket != WicketKind.RUN_OUT:
            penalty = 1 if kind in ("wide", "no_ball") else 0
            if ball.runs != penalty:
                errors.append(f"No runs can be completed on a {wicket.value.replace('_', ' ')} dismissal")
            if ball.dismissed_id != ball.striker_id:
                errors.append("Only the striker can be dismissed this way")
        elif ball.dismissed_id not in (ball.striker_id, ball.non_striker_id):
            errors.append("The run out batsman must be one of the two at the crease")

        return ValidationResult.from_errors(errors)
