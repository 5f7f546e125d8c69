"""
Exceptions raised by the scoring engine
"""


class ScoringError(Exception):
    """Base class for scoring engine errors"""


class InvalidDeliveryError(ScoringError, ValueError):
    """A delivery record that breaks the extras/wicket contract"""


class MatchStateError(ScoringError):
    """An action that is not allowed in the match's current phase"""
