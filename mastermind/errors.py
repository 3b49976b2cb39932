"""
Typed errors raised by the game-state layer.
Routes in main.py turn these into HTTP status codes.
"""


class MastermindError(Exception):
    """Base class for everything the core raises on purpose."""


class NotFoundError(MastermindError, LookupError):
    """A game or multiplayer id does not exist in the store."""


class ValidationError(MastermindError, ValueError):
    """Bad input (difficulty, guess digits, player count). Nothing was changed."""


class ExternalServiceUnavailable(MastermindError):
    """random.org failed; only ever seen inside random_client."""


class InvariantViolation(MastermindError):
    """Stored state broke a rule it should never break (ex. seat index out of range)."""


class ConcurrentUpdateError(MastermindError):
    """Someone else saved the same record after we loaded it."""
