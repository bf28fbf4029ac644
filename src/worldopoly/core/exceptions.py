"""
Exception hierarchy for the game service layer.

The engine itself never raises for an illegal move (it returns the state
unchanged); these errors are raised at the parsing, oracle and HTTP
boundaries and handled there.
"""


class MonopolyError(Exception):
    """Base exception for all game-related errors."""


class GameNotFoundError(MonopolyError):
    """Game does not exist."""


class InvalidActionError(MonopolyError):
    """Action kind or parameters could not be understood."""


class LLMError(MonopolyError):
    """LLM oracle communication failed or returned an unusable answer."""


class ValidationError(MonopolyError):
    """Input validation failed."""
