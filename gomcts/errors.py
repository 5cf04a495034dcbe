"""
gomcts Error Hierarchy

Exception hierarchy for the search player and its collaborators. All custom
exceptions inherit from GoMctsError so callers can catch them in one place.

Usage:
    from gomcts.errors import InvalidMoveError

    try:
        position = position.play_move(c)
    except InvalidMoveError as e:
        logger.warning(f"Rejected move: {e.message} {e.context}")

Note that the player itself never raises for an illegal or late move: it
reports a False result and logs the diagnostics instead. These exceptions
come from the rules layer and from broken internal contracts.
"""

from typing import Any

__all__ = [
    "ConfigurationError",
    "GameOverError",
    "GoMctsError",
    "InvalidMoveError",
    "InvalidStateError",
    "RulesViolationError",
]


class GoMctsError(Exception):
    """Base exception for all gomcts errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "GOMCTS_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(GoMctsError):
    """Base class for errors raised by the board rules and game record."""
    code: str = "RULES_VIOLATION"


class InvalidMoveError(RulesViolationError):
    """Move that cannot be applied to the current position.

    Raised for occupied points, ko recaptures, suicide and off-board
    coordinates.

    Attributes:
        move: Flat move index that was rejected
    """
    code: str = "INVALID_MOVE"

    def __init__(
        self,
        message: str,
        move: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.move = move
        if move is not None:
            self.context["move"] = move


class GameOverError(RulesViolationError):
    """A move was recorded after the game already finished."""
    code: str = "GAME_OVER"


# =============================================================================
# Internal Errors
# =============================================================================


class InvalidStateError(GoMctsError):
    """Broken internal contract in the search tree or player.

    Raised when the tree reaches a configuration that correct callers can
    never produce, e.g. evaluating a leaf that carries no virtual loss or
    sampling a move that was never visited.
    """
    code: str = "INVALID_STATE"


class ConfigurationError(GoMctsError):
    """Inconsistent construction arguments."""
    code: str = "CONFIGURATION_ERROR"
