class WizardException(Exception):
    """Base exception for scoring errors."""
    error_code = "GAME_ERROR"


class NotFound(WizardException):
    """Raised when an id does not resolve to a record."""
    error_code = "NOT_FOUND"


class GameNotFound(NotFound):
    """Raised when a game is not found."""
    error_code = "GAME_NOT_FOUND"


class RoundNotFound(NotFound):
    """Raised when a round is not found."""
    error_code = "ROUND_NOT_FOUND"


class PlayerNotFound(NotFound):
    """Raised when a player is not found, or is not part of a game."""
    error_code = "PLAYER_NOT_FOUND"


class GameValidationError(WizardException):
    """Base class for input that breaks a game rule."""
    error_code = "VALIDATION_FAILED"


class InvalidPlayerCount(GameValidationError):
    """Raised when a game is created with fewer than 3 or more than 6 players."""
    error_code = "INVALID_PLAYER_COUNT"


class InvalidSeat(GameValidationError):
    """Raised when a seat position is out of range or seating is closed."""
    error_code = "INVALID_SEAT"


class SeatsNotAssigned(GameValidationError):
    """Raised when play starts before every player has a seat."""
    error_code = "SEATS_NOT_ASSIGNED"


class InvalidRound(GameValidationError):
    """Raised when a round cannot be created with the given number."""
    error_code = "INVALID_ROUND"


class InvalidRoundState(GameValidationError):
    """Raised when a round operation does not fit the round's status."""
    error_code = "INVALID_ROUND_STATE"


class InvalidBid(GameValidationError):
    """Raised when a bid or trick count is outside 0..cards dealt."""
    error_code = "INVALID_BID"


class TrickCountMismatch(GameValidationError):
    """Raised when tricks taken do not add up to the cards dealt."""
    error_code = "TRICK_COUNT_MISMATCH"


class TrumpSuitLocked(GameValidationError):
    """Raised when trying to change a round's trump suit once set."""
    error_code = "TRUMP_SUIT_LOCKED"


class InvalidStatusTransition(GameValidationError):
    """Raised when a game status change is not allowed."""
    error_code = "INVALID_STATUS_TRANSITION"


class PlayerNameTaken(GameValidationError):
    """Raised when renaming a player to a name already in use."""
    error_code = "PLAYER_NAME_TAKEN"


class PersistenceError(WizardException):
    """Raised when the database rejects a write."""
    error_code = "PERSISTENCE_ERROR"
