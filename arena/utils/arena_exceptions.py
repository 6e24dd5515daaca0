"""
Custom exceptions for the arena data-entry boundary with user-friendly error messages.
"""

class ArenaException(Exception):
    """Base exception for arena-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class NoActiveCycleError(ArenaException):
    """Raised when an operation needs the active cycle and none exists."""
    def __init__(self):
        super().__init__(
            "No active cycle",
            "❌ There is no active competition cycle. Ask an admin to start one!"
        )

class PlayerNotFoundError(ArenaException):
    """Raised when a player is not registered."""
    def __init__(self, identifier):
        super().__init__(
            f"Player '{identifier}' not found",
            "❌ That player hasn't joined the arena yet! Use `/join` to register."
        )

class RecordNotFoundError(ArenaException):
    """Raised when a record referenced by id does not exist."""
    def __init__(self, record_type: str, record_id: int):
        super().__init__(
            f"{record_type} {record_id} not found",
            f"❌ {record_type} #{record_id} could not be found."
        )

class RecordValidationError(ArenaException):
    """Raised when submitted values fail validation."""
    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid {field}: {reason}",
            f"❌ {reason}"
        )

class DuplicateCheckInError(ArenaException):
    """Raised when a player already checked in for a date."""
    def __init__(self, player_name: str, check_in_date):
        super().__init__(
            f"Player '{player_name}' already checked in on {check_in_date}",
            f"✅ {player_name} is already checked in for {check_in_date:%A, %d %b %Y}."
        )

class DuplicateBlogUrlError(ArenaException):
    """Raised when a blog URL has already been submitted by anyone."""
    def __init__(self, url: str):
        super().__init__(
            f"Blog URL already submitted: {url}",
            "❌ This blog link has already been submitted."
        )

class DuplicatePlayerError(ArenaException):
    """Raised when registering an email or Discord account twice."""
    def __init__(self, identifier: str):
        super().__init__(
            f"Player already registered: {identifier}",
            f"❌ {identifier} is already registered."
        )

class DoublePointsAlreadyUsedError(ArenaException):
    """Raised when a player tries to use double points twice in a cycle."""
    def __init__(self, player_name: str):
        super().__init__(
            f"Player '{player_name}' already used double points this cycle",
            f"❌ {player_name} already used Double Points this cycle!"
        )

class DatabaseError(ArenaException):
    """Raised when database operations fail."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )
