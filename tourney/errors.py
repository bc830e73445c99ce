"""
Engine error taxonomy.

Every error is recoverable by the caller: the operation that raised it left
persisted state untouched. The HTTP layer renders them as

    {"error": "<code>", "message": "<human readable>"}

with the status code carried by the exception class.
"""
from typing import Any, Dict

from fastapi import status


class EngineError(Exception):
    """Base class for all engine errors."""

    code = "EngineError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class Unauthenticated(EngineError):
    code = "Unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(EngineError):
    code = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFound(EngineError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidState(EngineError):
    code = "InvalidState"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation not valid in the current state"


class InvalidInput(EngineError):
    code = "InvalidInput"
    default_message = "Invalid input"


class InvalidScore(InvalidInput):
    code = "InvalidScore"
    default_message = "Invalid scores"


# Bracket generation

class InsufficientTeams(EngineError):
    code = "InsufficientTeams"
    default_message = "Not enough teams checked in"


class BracketAlreadyGenerated(EngineError):
    code = "BracketAlreadyGenerated"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Bracket has already been generated for this tournament"


# Check-in

class TournamentMismatch(EngineError):
    code = "TournamentMismatch"
    default_message = "This code is not for this tournament"


class NotApproved(EngineError):
    code = "NotApproved"
    default_message = "Your team has not been approved yet"


class CheckInClosed(EngineError):
    code = "CheckInClosed"
    default_message = "Check-in is closed"


# Registration

class RegistrationClosed(EngineError):
    code = "RegistrationClosed"
    default_message = "Registration is closed"


class DuplicateTeamName(EngineError):
    code = "DuplicateTeamName"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Team name already taken"


class TournamentFull(EngineError):
    code = "TournamentFull"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Tournament is full"


class DuplicateUsername(EngineError):
    code = "DuplicateUsername"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Username already exists"


class DuplicateDiscordId(EngineError):
    code = "DuplicateDiscordId"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Discord account is already linked to another user"
