"""
Error taxonomy shared by the engines and the HTTP layer.

Engines raise these; ``main.py`` turns them into ``{"kind", "detail"}``
responses. Nothing here carries stack traces or row ids to the caller
beyond what the message says.
"""
from typing import Optional


class ScoringError(Exception):
    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.message}


class ValidationError(ScoringError):
    """Malformed or missing input. Never persisted."""
    kind = "validation"
    status_code = 400


class NotFoundError(ScoringError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(ScoringError):
    """Tournament or league ownership mismatch"""
    kind = "forbidden"
    status_code = 403


class InvalidStateError(ScoringError):
    """Operation is illegal for the current lifecycle state"""
    kind = "invalid_state"
    status_code = 409


class ConflictError(ScoringError):
    """Blocked by existing data (performance lock, duplicate row). Retryable."""
    kind = "conflict"
    status_code = 409

    def __init__(self, message: str, players: Optional[list] = None):
        super().__init__(message)
        self.players = players or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.players:
            body["played_players"] = self.players
        return body


class InternalError(ScoringError):
    kind = "internal"
    status_code = 500
