from typing import Any

from fastapi import HTTPException, status

from .enums import ErrorCode


class GameException(HTTPException):
    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.details = details or {}


class NotFoundError(GameException):
    def __init__(self, resource: str, identifier: int | str):
        super().__init__(
            detail=f"{resource} with id '{identifier}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": identifier},
        )


class SessionNotFoundError(NotFoundError):
    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, session_id: str):
        super().__init__("CombatSession", session_id)


class ParticipantNotFoundError(NotFoundError):
    code = ErrorCode.PARTICIPANT_NOT_FOUND

    def __init__(self, participant_id: str):
        super().__init__("Participant", participant_id)


class EffectNotFoundError(NotFoundError):
    code = ErrorCode.EFFECT_NOT_FOUND

    def __init__(self, effect_id: str):
        super().__init__("StatusEffect", effect_id)


class InvalidSessionStateError(GameException):
    code = ErrorCode.INVALID_SESSION_STATE

    def __init__(self, detail: str, details: dict[str, Any] | None = None):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT, details=details)


class InvalidTurnIndexError(GameException):
    code = ErrorCode.INVALID_TURN_INDEX

    def __init__(self, turn_index: int, participant_count: int):
        super().__init__(
            detail=f"Turn index {turn_index} is out of range for {participant_count} participants",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"turnIndex": turn_index, "participantCount": participant_count},
        )


class InvalidDamageAmountError(GameException):
    code = ErrorCode.INVALID_DAMAGE_AMOUNT

    def __init__(self, amount: int):
        super().__init__(
            detail=f"Amount must be a positive integer, got {amount}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"amount": amount},
        )


class PermissionDeniedError(GameException):
    code = ErrorCode.PERMISSION_DENIED

    def __init__(self, detail: str = "You do not have access to this combat session"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class ValidationError(GameException):
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, detail: str, details: dict[str, Any] | None = None):
        super().__init__(detail=detail, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, details=details)
