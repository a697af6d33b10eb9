"""Application error taxonomy.

Every error carries an HTTP status and a stable message that clients match on.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors rendered as ``{"status_code", "message"}``."""

    status_code: int = 500
    message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# --- 400 ---


class ValidationError(AppError):
    status_code = 400
    message = "invalid request body"


class InvalidItemTypeError(ValidationError):
    message = "invalid item type"


class InvalidTokenError(ValidationError):
    message = "invalid token"


# --- 401 / 403 ---


class UnauthorizedError(AppError):
    status_code = 401
    message = "unauthorized user"


class ExpiredSessionError(UnauthorizedError):
    message = "session expired"


class ForbiddenError(AppError):
    status_code = 403
    message = "forbidden"


# --- 404 ---


class NotFoundError(AppError):
    status_code = 404
    message = "not found"


class UserNotFoundError(NotFoundError):
    message = "not found user"


class UserDeviceNotFoundError(NotFoundError):
    message = "not found user device"


class ItemNotFoundError(NotFoundError):
    message = "not found item"


class GachaNotFoundError(NotFoundError):
    message = "not found gacha"


class GachaItemNotFoundError(NotFoundError):
    message = "not found gacha item"


class LoginBonusRewardNotFoundError(NotFoundError):
    message = "not found login bonus reward"


class MasterVersionNotFoundError(NotFoundError):
    message = "active master version is not found"


# --- 409 / 422 ---


class ConflictError(AppError):
    status_code = 409
    message = "conflict"


class UnprocessableError(AppError):
    status_code = 422
    message = "unprocessable request"


class InvalidMasterVersionError(UnprocessableError):
    message = "invalid master version"


# --- 500 ---


class ConsistencyError(AppError):
    """A resource was observed already consumed inside the transaction."""

    status_code = 500
    message = "resource already consumed"


class StoreError(AppError):
    status_code = 500
    message = "store error"


class IdGenerationError(StoreError):
    message = "failed to generate id"
