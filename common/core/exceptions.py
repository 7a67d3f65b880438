from typing import Optional


class AppException(Exception):
    """Base application exception.

    Carried as the error side of a ``Result`` inside services; the HTTP layer
    turns it into a response using ``status_code`` and ``code``.
    """

    code = "APP_ERROR"
    status_code = 400

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# =============================================================================
# Not found
# =============================================================================


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "NOT_FOUND"
    status_code = 404


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"


class SubscriptionNotFoundError(NotFoundError):
    code = "SUBSCRIPTION_NOT_FOUND"


class PaymentMethodNotFoundError(NotFoundError):
    code = "PAYMENT_METHOD_NOT_FOUND"


class BillingRecordNotFoundError(NotFoundError):
    code = "BILLING_RECORD_NOT_FOUND"


# =============================================================================
# State / ownership
# =============================================================================


class StateError(AppException):
    """The resource exists but is not in a state that allows the operation."""

    code = "INVALID_STATE"
    status_code = 409


class UserInactiveError(StateError):
    code = "USER_INACTIVE"
    status_code = 403


class AdminPermissionRequiredError(StateError):
    code = "ADMIN_PERMISSION_REQUIRED"
    status_code = 403


class ForbiddenOwnershipError(StateError):
    """Record belongs to a different user."""

    code = "FORBIDDEN"
    status_code = 403


class SubscriptionAlreadyExistsError(StateError):
    code = "SUBSCRIPTION_ALREADY_EXISTS"


class SubscriptionAlreadyCancelledError(StateError):
    code = "SUBSCRIPTION_ALREADY_CANCELLED"


class InvalidStatusTransitionError(StateError):
    code = "INVALID_STATUS_TRANSITION"


# =============================================================================
# Validation
# =============================================================================


class ValidationError(AppException):
    """Validation error exception."""

    code = "VALIDATION_ERROR"
    status_code = 422


class InvalidMonthError(ValidationError):
    code = "INVALID_MONTH"


class InvalidYearError(ValidationError):
    code = "INVALID_YEAR"


# =============================================================================
# Internal
# =============================================================================


class InternalError(AppException):
    """Unexpected failure below the service layer. Always keeps the cause."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, cause: BaseException):
        super().__init__(message, cause=cause)
