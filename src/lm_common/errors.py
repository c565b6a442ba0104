"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Balance/Withdrawal
  4xxx: Order
  6xxx: Accrual service
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class LoginExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Login already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid login or password", 401)


# --- 2xxx: Balance/Withdrawal ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            402,
        )


class BalanceNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Balance not found for user {user_id}", 404)


class DuplicateWithdrawalError(AppError):
    def __init__(self, reference: str) -> None:
        super().__init__(2003, f"Withdrawal already registered for order {reference}", 409)


# --- 4xxx: Order ---

class MalformedOrderNumberError(AppError):
    def __init__(self, number: str) -> None:
        super().__init__(4001, f"Malformed order number: {number!r}", 422)


class OrderOwnedByAnotherUserError(AppError):
    def __init__(self, number: str) -> None:
        super().__init__(4002, f"Order {number} was uploaded by another user", 409)


# --- 6xxx: Accrual service ---

class AccrualError(AppError):
    """A single accrual lookup failed; the order is retried on the next tick."""


class AccrualServiceError(AccrualError):
    def __init__(self, detail: str) -> None:
        super().__init__(6001, f"Accrual service error: {detail}", 502)


class AccrualRateLimitError(AccrualError):
    def __init__(self, attempts: int) -> None:
        super().__init__(6002, f"Accrual service still rate limiting after {attempts} attempts", 429)


class AccrualPayloadError(AccrualError):
    def __init__(self, detail: str) -> None:
        super().__init__(6003, f"Malformed accrual payload: {detail}", 502)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
