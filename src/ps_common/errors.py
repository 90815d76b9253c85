"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Identity
  2xxx: Account / Portfolio
  3xxx: Market / Player
  4xxx: Order
  5xxx: Position
  9xxx: System
"""


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


# --- 1xxx: Auth/Identity ---

class InvalidTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Token is invalid or expired", 401)


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    def __init__(self, required: float, available: float) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: need ${required:,.2f} but only have ${available:,.2f}",
            422,
        )


class PortfolioNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Portfolio not found for user {user_id}", 404)


# --- 3xxx: Market ---

class PlayerNotFoundError(AppError):
    def __init__(self, player_id: str) -> None:
        super().__init__(3001, f"Player not found: {player_id}", 404)


# --- 4xxx: Order ---

class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid input: {detail}", 400)


class TradeLimitExceededError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "No live trades remaining for this session", 422)


class LimitOrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Limit order not found: {order_id}", 404)


class OrderNotCancellableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(4006, f"Order {order_id} in status {status} cannot be cancelled", 422)


# --- 5xxx: Position ---

class InsufficientSharesError(AppError):
    def __init__(self, held: int, requested: int) -> None:
        super().__init__(
            5001,
            f"Insufficient shares: own {held} but tried to sell {requested}",
            422,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransientBackendError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Persistence backend unavailable: {detail}", 503)
