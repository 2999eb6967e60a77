"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Wallet
  3xxx: Market
  4xxx: Bet
  5xxx: Settlement
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


# --- 1xxx: Auth/Wallet ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class InvalidNonceError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid or reused nonce", 401)


class InvalidSignatureError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid signature", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Admin address required", 403)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market is not active: {market_id}", 409)


class MarketExpiredError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market deadline has passed: {market_id}", 409)


class InvalidMarketParamsError(AppError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(3004, "Invalid market parameters: " + "; ".join(errors), 400)


class NotMarketCreatorError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3005, f"Only the creator of market {market_id} may do this", 403)


class MarketHasBetsError(AppError):
    def __init__(self, market_id: str, bet_count: int) -> None:
        super().__init__(
            3006,
            f"Market {market_id} already has {bet_count} bets; stake cannot be withdrawn",
            409,
        )


class MarketNotFinalizedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3007, f"Market {market_id} is not settled or cancelled yet", 409)


class NoCreatorPayoutError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3008, f"Market {market_id} has no creator payout to claim", 409)


class CreatorAlreadyClaimedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3009, f"Creator payout for market {market_id} has already been claimed", 409
        )


# --- 4xxx: Bet ---

class InvalidAmountError(AppError):
    def __init__(self, amount: int, detail: str = "") -> None:
        msg = f"Invalid amount: {amount}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(4001, msg, 400)


class InvalidSideError(AppError):
    def __init__(self, side: object) -> None:
        super().__init__(4002, f"Invalid side: {side!r} (expected 'yes' or 'no')", 400)


class BetNotFoundError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(4003, f"Bet not found: {bet_id}", 404)


class NotBetOwnerError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(4004, f"Bet {bet_id} belongs to another bettor", 403)


class BetNotSettledError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(4005, f"Bet {bet_id} is not settled yet", 409)


class AlreadyClaimedError(AppError):
    def __init__(self, bet_id: str) -> None:
        super().__init__(4006, f"Bet {bet_id} has already been claimed", 409)


# --- 5xxx: Settlement ---

class AlreadyFinalizedError(AppError):
    def __init__(self, market_id: str, status: str) -> None:
        super().__init__(5001, f"Market {market_id} is already {status}", 409)


class NotReadyToSettleError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            5002, f"Market {market_id} cannot settle before its deadline", 409
        )


class SettlementInvariantError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5003, f"Settlement invariant violated: {detail}", 500)


# --- 9xxx: System ---

class StorageConflictError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(9001, f"Concurrent update on market {market_id}", 409)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
