# backend/portfolio_tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
main.py maps them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFoundError
    │   ├── UserNotFoundError
    │   ├── ListNotFoundError
    │   ├── PositionNotFoundError
    │   └── CashFlowNotFoundError
    ├── BusinessRuleError
    │   ├── InsufficientSharesError
    │   ├── DefaultListDeletionError
    │   ├── DuplicateListNameError
    │   ├── DuplicatePositionError
    │   └── UserExistsError
    └── MarketDataError
        ├── ProviderUnavailableError
        ├── TickerNotFoundError
        ├── RateLimitError
        └── QuoteUnavailableError
"""

from decimal import Decimal


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when a service receives invalid input.

    Raised before any mutation takes place.

    Attributes:
        field: The offending field (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Position", "List")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found", "User", user_id)


class ListNotFoundError(NotFoundError):
    def __init__(self, list_id: int) -> None:
        self.list_id = list_id
        super().__init__(f"List {list_id} not found", "List", list_id)


class PositionNotFoundError(NotFoundError):
    """Raised for an unknown position id, or a position owned by someone else."""

    def __init__(self, position_id: int | None = None, symbol: str | None = None) -> None:
        self.position_id = position_id
        self.symbol = symbol
        if position_id is not None:
            message = f"Position {position_id} not found"
        else:
            message = f"No open position in {symbol}"
        super().__init__(message, "Position", position_id if position_id is not None else symbol)


class CashFlowNotFoundError(NotFoundError):
    def __init__(self, cash_flow_id: int) -> None:
        self.cash_flow_id = cash_flow_id
        super().__init__(f"Cash flow {cash_flow_id} not found", "CashFlow", cash_flow_id)


# =============================================================================
# BUSINESS RULE ERRORS
# =============================================================================


class BusinessRuleError(ServiceError):
    """
    Base exception for requests that are well-formed but not allowed.

    Distinct from ValidationError: the input parses fine, the current state
    forbids the operation.
    """


class InsufficientSharesError(BusinessRuleError):
    """
    Raised when a sell asks for more shares than the position holds.

    Attributes:
        symbol: Ticker of the position
        position_id: ID of the position
        requested: Quantity the caller tried to sell
        available: Quantity currently held
    """

    def __init__(
            self,
            symbol: str,
            position_id: int,
            requested: Decimal,
            available: Decimal,
    ) -> None:
        self.symbol = symbol
        self.position_id = position_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot sell {requested} shares of {symbol} (position {position_id}): "
            f"only {available} available"
        )


class DefaultListDeletionError(BusinessRuleError):
    def __init__(self, list_id: int) -> None:
        self.list_id = list_id
        super().__init__("Cannot delete default list")


class DuplicateListNameError(BusinessRuleError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A list named '{name}' already exists")


class DuplicatePositionError(BusinessRuleError):
    def __init__(self, symbol: str, list_id: int | None = None) -> None:
        self.symbol = symbol
        self.list_id = list_id
        scope = f"list {list_id}" if list_id is not None else "no list"
        super().__init__(f"{symbol} is already tracked in {scope}")


class UserExistsError(BusinessRuleError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A user with email {email} already exists")


# =============================================================================
# MARKET DATA ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider errors.

    Attributes:
        provider: Name of the provider (e.g., "yahoo")
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when the provider cannot be reached or timed out.

    Retryable: the request may succeed later.
    """

    def __init__(self, provider: str, reason: str | None = None) -> None:
        self.reason = reason
        message = f"Market data provider '{provider}' is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message, provider)


class TickerNotFoundError(MarketDataError):
    """Raised when the provider does not know the symbol. Not retryable."""

    def __init__(self, symbol: str, provider: str | None = None) -> None:
        self.symbol = symbol
        super().__init__(f"Symbol '{symbol}' not found", provider)


class RateLimitError(MarketDataError):
    """
    Raised when the provider rate limit is hit.

    Attributes:
        retry_after: Seconds to wait before retrying, when known
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f". Retry after {retry_after} seconds"
        super().__init__(message, provider)


class QuoteUnavailableError(MarketDataError):
    """
    Raised when neither a live quote nor a synthetic fallback can be produced.

    Attributes:
        symbol: The symbol that could not be quoted
        reason: Why the live fetch failed
    """

    def __init__(self, symbol: str, reason: str | None = None, provider: str | None = None) -> None:
        self.symbol = symbol
        self.reason = reason
        message = f"No quote available for {symbol}"
        if reason:
            message += f": {reason}"
        super().__init__(message, provider)


__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "UserNotFoundError",
    "ListNotFoundError",
    "PositionNotFoundError",
    "CashFlowNotFoundError",
    "BusinessRuleError",
    "InsufficientSharesError",
    "DefaultListDeletionError",
    "DuplicateListNameError",
    "DuplicatePositionError",
    "UserExistsError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "QuoteUnavailableError",
]
