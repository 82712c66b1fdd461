# backend/holdings_ledger/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
main.py maps them to HTTP responses with global exception handlers.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── FutureDateError
    │   ├── InvalidUpdateError
    │   └── InvalidDateRangeError
    ├── BusinessRuleError
    │   ├── InsufficientValueError
    │   └── PortfolioNotEmptyError
    ├── NotFoundError
    │   ├── HoldingNotFoundError
    │   ├── PortfolioNotFoundError
    │   └── TransactionNotFoundError
    └── PermissionDeniedError

    InvalidCredentialsError / TokenExpiredError
        - Raised by the JWT handler; mapped to 401 by get_current_user
"""

from datetime import date
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
    Raised when caller-correctable input is rejected by a service.

    Nothing is written when this is raised.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class FutureDateError(ValidationError):
    """Raised when a transaction or purchase date lies after today."""

    def __init__(self, field: str, value: date, today: date) -> None:
        self.value = value
        self.today = today
        super().__init__(
            f"{field} cannot be in the future ({value.isoformat()} > {today.isoformat()})",
            field=field,
        )


class InvalidUpdateError(ValidationError):
    """Raised when an Update transaction has a non-positive quantity or price."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Update transactions require a positive {field}",
            field=field,
        )


class InvalidDateRangeError(ValidationError):
    """Raised for an unknown date-range preset or start after end."""
    pass


# =============================================================================
# BUSINESS RULE ERRORS
# =============================================================================


class BusinessRuleError(ServiceError):
    """Raised when well-formed input would break a ledger invariant."""
    pass


class InsufficientValueError(BusinessRuleError):
    """
    Raised when an entry would leave the holding's value below zero.

    Either a Sell above the current value, or a back-dated entry whose
    replay drives a later Sell below zero (resulting_value is then set).
    The ledger and the cached value are left unchanged.
    """

    def __init__(
            self,
            holding_id: int,
            current_value: Decimal,
            amount: Decimal,
            resulting_value: Decimal | None = None,
    ) -> None:
        self.holding_id = holding_id
        self.current_value = current_value
        self.amount = amount
        self.resulting_value = resulting_value
        if resulting_value is None:
            message = f"Sell amount {amount} exceeds current value {current_value} of holding {holding_id}"
        else:
            message = (
                f"Entry of {amount} would change the value of holding {holding_id} "
                f"from {current_value} to {resulting_value}; values cannot go below zero"
            )
        super().__init__(message)


class PortfolioNotEmptyError(BusinessRuleError):
    """Raised when deleting a portfolio that still holds non-deleted holdings."""

    def __init__(self, portfolio_id: int, holding_count: int) -> None:
        self.portfolio_id = portfolio_id
        self.holding_count = holding_count
        super().__init__(
            f"Portfolio {portfolio_id} still holds {holding_count} holding(s); "
            f"move or delete them before deleting the portfolio"
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Holding", "Portfolio")
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


class HoldingNotFoundError(NotFoundError):
    def __init__(self, holding_id: int) -> None:
        self.holding_id = holding_id
        super().__init__(
            f"Holding {holding_id} not found",
            resource_type="Holding",
            resource_id=holding_id,
        )


class PortfolioNotFoundError(NotFoundError):
    def __init__(self, portfolio_id: int) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(
            f"Portfolio {portfolio_id} not found",
            resource_type="Portfolio",
            resource_id=portfolio_id,
        )


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: int) -> None:
        self.transaction_id = transaction_id
        super().__init__(
            f"Transaction {transaction_id} not found",
            resource_type="Transaction",
            resource_id=transaction_id,
        )


# =============================================================================
# AUTHORIZATION ERRORS
# =============================================================================


class PermissionDeniedError(ServiceError):
    """Raised when a user operates on a resource owned by someone else."""

    def __init__(self, resource_type: str, resource_id: int) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"You don't have permission to access {resource_type.lower()} {resource_id}"
        )


class InvalidCredentialsError(ServiceError):
    """Raised when a bearer token is malformed, has a bad signature or wrong type."""
    pass


class TokenExpiredError(ServiceError):
    """Raised when a bearer token has expired."""
    pass
