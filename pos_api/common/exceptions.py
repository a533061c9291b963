"""
Error taxonomy for the POS API.

Every error is an ``HTTPException`` so services can raise it directly and the
application handler renders it as ``{success: false, message, statusCode}``.
"""

from typing import Optional

from fastapi import HTTPException, status


class POSError(HTTPException):
    """Base class for business errors surfaced to the caller"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(
            status_code=status_code or self.status_code,
            detail=message or self.default_message
        )

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidStatusError(ValidationError):
    default_message = "Invalid order status"


class NotFoundError(POSError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InvalidStateError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class InsufficientStockError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Insufficient stock for: {product_name}. Available: {available}")


class PaymentInsufficientError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, payment_amount, total_amount):
        self.payment_amount = payment_amount
        self.total_amount = total_amount
        super().__init__(
            f"Payment amount ({payment_amount}) is less than total amount ({total_amount})"
        )


class RefundExceedsTotalError(POSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Refund amount cannot exceed order total"


class ConflictError(POSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Duplicate value for a unique field"


class InternalError(POSError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class AuthenticationError(POSError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class PermissionDeniedError(POSError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed to access this route"
