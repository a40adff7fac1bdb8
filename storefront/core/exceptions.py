# storefront/core/exceptions.py

from enum import Enum
from typing import Optional, Dict, Any, List
import logging

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Caller errors
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"

    # Order builder errors
    EMPTY_CART = "EMPTY_CART"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_SHIPPING_VALUE = "INVALID_SHIPPING_VALUE"

    # Payment reconciliation errors
    INVALID_NOTIFICATION = "INVALID_NOTIFICATION"
    PAYMENT_LOOKUP_FAILED = "PAYMENT_LOOKUP_FAILED"
    PAYMENT_NOT_APPROVED = "PAYMENT_NOT_APPROVED"
    EXTERNAL_REFERENCE_MISSING = "EXTERNAL_REFERENCE_MISSING"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # External services
    UPSTREAM_REQUEST_FAILED = "UPSTREAM_REQUEST_FAILED"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    SHIPPING_STEP_FAILED = "SHIPPING_STEP_FAILED"

    # System errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class StorefrontError(Exception):
    """Base exception for all storefront application errors."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None
    ):
        self.code = code
        self.user_message = user_message
        self.technical_details = technical_details
        self.context = context or {}
        self.suggested_action = suggested_action

        logger.error(
            f"Storefront Error: {code.value}",
            extra={
                "error_code": code.value,
                "user_message": user_message,
                "technical_details": technical_details,
                "context": self.context,
                "suggested_action": suggested_action
            }
        )

        super().__init__(self.user_message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        response = {
            "error": {
                "code": self.code.value,
                "message": self.user_message,
                "context": self.context
            }
        }

        if self.suggested_action:
            response["error"]["suggested_action"] = self.suggested_action

        return response


class NotAuthenticatedError(StorefrontError):
    def __init__(self, technical_details: Optional[str] = None):
        super().__init__(
            code=ErrorCode.UNAUTHENTICATED,
            user_message="User not authenticated",
            technical_details=technical_details,
            suggested_action="Log in and send the access token as a Bearer header"
        )


class ForbiddenError(StorefrontError):
    def __init__(self, user_message: str = "Access denied: administrators only"):
        super().__init__(code=ErrorCode.FORBIDDEN, user_message=user_message)


class InvalidInputError(StorefrontError):
    def __init__(self, user_message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(code=ErrorCode.INVALID_INPUT, user_message=user_message, context=context)


class EmptyCartError(StorefrontError):
    def __init__(self, user_id: str):
        super().__init__(
            code=ErrorCode.EMPTY_CART,
            user_message="Cart is empty",
            context={"user_id": user_id},
            suggested_action="Add products to the cart before placing an order"
        )


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id: str):
        super().__init__(
            code=ErrorCode.PRODUCT_NOT_FOUND,
            user_message=f"Product {product_id} not found",
            context={"product_id": product_id}
        )


class OutOfStockError(StorefrontError):
    def __init__(self, product_id: str, product_name: str):
        super().__init__(
            code=ErrorCode.OUT_OF_STOCK,
            user_message=f"Product '{product_name}' is out of stock.",
            context={"product_id": product_id}
        )


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            user_message=f"Insufficient stock for '{product_name}'. Requested {requested}, available {available}.",
            context={
                "product_id": product_id,
                "requested": requested,
                "available": available
            },
            suggested_action=f"Reduce the quantity to at most {available}"
        )


class InvalidShippingValueError(StorefrontError):
    def __init__(self, value: Any):
        super().__init__(
            code=ErrorCode.INVALID_SHIPPING_VALUE,
            user_message=f"Invalid shipping fee: {value}",
            context={"shipping_fee": str(value)},
            suggested_action="Provide a non-negative numeric shipping fee"
        )


class OrderNotFoundError(StorefrontError):
    def __init__(self, order_id: str):
        super().__init__(
            code=ErrorCode.ORDER_NOT_FOUND,
            user_message="Order not found",
            context={"order_id": order_id}
        )


class UserNotFoundError(StorefrontError):
    def __init__(self, user_id: str):
        super().__init__(
            code=ErrorCode.USER_NOT_FOUND,
            user_message="User not found",
            context={"user_id": user_id}
        )


class InvalidNotificationError(StorefrontError):
    def __init__(self, topic: Optional[str]):
        super().__init__(
            code=ErrorCode.INVALID_NOTIFICATION,
            user_message="Invalid notification",
            context={"topic": topic}
        )


class PaymentLookupFailedError(StorefrontError):
    def __init__(self, payment_id: str, technical_details: Optional[str] = None):
        super().__init__(
            code=ErrorCode.PAYMENT_LOOKUP_FAILED,
            user_message="Payment not found or invalid",
            technical_details=technical_details,
            context={"payment_id": payment_id}
        )


class PaymentNotApprovedError(StorefrontError):
    def __init__(self, payment_id: str, payment_status: Optional[str]):
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_APPROVED,
            user_message=f"Payment not approved: status {payment_status}",
            context={"payment_id": payment_id, "payment_status": payment_status}
        )


class ExternalReferenceMissingError(StorefrontError):
    def __init__(self, payment_id: str):
        super().__init__(
            code=ErrorCode.EXTERNAL_REFERENCE_MISSING,
            user_message="Order id not found in external_reference",
            context={"payment_id": payment_id}
        )


class AlreadyProcessedError(StorefrontError):
    def __init__(self, order_id: str):
        super().__init__(
            code=ErrorCode.ALREADY_PROCESSED,
            user_message="Order is already paid",
            context={"order_id": order_id}
        )


class UpstreamServiceError(StorefrontError):
    def __init__(
        self,
        service: str,
        user_message: str,
        upstream_status: Optional[int] = None,
        technical_details: Optional[str] = None
    ):
        self.upstream_status = upstream_status
        super().__init__(
            code=ErrorCode.UPSTREAM_REQUEST_FAILED,
            user_message=user_message,
            technical_details=technical_details,
            context={"service": service, "upstream_status": upstream_status}
        )


class UpstreamTimeoutError(StorefrontError):
    def __init__(self, service: str, timeout: float):
        super().__init__(
            code=ErrorCode.UPSTREAM_TIMEOUT,
            user_message=f"Timeout calling {service}",
            context={"service": service, "timeout_seconds": timeout},
            suggested_action="Retry the request later"
        )


class ShippingStepFailedError(StorefrontError):
    """A step of the label purchase failed after zero or more steps succeeded."""

    def __init__(
        self,
        failed_step: str,
        completed_steps: List[str],
        label_id: Optional[str],
        requires_manual_reconciliation: bool,
        upstream_message: str,
        upstream_status: Optional[int] = None
    ):
        self.failed_step = failed_step
        self.completed_steps = completed_steps
        suggested_action = None
        if requires_manual_reconciliation:
            suggested_action = "The label was already paid for; reconcile it in the carrier panel before retrying"
        super().__init__(
            code=ErrorCode.SHIPPING_STEP_FAILED,
            user_message=f"Shipping label purchase failed at step '{failed_step}': {upstream_message}",
            context={
                "failed_step": failed_step,
                "completed_steps": completed_steps,
                "label_id": label_id,
                "requires_manual_reconciliation": requires_manual_reconciliation,
                "upstream_status": upstream_status
            },
            suggested_action=suggested_action
        )


class ConfigurationError(StorefrontError):
    def __init__(self, setting_name: str):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            user_message=f"{setting_name} not configured",
            context={"setting": setting_name}
        )


class StoreUnavailableError(StorefrontError):
    def __init__(self, technical_details: Optional[str] = None):
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            user_message="The data store did not respond in time. Please try again.",
            technical_details=technical_details
        )
