"""Error taxonomy for the storefront.

Each error carries the HTTP status it maps to and a stable machine-readable
code. Errors that describe several problems at once (cart validation) carry
the full list in ``errors`` so a client can show every problem together.
"""


class StorefrontError(Exception):
    status_code = 500
    code = "STOREFRONT_ERROR"
    default_message = "Storefront error"

    def __init__(self, message: str | None = None, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationFailed(StorefrontError):
    status_code = 400
    code = "VALIDATION_FAILED"
    default_message = "Validation failed"


class EmptyCart(StorefrontError):
    status_code = 400
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class MissingField(StorefrontError):
    status_code = 400
    code = "MISSING_FIELD"
    default_message = "Required field is missing"

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(
            message or f"{field} is required",
            errors=[{"field": field, "error": "This field is required"}],
        )


class Unavailable(StorefrontError):
    status_code = 400
    code = "PRODUCT_UNAVAILABLE"
    default_message = "Product is not available"


class InsufficientInventory(StorefrontError):
    status_code = 400
    code = "INSUFFICIENT_INVENTORY"
    default_message = "Insufficient inventory"

    def __init__(self, product_id: str, available: int, requested: int, message: str | None = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            message,
            errors=[
                {
                    "product_id": product_id,
                    "error": "Insufficient inventory",
                    "available": available,
                    "requested": requested,
                }
            ],
        )


class Unauthorized(StorefrontError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class Forbidden(StorefrontError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(StorefrontError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(StorefrontError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class UpstreamPaymentError(StorefrontError):
    """A payment gateway call failed.

    Surfaces as a generic 500 unless the gateway supplied a decline reason,
    which is then passed through as the message.

    Payment capture happens outside the storefront, so no adapter raises
    this yet; the mapping is in place for when one does.
    """

    status_code = 500
    code = "PAYMENT_ERROR"
    default_message = "Payment processing failed"

    def __init__(self, decline_reason: str | None = None):
        self.decline_reason = decline_reason
        super().__init__(decline_reason)
