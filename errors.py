"""
Error taxonomy

Every error the API reports on purpose derives from ShopError and carries the
HTTP status it is rendered with.
"""


class ShopError(Exception):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShopError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateUser(ValidationError):
    default_message = "User already exists"


class AuthError(ShopError):
    status_code = 401
    default_message = "Could not validate credentials"


class InvalidCredentials(AuthError):
    # Same message for unknown email and wrong password.
    status_code = 400
    default_message = "Invalid credentials"


class MissingToken(AuthError):
    status_code = 401
    default_message = "Access token required"


class InvalidToken(AuthError):
    status_code = 403
    default_message = "Invalid token"


class NotFoundError(ShopError):
    status_code = 404
    default_message = "Not found"


class ProductNotFound(NotFoundError):
    # Reported as a bad order request.
    status_code = 400

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ConflictError(ShopError):
    status_code = 409
    default_message = "Conflict"


class InsufficientStock(ConflictError):
    status_code = 400

    def __init__(self, product_name, product_id=None):
        self.product_id = product_id
        super().__init__(f"Insufficient stock for {product_name}")


class InternalError(ShopError):
    status_code = 500
    default_message = "Server error"
