"""Domain errors raised by the product service and mapped to HTTP statuses by the API layer."""


class InvalidProductNameError(ValueError):
    """Raised when a product name is blank after trimming."""

    def __init__(self, message: str = "product name is required"):
        super().__init__(message)


class ProductNotFoundError(LookupError):
    """Raised when a product id does not reference a stored product."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__("product not found")
