from .error_handler import setup_product_error_handling

__all__ = ["setup_product_error_handling"]
