"""HTTP middleware."""
from expense_claims.middleware.logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
