from .retry import DB_RETRY_EXCEPTIONS, retry_db_operation, retry_with_backoff

__all__ = [
    "DB_RETRY_EXCEPTIONS",
    "retry_db_operation",
    "retry_with_backoff",
]
