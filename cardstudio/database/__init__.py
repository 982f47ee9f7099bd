from .connection import get_db, init_db, transport_errors, with_retry

__all__ = ["get_db", "init_db", "transport_errors", "with_retry"]
