from src.services import (
    account_service,
    auth_gate,
    query_engine,
    stats_service,
    task_service,
)


__all__ = [
    "account_service",
    "auth_gate",
    "query_engine",
    "stats_service",
    "task_service",
]
