"""History store and record gateway backends."""

from backoffice.history.stores.inmemory import InMemoryHistoryStore, InMemoryRecordGateway
from backoffice.history.stores.postgres import PostgresHistoryStore, PostgresRecordGateway

__all__ = [
    "InMemoryHistoryStore",
    "InMemoryRecordGateway",
    "PostgresHistoryStore",
    "PostgresRecordGateway",
]
