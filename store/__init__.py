from store.document_store import (
    DocumentStore,
    JsonFileStore,
    MemoryStore,
    StoreError,
    Subscription,
    WriteResult,
)
from store.repository import EventRepository
from store.auth import AuthService, StaticAuth

__all__ = [
    "DocumentStore",
    "JsonFileStore",
    "MemoryStore",
    "StoreError",
    "Subscription",
    "WriteResult",
    "EventRepository",
    "AuthService",
    "StaticAuth",
]
