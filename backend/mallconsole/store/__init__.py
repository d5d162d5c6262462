from mallconsole.store.document_store import (
    SERVER_TIMESTAMP,
    CollectionRef,
    DocumentStore,
    DocumentStoreError,
    Query,
)

__all__ = ["SERVER_TIMESTAMP", "CollectionRef", "DocumentStore", "DocumentStoreError", "Query"]
