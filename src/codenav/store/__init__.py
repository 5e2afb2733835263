"""Document store contract and SQLite implementation."""

from codenav.store.database import Database
from codenav.store.document_store import (
    Document,
    DocumentStore,
    SearchHit,
    SqliteDocumentStore,
    remove_store_files,
)

__all__ = [
    "Database",
    "Document",
    "DocumentStore",
    "SearchHit",
    "SqliteDocumentStore",
    "remove_store_files",
]
