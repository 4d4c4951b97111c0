"""Directory collaborator interface and the bundled implementations."""

from .base import DirectoryClient, DirectorySession, Entity, LinkOperation, transaction
from .file_store import FileDirectory
from .memory import InMemoryDirectory, InMemorySession

__all__ = [
    "DirectoryClient",
    "DirectorySession",
    "Entity",
    "FileDirectory",
    "InMemoryDirectory",
    "InMemorySession",
    "LinkOperation",
    "transaction",
]
