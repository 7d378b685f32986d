"""Repository layer - data access abstraction."""

from monteerly.repositories.base import BaseRepository
from monteerly.repositories.credential import CredentialRepository
from monteerly.repositories.document import DocumentRepository

__all__ = [
    "BaseRepository",
    "CredentialRepository",
    "DocumentRepository",
]
