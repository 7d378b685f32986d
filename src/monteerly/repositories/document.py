"""Repository for Document rows."""

from sqlmodel import col, select

from monteerly.models import Document
from monteerly.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Data access for documents, keyed by (collection, id)."""

    model = Document

    async def get_document(self, collection: str, document_id: str) -> Document | None:
        return await self.get((collection, document_id))

    async def list_collection(
        self,
        collection: str,
        owner_id: str | None = None,
    ) -> list[Document]:
        """List documents of a collection, optionally only those of one owner.

        Rows come back in insertion order (oldest first); callers sort.
        """
        query = select(Document).where(Document.collection == collection)
        if owner_id is not None:
            query = query.where(Document.owner_id == owner_id)
        query = query.order_by(col(Document.created_at).asc())
        result = await self.session.execute(query)
        return list(result.scalars().all())
