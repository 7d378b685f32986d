"""Document store dependency."""

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from monteerly.store import DocumentStore


def get_document_store(connection: HTTPConnection) -> DocumentStore:
    """The app-wide store created in create_app(). Works for HTTP and WebSocket."""
    return connection.app.state.store  # type: ignore[no-any-return]


StoreDep = Annotated[DocumentStore, Depends(get_document_store)]
