"""Live record views over WebSocket.

The client connects with its session token and receives the full ordered
view with aggregates on every snapshot until it disconnects. A single-record
view sends just that record, or null once it is gone. A failed live query
sends one error frame and closes the socket.
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from monteerly.api.dependencies import SessionProviderDep, StoreDep
from monteerly.core.exceptions import NotAuthenticated, SyncError
from monteerly.core.logging import get_logger
from monteerly.models import Brief, Collection, Project, Record
from monteerly.schemas.brief import BriefRead
from monteerly.schemas.dashboard import AggregatesRead
from monteerly.schemas.project import ProjectRead
from monteerly.services import SessionProvider
from monteerly.store import DocumentStore
from monteerly.sync import EntitySyncEngine, SyncView, spec_for

logger = get_logger(__name__)

router = APIRouter(prefix="/live", tags=["live"])

LIVE_COLLECTIONS = frozenset({Collection.PROJECTS.value, Collection.BRIEFS.value})


def _read_model(record: Record) -> Any:
    if isinstance(record, Project):
        return ProjectRead.from_record(record)
    if isinstance(record, Brief):
        return BriefRead.from_record(record)
    return None


def snapshot_frame(view: SyncView) -> dict[str, Any]:
    records: list[dict[str, Any]] = []
    for record in view.records:
        read = _read_model(record)
        if read is not None:
            records.append(read.model_dump(mode="json", by_alias=True))
    return {
        "type": "snapshot",
        "records": records,
        "aggregates": AggregatesRead.from_aggregates(view.aggregates).model_dump(mode="json"),
    }


def record_frame(view: SyncView) -> dict[str, Any]:
    """One record, or None when it does not exist (or is not the caller's)."""
    read = _read_model(view.records[0]) if view.records else None
    return {
        "type": "snapshot",
        "record": read.model_dump(mode="json", by_alias=True) if read is not None else None,
    }


def error_frame(error: SyncError) -> dict[str, Any]:
    return {"type": "error", "error": type(error).__name__, "detail": error.message}


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def _stream(
    websocket: WebSocket,
    store: DocumentStore,
    provider: SessionProvider,
    token: str,
    collection: str,
    frame: Callable[[SyncView], dict[str, Any]],
    filter_predicate: Mapping[str, Any] | None = None,
) -> None:
    """Send `frame(view)` for every snapshot of the caller's live query."""
    try:
        identity = await provider.restore(token)
    except NotAuthenticated as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    if collection not in LIVE_COLLECTIONS:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown collection")
        return

    await websocket.accept()
    updates: asyncio.Queue[SyncView | SyncError] = asyncio.Queue()
    engine = EntitySyncEngine(store)
    engine.add_observer(updates.put_nowait)
    engine.add_error_observer(updates.put_nowait)
    engine.open(identity.uid, spec_for(collection).collection, filter_predicate)
    logger.info("Live view connected", collection=collection)

    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            next_update = asyncio.create_task(updates.get())
            done, _ = await asyncio.wait(
                {next_update, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if next_update not in done:
                next_update.cancel()
                break

            update = next_update.result()
            if isinstance(update, SyncError):
                await websocket.send_json(error_frame(update))
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
                break
            await websocket.send_json(frame(update))
    except WebSocketDisconnect:
        pass
    finally:
        engine.close()
        disconnected.cancel()
        logger.info("Live view closed", collection=collection)


@router.websocket("/{collection}")
async def live_view(
    websocket: WebSocket,
    collection: str,
    store: StoreDep,
    provider: SessionProviderDep,
    token: str = "",
) -> None:
    await _stream(websocket, store, provider, token, collection, snapshot_frame)


@router.websocket("/{collection}/{record_id}")
async def live_record(
    websocket: WebSocket,
    collection: str,
    record_id: str,
    store: StoreDep,
    provider: SessionProviderDep,
    token: str = "",
) -> None:
    """Live view of a single record, as the project detail page shows it."""
    await _stream(
        websocket, store, provider, token, collection, record_frame, {"id": record_id}
    )
