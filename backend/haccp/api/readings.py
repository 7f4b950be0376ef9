import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, WebSocket

from ..models.user import User
from ..schemas.common import ReadingBatch, ReadingIn, ReadingOut
from ..services import notifier
from ..services.channels import get_chat_config, get_smtp_config
from ..services.readings import PendingNotification, submit_reading
from ..services.repository import DuplicateReading, HaccpRepository
from .deps import get_current_user, get_repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/readings", tags=["readings"])
WS_CLIENTS = set()


def _schedule_dispatch(pending: PendingNotification, repo: HaccpRepository, tasks: BackgroundTasks):
    if pending.recipients.empty:
        logger.info("No subscribers for alert on reading %s", pending.notice.reading_id)
        return
    # Runs after the response has been sent
    tasks.add_task(
        notifier.dispatch,
        pending.notice,
        pending.recipients,
        get_smtp_config(repo.db),
        get_chat_config(repo.db),
    )


async def _process_reading(payload: ReadingIn, repo: HaccpRepository, tasks: BackgroundTasks):
    try:
        reading, pending = submit_reading(repo, payload)
    except DuplicateReading:
        raise HTTPException(status_code=409, detail=f"Reading {payload.id} already recorded")

    if pending is not None:
        notice = pending.notice
        await broadcast(
            {
                "type": "alert",
                "data": {
                    "reading_id": notice.reading_id,
                    "facility_id": notice.facility_id,
                    "facility_name": notice.facility_name,
                    "target_name": notice.target_name,
                    "checkpoint_name": notice.checkpoint_name,
                    "value": notice.value,
                    "min": notice.min,
                    "max": notice.max,
                    "timestamp": notice.timestamp.isoformat(),
                },
            }
        )
        _schedule_dispatch(pending, repo, tasks)

    await broadcast(
        {
            "type": "reading",
            "data": {
                "id": reading.id,
                "facility_id": reading.facility_id,
                "target_id": reading.target_id,
                "checkpoint_name": reading.checkpoint_name,
                "value": reading.value,
                "timestamp": reading.timestamp.isoformat(),
            },
        }
    )
    return reading

@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
    await websocket.accept(); WS_CLIENTS.add(websocket)
    try:
        while True: await websocket.receive_text()
    except Exception:
        WS_CLIENTS.discard(websocket)

async def broadcast(message: dict):
    dead = []
    for ws in list(WS_CLIENTS):
        try: await ws.send_json(message)
        except Exception: dead.append(ws)
    for d in dead: WS_CLIENTS.discard(d)

@router.get("/", response_model=List[ReadingOut])
def list_readings(limit: int = 1000, repo: HaccpRepository = Depends(get_repo), _: User = Depends(get_current_user)):
    return repo.list_readings(max(1, min(limit, 1000)))

@router.post("/", response_model=ReadingOut)
async def ingest(payload: ReadingIn, tasks: BackgroundTasks, repo: HaccpRepository = Depends(get_repo),
                 _: User = Depends(get_current_user)):
    return await _process_reading(payload, repo, tasks)


@router.post("/batch", response_model=List[ReadingOut])
async def ingest_batch(batch: ReadingBatch, tasks: BackgroundTasks, repo: HaccpRepository = Depends(get_repo),
                       _: User = Depends(get_current_user)):
    ids = [item.id for item in batch.items if item.id]
    repeated = sorted({i for i in ids if ids.count(i) > 1} | set(repo.existing_reading_ids(ids)))
    if repeated:
        # Rejected before any write so no alert is left without its dispatch
        raise HTTPException(status_code=409, detail=f"Duplicate or already recorded readings: {', '.join(repeated)}")
    results = []
    for item in batch.items:
        reading = await _process_reading(item, repo, tasks)
        results.append(reading)
    return results
