from fastapi import APIRouter, Depends, HTTPException
from typing import Annotated
from pydantic import BaseModel
from datetime import datetime
from helpers.jwt_token import get_current_user
from helpers.quiet_hour_store import QuietHourStore
from helpers.time_window import as_utc
from models.user import User


quiet_hours_router = APIRouter()


class CreateQuietHourRequest(BaseModel):
    start_time: datetime
    end_time: datetime


def get_quiet_hour_store() -> QuietHourStore:
    return QuietHourStore()


def serialize(block):
    return {
        "id": block.id,
        "start_time": block.start_time.isoformat() if block.start_time else None,
        "end_time": block.end_time.isoformat() if block.end_time else None,
        "notified": block.notified,
    }


@quiet_hours_router.post("/quiet-hours")
async def create_quiet_hour(
    req: CreateQuietHourRequest,
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[QuietHourStore, Depends(get_quiet_hour_store)],
):
    start_time, end_time = as_utc(req.start_time), as_utc(req.end_time)
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")
    try:
        await store.sweep_expired(user.id)
        block = await store.create(user.id, start_time, end_time)
        return {
            "success": True,
            "detail": "Quiet hour block added",
            "data": serialize(block),
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to add quiet hour: {str(e)}")


@quiet_hours_router.get("/quiet-hours")
async def list_quiet_hours(
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[QuietHourStore, Depends(get_quiet_hour_store)],
):
    try:
        await store.sweep_expired(user.id)
        blocks = await store.list_for_user(user.id)
        return [serialize(b) for b in blocks]
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch quiet hours: {str(e)}")


@quiet_hours_router.delete("/quiet-hours/{quiet_hour_id}")
async def delete_quiet_hour(
    quiet_hour_id: int,
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[QuietHourStore, Depends(get_quiet_hour_store)],
):
    try:
        deleted = await store.delete(user.id, quiet_hour_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="Quiet hour not found")
        await store.sweep_expired(user.id)
        return {"success": True, "detail": "Quiet hour deleted"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete quiet hour: {str(e)}")
