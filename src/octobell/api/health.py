"""Liveness and readiness checks."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_session

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request, session: AsyncSession = Depends(get_session)) -> dict:
    """Ready while the database answers and both queues take new work."""
    queues = {
        worker.name: {"accepting": worker.accepting, "pending": worker.pending}
        for worker in (request.app.state.event_worker, request.app.state.command_worker)
    }
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {"status": "not ready", "database": str(e), "queues": queues}

    accepting = all(queue["accepting"] for queue in queues.values())
    return {
        "status": "ready" if accepting else "not ready",
        "database": "connected",
        "queues": queues,
    }
