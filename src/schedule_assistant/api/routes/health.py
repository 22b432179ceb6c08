"""Liveness routes."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from schedule_assistant.normalizers import utc_now_iso

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint."""
    return {
        "ok": True,
        "timestamp": utc_now_iso(),
        "uptime": time.monotonic() - request.app.state.started_at,
    }
