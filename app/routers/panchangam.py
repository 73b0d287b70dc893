"""
app/routers/panchangam.py
Endpoints:
  GET /api/daily-panchangam?date=YYYY-MM-DD

Cold key      → {"loading": true}
Cached key    → the record plus "loading" (true while a refresh runs)
Cold failure  → empty-shaped record, "failed": true and the error text
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from app.core.cache import EntryState
from app.core.keys import almanac_key
from app.scrapers.panchangam import empty_panchangam

router = APIRouter(prefix="/api", tags=["panchangam"])


@router.get("/daily-panchangam")
async def get_daily_panchangam(request: Request, date: Optional[str] = Query(None)):
    if not date:
        return JSONResponse(
            status_code=400,
            content={"error": "Date is required in query parameter (e.g., ?date=2024-01-22)"},
        )
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid date '{date}', expected YYYY-MM-DD (e.g., ?date=2024-01-22)"},
        )

    orchestrator = request.app.state.orchestrator
    key  = almanac_key(date)
    last = orchestrator.entry(key)
    failed = last is not None and last.state is EntryState.FAILED

    record, loading = orchestrator.get(key)

    if record is not None:
        body = {**record, "loading": loading, "failed": failed}
    elif failed:
        body = {**empty_panchangam(), "loading": loading, "failed": True}
    else:
        return {"loading": True, "failed": False}

    if failed:
        body["error"] = last.error
    return body
