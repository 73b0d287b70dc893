"""
app/routers/horoscopes.py
Endpoints:
  GET /api/daily-horoscopes         → all twelve signs for today
  GET /api/daily-horoscopes/{sign}  → one sign for today

Never waits on astrosage. A cold or stale key answers with whatever is cached
plus "loading": true while the refresh runs in the background.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.cache import EntryState
from app.core.config import SIGNS
from app.core.keys import horoscopes_key, sign_key

router = APIRouter(prefix="/api", tags=["horoscopes"])


def _failure(entry) -> dict:
    if entry is not None and entry.state is EntryState.FAILED:
        return {"failed": True, "error": entry.error}
    return {"failed": False}


@router.get("/daily-horoscopes")
async def get_daily_horoscopes(request: Request):
    state = request.app.state
    key   = horoscopes_key(state.clock.today())

    last = state.orchestrator.entry(key)
    agg, loading = state.orchestrator.get(key)

    records = agg.records if agg else {}
    body = {sign: records.get(sign) for sign in SIGNS}
    body["loading"]   = loading
    body["timestamp"] = agg.timestamp if agg else None
    body.update(_failure(last))
    return body


@router.get("/daily-horoscopes/{sign}")
async def get_sign_horoscope(sign: str, request: Request):
    sign = sign.lower()
    if sign not in SIGNS:
        return JSONResponse(
            status_code=404,
            content={"error": f"Unknown sign '{sign}'. Use one of: {', '.join(SIGNS)}"},
        )

    state = request.app.state
    key   = sign_key(state.clock.today(), sign)

    last = state.orchestrator.entry(key)
    record, loading = state.orchestrator.get(key)
    return {"sign": sign, "horoscope": record, "loading": loading, **_failure(last)}
