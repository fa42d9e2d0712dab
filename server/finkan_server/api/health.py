"""Health check API routes"""

import time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..config import get_engine
from ..core.database import get_connection

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check(engine: Engine = Depends(get_engine)) -> dict[str, Any]:
    """Health check endpoint (no auth required).

    Returns:
        dict containing health status and database round-trip time.

    Raises:
        HTTPException: 503 if the database cannot be reached.
    """
    try:
        start = time.time()
        with get_connection(engine) as conn:
            conn.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        return {"status": "healthy", "database": "ok", "db_latency_ms": round(latency_ms, 1)}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Unhealthy: {str(e)}")
