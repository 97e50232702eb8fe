"""Operational endpoints: liveness and Prometheus scrape."""

from __future__ import annotations

from fastapi import APIRouter, Header, HTTPException, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from icebreaker.obs import metrics as obs_metrics
from icebreaker.settings import settings

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    core = request.app.state.core
    return {
        "ok": True,
        "service": settings.service_name,
        "commit": settings.git_commit,
        "users": len(core.positions),
        "visible": core.positions.visible_count(),
        "cached_pairs": len(core.cache),
    }


@router.get("/metrics")
async def metrics(request: Request, x_admin_token: str | None = Header(default=None)):
    if settings.obs_admin_token and x_admin_token != settings.obs_admin_token:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "forbidden")
    obs_metrics.VISIBLE_USERS.set(float(request.app.state.core.positions.visible_count()))
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
