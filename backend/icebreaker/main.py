"""FastAPI application entrypoint."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from icebreaker.api import ops, radar
from icebreaker.api.errors import install_error_handlers
from icebreaker.core import build_core
from icebreaker.domain.proximity.sweeper import run_expiry_sweeper
from icebreaker.obs import init as obs_init
from icebreaker.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	sweeper = asyncio.create_task(
		run_expiry_sweeper(app.state.core, settings.expiry_sweep_interval_seconds),
		name="expiry-sweeper",
	)
	try:
		yield
	finally:
		sweeper.cancel()
		await asyncio.gather(sweeper, return_exceptions=True)


app = FastAPI(title="Icebreaker Matching Core", lifespan=lifespan)
app.state.core = build_core(config=settings)

obs_init(app)
install_error_handlers(app)

app.include_router(radar.router, tags=["radar"])
app.include_router(ops.router, tags=["ops"])
