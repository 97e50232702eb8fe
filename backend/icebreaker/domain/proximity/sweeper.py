"""Background sweeper that hides users who stopped broadcasting."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from icebreaker.obs import metrics as obs_metrics

if TYPE_CHECKING:
    from icebreaker.core import MatchingCore

logger = logging.getLogger(__name__)


async def run_expiry_sweeper(core: "MatchingCore", interval_s: float = 30.0) -> None:
    """Periodically hide stale positions and purge users gone past the purge window."""
    interval = max(0.01, float(interval_s))
    while True:
        await asyncio.sleep(interval)
        try:
            await sweep_once(core)
        except asyncio.CancelledError:
            raise
        except Exception:  # pragma: no cover - keep the loop alive, surface in logs
            logger.exception("expiry sweeper iteration failed")


async def sweep_once(core: "MatchingCore") -> int:
    """Run one pass; returns how many users were newly hidden."""
    expired = await core.positions.expire_stale()
    if expired:
        logger.info("expiry sweeper hid %s stale users", len(expired))
        obs_metrics.EXPIRY_SWEEPER_TRIMS.inc(len(expired))
    purged = await core.purge_expired()
    if purged:
        logger.info("expiry sweeper purged %s users", len(purged))
        obs_metrics.EXPIRY_SWEEPER_PURGES.inc(len(purged))
    return len(expired)


__all__ = ["run_expiry_sweeper", "sweep_once"]
