"""Token reaper — deletes expired auth tokens in the background.

Expired tokens are already useless (TokenStore.resolve filters on
expires_at), so this only keeps the auth_tokens table from growing
forever. Runs as a long-lived task in the FastAPI lifespan; each sweep
gets its own DB session.

Usage:
    reaper = TokenReaper(interval=3600)
    asyncio.create_task(reaper.run_loop())
"""

import asyncio

import structlog

from declutter.auth.tokens import TokenStore
from declutter.db.engine import async_session_factory

logger = structlog.get_logger()


class TokenReaper:
    def __init__(self, interval: float = 3600.0, session_factory=None):
        self.interval = interval
        self.session_factory = session_factory or async_session_factory
        self._running = False

    async def sweep(self) -> int:
        """Delete expired tokens once. Returns the number removed."""
        async with self.session_factory() as db:
            purged = await TokenStore(db).purge_expired()
        if purged:
            logger.info("tokens.purged", count=purged)
        return purged

    async def run_loop(self) -> None:
        """Sweep every `interval` seconds until stop() is called."""
        self._running = True
        logger.info("token_reaper.started", interval=self.interval)

        while self._running:
            try:
                await self.sweep()
            except Exception:
                logger.exception("token_reaper.error")
            await asyncio.sleep(self.interval)

    def stop(self) -> None:
        """Signal the reaper to stop."""
        self._running = False
        logger.info("token_reaper.stopping")
