"""
Scheduling service for automated suspicious activity detection
"""
import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from resolve.config import settings
from resolve.database import supabase_manager
from resolve.logging_config import logger
from resolve.store import SupabaseStore


async def _detect_with_service_client() -> None:
    client = await supabase_manager.get_service_client()
    await SupabaseStore(client).detect_suspicious_activity()


class DetectionScheduler:
    """Service for running anomaly detection on a timer"""

    def __init__(
        self,
        detect: Optional[Callable[[], Awaitable[None]]] = None,
        interval: Optional[int] = None,
    ):
        self.detect = detect or _detect_with_service_client
        self.interval = settings.DETECTION_INTERVAL_SECONDS if interval is None else interval
        self.is_running = False
        self.last_run: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    async def run_detection(self, detect: Optional[Callable[[], Awaitable[None]]] = None) -> bool:
        """Run one detection pass. Returns False if one was already running."""
        if self.is_running:
            logger.warning("Detection already in progress, skipping run")
            return False

        self.is_running = True
        self.last_run = datetime.now(timezone.utc)

        try:
            logger.info("Starting suspicious activity detection")
            await (detect or self.detect)()
            self.last_error = None
            logger.info("Detection completed")

        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Error in detection: {str(e)}")
        finally:
            self.is_running = False

        return True

    async def run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.run_detection()

    def start(self) -> None:
        if self.interval <= 0:
            logger.info("Scheduled detection disabled")
            return
        if self._task is None:
            self._task = asyncio.create_task(self.run_forever(), name="detection-scheduler")
            logger.info(f"Detection scheduled every {self.interval} seconds")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def get_status(self) -> dict:
        """Get current scheduler status"""
        return {
            "is_running": self.is_running,
            "scheduled": self._task is not None,
            "interval_seconds": self.interval,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_error": self.last_error,
        }


# Global scheduler instance
scheduler = DetectionScheduler()
