"""
ML Background Worker
Periodically re-evaluates the models and retrains them when performance drops
"""

import asyncio
import logging
import time
from typing import Optional

from maritime_ai.services.ai_service import AIService

logger = logging.getLogger(__name__)

class MLWorker:
    def __init__(self, service: AIService, interval_hours: Optional[float] = None):
        self.service = service
        hours = service.settings.model_update_interval if interval_hours is None else interval_hours
        self.processing_interval = hours * 3600
        self.is_running = False
        self.last_check: Optional[float] = None

    async def start(self):
        if self.is_running:
            logger.warning("ML worker already running")
            return

        self.is_running = True
        logger.info(f"Starting ML background worker, interval {self.processing_interval:.0f}s")

        try:
            while self.is_running:
                await asyncio.sleep(self.processing_interval)
                if not self.is_running:
                    break

                start_time = time.time()
                await self.run_once()
                logger.debug(f"ML worker cycle took {time.time() - start_time:.1f}s")

        except asyncio.CancelledError:
            logger.info("ML worker stopped")
        finally:
            self.is_running = False

    async def run_once(self) -> bool:
        self.last_check = time.time()
        try:
            return await self.service.check_and_auto_train()
        except Exception as e:
            logger.error(f"ML worker auto-training failed: {e}", exc_info=True)
            return False

    async def stop(self):
        self.is_running = False
        logger.info("Stopping ML worker")
