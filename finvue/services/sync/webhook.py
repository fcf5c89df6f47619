"""
Webhook Sync

POSTs the snapshot as JSON to a web app endpoint (e.g. a Google Apps
Script deployment bound to the organization's sheet).

Transient network failures are retried with exponential backoff.
"""

import asyncio
from typing import Optional

import requests
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finvue.config import SyncSettings, get_settings
from finvue.models.ledger import AppState
from finvue.services.sync.interface import RemoteSyncInterface, build_sync_payload


logger = structlog.get_logger()


class WebhookSyncService(RemoteSyncInterface):

    name = "webhook_sync"

    def __init__(
        self,
        settings: Optional[SyncSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().sync
        self._session = session or requests.Session()

    def _post(self, url: str, payload: dict) -> requests.Response:
        @retry(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            reraise=True,
        )
        def send() -> requests.Response:
            response = self._session.post(
                url,
                json=payload,
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
            return response

        return send()

    async def push(self, url: str, state: AppState) -> bool:
        payload = build_sync_payload(state)
        try:
            await asyncio.to_thread(self._post, url, payload)
        except requests.RequestException as e:
            logger.error("webhook_sync_failed", url=url, error=str(e))
            return False

        logger.info(
            "webhook_sync_pushed",
            url=url,
            transactions=len(payload["transactions"]),
        )
        return True
