"""External API sync — polls the remote readings endpoint and ingests new rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from powerwatch.models.base import utcnow
from powerwatch.services.periodic import PeriodicService
from powerwatch.services.reading_service import IngestStatus, ReadingService

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONSECUTIVE_ERRORS = 10


class SyncTransportError(ConnectionError):
    """Remote fetch failed (timeout, network, HTTP status). Retried next cycle."""


class PayloadShape(str, Enum):
    BARE_ARRAY = "bare_array"
    ENVELOPE = "envelope"  # {"success": ..., "data"|"readings": [...]}
    SINGLE_OBJECT = "single_object"  # one record carrying mac_address
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NormalizedBatch:
    shape: PayloadShape
    records: list[dict[str, Any]]


def classify_payload(payload: Any) -> PayloadShape:
    if isinstance(payload, list):
        return PayloadShape.BARE_ARRAY
    if isinstance(payload, dict):
        if isinstance(payload.get("data"), list) or isinstance(payload.get("readings"), list):
            return PayloadShape.ENVELOPE
        if "mac_address" in payload:
            return PayloadShape.SINGLE_OBJECT
    return PayloadShape.UNKNOWN


def _from_bare_array(payload: list[Any]) -> list[dict[str, Any]]:
    return _records(payload)


def _from_envelope(payload: dict[str, Any]) -> list[dict[str, Any]]:
    if payload.get("success") is False:
        logger.warning("Remote API reported success=false: %s", payload.get("message"))
        return []
    items = payload["data"] if isinstance(payload.get("data"), list) else payload["readings"]
    return _records(items)


def _from_single_object(payload: dict[str, Any]) -> list[dict[str, Any]]:
    return [payload]


def _from_unknown(payload: Any) -> list[dict[str, Any]]:
    logger.warning("Unknown payload format from remote API: %s", type(payload).__name__)
    return []


_EXTRACTORS = {
    PayloadShape.BARE_ARRAY: _from_bare_array,
    PayloadShape.ENVELOPE: _from_envelope,
    PayloadShape.SINGLE_OBJECT: _from_single_object,
    PayloadShape.UNKNOWN: _from_unknown,
}


def normalize_payload(payload: Any) -> NormalizedBatch:
    """Map every payload shape the remote API has produced onto a list of records."""
    shape = classify_payload(payload)
    return NormalizedBatch(shape, _EXTRACTORS[shape](payload))


def _records(items: list[Any]) -> list[dict[str, Any]]:
    """Keep object entries; anything else becomes an empty record and is rejected later."""
    return [item if isinstance(item, dict) else {} for item in items]


class RemoteReadingsClient:
    """Transport for the remote readings endpoint."""

    async def fetch_batch(self, url: str, timeout: float) -> Any:
        """
        GET the endpoint and return the decoded JSON body.

        Returns None when the body is empty or not JSON (a data-shape problem,
        not a transport one).

        Raises:
            SyncTransportError: timeout, connection failure or non-2xx status.
        """
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.get(url, headers={"Accept": "application/json"})
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise SyncTransportError(f"Timeout: external API took longer than {timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise SyncTransportError(
                f"API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except (httpx.HTTPError, OSError) as e:
            raise SyncTransportError(f"Network error: could not reach external API ({e})") from e

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            logger.warning("External API returned a non-JSON body (%d bytes)", len(resp.content))
            return None


@dataclass
class SyncResult:
    shape: PayloadShape = PayloadShape.UNKNOWN
    fetched: int = 0
    stored: int = 0
    duplicates: int = 0
    unregistered: int = 0
    invalid: int = 0
    failed: int = 0


class ExternalSyncPoller(PeriodicService):
    """
    Fetches a batch from the remote API each cycle and stores unseen readings.

    A successful fetch (even an empty one) clears the consecutive error
    counter. After ``max_consecutive_errors`` failed fetches in a row the
    poller stops itself and stays stopped until ``start()`` is called again.
    """

    name = "External API sync"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        api_url: str,
        interval_seconds: float = 30.0,
        timeout_seconds: float = 10.0,
        max_consecutive_errors: int = DEFAULT_MAX_CONSECUTIVE_ERRORS,
        client: RemoteReadingsClient | None = None,
        reading_service: ReadingService | None = None,
    ):
        super().__init__(interval_seconds)
        self._session_factory = session_factory
        self._api_url = api_url
        self._timeout = timeout_seconds
        self._max_errors = max_consecutive_errors
        self._client = client or RemoteReadingsClient()
        self._readings = reading_service or ReadingService()

        self.last_success: datetime | None = None
        self.success_count = 0
        self.error_count = 0
        self.consecutive_errors = 0

    async def start(self) -> None:
        if not self.running:
            self.consecutive_errors = 0
            logger.info("Polling %s every %.0fs", self._api_url, self.interval)
        await super().start()

    def status(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "consecutive_errors": self.consecutive_errors,
            "interval_seconds": self.interval,
            "api_url": self._api_url,
        }

    async def run_cycle(self) -> SyncResult | None:
        try:
            payload = await self._client.fetch_batch(self._api_url, self._timeout)
        except SyncTransportError as e:
            logger.error("%s", e)
            self._record_failure()
            return None

        batch = normalize_payload(payload)
        result = SyncResult(shape=batch.shape, fetched=len(batch.records))
        if batch.records:
            logger.info("Processing %d reading(s) from external API", len(batch.records))

        async with self._session_factory() as db:
            for record in batch.records:
                await self._store_record(db, record, result)

        self.last_success = utcnow()
        self.success_count += 1
        self.consecutive_errors = 0

        if result.stored or result.invalid or result.failed:
            logger.info(
                "Sync done: %d stored, %d duplicate, %d unregistered, %d invalid, %d failed",
                result.stored, result.duplicates, result.unregistered, result.invalid, result.failed,
            )
        return result

    async def _store_record(self, db: AsyncSession, record: dict[str, Any], result: SyncResult) -> None:
        try:
            outcome = await self._readings.ingest_record(db, record)
        except Exception as e:
            result.failed += 1
            logger.error("Error storing reading: %s", e)
            await db.rollback()
            return

        if outcome.status == IngestStatus.STORED:
            result.stored += 1
            logger.debug("Stored reading for %s (%s)", outcome.device.name, record.get("mac_address"))
        elif outcome.status == IngestStatus.DUPLICATE:
            result.duplicates += 1
        elif outcome.status == IngestStatus.UNREGISTERED:
            result.unregistered += 1
            logger.debug("%s. Skipping.", outcome.reason)
        else:
            result.invalid += 1
            logger.warning("Skipping remote record: %s", outcome.reason)

    def _record_failure(self) -> None:
        self.error_count += 1
        self.consecutive_errors += 1
        if self.consecutive_errors >= self._max_errors:
            logger.error(
                "%d consecutive sync errors — stopping %s until restarted",
                self.consecutive_errors, self.name,
            )
            self._halt()
