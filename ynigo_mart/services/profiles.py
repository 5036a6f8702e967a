"""Creation of new profiles with a normalised photo."""

from __future__ import annotations

import logging

from ynigo_mart.errors import SubmissionInProgressError, ValidationError
from ynigo_mart.imgproc.normalize import ImageNormalizer
from ynigo_mart.metrics.prometheus_exporter import profiles_created_total
from ynigo_mart.store.records import ZERO_BALANCE, UserRecord
from ynigo_mart.store.repository import ProfileStore

logger = logging.getLogger(__name__)


class ProfileCreator:
    """Validates input, builds the thumbnail and appends the new row."""

    def __init__(
        self,
        store: ProfileStore,
        normalizer: ImageNormalizer,
        *,
        max_upload_bytes: int | None = None,
    ) -> None:
        self._store = store
        self._normalizer = normalizer
        self._max_upload_bytes = max_upload_bytes
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def create(self, name: str | None, image_bytes: bytes | None) -> UserRecord:
        """Append a profile with a zero balance and return it."""

        if self._in_flight:
            raise SubmissionInProgressError("A profile is already being added, please wait.")

        self._in_flight = True
        try:
            return await self._create(name, image_bytes)
        finally:
            self._in_flight = False

    async def _create(self, name: str | None, image_bytes: bytes | None) -> UserRecord:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Please enter a name.")
        if not image_bytes:
            raise ValidationError("Please select or take a profile picture.")
        if self._max_upload_bytes is not None and len(image_bytes) > self._max_upload_bytes:
            raise ValidationError("That picture is too large, please choose a smaller one.")

        image = self._normalizer.normalize(image_bytes)

        await self._store.refresh()
        record = UserRecord(
            id=self._store.next_id(),
            name=clean_name,
            image=image,
            balance=ZERO_BALANCE,
        )
        await self._store.append(record)
        profiles_created_total.inc()
        logger.info("Added profile %s (%s).", record.id, record.name)

        await self._store.refresh()
        return self._store.get(record.id) or record
