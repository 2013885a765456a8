"""
FormBridge - Submission Service (Business Logic Orchestrator)
==============================================================

What:  Runs one form submission end to end against the content store.
How:   Composes a SubmissionVariant (what to build) with a ContentStore (where
       to put it). Holds no per-request state.
Who:   Called by the POST /submit route handler.

Orchestration Flow:
    ┌──────────┐   ┌──────────┐   ┌──────────────┐   ┌────────────┐   ┌──────────────┐
    │ Validate │──▶│ Prefetch │──▶│ Upload image │──▶│ Build      │──▶│ Read, append │
    │ fields   │   │ (catalog)│   │ (optional)   │   │ record     │   │ & write list │
    └──────────┘   └──────────┘   └──────────────┘   └────────────┘   └──────────────┘
                                                                       ↺ on sha conflict

    Validation failure → ValidationError (400), nothing written.
    Any later failure  → propagates to the global handlers (500). An image
                         uploaded before the failure stays in the repository.

Conflict handling:
    The record-list write carries the sha of the read made immediately before
    it. A RemoteWriteConflictError re-runs read → append → write with tenacity,
    up to ``max_attempts`` times. The record itself (id, timestamps) is built
    once and reused across attempts.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from formbridge.exceptions import RemoteWriteConflictError, ValidationError
from formbridge.services.content_store import ContentStore, WriteResult
from formbridge.services.record_builder import build_image_path
from formbridge.services.record_list import dump_records, load_records
from formbridge.services.variants import SubmissionVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded attachment, fully read into memory."""

    filename: str
    content: bytes
    content_type: Optional[str] = None


class SubmissionService:
    """
    Business logic layer for form submissions.

    Args:
        store:        Where images and the record list live
        variant:      Which form this deployment serves
        max_attempts: Record-list write attempts on sha conflict (1 = no retry)
        min_wait:     Initial backoff between attempts, seconds
        max_wait:     Backoff ceiling, seconds
    """

    def __init__(
        self,
        store: ContentStore,
        variant: SubmissionVariant,
        max_attempts: int = 3,
        min_wait: float = 0.5,
        max_wait: float = 4.0,
    ):
        self.store = store
        self.variant = variant
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait

    async def submit(
        self,
        fields: Mapping[str, str],
        image: Optional[ImageUpload] = None,
    ) -> BaseModel:
        """
        Validate, upload the image (if any) and append the record.

        Returns:
            The variant's success payload (PriceSubmitResponse or CatalogSubmitResponse)

        Raises:
            ValidationError:          A required field is missing or empty (no writes made)
            RemoteNotFoundError:      The record list is absent and the variant requires it
            RemoteWriteConflictError: The record list kept changing for every attempt
            RemoteStoreError:         Any other content store failure
        """
        missing = self.variant.missing_fields(fields)
        if missing:
            raise ValidationError(missing=missing)

        records_path = self.variant.records_path

        if self.variant.prefetch_records:
            # Surfaces auth/network problems before an image is committed.
            # The list itself is re-read right before the write.
            await self.store.read(records_path, missing_ok=True)

        image_path: Optional[str] = None
        if image is not None:
            image_path = await self.upload_image(fields, image)

        record = self.variant.build_record(fields, image_path)
        await self.append_record(record, self.variant.records_commit_message(fields))

        logger.info(
            "Submission stored in %s (variant=%s, image=%s)",
            records_path,
            self.variant.name,
            image_path or "none",
        )
        return self.variant.success_payload(record, image_path)

    async def upload_image(self, fields: Mapping[str, str], image: ImageUpload) -> str:
        """Commit the attachment as a new file and return its repository path."""
        image_path = build_image_path(
            directory=self.variant.images_dir,
            subject=self.variant.image_subject(fields),
            filename=image.filename,
            fallback=self.variant.slug_fallback,
        )
        await self.store.write(
            image_path,
            image.content,
            self.variant.image_commit_message(fields),
        )
        logger.info("Image uploaded: %s (%d bytes)", image_path, len(image.content))
        return image_path

    async def append_record(self, record: BaseModel, message: str) -> WriteResult:
        """
        Append one record to the record list with a conditional write.

        Each attempt reads the list and its sha, appends, and writes with that
        sha. Only RemoteWriteConflictError is retried.
        """
        path = self.variant.records_path
        entry = record.model_dump(by_alias=True)

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RemoteWriteConflictError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                multiplier=self.min_wait,
                max=self.max_wait,
                jitter=self.min_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                current = await self.store.read(
                    path, missing_ok=self.variant.missing_records_ok
                )
                records = load_records(current.content if current else None, path)
                records.append(entry)
                result = await self.store.write(
                    path,
                    dump_records(records),
                    message,
                    sha=current.sha if current else None,
                )
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "Record list %s written on attempt %d",
                        path,
                        attempt.retry_state.attempt_number,
                    )
        return result
