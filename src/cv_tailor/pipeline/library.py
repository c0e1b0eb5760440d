"""CV library: ingestion results persisted with their attachments."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Callable

from cv_tailor.pipeline.orchestrator import GenerationPipeline
from cv_tailor.pipeline.retry import RetryState
from cv_tailor.storage.attachment_store import AttachmentStore
from cv_tailor.storage.document_store import DocumentStore, StoredCV

logger = logging.getLogger(__name__)


class CVLibrary:
    """Connects the generation pipeline to the document and attachment stores.

    A record is written only after ingestion succeeds, so a failed generation
    never leaves a partial document behind. Attachment failures are logged
    and never block document operations.
    """

    def __init__(
        self,
        pipeline: GenerationPipeline,
        documents: DocumentStore,
        attachments: AttachmentStore | None = None,
    ):
        self.pipeline = pipeline
        self.documents = documents
        self.attachments = attachments

    async def ingest(
        self,
        title: str,
        raw_text: str,
        *,
        api_key: str,
        model: str,
        locale: str = "en",
        photo: bytes | None = None,
        editing_id: str | None = None,
        on_attempt: Callable[[RetryState], None] | None = None,
    ) -> StoredCV:
        """Format raw CV text and store it, as a new record or over ``editing_id``."""
        formatted = await self.pipeline.ingest_cv(
            raw_text, api_key, model, locale, on_attempt=on_attempt
        )

        existing = self.documents.get(editing_id) if editing_id else None
        record = StoredCV(
            title=title,
            raw_text=raw_text,
            formatted_cv=formatted,
            profile_photo_id=existing.profile_photo_id if existing else None,
        )
        if existing is not None:
            record = record.model_copy(
                update={"id": existing.id, "created_at": existing.created_at}
            )

        if photo is not None:
            photo_id = self._store_photo(photo, record.id)
            if photo_id is not None:
                if existing is not None and existing.profile_photo_id:
                    self._delete_photo(existing.profile_photo_id)
                record = record.model_copy(update={"profile_photo_id": photo_id})

        if existing is not None:
            record = self.documents.update(existing.id, record)
        else:
            record = self.documents.add(record)
        logger.info("Stored CV %s (%s)", record.id, record.title)
        return record

    def _store_photo(self, photo: bytes, owner_id: str) -> str | None:
        if self.attachments is None:
            return None
        try:
            return self.attachments.store(photo, owner_id)
        except sqlite3.Error:
            logger.warning("Failed to store photo for CV %s", owner_id, exc_info=True)
            return None

    def _delete_photo(self, photo_id: str) -> None:
        try:
            self.attachments.delete(photo_id)
        except sqlite3.Error:
            logger.warning("Failed to delete replaced photo %s", photo_id, exc_info=True)

    def photo_for(self, record: StoredCV) -> bytes | None:
        """The record's photo, or None when missing or unreadable (show a placeholder)."""
        if not record.profile_photo_id or self.attachments is None:
            return None
        try:
            return self.attachments.get(record.profile_photo_id)
        except sqlite3.Error:
            logger.warning("Failed to load photo %s", record.profile_photo_id, exc_info=True)
            return None

    def rename(self, cv_id: str, title: str) -> StoredCV | None:
        record = self.documents.get(cv_id)
        if record is None:
            return None
        updated = record.model_copy(update={"title": title, "updated_at": datetime.now()})
        return self.documents.update(cv_id, updated)

    def delete(self, cv_id: str) -> None:
        self.documents.delete(cv_id)
        if self.attachments is None:
            return
        try:
            self.attachments.delete_all_for_owner(cv_id)
        except sqlite3.Error:
            logger.warning("Failed to delete attachments for CV %s", cv_id, exc_info=True)

    def list(self) -> list[StoredCV]:
        return self.documents.list()
