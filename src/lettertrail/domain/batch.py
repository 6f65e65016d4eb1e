"""Batch ingestion pipeline.

Turns a set of source files into reviewable batch items, runs one extraction
per item concurrently, and commits the completed items as creation drafts.

    expand -> process_all -> edit_field* -> commit -> DocumentStore.create_batch
"""

import asyncio
import logging
import mimetypes
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path

from ..ports.extraction import ExtractionPort
from ..ports.rasterizer import RasterizerPort
from .errors import ExtractionFailure, ValidationError
from .images import encode_data_url
from .models import (
    FIELD_NAMES,
    BatchItem,
    BatchSummary,
    CommonFields,
    DocumentDraft,
    IntakeMethod,
    ProcessingState,
)

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tif", ".tiff"}
PDF_SUFFIXES = {".pdf"}

ItemCallback = Callable[[BatchItem], None]


def new_item_id() -> str:
    return uuid.uuid4().hex


def _image_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "image/jpeg"


def merge_result(items: Iterable[BatchItem], result: BatchItem) -> list[BatchItem]:
    """Merge ``result`` into ``items`` by id.

    Items that already reached Complete or Failed are never overwritten, so
    re-applying a result is a no-op and arrival order does not matter.
    """
    merged = []
    for item in items:
        if item.id == result.id and not item.processing_state.is_terminal:
            merged.append(result)
        else:
            merged.append(item)
    return merged


def edit_field(items: Iterable[BatchItem], item_id: str, field: str, value: str) -> list[BatchItem]:
    """Set one extracted field of a Complete item."""
    if field not in FIELD_NAMES:
        raise ValidationError(f"Unknown field: {field}")

    edited = []
    for item in items:
        if item.id == item_id and item.processing_state == ProcessingState.COMPLETE:
            fields = replace(item.extracted_fields, **{field: value})
            item = replace(item, extracted_fields=fields)
        edited.append(item)
    return edited


def resubmit(items: Iterable[BatchItem], item_id: str) -> list[BatchItem]:
    """Reset a Failed item to Pending so the next run extracts it again."""
    return [
        replace(item, processing_state=ProcessingState.PENDING, error=None)
        if item.id == item_id and item.processing_state == ProcessingState.FAILED
        else item
        for item in items
    ]


def remove(items: Iterable[BatchItem], item_id: str) -> list[BatchItem]:
    return [item for item in items if item.id != item_id]


def summarize(items: Iterable[BatchItem]) -> BatchSummary:
    summary = BatchSummary()
    for item in items:
        name = item.processing_state.value
        setattr(summary, name, getattr(summary, name) + 1)
    return summary


def commit(items: Iterable[BatchItem], common: CommonFields) -> list[DocumentDraft]:
    """Build one creation draft per Complete item.

    Raises ValidationError when nothing was extracted successfully or when
    the batch-wide fields are missing, so nothing meaningless is persisted.
    """
    if not common.delivered_by.strip():
        raise ValidationError("Please enter who delivered the documents")

    drafts = [
        DocumentDraft.from_fields(
            item.extracted_fields,
            scanned_document=item.source_image,
            delivered_by=common.delivered_by.strip(),
            signing_office=common.signing_office,
            intake=IntakeMethod.UPLOAD,
        )
        for item in items
        if item.processing_state == ProcessingState.COMPLETE
    ]

    if not drafts:
        raise ValidationError("No documents have been successfully processed to save")

    for draft in drafts:
        draft.validate()
    return drafts


class BatchIngestionPipeline:
    """Orchestrates expansion and concurrent extraction of a batch."""

    def __init__(
        self,
        extractor: ExtractionPort,
        rasterizer: RasterizerPort,
        id_factory: Callable[[], str] = new_item_id,
    ) -> None:
        self.extractor = extractor
        self.rasterizer = rasterizer
        self.id_factory = id_factory

    async def expand(self, files: Iterable[Path]) -> list[BatchItem]:
        """Turn source files into Pending items, one per image or PDF page.

        Unsupported, unreadable and unrenderable files are skipped.
        """
        items: list[BatchItem] = []

        for path in files:
            suffix = path.suffix.lower()

            if suffix not in IMAGE_SUFFIXES | PDF_SUFFIXES:
                logger.debug(f"Skipping unsupported file: {path.name}")
                continue

            try:
                data = await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                logger.warning(f"Could not read {path.name}: {e}")
                continue

            if suffix in IMAGE_SUFFIXES:
                items.append(
                    BatchItem(
                        id=self.id_factory(),
                        source_file_name=path.name,
                        source_image=encode_data_url(data, _image_mime_type(path)),
                    )
                )
            else:
                try:
                    pages = await asyncio.to_thread(self.rasterizer.render_pages, data)
                except Exception as e:
                    logger.warning(f"Could not render {path.name}: {e}")
                    continue

                for number, image in enumerate(pages, start=1):
                    items.append(
                        BatchItem(
                            id=self.id_factory(),
                            source_file_name=path.name,
                            source_image=image,
                            page_number=number,
                        )
                    )
                logger.info(f"Expanded {path.name} into {len(pages)} pages")

        return items

    async def process_all(
        self,
        items: Iterable[BatchItem],
        on_update: ItemCallback | None = None,
    ) -> list[BatchItem]:
        """Extract every Pending item concurrently.

        Each item is marked Analyzing at once and then Complete or Failed as
        its own call resolves; ``on_update`` sees every change as it happens.
        A failing item never affects its siblings. Items in any other state
        are returned unchanged.
        """
        items = list(items)
        results: dict[str, BatchItem] = {item.id: item for item in items}

        def publish(item: BatchItem) -> None:
            results[item.id] = item
            if on_update is not None:
                on_update(item)

        pending = [item for item in items if item.processing_state == ProcessingState.PENDING]
        if not pending:
            return items

        logger.info(f"Extracting details for {len(pending)} items")

        for item in pending:
            publish(replace(item, processing_state=ProcessingState.ANALYZING))

        await asyncio.gather(*(self._process_one(results[item.id], publish) for item in pending))

        merged = items
        for item in pending:
            merged = merge_result(merged, results[item.id])

        summary = summarize(merged)
        logger.info(f"Batch done: {summary.complete} complete, {summary.failed} failed")
        return merged

    async def _process_one(self, item: BatchItem, publish: ItemCallback) -> None:
        try:
            fields = await self.extractor.extract(item.source_image)
        except ExtractionFailure as e:
            logger.warning(f"Extraction failed for {item.label}: {e}")
            publish(replace(item, processing_state=ProcessingState.FAILED, error=str(e)))
            return
        except Exception as e:
            logger.exception(f"Unexpected error extracting {item.label}: {e}")
            publish(
                replace(
                    item,
                    processing_state=ProcessingState.FAILED,
                    error=str(e) or "Failed to analyze.",
                )
            )
            return

        publish(replace(item, processing_state=ProcessingState.COMPLETE, extracted_fields=fields))
