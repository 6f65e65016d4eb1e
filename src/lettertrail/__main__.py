"""CLI entry point for lettertrail."""

import asyncio
import logging
import mimetypes
import sys
from dataclasses import fields
from pathlib import Path

import click

from .adapters.extraction import create_extraction_adapter
from .adapters.pdf import PyMuPdfRasterizer
from .adapters.storage import JsonFileStore
from .config import Settings, load_settings
from .domain import batch
from .domain.batch import IMAGE_SUFFIXES, PDF_SUFFIXES, BatchIngestionPipeline
from .domain.dashboard import partition, search
from .domain.errors import LettertrailError, WorkflowError
from .domain.images import encode_data_url
from .domain.models import (
    FIELD_NAMES,
    BatchItem,
    CommonFields,
    Document,
    DocumentDraft,
    DocumentStatus,
    FieldSet,
    IntakeMethod,
    ProcessingState,
    parse_letter_date,
)
from .domain.services import RegistryService
from .domain.store import DocumentStore
from .domain.workflow import (
    AddMore,
    Back,
    Next,
    OutgoingEntry,
    OutgoingState,
    OutgoingStep,
    Sign,
    UpdateEntry,
    advance_outgoing,
)
from .ports.extraction import ExtractionPort

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = IMAGE_SUFFIXES | PDF_SUFFIXES
# Statuses reachable without dispatch proof
ADVANCE_STATUSES = {
    "sent-for-signing": DocumentStatus.SENT_FOR_SIGNING,
    "returned-from-signing": DocumentStatus.RETURNED_FROM_SIGNING,
    "archived": DocumentStatus.ARCHIVED,
}
STATE_MARKS = {
    ProcessingState.PENDING: "·",
    ProcessingState.ANALYZING: "…",
    ProcessingState.COMPLETE: "✓",
    ProcessingState.FAILED: "✗",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def open_store(settings: Settings) -> DocumentStore:
    """Load the document store, warning if it had to be reset."""
    store = DocumentStore(JsonFileStore(settings.paths.store))
    store.load()
    if store.load_failed:
        click.echo(
            f"Warning: document store at {settings.paths.store} was unreadable; "
            "starting with an empty collection",
            err=True,
        )
    return store


def collect_sources(paths: tuple[Path, ...], recursive: bool) -> list[Path]:
    """Collect supported source files from files and directories."""
    collected: list[Path] = []
    for path in paths:
        if path.is_file():
            collected.append(path)
            continue
        pattern = "**/*" if recursive else "*"
        collected.extend(
            sorted(p for p in path.glob(pattern) if p.is_file() and p.suffix.lower() in SOURCE_SUFFIXES)
        )
    return collected


def read_image(path: Path) -> str:
    """Read an image file as a data URL."""
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise click.BadParameter(f"Not an image file: {path.name}")
    return encode_data_url(path.read_bytes(), mime_type)


def merge_typed(typed: FieldSet, extracted: FieldSet) -> FieldSet:
    """Prefer typed values, fill blanks from extraction."""
    return FieldSet(
        **{f.name: getattr(typed, f.name) or getattr(extracted, f.name) for f in fields(FieldSet)}
    )


def format_document(doc: Document) -> str:
    """One-line summary for listings."""
    ref = f" [{doc.reference_number}]" if doc.reference_number else ""
    return (
        f"{doc.id}  {doc.received_date:%Y-%m-%d}  {doc.status.value:<21}  "
        f"{doc.subject or '(no subject)'}{ref} - {doc.sender_name or 'Unknown'}"
    )


def format_item(item: BatchItem) -> str:
    mark = STATE_MARKS[item.processing_state]
    line = f"{mark} {item.label}: {item.processing_state.value}"
    if item.error:
        line += f" ({item.error})"
    return line


def review_items(items: list[BatchItem]) -> list[BatchItem]:
    """Prompt for corrections of every complete item."""
    for item in list(items):
        if item.processing_state != ProcessingState.COMPLETE:
            continue
        click.echo(f"\n{item.label}")
        for name in FIELD_NAMES:
            current = getattr(item.extracted_fields, name)
            value = click.prompt(f"  {name}", default=current, show_default=True)
            if value != current:
                items = batch.edit_field(items, item.id, name, value)
    return items


def build_extractor(settings: Settings) -> ExtractionPort:
    """Create the configured extractor, reporting setup problems as CLI errors."""
    try:
        return create_extraction_adapter(settings.llm)
    except (LettertrailError, ValueError) as e:
        raise click.ClickException(str(e)) from e


async def run_intake(pipeline: BatchIngestionPipeline, sources: list[Path]) -> list[BatchItem]:
    items = await pipeline.expand(sources)
    if not items:
        return items
    click.echo(f"Analyzing {len(items)} pages...")
    return await pipeline.process_all(items, on_update=lambda item: click.echo(format_item(item)))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", type=click.Path(exists=True), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """Lettertrail - track correspondence from receipt to dispatch."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--delivered-by", required=True, help="Who delivered the documents")
@click.option("--signing-office", help="Signing office for the whole batch")
@click.option("--recursive/--no-recursive", default=False, help="Search directories recursively")
@click.option("--review", is_flag=True, help="Review extracted fields before saving")
@click.pass_context
def intake(
    ctx: click.Context,
    paths: tuple[Path, ...],
    delivered_by: str,
    signing_office: str | None,
    recursive: bool,
    review: bool,
) -> None:
    """Register incoming documents from images and PDFs."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)

    # Wire up adapters
    pipeline = BatchIngestionPipeline(
        extractor=build_extractor(settings),
        rasterizer=PyMuPdfRasterizer(scale=settings.intake.pdf_scale),
    )

    sources = collect_sources(paths, recursive)
    logger.debug(f"Collected {len(sources)} source files")
    items = asyncio.run(run_intake(pipeline, sources))
    if not items:
        click.echo("No supported files found", err=True)
        sys.exit(1)

    if review:
        items = review_items(items)

    try:
        drafts = batch.commit(items, CommonFields(delivered_by=delivered_by, signing_office=signing_office))
        created = store.create_batch(drafts)
    except LettertrailError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    summary = batch.summarize(items)
    click.echo(f"\nSaved {len(created)} documents ({summary.failed} failed)")
    for doc in created:
        click.echo(f"  {format_document(doc)}")


@cli.command()
@click.option("--subject", default="", help="Subject or description")
@click.option("--sender", default="", help="Sender name")
@click.option("--reference", default="", help="Reference / file number")
@click.option("--division", default="", help="Originating division")
@click.option("--letter-date", help="Date on the letter (YYYY-MM-DD)")
@click.option("--delivered-by", help="Who delivered the document")
@click.option("--signing-office", help="Signing office")
@click.option("--scan", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Scanned image")
@click.option("--extract", is_flag=True, help="Fill blank fields from the scan")
@click.pass_context
def add(
    ctx: click.Context,
    subject: str,
    sender: str,
    reference: str,
    division: str,
    letter_date: str | None,
    delivered_by: str | None,
    signing_office: str | None,
    scan: Path | None,
    extract: bool,
) -> None:
    """Register a single incoming document."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)

    if letter_date and parse_letter_date(letter_date) is None:
        raise click.BadParameter("Letter date must be YYYY-MM-DD", param_hint="--letter-date")
    if extract and scan is None:
        raise click.UsageError("--extract needs --scan")

    image = read_image(scan) if scan else None
    typed = FieldSet(
        letter_date=letter_date or "",
        sender_name=sender,
        subject=subject,
        reference_number=reference,
        originating_division=division,
    )

    if extract:
        extractor = build_extractor(settings)
        try:
            extracted = asyncio.run(extractor.extract(image))
        except LettertrailError as e:
            click.echo(f"Extraction failed, using typed fields: {e}", err=True)
        else:
            typed = merge_typed(typed, extracted)

    draft = DocumentDraft.from_fields(
        typed,
        scanned_document=image,
        delivered_by=delivered_by,
        signing_office=signing_office,
        intake=IntakeMethod.SCAN if image else IntakeMethod.MANUAL,
    )

    try:
        doc = store.create(draft)
    except LettertrailError as e:
        raise click.ClickException(str(e)) from e
    click.echo(format_document(doc))


@cli.command(name="list")
@click.option("--outgoing", is_flag=True, help="Show dispatched documents")
@click.option("-s", "--search", "term", default="", help="Filter by text")
@click.pass_context
def list_documents(ctx: click.Context, outgoing: bool, term: str) -> None:
    """List incoming (default) or outgoing documents."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)

    incoming, dispatched = partition(search(store.documents, term))
    docs = dispatched if outgoing else incoming

    if not docs:
        click.echo("No documents")
        return
    for doc in docs:
        click.echo(format_document(doc))


@cli.command()
@click.argument("doc_id")
@click.pass_context
def show(ctx: click.Context, doc_id: str) -> None:
    """Show a document with its status history."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)

    doc = store.get_by_id(doc_id)
    if doc is None:
        raise click.ClickException(f"Document not found: {doc_id}")

    click.echo(f"id: {doc.id}")
    click.echo(f"subject: {doc.subject}")
    click.echo(f"sender: {doc.sender_name}")
    click.echo(f"reference: {doc.reference_number}")
    click.echo(f"division: {doc.originating_division}")
    click.echo(f"letter_date: {doc.letter_date or ''}")
    click.echo(f"received: {doc.received_date.isoformat()}")
    click.echo(f"status: {doc.status.value}")
    if doc.delivered_by:
        click.echo(f"delivered_by: {doc.delivered_by}")
    if doc.signing_office:
        click.echo(f"signing_office: {doc.signing_office}")
    if doc.dispatched_details:
        details = doc.dispatched_details
        click.echo(f"recipient: {details.recipient_name}")
        click.echo(f"dispatched_by: {details.dispatched_by}")
        click.echo(f"dispatched: {details.dispatched_date.isoformat()}")
    click.echo("history:")
    for entry in reversed(doc.status_history):
        notes = f" - {entry.notes}" if entry.notes else ""
        click.echo(f"  {entry.timestamp.isoformat()}  {entry.status.value}{notes}")


@cli.command()
@click.argument("doc_id")
@click.option("--recipient", required=True, help="Recipient name")
@click.option("--by", "dispatched_by", required=True, help="Who hands the document over")
@click.option("--signature", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--photo", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def dispatch(
    ctx: click.Context,
    doc_id: str,
    recipient: str,
    dispatched_by: str,
    signature: Path,
    photo: Path,
) -> None:
    """Dispatch a document with signature and photo proof."""
    settings = load_settings(ctx.obj["config_path"])
    service = RegistryService(open_store(settings))

    try:
        doc = service.dispatch(doc_id, recipient, dispatched_by, read_image(signature), read_image(photo))
    except LettertrailError as e:
        raise click.ClickException(str(e)) from e
    click.echo(format_document(doc))


@cli.command()
@click.argument("doc_id")
@click.argument("status", type=click.Choice(sorted(ADVANCE_STATUSES)))
@click.option("--notes", help="Note for the history entry")
@click.pass_context
def advance(ctx: click.Context, doc_id: str, status: str, notes: str | None) -> None:
    """Move a document to another status."""
    settings = load_settings(ctx.obj["config_path"])
    service = RegistryService(open_store(settings))

    try:
        doc = service.advance(doc_id, ADVANCE_STATUSES[status], notes=notes)
    except LettertrailError as e:
        raise click.ClickException(str(e)) from e
    click.echo(format_document(doc))


def prompt_outgoing_entry() -> OutgoingEntry:
    """Ask for the details of one outgoing document."""
    minuted_to = click.prompt("  Minuted to")
    description = click.prompt("  Description")
    file_no = click.prompt("  File no.")
    name = click.prompt("  Name")
    photo = click.prompt("  Photo", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    return OutgoingEntry(
        minuted_to=minuted_to,
        description=description,
        file_no=file_no,
        name=name,
        image=read_image(photo),
    )


@cli.command()
@click.option("--by", "dispatched_by", prompt="Dispatched by", help="Who hands the documents over")
@click.option(
    "--signature",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Recipient signature image",
)
@click.pass_context
def outgoing(ctx: click.Context, dispatched_by: str, signature: Path) -> None:
    """Record outgoing documents handed over in one signed dispatch."""
    settings = load_settings(ctx.obj["config_path"])
    store = open_store(settings)
    state = OutgoingState()

    while state.step == OutgoingStep.DETAILS:
        click.echo(f"\nDocument {len(state.batch) + 1}")
        state = advance_outgoing(state, UpdateEntry(prompt_outgoing_entry()))
        event = AddMore() if click.confirm("Add another document?", default=False) else Next()
        try:
            state = advance_outgoing(state, event)
        except WorkflowError as e:
            click.echo(f"Error: {e}", err=True)

    click.echo("\nTo dispatch:")
    for entry in state.entries:
        click.echo(f"  {entry.description} [{entry.file_no}] - {entry.name} -> {entry.minuted_to}")

    if not click.confirm("Dispatch these documents?", default=True):
        state = advance_outgoing(advance_outgoing(state, Back()), Back())
        click.echo(f"Dispatch {state.step.value}")
        return

    try:
        state = advance_outgoing(state, Next())
        state = advance_outgoing(
            state,
            Sign(dispatched_by=dispatched_by, signature=read_image(signature), timestamp=store.clock()),
        )
        created = store.create_batch(state.drafts)
    except LettertrailError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"\nDispatched {len(created)} documents")
    for doc in created:
        click.echo(f"  {format_document(doc)}")


if __name__ == "__main__":
    cli()
