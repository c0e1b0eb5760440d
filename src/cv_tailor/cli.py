"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from cv_tailor.clients.llm_client import LLMClient
from cv_tailor.config import AppConfig, load_config, resolve_api_key
from cv_tailor.errors import GenerationFailedError
from cv_tailor.models.catalog import AVAILABLE_MODELS
from cv_tailor.models.request import CoverLetterRequest
from cv_tailor.pipeline.library import CVLibrary
from cv_tailor.pipeline.orchestrator import GenerationPipeline
from cv_tailor.pipeline.retry import RetryPolicy, RetryState
from cv_tailor.pipeline.session import GenerationSession, Phase
from cv_tailor.storage.attachment_store import AttachmentStore
from cv_tailor.storage.document_store import DocumentStore, StoredCV

app = typer.Typer(
    name="cv-tailor",
    help="AI-assisted CV ingestion, tailoring and cover letters",
    no_args_is_help=True,
)
console = Console()


def _build_library(config: AppConfig) -> CVLibrary:
    llm = LLMClient(config.gateway, config.generation)
    pipeline = GenerationPipeline(llm, retry_policy=RetryPolicy.from_config(config.retry))
    db_path = config.storage.resolved_db_path
    return CVLibrary(pipeline, DocumentStore(db_path), AttachmentStore(db_path))


def _require_key(api_key: str | None) -> str:
    key = resolve_api_key(api_key)
    if not key:
        console.print("[red]No API key. Pass --api-key or set OPENROUTER_API_KEY.[/red]")
        raise typer.Exit(1)
    return key


def _load_cv(library: CVLibrary, cv_id: str) -> StoredCV:
    record = library.documents.get(cv_id)
    if record is None:
        console.print(f"[red]CV not found: {cv_id}[/red]")
        raise typer.Exit(1)
    return record


def _read_optional(path: Path | None) -> str:
    if path is None:
        return ""
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _show_failure(error: GenerationFailedError) -> None:
    attempts = f"\nAttempts: {error.attempts}" if error.attempts else ""
    console.print(
        Panel(
            f"{error.classification.message}\n[dim]{error.suggestion}[/dim]{attempts}",
            title=f"[red]Generation failed ({error.kind.value})[/red]",
        )
    )


def _with_progress(label: str, run):
    """Run ``run(on_attempt)`` under a spinner that reports retries."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(label, total=None)

        def on_attempt(state: RetryState) -> None:
            if state.attempt > 1:
                progress.update(
                    task, description=f"Retrying ({state.attempt}/{state.max_attempts})..."
                )

        return asyncio.run(run(on_attempt))


@app.command()
def ingest(
    source: Path = typer.Argument(help="Plain-text CV file"),
    title: str = typer.Option(None, "--title", help="Library title (defaults to file name)"),
    model: str = typer.Option(None, "--model", "-m", help="Gateway model id"),
    locale: str = typer.Option("en", "--locale", "-l", help="Output language (en/fr/pt)"),
    photo: Path = typer.Option(None, "--photo", help="Profile photo to attach"),
    replace: str = typer.Option(None, "--replace", help="Re-ingest over an existing CV id"),
    api_key: str = typer.Option(None, "--api-key", help="Gateway API key"),
) -> None:
    """Format a raw CV into a structured document and store it."""
    if not source.exists():
        console.print(f"[red]CV file not found: {source}[/red]")
        raise typer.Exit(1)

    config = load_config()
    library = _build_library(config)
    key = _require_key(api_key)
    raw_text = source.read_text(encoding="utf-8")
    photo_bytes = photo.read_bytes() if photo else None

    try:
        record = _with_progress(
            "Formatting CV...",
            lambda on_attempt: library.ingest(
                title or source.stem,
                raw_text,
                api_key=key,
                model=model or config.gateway.default_model,
                locale=locale,
                photo=photo_bytes,
                editing_id=replace,
                on_attempt=on_attempt,
            ),
        )
    except GenerationFailedError as exc:
        _show_failure(exc)
        raise typer.Exit(1)

    doc = record.formatted_cv
    console.print(f"[green]Stored CV {record.id}[/green]: {doc.name} - {doc.title}")


@app.command()
def tailor(
    cv_id: str = typer.Argument(help="Stored CV id"),
    job_title: str = typer.Option(..., "--job-title", help="Target job title"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    instructions: str = typer.Option("", "--instructions", help="Extra instructions for the AI"),
    model: str = typer.Option(None, "--model", "-m", help="Gateway model id"),
    locale: str = typer.Option("en", "--locale", "-l", help="Output language (en/fr/pt)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write tailored JSON here"),
    api_key: str = typer.Option(None, "--api-key", help="Gateway API key"),
) -> None:
    """Tailor a stored CV to a job description."""
    config = load_config()
    library = _build_library(config)
    record = _load_cv(library, cv_id)
    key = _require_key(api_key)
    job_description = _read_optional(jd)

    try:
        tailored = _with_progress(
            "Tailoring resume...",
            lambda on_attempt: library.pipeline.tailor_resume(
                job_title,
                job_description,
                record.formatted_cv,
                key,
                model or config.gateway.default_model,
                ai_instructions=instructions,
                locale=locale,
                on_attempt=on_attempt,
            ),
        )
    except GenerationFailedError as exc:
        _show_failure(exc)
        raise typer.Exit(1)

    if tailored.changes:
        table = Table(title="Changes")
        table.add_column("Field")
        table.add_column("Change")
        for change in tailored.changes:
            table.add_row(change.field, change.change)
        console.print(table)

    payload = json.dumps(tailored.to_wire(), indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(f"[green]Tailored resume saved: {output}[/green]")
    else:
        console.print_json(payload)


@app.command("cover-letter")
def cover_letter(
    cv_id: str = typer.Argument(help="Stored CV id"),
    job_title: str = typer.Option("", "--job-title", help="Job title (empty = spontaneous)"),
    jd: Path = typer.Option(None, "--jd", help="Job description text file"),
    company: str = typer.Option("", "--company", help="Company description"),
    model: str = typer.Option(None, "--model", "-m", help="Gateway model id"),
    locale: str = typer.Option("en", "--locale", "-l", help="Output language (en/fr/pt)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the letter here"),
    api_key: str = typer.Option(None, "--api-key", help="Gateway API key"),
) -> None:
    """Generate a cover letter, offering to regenerate until accepted."""
    config = load_config()
    library = _build_library(config)
    record = _load_cv(library, cv_id)
    key = _require_key(api_key)

    request = CoverLetterRequest(
        job_title=job_title,
        job_description=_read_optional(jd),
        company_description=company,
        resume=record.formatted_cv,
        api_key=key,
        model=model or config.gateway.default_model,
        locale=locale,
    )
    session = GenerationSession(library.pipeline.run)

    async def _generate(first: bool):
        with console.status("Generating cover letter..."):
            if first:
                return await session.submit(request)
            return await session.regenerate()

    result = asyncio.run(_generate(first=True))
    while True:
        if session.phase is Phase.ERROR:
            _show_failure(session.error)
            if session.error.retryable and typer.confirm("Try again?", default=True):
                result = asyncio.run(_generate(first=False))
                continue
            raise typer.Exit(1)

        console.print(Panel(result.content, title="Cover Letter"))
        if not typer.confirm("Regenerate?", default=False):
            break
        result = asyncio.run(_generate(first=False))

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.content, encoding="utf-8")
        console.print(f"[green]Cover letter saved: {output}[/green]")


@app.command("list")
def list_cvs() -> None:
    """List stored CVs."""
    config = load_config()
    library = _build_library(config)
    records = library.list()
    if not records:
        console.print("[dim]No CVs stored yet.[/dim]")
        return
    table = Table(title="CV Library")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Name")
    table.add_column("Updated")
    table.add_column("Photo")
    for record in records:
        table.add_row(
            record.id,
            record.title,
            record.formatted_cv.name,
            record.updated_at.strftime("%Y-%m-%d %H:%M"),
            "yes" if library.photo_for(record) else "-",
        )
    console.print(table)


@app.command()
def delete(cv_id: str = typer.Argument(help="Stored CV id")) -> None:
    """Delete a stored CV and its attachments."""
    config = load_config()
    library = _build_library(config)
    library.delete(cv_id)
    console.print(f"[green]Deleted {cv_id}[/green]")


@app.command()
def models() -> None:
    """List the models offered through the gateway."""
    table = Table(title="Available Models")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Provider")
    table.add_column("Free")
    for option in AVAILABLE_MODELS:
        table.add_row(option.id, option.name, option.provider, "yes" if option.is_free else "")
    console.print(table)


if __name__ == "__main__":
    app()
