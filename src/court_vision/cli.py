"""Command-line interface using Typer."""

import json
import mimetypes
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from court_vision import __version__
from court_vision.domain.enums import JobStatus
from court_vision.domain.errors import CourtVisionError
from court_vision.logging import setup_logging
from court_vision.utils import run_async

setup_logging()

app = typer.Typer(
    name="court-vision",
    help="Court Vision - basketball video analysis CLI",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    JobStatus.UPLOADED: "cyan",
    JobStatus.ANALYZING: "yellow",
    JobStatus.ANALYZED: "green",
    JobStatus.FAILED: "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Court Vision v{__version__}")
        raise typer.Exit()


def _fail(message: str) -> None:
    console.print(f"[bold red]✗ {message}[/bold red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Court Vision - annotate basketball videos and summarize player tendencies."""
    pass


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Video file"),
) -> None:
    """Upload a video and register it for analysis."""
    from court_vision.services.uploads import UploadService

    content_type = mimetypes.guess_type(path.name)[0] or "video/mp4"
    try:
        job = UploadService().register_upload(path.name, path.read_bytes(), content_type)
    except (ValueError, CourtVisionError) as e:
        _fail(f"Upload failed: {e}")

    console.print("[bold green]✓ Video uploaded[/bold green]")
    console.print(f"Job ID: {job.id}")
    console.print(f"[dim]Source: {job.source_ref}[/dim]")


@app.command()
def analyze(
    job_id: str = typer.Argument(..., help="Video job ID"),
    retry: bool = typer.Option(
        False, "--retry", "-r", help="Analyze an analyzed or failed video again"
    ),
    queue: bool = typer.Option(
        False, "--queue", "-q", help="Enqueue on the worker instead of running inline"
    ),
) -> None:
    """Annotate a video and generate its feature summary."""
    if queue:
        from court_vision.jobs.analysis_tasks import analyze_video_task

        task = analyze_video_task.delay(video_job_id=job_id, retry=retry)
        console.print(f"[green]Task enqueued: {task.id}[/green]")
        return

    from court_vision.services.analysis_pipeline import AnalysisPipeline

    console.print(f"[bold blue]Analyzing video job {job_id}...[/bold blue]")
    try:
        result = run_async(AnalysisPipeline().analyze(job_id, retry=retry))
    except ValueError:
        _fail(f"Invalid job ID: {job_id}")
    except CourtVisionError as e:
        _fail(f"{e.kind}: {e.message}")

    if not result.success:
        _fail(f"Analysis failed ({result.error_kind}): {result.error_message}")

    resumed = " (resumed from stored summary)" if result.resumed else ""
    console.print(f"[bold green]✓ Analysis complete{resumed}[/bold green]")
    console.print(f"Artifact: {result.artifact_ref}")


@app.command()
def status(
    job_id: str = typer.Argument(..., help="Video job ID"),
) -> None:
    """Show a video job's status."""
    from uuid import UUID

    from court_vision.adapters.factory import get_job_store

    try:
        job = get_job_store().get(UUID(job_id))
    except ValueError:
        _fail(f"Invalid job ID: {job_id}")
    except CourtVisionError as e:
        _fail(e.message)

    table = Table(title="Video Job")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    style = STATUS_STYLES.get(job.status, "white")
    table.add_row("ID", str(job.id))
    table.add_row("Status", f"[{style}]{job.status}[/{style}]")
    table.add_row("Source", job.source_ref)
    table.add_row("Attempts", str(job.analysis_attempts))
    table.add_row("Created", job.created_at.isoformat() if job.created_at else "N/A")
    table.add_row("Analyzed", job.analyzed_at.isoformat() if job.analyzed_at else "N/A")
    if job.analysis_artifact_ref:
        table.add_row("Artifact", job.analysis_artifact_ref)
    if job.last_error:
        table.add_row("Error", f"{job.last_error_kind}: {job.last_error}")

    console.print(table)


@app.command()
def jobs(
    status_filter: Optional[JobStatus] = typer.Option(
        None, "--status", "-s", help="Filter by status"
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum jobs to show"),
) -> None:
    """List video jobs, newest first."""
    from court_vision.adapters.factory import get_job_store

    try:
        job_list = get_job_store().list_jobs(status=status_filter, limit=limit)
    except CourtVisionError as e:
        _fail(e.message)

    if not job_list:
        console.print("[dim]No video jobs found[/dim]")
        return

    table = Table(title="Video Jobs")
    table.add_column("ID", style="cyan")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Created")
    table.add_column("Source")

    for job in job_list:
        style = STATUS_STYLES.get(job.status, "white")
        table.add_row(
            str(job.id),
            f"[{style}]{job.status}[/{style}]",
            str(job.analysis_attempts),
            job.created_at.strftime("%Y-%m-%d %H:%M") if job.created_at else "",
            job.source_ref[:60],
        )

    console.print(table)


@app.command()
def summary(
    job_id: str = typer.Argument(..., help="Video job ID"),
) -> None:
    """Print the stored feature summary of an analyzed video."""
    from uuid import UUID

    from court_vision.adapters.factory import get_blob_store
    from court_vision.services.artifacts import ArtifactStore

    try:
        envelope = ArtifactStore(get_blob_store()).get_summary_envelope(UUID(job_id))
    except ValueError:
        _fail(f"Invalid job ID: {job_id}")
    except CourtVisionError as e:
        _fail(e.message)

    console.print(Panel.fit(
        json.dumps(envelope.summary.to_dict(), indent=2),
        title=f"Feature Summary (attempt {envelope.attempt})",
        border_style="green",
    ))


@app.command()
def chat(
    job_id: str = typer.Argument(..., help="Video job ID"),
    question: Optional[str] = typer.Argument(None, help="Question about the video"),
) -> None:
    """Ask a question about an analyzed video."""
    from court_vision.services.chat import VideoChatService

    try:
        answer = run_async(VideoChatService().ask(job_id, question))
    except ValueError:
        _fail(f"Invalid job ID: {job_id}")
    except CourtVisionError as e:
        _fail(f"{e.kind}: {e.message}")

    console.print(Panel.fit(answer, title="Analyst", border_style="blue"))


@app.command()
def worker() -> None:
    """Start a Celery worker on the analysis queue (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    subprocess.run(
        [
            sys.executable,
            "-m",
            "celery",
            "-A",
            "court_vision.worker",
            "worker",
            "--queues=analysis",
            "--loglevel=info",
        ],
        check=True,
    )


if __name__ == "__main__":
    app()
