"""creative_labels CLI entrypoint."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer

from .analysis.gemini import GeminiClient, estimate_analysis_seconds, filename_from_url
from .analysis.results import BatchResult, LabelledVideo, VideoInfo, load_results, save_results
from .report.context import extract_context
from .report.display import organize_for_display, section_icon, sort_sections
from .report.export import export_csv, export_filename, rows_from_results
from .report.parser import parse_report
from .settings import Settings, get_settings
from .store.clips import ClipStore
from .util import ffmpeg_io
from .util.logging import emit_event, get_logger, set_level

app = typer.Typer(add_completion=False, help="Creative labels for short-form video ads.")
logger = get_logger(__name__)


def instantiate_client(settings: Settings) -> GeminiClient:
    """Instantiate the Gemini client with credentials sourced from settings."""
    return GeminiClient.from_settings(settings)


def instantiate_store(settings: Settings) -> ClipStore:
    return ClipStore.from_settings(settings)


def _run(action: Callable[[], Any]) -> None:
    """Run a command body, turning failures into a red message and exit code 1."""
    try:
        action()
    except Exception as exc:  # noqa: BLE001
        typer.secho(f"Command failed: {exc}", err=True, fg=typer.colors.RED)
        logger.exception("Command error")
        raise typer.Exit(code=1)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _log_estimate(video: Path) -> None:
    duration = ffmpeg_io.duration_seconds(video)
    minutes = duration / 60 if duration is not None else 0.0
    emit_event(
        logger,
        "analysis.estimate",
        file=video.name,
        duration_min=round(minutes, 2),
        estimate_s=estimate_analysis_seconds(minutes),
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    level = "DEBUG" if verbose else get_settings().creative_labels_log_level
    if level:
        set_level(level)


@app.command()
def analyze(
    videos: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    output: Path = typer.Option(Path("results.json"), "--output", dir_okay=False),
) -> None:
    """Analyse local videos with Gemini and write a results file."""

    def action() -> None:
        client = instantiate_client(get_settings())
        for video in videos:
            _log_estimate(video)
        batch = client.analyze_batch(videos)
        save_results(batch, output)
        colour = typer.colors.GREEN if not batch.failed else typer.colors.YELLOW
        typer.secho(
            f"{batch.completed}/{batch.total_videos} videos analysed; results in {output}",
            fg=colour,
        )

    _run(action)


@app.command("analyze-url")
def analyze_url(
    url: str = typer.Argument(...),
    name: Optional[str] = typer.Option(None, "--name", help="Display filename"),
    output: Path = typer.Option(Path("results.json"), "--output", dir_okay=False),
) -> None:
    """Download a video by URL, analyse it and write a results file."""

    def action() -> None:
        client = instantiate_client(get_settings())
        result = client.analyze_video_url(url)
        entry = LabelledVideo(
            video_info=VideoInfo(filename=name or filename_from_url(url), url=url),
            analysis=result,
        )
        save_results(BatchResult.from_entries([entry]), output)
        typer.secho(f"Analysis written to {output}", fg=typer.colors.GREEN)

    _run(action)


@app.command("export-csv")
def export_csv_command(
    results: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    output: Optional[Path] = typer.Option(None, "--output", dir_okay=False),
) -> None:
    """Flatten a results file into a CSV of creative labels."""

    def action() -> None:
        reports = rows_from_results(load_results(results))
        destination = output or Path(export_filename())
        destination.write_text(export_csv(reports), encoding="utf-8")
        typer.secho(f"CSV written to {destination}", fg=typer.colors.GREEN)

    _run(action)


def _render(entry: LabelledVideo, display: bool) -> None:
    typer.secho(entry.video_info.filename, bold=True)
    text = entry.report_text
    if entry.status == "failed" or text is None:
        typer.secho(f"  analysis failed: {entry.error or 'no analysis'}", fg=typer.colors.RED)
        return
    context = extract_context(text)
    typer.echo(f"  vertical: {context.vertical} | platform: {context.platform}")
    if display:
        sections = sort_sections(organize_for_display(text))
    else:
        sections = list(parse_report(text).items())
    for title, items in sections:
        prefix = f"{section_icon(title)} " if display else ""
        typer.echo(f"  {prefix}{title}")
        for index, item in enumerate(items, start=1):
            typer.echo(f"    {index}. {item}")


@app.command()
def show(
    results: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    display: bool = typer.Option(False, "--display", help="Reorganise sections for reading"),
) -> None:
    """Print the parsed sections of every report in a results file."""

    def action() -> None:
        for entry in load_results(results):
            _render(entry, display)

    _run(action)


@app.command()
def formats() -> None:
    """List ad formats by the number of videos they dominate."""

    def action() -> None:
        store = instantiate_store(get_settings())
        _echo_json([fmt.model_dump(by_alias=True) for fmt in store.list_formats()])

    _run(action)


@app.command()
def videos(
    ad_format: Optional[str] = typer.Option(None, "--format", help="Only videos of this dominant ad type"),
) -> None:
    """List clips for the brand, or whole videos of one ad format."""

    def action() -> None:
        store = instantiate_store(get_settings())
        if ad_format:
            groups = store.videos_for_format(ad_format)
            _echo_json([group.model_dump(mode="json", by_alias=True) for group in groups])
        else:
            clips = store.list_clips()
            _echo_json([clip.model_dump(mode="json", by_alias=True) for clip in clips])

    _run(action)


@app.command("whole-video")
def whole_video(url: str = typer.Argument(...)) -> None:
    """Show every clip of one whole video with its dominant ad type."""

    def action() -> None:
        store = instantiate_store(get_settings())
        group = store.whole_video(url)
        if group is None:
            raise LookupError(f"No clips found for {url}")
        _echo_json(group.model_dump(mode="json", by_alias=True))

    _run(action)


if __name__ == "__main__":
    sys.exit(app())
