"""Command-line interface for chaptersplit.

Responsibilities:
- Expose the `chaptersplit INPUT OUTPUT_DIR` command.
- Convert CLI arguments into `SplitConfig` and run `ChapterSplitPipeline`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_split_summary, exit_with_command_error
from .config import ConfigLoader, SplitConfig, ToolSettings
from .errors import PipelineStageError
from .splitter import ChapterSplitPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="chaptersplit",
    add_completion=False,
    help="Split a chaptered audiobook (m4b, aax, ...) into one mp3 per chapter.",
)


class ChapterProgressIndicator:
    """Render deterministic per-chapter progress lines on stderr."""

    _SPINNER_FRAMES = "|/-\\"

    def on_chapter_start(self, chapter_title: str, chapter_index: int, chapter_total: int) -> None:
        """Print one progress line for a chapter start transition."""

        spinner = self._SPINNER_FRAMES[(chapter_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] {spinner} {chapter_index}/{chapter_total} chapter={chapter_title}",
            err=True,
        )


def _load_tool_settings(config_path: Path | None) -> ToolSettings:
    """Load tool settings from YAML and environment, mapping failures to stage errors."""

    tools = ToolSettings()
    if config_path is not None:
        try:
            tools = ConfigLoader.tools_from_yaml(config_path, base=tools)
        except FileNotFoundError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Config file not found: `{config_path}`.",
                hint="Provide an existing path via `--config <path.yaml>`.",
            ) from exc
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid config file `{config_path}`: {exc}",
                hint="Fix config schema/values and rerun.",
            ) from exc
        except Exception as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Failed to load config file `{config_path}`: {exc}",
                hint="Verify YAML syntax and file permissions.",
            ) from exc

    try:
        return ConfigLoader.tools_from_env(base=tools)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid environment override: {exc}",
            hint="Fix or unset the offending `CHAPTERSPLIT_*` variable.",
        ) from exc


@app.command()
def split_command(
    ctx: typer.Context,
    input_file: Annotated[
        Path | None,
        typer.Argument(help="Chaptered input container, e.g. `book.m4b`."),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Argument(help="Directory receiving one file per chapter."),
    ] = None,
    title: Annotated[
        str,
        typer.Option(
            "-t",
            "--title",
            help=(
                "Title. If empty, the title tag from metadata or the basename "
                "of the input file is used."
            ),
        ),
    ] = "",
    chapter_number: Annotated[
        bool,
        typer.Option("-c", "--chapter-number", help="Include chapter number in filename."),
    ] = False,
    activation_bytes: Annotated[
        str,
        typer.Option(
            "-a",
            "--activation-bytes",
            help="Audible activation bytes for .aax files.",
        ),
    ] = "",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML file with tool settings."),
    ] = None,
) -> None:
    """Split INPUT_FILE into one encoded file per chapter inside OUTPUT_DIR."""

    if input_file is None or output_dir is None:
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(code=1)

    try:
        config = SplitConfig(
            input_path=input_file,
            output_dir=output_dir,
            title=title,
            with_chapter_number=chapter_number,
            activation_bytes=activation_bytes,
            tools=_load_tool_settings(config_file),
        )
        progress = ChapterProgressIndicator()
        pipeline = ChapterSplitPipeline(
            run_logger=RunLogger(),
            chapter_progress_callback=progress.on_chapter_start,
        )
        result = pipeline.run(config)
    except Exception as exc:
        exit_with_command_error("split", exc)

    echo_split_summary(result)
    typer.echo("OK")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
