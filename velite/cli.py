"""CLI entrypoint for writing Velite build outputs."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import Config, load_config
from .output import BuildOutputs, OutputError, run_output_build

console = Console()
app = typer.Typer(help="Velite content output toolkit.")


class BuildMode(str, Enum):
    """Serialization mode for data files."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log skipped writes and other debug details."),
    ] = False,
) -> None:
    """Persist built collections as data, entry and asset files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def output(
    result_path: Annotated[
        Path,
        typer.Option("--result", "-r", help="JSON file mapping collection keys to built records."),
    ],
    config_path: ConfigPathOption = "velite.yml",
    assets_path: Annotated[
        Path | None,
        typer.Option("--assets", "-a", help="JSON file mapping asset names to source paths."),
    ] = None,
    config_module: Annotated[
        Path | None,
        typer.Option(
            "--config-module",
            help="Typed config module to reference from index.d.ts instead of inlining schemas.",
        ),
    ] = None,
    mode: Annotated[
        BuildMode | None,
        typer.Option("--mode", "-m", help="Override the VELITE_ENV build mode for JSON output."),
    ] = None,
) -> None:
    """Write data files, the entry module and assets for a finished build."""
    config: Config = _load(config_path)
    result = _read_json(result_path, "--result")
    assets: dict[str, str] = {}
    if assets_path is not None:
        raw_assets = _read_json(assets_path, "--assets")
        base = assets_path.parent.resolve()
        assets = {name: str(_resolve(base, Path(source))) for name, source in raw_assets.items()}

    try:
        outputs = run_output_build(
            config,
            result,
            assets,
            config_module=config_module,
            minify=None if mode is None else mode is BuildMode.PRODUCTION,
        )
    except OutputError as exc:
        console.print(f"[bold red]Output failed[/]: {exc.strerror} ({exc.path})")
        raise typer.Exit(code=1) from exc

    _print_output_summary(config, outputs)


def _print_output_summary(config: Config, outputs: BuildOutputs) -> None:
    console.print(
        f"[bold green]Output complete[/]: {len(outputs.counts)} collection(s) written to "
        f"{config.output.data}; {outputs.assets.count} asset(s) copied."
    )
    for key, count in outputs.counts.items():
        console.print(f"  [cyan]{key}[/]: {count} record(s)")
    console.print(f"[dim]Finished in {outputs.elapsed_seconds:.2f}s.[/]")


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _read_json(path: Path, option: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"File not found: {path}", param_hint=option) from exc
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in {path}: {exc}", param_hint=option) from exc
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} should contain a JSON object.", param_hint=option)
    return data


def _resolve(base: Path, value: Path) -> Path:
    return value if value.is_absolute() else (base / value).resolve()
