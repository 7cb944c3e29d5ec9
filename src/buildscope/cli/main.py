"""Click CLI group: serve, recipe, manifest, compile and speed-test commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from buildscope.analysis import get_analysis_client, get_speed_estimator
from buildscope.analysis.capabilities import CAPABILITY_OPTIONS, ComputeCapabilities
from buildscope.analysis.results import compilation_payload, manifest_payload, recipe_payload
from buildscope.config import get_settings
from buildscope.logging import configure_logging


def _choices(field: str) -> click.Choice:
    return click.Choice([option["value"] for option in CAPABILITY_OPTIONS[field]])


def _read_text(path: Path | None) -> str:
    if path is None:
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"{path} is not valid UTF-8 text") from exc


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this invocation.")
def cli(log_level: str | None) -> None:
    """BuildScope: Dockerfile and requirements analysis."""
    configure_logging(log_level or get_settings().log_level)


@cli.command()
@click.option("--host", default=None, help="Bind host (default: BIND_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: BIND_PORT).")
def serve(host: str | None, port: int | None) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "buildscope.main:app",
        host=host or settings.bind_host,
        port=port or settings.bind_port,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("dockerfile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def recipe(dockerfile: Path) -> None:
    """Break down each instruction of DOCKERFILE."""
    outcome = asyncio.run(get_analysis_client().analyze_recipe(_read_text(dockerfile)))
    _echo_json(recipe_payload(outcome))


@cli.command()
@click.argument("requirements", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def manifest(requirements: Path) -> None:
    """Estimate download sizes of the packages in REQUIREMENTS."""
    outcome = asyncio.run(get_analysis_client().analyze_manifest(_read_text(requirements)))
    _echo_json(manifest_payload(outcome))


@cli.command("compile")
@click.option(
    "--recipe", "recipe_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--manifest", "manifest_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--cpu", type=_choices("cpu"), default="medium", show_default=True)
@click.option("--memory", type=_choices("memory"), default="medium", show_default=True)
@click.option(
    "--architecture", type=_choices("architecture"), default="x86_64", show_default=True
)
@click.option("--environment", type=_choices("environment"), default="local", show_default=True)
def compile_estimate(
    recipe_path: Path | None,
    manifest_path: Path | None,
    cpu: str,
    memory: str,
    architecture: str,
    environment: str,
) -> None:
    """Estimate build time and bottlenecks for the given compute capabilities."""
    if recipe_path is None and manifest_path is None:
        raise click.ClickException("at least one of --recipe or --manifest is required")
    capabilities = ComputeCapabilities(
        cpu=cpu,  # type: ignore[arg-type]
        memory=memory,  # type: ignore[arg-type]
        architecture=architecture,  # type: ignore[arg-type]
        environment=environment,  # type: ignore[arg-type]
    )
    outcome = asyncio.run(
        get_analysis_client().analyze_compilation_profile(
            _read_text(recipe_path), _read_text(manifest_path), capabilities
        )
    )
    _echo_json(compilation_payload(outcome))


@cli.command("speed-test")
@click.option(
    "--total-size",
    default=None,
    help='Total download size used for the time estimate, e.g. "51.0 MB".',
)
def speed_test(total_size: str | None) -> None:
    """Measure download throughput and estimate download time."""
    result = asyncio.run(get_speed_estimator().measure_throughput(total_size))
    _echo_json(result.to_dict())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
