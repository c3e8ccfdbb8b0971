"""Typer CLI entrypoint for ref_embed."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml

from ref_embed.artifact.archive import read_artifact
from ref_embed.config import AppSettings, load_settings
from ref_embed.errors import ReadError
from ref_embed.ingest.candidates import load_candidate_list
from ref_embed.logging_utils import configure_logging
from ref_embed.weave.directives import directive_kind
from ref_embed.weave.models import COMPRESSED_SUFFIX
from ref_embed.weave.pipeline import WeaveRunOptions, run_weave_pass

app = typer.Typer(
    add_completion=False,
    help="ref_embed command line interface.",
    no_args_is_help=True,
)


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(config_file=config_file)
    if configure:
        logger = configure_logging(settings.paths.logs_root / "weave.log")
    else:
        logger = logging.getLogger("ref_embed")
    return settings, logger


@app.command("show-config")
def show_config(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("weave")
def weave_cmd(
    input_artifact: Path = typer.Argument(..., help="Artifact archive to weave."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output artifact path. Defaults to rewriting the input in place.",
        dir_okay=False,
    ),
    candidates_file: Path | None = typer.Option(
        None,
        "--candidates-file",
        help="YAML reference list of candidates (name + path).",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    candidates_dir: Path | None = typer.Option(
        None,
        "--candidates-dir",
        help="Directory to scan for candidates. Defaults to the input artifact's directory.",
        file_okay=False,
        dir_okay=True,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Resolve and synthesize without writing the output artifact.",
    ),
    no_fail: bool = typer.Option(
        False,
        "--no-fail",
        help="Exit 0 even when the pass fails.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Embed selected candidates into an artifact according to its directives."""

    if candidates_file is not None and candidates_dir is not None:
        raise typer.BadParameter("Provide at most one of --candidates-file or --candidates-dir.")

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)

    candidates = None
    if candidates_file is not None:
        try:
            candidates = load_candidate_list(candidates_file, settings.embed.candidate_patterns, logger=logger)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise typer.BadParameter(f"candidates-file could not be loaded: {exc}") from exc

    options = WeaveRunOptions(candidates=candidates, candidates_dir=candidates_dir, dry_run=dry_run)
    result = run_weave_pass(settings, input_artifact, output, options=options, logger=logger)

    summary = result.summary
    typer.echo(f"run_id: {result.run_id}")
    typer.echo(f"state: {result.state}")
    typer.echo(f"output_path: {result.output_path}")
    typer.echo(f"directives_total: {summary['directives_total']}")
    typer.echo(f"directives_dropped: {summary['directives_dropped']}")
    typer.echo(f"candidates_total: {summary['candidates_total']}")
    typer.echo(f"resources_added: {len(result.resource_names)}")
    for name in result.resource_names:
        typer.echo(f"  {name}")
    if summary["conflicts_skipped"]:
        typer.echo(f"conflicts_skipped: {', '.join(summary['conflicts_skipped'])}")
    if summary["unmatched_filter_names"]:
        typer.echo(f"unmatched_filter_names: {', '.join(summary['unmatched_filter_names'])}")
    if result.summary_path is not None:
        typer.echo(f"summary_path: {result.summary_path}")

    if not result.ok:
        typer.echo(f"weave failed during {result.failed_state}: {result.error}", err=True)
        if no_fail:
            logger.warning("weave_cmd.failure_ignored run_id=%s", result.run_id)
            return
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_cmd(
    artifact_path: Path = typer.Argument(..., help="Artifact archive to inspect."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """List an artifact's metadata items, references and resources."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    try:
        artifact = read_artifact(artifact_path)
    except ReadError as exc:
        raise typer.BadParameter(str(exc)) from exc

    namespace = settings.embed.directive_namespace
    typer.echo(f"name: {artifact.name}")
    typer.echo(f"metadata: {len(artifact.metadata)}")
    for item in artifact.metadata:
        marker = " [directive]" if directive_kind(item.type_name, namespace) else ""
        typer.echo(f"  {item.type_name}{list(item.args)}{marker}")
    typer.echo(f"references: {len(artifact.references)}")
    for reference in artifact.references:
        typer.echo(f"  {reference.name} {reference.version or ''}".rstrip())
    typer.echo(f"resources: {len(artifact.resources)}")
    for resource in artifact.resources:
        marker = " [compressed]" if resource.name.endswith(COMPRESSED_SUFFIX) else ""
        typer.echo(f"  {resource.name} bytes={len(resource.data)}{marker}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
