"""Weave pass orchestration: extract, resolve, select, synthesize, write."""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Sequence
from uuid import uuid4

from ref_embed.artifact.archive import read_artifact, write_artifact
from ref_embed.config import AppSettings
from ref_embed.errors import ReadError
from ref_embed.ingest.candidates import discover_candidates
from ref_embed.utils.paths import write_json_atomically
from ref_embed.utils.time_utils import now_utc
from ref_embed.weave.directives import extract_directives
from ref_embed.weave.models import Candidate, EmbedPolicy, normalize_candidate
from ref_embed.weave.policy import resolve_policy
from ref_embed.weave.report import build_decisions, outcome_counts, write_decisions_parquet
from ref_embed.weave.resources import synthesize_resources
from ref_embed.weave.selection import select_candidates

LOGGER = logging.getLogger(__name__)

PassState = Literal["idle", "extracting", "resolving", "selecting", "synthesizing", "writing", "done", "failed"]


@dataclass(frozen=True, slots=True)
class WeaveRunOptions:
    """Runtime options for one weave pass."""

    candidates: Sequence[Candidate] | None = None
    candidates_dir: Path | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class WeavePassResult:
    """Return object for weave pass outcomes."""

    run_id: str
    state: PassState
    output_path: Path
    summary: dict[str, Any]
    failed_state: PassState | None = None
    error: BaseException | None = None
    summary_path: Path | None = None
    decisions_path: Path | None = None
    resource_names: tuple[str, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.state == "done"


def _policy_snapshot(policy: EmbedPolicy | None) -> dict[str, Any] | None:
    if policy is None:
        return None
    return {
        "prefix": policy.prefix,
        "exclude_mode": policy.exclude_mode,
        "filter_set": sorted(policy.filter_set),
        "default_compression": policy.default_compression,
        "compression_overrides": dict(sorted(policy.compression_overrides.items())),
    }


def _supply_candidates(
    settings: AppSettings,
    input_path: Path,
    options: WeaveRunOptions,
    logger: logging.Logger,
) -> tuple[list[Candidate], bool]:
    """Return the candidate list and whether it came from an open-ended scan."""

    if options.candidates is not None:
        extensions = settings.embed.candidate_extensions
        return [normalize_candidate(candidate, extensions) for candidate in options.candidates], False
    directory = options.candidates_dir or input_path.parent
    try:
        discovered = discover_candidates(
            directory,
            settings.embed.candidate_patterns,
            exclude=input_path,
            logger=logger,
        )
    except OSError as exc:
        raise ReadError(f"candidate directory unreadable: {exc}", directory=directory) from exc
    return discovered, True


def run_weave_pass(
    settings: AppSettings,
    input_path: Path,
    output_path: Path | None = None,
    *,
    options: WeaveRunOptions | None = None,
    logger: logging.Logger | None = None,
) -> WeavePassResult:
    """Run one weave pass; failures are reported in the result, never raised."""

    effective_logger = logger or LOGGER
    run_options = options or WeaveRunOptions()
    target_path = output_path or input_path
    embed = settings.embed

    run_id = f"weave-run-{uuid4().hex[:12]}"
    started_ts = now_utc()
    started_mono = time.monotonic()

    state: PassState = "idle"
    failed_state: PassState | None = None
    error: BaseException | None = None
    policy: EmbedPolicy | None = None
    candidates: list[Candidate] = []
    unmatched: tuple[str, ...] = ()
    blobs = ()
    conflicts = ()
    directives_count = 0
    dropped_count = 0
    removed_references: list[str] = []

    effective_logger.info(
        "weave_pass.start run_id=%s input=%s output=%s dry_run=%s",
        run_id,
        input_path,
        target_path,
        run_options.dry_run,
    )

    try:
        state = "extracting"
        artifact = read_artifact(input_path, logger=effective_logger)
        extraction = extract_directives(
            artifact,
            namespace=embed.directive_namespace,
            support_reference=embed.support_reference,
            extensions=embed.candidate_extensions,
            logger=effective_logger,
        )
        directives_count = len(extraction.directives)
        dropped_count = len(extraction.parse_errors)
        removed_references = [ref.name for ref in extraction.removed_references]

        state = "resolving"
        policy = resolve_policy(extraction.directives, default_prefix=embed.default_prefix, logger=effective_logger)

        state = "selecting"
        candidates, open_ended = _supply_candidates(settings, input_path, run_options, effective_logger)
        selection = select_candidates(policy, candidates, consume=open_ended, logger=effective_logger)
        unmatched = selection.unmatched_filter_names

        state = "synthesizing"
        synthesis = synthesize_resources(
            policy,
            selection.included,
            extraction.artifact.resource_names(),
            compression_level=embed.compression_level,
            logger=effective_logger,
        )
        blobs = synthesis.blobs
        conflicts = synthesis.conflicts

        state = "writing"
        woven = extraction.artifact.with_resources(blob.to_resource() for blob in blobs)
        if run_options.dry_run:
            effective_logger.info("weave_pass.dry_run_skip_write output=%s", target_path)
        else:
            write_artifact(woven, target_path, logger=effective_logger)
        state = "done"
    except Exception as exc:
        failed_state = state
        state = "failed"
        error = exc
        effective_logger.error(
            "weave_pass.failed run_id=%s state=%s kind=%s error=%s\n%s",
            run_id,
            failed_state,
            type(exc).__name__,
            exc,
            traceback.format_exc(),
        )

    decisions = build_decisions(candidates, policy, blobs, conflicts)
    summary: dict[str, Any] = {
        "run_id": run_id,
        "started_ts": started_ts.isoformat(),
        "finished_ts": now_utc().isoformat(),
        "duration_sec": round(time.monotonic() - started_mono, 3),
        "input_path": str(input_path),
        "output_path": str(target_path),
        "dry_run": run_options.dry_run,
        "state": state,
        "failed_state": failed_state,
        "error": None if error is None else {"type": type(error).__name__, "message": str(error)},
        "directives_total": directives_count,
        "directives_dropped": dropped_count,
        "removed_references": removed_references,
        "policy": _policy_snapshot(policy),
        "candidates_total": len(candidates),
        "outcome_counts": outcome_counts(decisions),
        "resources_added": [blob.final_name for blob in blobs],
        "conflicts_skipped": [str(conflict.context.get("resource")) for conflict in conflicts],
        "unmatched_filter_names": list(unmatched),
    }

    run_dir = settings.paths.reports_root / "weave" / run_id
    summary_path: Path | None = None
    decisions_path: Path | None = None
    try:
        if settings.reports.write_decisions:
            decisions_path = write_decisions_parquet(decisions, run_dir / "decisions.parquet")
            summary["decisions_path"] = str(decisions_path)
        if settings.reports.write_summary:
            summary_path = write_json_atomically(summary, run_dir / "summary.json")
    except OSError as exc:
        effective_logger.warning("weave_pass.report_write_failed run_id=%s error=%s", run_id, exc)

    effective_logger.info(
        "weave_pass.finish run_id=%s state=%s resources_added=%s conflicts=%s summary=%s",
        run_id,
        state,
        len(blobs),
        len(conflicts),
        summary_path,
    )
    return WeavePassResult(
        run_id=run_id,
        state=state,
        output_path=target_path,
        summary=summary,
        failed_state=failed_state,
        error=error,
        summary_path=summary_path,
        decisions_path=decisions_path,
        resource_names=tuple(blob.final_name for blob in blobs),
    )
