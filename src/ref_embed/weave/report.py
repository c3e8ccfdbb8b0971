"""Per-candidate decision tables and pass report persistence."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

import polars as pl

from ref_embed.errors import ConflictError
from ref_embed.utils.paths import atomic_temp_path
from ref_embed.weave.models import Candidate, EmbedPolicy, ResourceBlob


def _decision_schema() -> dict[str, pl.DataType]:
    """Stable schema for candidate decision tables."""

    return {
        "candidate_name": pl.String,
        "source": pl.String,
        "included": pl.Boolean,
        "compressed": pl.Boolean,
        "resource_name": pl.String,
        "bytes_in": pl.Int64,
        "bytes_out": pl.Int64,
        "outcome": pl.String,
    }


def build_decisions(
    candidates: Sequence[Candidate],
    policy: EmbedPolicy | None,
    blobs: Sequence[ResourceBlob] = (),
    conflicts: Sequence[ConflictError] = (),
) -> pl.DataFrame:
    """Tabulate what happened to each candidate in this pass."""

    blobs_by_candidate = {blob.candidate_name: blob for blob in blobs}
    conflicted = {str(conflict.context.get("candidate")): conflict for conflict in conflicts}
    rows: list[dict[str, object]] = []
    for candidate in candidates:
        included = policy.includes(candidate.name) if policy is not None else None
        blob = blobs_by_candidate.get(candidate.name)
        row: dict[str, object] = {
            "candidate_name": candidate.name,
            "source": candidate.source,
            "included": included,
            "compressed": None,
            "resource_name": None,
            "bytes_in": None,
            "bytes_out": None,
            "outcome": "not_reached",
        }
        if blob is not None:
            row.update(
                compressed=blob.compressed,
                resource_name=blob.final_name,
                bytes_in=blob.source_size,
                bytes_out=len(blob.data),
                outcome="embedded",
            )
        elif candidate.name in conflicted:
            row.update(resource_name=conflicted[candidate.name].context.get("resource"), outcome="conflict")
        elif included is False:
            row["outcome"] = "excluded"
        rows.append(row)

    if not rows:
        return pl.DataFrame(schema=_decision_schema())
    return pl.DataFrame(rows, schema=_decision_schema())


def write_decisions_parquet(decisions: pl.DataFrame, output_path: Path) -> Path:
    """Write decisions parquet atomically and return output path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = atomic_temp_path(output_path)
    try:
        decisions.write_parquet(temp_path)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def outcome_counts(decisions: pl.DataFrame) -> dict[str, int]:
    """Return candidate counts per outcome."""

    if decisions.height == 0:
        return {}
    result: dict[str, int] = {}
    for row in decisions.group_by("outcome").len(name="count").to_dicts():
        result[str(row["outcome"])] = int(row["count"])
    return dict(sorted(result.items()))
