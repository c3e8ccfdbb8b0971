"""Candidate supply: directory scans and explicit reference lists."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import yaml

from ref_embed.weave.models import Candidate, strip_candidate_extension

LOGGER = logging.getLogger(__name__)


def _extensions_from_patterns(patterns: Sequence[str]) -> tuple[str, ...]:
    return tuple(pattern[1:].lower() for pattern in patterns if pattern.startswith("*."))


def discover_candidates(
    directory: Path,
    patterns: Sequence[str] = ("*.dll", "*.exe"),
    *,
    exclude: Path | None = None,
    logger: logging.Logger | None = None,
) -> list[Candidate]:
    """Scan the top level of a directory for candidate files, sorted by file name."""

    effective_logger = logger or LOGGER
    if not directory.is_dir():
        raise FileNotFoundError(f"candidate directory {directory} is not found")

    extensions = _extensions_from_patterns(patterns)
    excluded = exclude.resolve() if exclude is not None else None
    candidates: list[Candidate] = []
    for file_path in sorted(directory.iterdir(), key=lambda path: path.name):
        if not file_path.is_file() or file_path.suffix.lower() not in extensions:
            continue
        if excluded is not None and file_path.resolve() == excluded:
            continue
        candidates.append(
            Candidate(
                name=strip_candidate_extension(file_path.name, extensions),
                path=file_path.resolve(strict=False),
            )
        )
    effective_logger.info("candidates.discovered directory=%s count=%s", directory, len(candidates))
    return candidates


def _candidate_from_entry(entry: Any, base_dir: Path, extensions: tuple[str, ...]) -> Candidate:
    if isinstance(entry, str):
        path = Path(entry)
        name = strip_candidate_extension(path.name, extensions)
    elif isinstance(entry, dict) and isinstance(entry.get("path"), str):
        path = Path(entry["path"])
        raw_name = entry.get("name")
        name = strip_candidate_extension(str(raw_name) if raw_name is not None else path.name, extensions)
    else:
        raise ValueError(f"candidate entry must be a path or a mapping with 'path', got {entry!r}")
    if not path.is_absolute():
        path = (base_dir / path).resolve(strict=False)
    if not name:
        raise ValueError(f"candidate entry has an empty name: {entry!r}")
    return Candidate(name=name, path=path)


def load_candidate_list(
    list_file: Path,
    patterns: Sequence[str] = ("*.dll", "*.exe"),
    logger: logging.Logger | None = None,
) -> list[Candidate]:
    """Load an explicit, ordered candidate reference list from YAML."""

    effective_logger = logger or LOGGER
    with list_file.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)

    entries = payload.get("candidates") if isinstance(payload, dict) else payload
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise ValueError(f"candidate list {list_file} must contain a list of candidates")

    extensions = _extensions_from_patterns(patterns)
    candidates: list[Candidate] = []
    seen: set[str] = set()
    for entry in entries:
        candidate = _candidate_from_entry(entry, list_file.parent, extensions)
        if candidate.name in seen:
            raise ValueError(f"duplicate candidate name {candidate.name!r} in {list_file}")
        seen.add(candidate.name)
        candidates.append(candidate)

    effective_logger.info("candidates.loaded list_file=%s count=%s", list_file, len(candidates))
    return candidates
