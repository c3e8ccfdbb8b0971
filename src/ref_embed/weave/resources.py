"""Turn included candidates into named, optionally compressed resource blobs."""

from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass
from typing import AbstractSet, Sequence

from ref_embed.errors import ConflictError
from ref_embed.weave.models import Candidate, EmbedPolicy, ResourceBlob

LOGGER = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 9


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Blobs to append, plus conflicts that were skipped."""

    blobs: tuple[ResourceBlob, ...]
    conflicts: tuple[ConflictError, ...]


def compress_raw(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """Compress as a single headerless deflate stream."""

    compressor = zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def synthesize_resources(
    policy: EmbedPolicy,
    candidates: Sequence[Candidate],
    existing_names: AbstractSet[str] = frozenset(),
    *,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    logger: logging.Logger | None = None,
) -> SynthesisResult:
    """Build one resource blob per candidate, skipping names already taken.

    Candidate read failures raise ``ReadError`` and abort the remaining work.
    """

    effective_logger = logger or LOGGER
    taken = set(existing_names)
    blobs: list[ResourceBlob] = []
    conflicts: list[ConflictError] = []

    for candidate in candidates:
        compress = policy.compression_for(candidate.name)
        final_name = policy.resource_name(candidate.name, compress)
        if final_name in taken:
            conflict = ConflictError("resource already exists", resource=final_name, candidate=candidate.name)
            effective_logger.warning("resources.skipped_conflict resource=%s candidate=%s", final_name, candidate.name)
            conflicts.append(conflict)
            continue

        content = candidate.read_bytes()
        data = compress_raw(content, compression_level) if compress else content
        blobs.append(
            ResourceBlob(
                final_name=final_name,
                data=data,
                compressed=compress,
                candidate_name=candidate.name,
                source_size=len(content),
            )
        )
        taken.add(final_name)
        effective_logger.info(
            "resources.synthesized resource=%s source=%s bytes_in=%s bytes_out=%s",
            final_name,
            candidate.source,
            len(content),
            len(data),
        )

    return SynthesisResult(blobs=tuple(blobs), conflicts=tuple(conflicts))
