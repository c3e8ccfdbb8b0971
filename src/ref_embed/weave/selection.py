"""Apply the policy's inclusion rule to the candidate list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ref_embed.weave.models import Candidate, EmbedPolicy

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CandidateSelection:
    """Included and excluded candidates in input order."""

    included: tuple[Candidate, ...]
    excluded: tuple[Candidate, ...]
    unmatched_filter_names: tuple[str, ...]


def select_candidates(
    policy: EmbedPolicy,
    candidates: Sequence[Candidate],
    *,
    consume: bool = False,
    logger: logging.Logger | None = None,
) -> CandidateSelection:
    """Include a candidate iff ``exclude_mode XOR name in filter_set``.

    With ``consume=True`` each filter entry matches at most one candidate, the
    way an open-ended directory scan needs it; entries never matched are
    reported either way.
    """

    effective_logger = logger or LOGGER
    remaining = set(policy.filter_set)
    included: list[Candidate] = []
    excluded: list[Candidate] = []

    for candidate in candidates:
        if consume:
            matched = candidate.name in remaining
            remaining.discard(candidate.name)
        else:
            matched = candidate.name in policy.filter_set
            remaining.discard(candidate.name)
        if policy.exclude_mode ^ matched:
            included.append(candidate)
        else:
            excluded.append(candidate)

    unmatched = tuple(sorted(remaining))
    for name in unmatched:
        effective_logger.warning("selection.unmatched_filter name=%s exclude_mode=%s", name, policy.exclude_mode)
    effective_logger.info(
        "selection.done candidates=%s included=%s excluded=%s unmatched=%s",
        len(candidates),
        len(included),
        len(excluded),
        len(unmatched),
    )
    return CandidateSelection(
        included=tuple(included),
        excluded=tuple(excluded),
        unmatched_filter_names=unmatched,
    )
