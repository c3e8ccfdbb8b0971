"""Candidate supply collaborators."""

from ref_embed.ingest.candidates import discover_candidates, load_candidate_list

__all__ = [
    "discover_candidates",
    "load_candidate_list",
]
