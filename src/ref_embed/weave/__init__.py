"""Directive resolution and resource synthesis for one weave pass.

The pass orchestration lives in ``ref_embed.weave.pipeline``; it depends on
candidate supply and is not re-exported here.
"""

from ref_embed.weave.directives import DirectiveExtraction, extract_directives, parse_directive
from ref_embed.weave.models import (
    Candidate,
    ConfigDirective,
    Directive,
    EmbedPolicy,
    ExcludeDirective,
    IncludeAllDirective,
    IncludeDirective,
    ResourceBlob,
    normalize_candidate,
    strip_candidate_extension,
)
from ref_embed.weave.policy import resolve_policy
from ref_embed.weave.resources import SynthesisResult, compress_raw, synthesize_resources
from ref_embed.weave.selection import CandidateSelection, select_candidates

__all__ = [
    "Candidate",
    "CandidateSelection",
    "ConfigDirective",
    "Directive",
    "DirectiveExtraction",
    "EmbedPolicy",
    "ExcludeDirective",
    "IncludeAllDirective",
    "IncludeDirective",
    "ResourceBlob",
    "SynthesisResult",
    "compress_raw",
    "extract_directives",
    "normalize_candidate",
    "parse_directive",
    "resolve_policy",
    "select_candidates",
    "strip_candidate_extension",
    "synthesize_resources",
]
