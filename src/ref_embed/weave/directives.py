"""Extract embedding directives from artifact metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem
from ref_embed.errors import DirectiveParseError
from ref_embed.weave.models import (
    ConfigDirective,
    Directive,
    ExcludeDirective,
    IncludeAllDirective,
    IncludeDirective,
    strip_candidate_extension,
)

LOGGER = logging.getLogger(__name__)

CONFIG_KIND = "EmbedConfig"
INCLUDE_ALL_KIND = "EmbedIncludeAll"
INCLUDE_KIND = "EmbedInclude"
EXCLUDE_KIND = "EmbedExclude"
DIRECTIVE_KINDS: tuple[str, ...] = (CONFIG_KIND, INCLUDE_ALL_KIND, INCLUDE_KIND, EXCLUDE_KIND)

DEFAULT_NAMESPACE = "ref_embed"
DEFAULT_EXTENSIONS: tuple[str, ...] = (".dll", ".exe")


@dataclass(frozen=True, slots=True)
class DirectiveExtraction:
    """Directives in stored order plus the artifact with them stripped."""

    directives: tuple[Directive, ...]
    artifact: Artifact
    removed_items: tuple[MetadataItem, ...]
    removed_references: tuple[ArtifactReference, ...]
    parse_errors: tuple[DirectiveParseError, ...]


def directive_kind(type_name: str, namespace: str = DEFAULT_NAMESPACE) -> str | None:
    """Return the directive kind for a metadata type name, or None if unrecognized."""

    head, _, kind = type_name.rpartition(".")
    if head == namespace and kind in DIRECTIVE_KINDS:
        return kind
    return None


def _positional_args(item: MetadataItem) -> tuple[bool | None, str | None]:
    """Match arguments by type: first bool, first string. None counts as absent."""

    flags: list[bool] = []
    texts: list[str] = []
    for position, arg in enumerate(item.args):
        if arg is None:
            continue
        if isinstance(arg, bool):
            flags.append(arg)
        elif isinstance(arg, str):
            texts.append(arg)
        else:
            raise DirectiveParseError(
                "unsupported directive argument type",
                directive=item.type_name,
                position=position,
                arg_type=type(arg).__name__,
            )
    if len(flags) > 1 or len(texts) > 1:
        raise DirectiveParseError(
            "directive takes at most one bool and one string argument",
            directive=item.type_name,
            args=list(item.args),
        )
    return (flags[0] if flags else None), (texts[0] if texts else None)


def parse_directive(
    item: MetadataItem,
    kind: str,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> Directive:
    """Parse one recognized metadata item into a typed directive."""

    flag, text = _positional_args(item)

    if kind == CONFIG_KIND:
        return ConfigDirective(default_compress=bool(flag), prefix=text)

    if kind == INCLUDE_ALL_KIND:
        if flag is not None or text is not None:
            raise DirectiveParseError("include-all directive takes no arguments", directive=item.type_name)
        return IncludeAllDirective()

    if text is None or not text.strip():
        raise DirectiveParseError("directive requires a candidate name", directive=item.type_name)
    name = strip_candidate_extension(text, extensions)

    if kind == INCLUDE_KIND:
        return IncludeDirective(name=name, compress=flag)

    if flag is not None:
        raise DirectiveParseError("exclude directive takes no compression flag", directive=item.type_name, name=name)
    return ExcludeDirective(name=name)


def extract_directives(
    artifact: Artifact,
    *,
    namespace: str = DEFAULT_NAMESPACE,
    support_reference: str = DEFAULT_NAMESPACE,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    logger: logging.Logger | None = None,
) -> DirectiveExtraction:
    """Collect directive items and the support reference, then rebuild the artifact without them."""

    effective_logger = logger or LOGGER

    directives: list[Directive] = []
    parse_errors: list[DirectiveParseError] = []
    removed_positions: set[int] = set()
    for position, item in enumerate(artifact.metadata):
        kind = directive_kind(item.type_name, namespace)
        if kind is None:
            continue
        removed_positions.add(position)
        try:
            directives.append(parse_directive(item, kind, extensions))
        except DirectiveParseError as exc:
            effective_logger.warning("directives.dropped position=%s error=%s", position, exc)
            parse_errors.append(exc)

    retained_metadata = [item for position, item in enumerate(artifact.metadata) if position not in removed_positions]
    removed_items = tuple(item for position, item in enumerate(artifact.metadata) if position in removed_positions)
    retained_references = [ref for ref in artifact.references if ref.name != support_reference]
    removed_references = tuple(ref for ref in artifact.references if ref.name == support_reference)

    effective_logger.info(
        "directives.extracted directives=%s dropped=%s removed_items=%s removed_references=%s",
        len(directives),
        len(parse_errors),
        len(removed_items),
        len(removed_references),
    )
    return DirectiveExtraction(
        directives=tuple(directives),
        artifact=artifact.with_metadata(retained_metadata, retained_references),
        removed_items=removed_items,
        removed_references=removed_references,
        parse_errors=tuple(parse_errors),
    )
