"""Typed values flowing through one weave pass."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union

from ref_embed.artifact.models import Resource
from ref_embed.errors import ReadError

COMPRESSED_SUFFIX = ".compressed"


@dataclass(frozen=True, slots=True)
class ConfigDirective:
    """Sets default compression and the resource name prefix."""

    default_compress: bool = False
    prefix: str | None = None


@dataclass(frozen=True, slots=True)
class IncludeAllDirective:
    """Embeds every candidate unless excluded."""


@dataclass(frozen=True, slots=True)
class IncludeDirective:
    """Embeds one named candidate, optionally overriding its compression."""

    name: str
    compress: bool | None = None


@dataclass(frozen=True, slots=True)
class ExcludeDirective:
    """Keeps one named candidate out of the artifact."""

    name: str


Directive = Union[ConfigDirective, IncludeAllDirective, IncludeDirective, ExcludeDirective]


@dataclass(frozen=True, slots=True)
class EmbedPolicy:
    """Resolved embedding policy.

    ``filter_set`` names the candidates to include in allow-list mode
    (``exclude_mode=False``) and the candidates to exclude in deny-list mode.
    """

    prefix: str
    filter_set: frozenset[str] = frozenset()
    exclude_mode: bool = False
    default_compression: bool = False
    compression_overrides: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def includes(self, name: str) -> bool:
        return self.exclude_mode ^ (name in self.filter_set)

    def compression_for(self, name: str) -> bool:
        return self.compression_overrides.get(name, self.default_compression)

    def resource_name(self, name: str, compressed: bool) -> str:
        return self.prefix + name + (COMPRESSED_SUFFIX if compressed else "")


@dataclass(frozen=True, slots=True)
class Candidate:
    """A named blob eligible for embedding, backed by a file or in-memory bytes."""

    name: str
    path: Path | None = None
    content: bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if (self.path is None) == (self.content is None):
            raise ValueError(f"candidate {self.name!r} needs exactly one of path or content")

    @property
    def source(self) -> str:
        return str(self.path) if self.path is not None else "<memory>"

    def read_bytes(self) -> bytes:
        """Return the full candidate content, raising ReadError when unreadable."""

        if self.content is not None:
            return self.content
        if self.path is None:
            raise ReadError("candidate has no content source", candidate=self.name)
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise ReadError(f"candidate content unreadable: {exc.strerror or exc}", candidate=self.name, path=self.path) from exc


@dataclass(frozen=True, slots=True)
class ResourceBlob:
    """Final named resource produced for one included candidate."""

    final_name: str
    data: bytes = field(repr=False)
    compressed: bool
    candidate_name: str
    source_size: int

    def to_resource(self) -> Resource:
        return Resource(name=self.final_name, data=self.data)


def strip_candidate_extension(name: str, extensions: tuple[str, ...]) -> str:
    """Drop one trailing candidate file extension, keeping other dots."""

    stripped = name.strip()
    lowered = stripped.lower()
    for extension in extensions:
        if lowered.endswith(extension) and len(stripped) > len(extension):
            return stripped[: -len(extension)]
    return stripped


def normalize_candidate(candidate: Candidate, extensions: tuple[str, ...]) -> Candidate:
    """Return the candidate named the way directives name it."""

    name = strip_candidate_extension(candidate.name, extensions)
    if name == candidate.name:
        return candidate
    return replace(candidate, name=name)
