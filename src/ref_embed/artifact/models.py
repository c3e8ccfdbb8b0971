"""In-memory model of a compiled artifact container."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable


@dataclass(frozen=True, slots=True)
class MetadataItem:
    """One declarative metadata entry attached to the artifact."""

    type_name: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class ArtifactReference:
    """A runtime dependency the artifact declares."""

    name: str
    version: str | None = None


@dataclass(frozen=True, slots=True)
class Resource:
    """A named blob in the artifact's resource table."""

    name: str
    data: bytes


@dataclass(frozen=True, slots=True)
class Artifact:
    """Immutable snapshot of an artifact; edits produce new snapshots."""

    name: str
    metadata: tuple[MetadataItem, ...] = ()
    references: tuple[ArtifactReference, ...] = ()
    resources: tuple[Resource, ...] = ()
    payload: tuple[tuple[str, bytes], ...] = field(default=(), repr=False)

    def resource_names(self) -> frozenset[str]:
        """Return names currently present in the resource table."""

        return frozenset(resource.name for resource in self.resources)

    def with_metadata(
        self,
        metadata: Iterable[MetadataItem],
        references: Iterable[ArtifactReference],
    ) -> "Artifact":
        """Return a copy with rebuilt metadata and reference lists."""

        return replace(self, metadata=tuple(metadata), references=tuple(references))

    def with_resources(self, resources: Iterable[Resource]) -> "Artifact":
        """Return a copy with resources appended to the resource table."""

        return replace(self, resources=self.resources + tuple(resources))
