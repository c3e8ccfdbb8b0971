"""Artifact container model and archive IO."""

from ref_embed.artifact.archive import MANIFEST_ENTRY, RESOURCE_PREFIX, read_artifact, write_artifact
from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem, Resource

__all__ = [
    "Artifact",
    "ArtifactReference",
    "MetadataItem",
    "Resource",
    "MANIFEST_ENTRY",
    "RESOURCE_PREFIX",
    "read_artifact",
    "write_artifact",
]
