"""Read and write artifact containers stored as zip archives.

Layout:

* ``artifact.json`` holds the artifact name, ordered metadata items and
  declared references.
* ``resources/<name>`` holds one entry per embedded resource.
* any other entry is opaque payload, copied through unchanged.
"""

from __future__ import annotations

import json
import logging
import os
import zipfile
from pathlib import Path
from typing import Any

from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem, Resource
from ref_embed.errors import ReadError, WriteError
from ref_embed.utils.paths import atomic_temp_path

LOGGER = logging.getLogger(__name__)

MANIFEST_ENTRY = "artifact.json"
RESOURCE_PREFIX = "resources/"
FORMAT_VERSION = 1


def _parse_metadata(raw: Any, path: Path) -> tuple[MetadataItem, ...]:
    if not isinstance(raw, list):
        raise ReadError("artifact metadata is not a list", path=path)
    items: list[MetadataItem] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict) or not isinstance(entry.get("type"), str):
            raise ReadError("artifact metadata item has no type", path=path, index=index)
        args = entry.get("args", [])
        if not isinstance(args, list):
            raise ReadError("artifact metadata args is not a list", path=path, index=index)
        items.append(MetadataItem(type_name=entry["type"], args=tuple(args)))
    return tuple(items)


def _parse_references(raw: Any, path: Path) -> tuple[ArtifactReference, ...]:
    if not isinstance(raw, list):
        raise ReadError("artifact references is not a list", path=path)
    references: list[ArtifactReference] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ReadError("artifact reference has no name", path=path, index=index)
        version = entry.get("version")
        references.append(ArtifactReference(name=entry["name"], version=None if version is None else str(version)))
    return tuple(references)


def read_artifact(path: Path, logger: logging.Logger | None = None) -> Artifact:
    """Open an artifact archive and enumerate its metadata, references and resources."""

    effective_logger = logger or LOGGER
    if not path.is_file():
        raise ReadError("artifact not found", path=path)

    try:
        with zipfile.ZipFile(path) as archive:
            try:
                manifest = json.loads(archive.read(MANIFEST_ENTRY).decode("utf-8"))
            except KeyError as exc:
                raise ReadError(f"artifact has no {MANIFEST_ENTRY}", path=path) from exc
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise ReadError(f"artifact {MANIFEST_ENTRY} is not valid JSON: {exc}", path=path) from exc

            resources: list[Resource] = []
            payload: list[tuple[str, bytes]] = []
            for info in archive.infolist():
                if info.is_dir() or info.filename == MANIFEST_ENTRY:
                    continue
                data = archive.read(info)
                if info.filename.startswith(RESOURCE_PREFIX):
                    resources.append(Resource(name=info.filename[len(RESOURCE_PREFIX):], data=data))
                else:
                    payload.append((info.filename, data))
    except zipfile.BadZipFile as exc:
        raise ReadError(f"artifact is not a valid archive: {exc}", path=path) from exc
    except OSError as exc:
        raise ReadError(f"artifact could not be opened: {exc}", path=path) from exc

    if not isinstance(manifest, dict):
        raise ReadError(f"artifact {MANIFEST_ENTRY} is not an object", path=path)

    artifact = Artifact(
        name=str(manifest.get("name") or path.stem),
        metadata=_parse_metadata(manifest.get("metadata", []), path),
        references=_parse_references(manifest.get("references", []), path),
        resources=tuple(resources),
        payload=tuple(payload),
    )
    effective_logger.debug(
        "artifact.read path=%s metadata=%s references=%s resources=%s",
        path,
        len(artifact.metadata),
        len(artifact.references),
        len(artifact.resources),
    )
    return artifact


def _manifest_payload(artifact: Artifact) -> dict[str, Any]:
    return {
        "format": FORMAT_VERSION,
        "name": artifact.name,
        "metadata": [{"type": item.type_name, "args": list(item.args)} for item in artifact.metadata],
        "references": [{"name": ref.name, "version": ref.version} for ref in artifact.references],
    }


def write_artifact(artifact: Artifact, output_path: Path, logger: logging.Logger | None = None) -> Path:
    """Persist an artifact atomically via temporary file then os.replace."""

    effective_logger = logger or LOGGER
    temp_path = atomic_temp_path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(temp_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(MANIFEST_ENTRY, json.dumps(_manifest_payload(artifact), indent=2) + "\n")
            for entry_name, data in artifact.payload:
                archive.writestr(entry_name, data)
            for resource in artifact.resources:
                archive.writestr(RESOURCE_PREFIX + resource.name, resource.data)
        os.replace(temp_path, output_path)
    except (OSError, TypeError, ValueError) as exc:
        raise WriteError(f"artifact could not be written: {exc}", path=output_path) from exc
    finally:
        if temp_path.exists():
            temp_path.unlink()

    effective_logger.debug("artifact.write path=%s resources=%s", output_path, len(artifact.resources))
    return output_path
