from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Sequence

import pytest

from ref_embed.artifact.archive import write_artifact
from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem, Resource
from ref_embed.config import AppSettings, PathsConfig

NS = "ref_embed"


@pytest.fixture
def directive() -> Callable[..., MetadataItem]:
    def _directive(kind: str, *args: Any) -> MetadataItem:
        return MetadataItem(type_name=f"{NS}.{kind}", args=tuple(args))

    return _directive


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        paths=PathsConfig(logs_root=tmp_path / "logs", reports_root=tmp_path / "reports"),
    )


@pytest.fixture
def make_artifact(tmp_path: Path) -> Callable[..., Path]:
    def _make(
        path: Path | None = None,
        *,
        metadata: Sequence[MetadataItem] = (),
        references: Sequence[str] = (),
        resources: dict[str, bytes] | None = None,
        payload: dict[str, bytes] | None = None,
    ) -> Path:
        target = path or tmp_path / "host.zip"
        artifact = Artifact(
            name=target.stem,
            metadata=tuple(metadata),
            references=tuple(ArtifactReference(name=name, version="1.0") for name in references),
            resources=tuple(Resource(name=name, data=data) for name, data in (resources or {}).items()),
            payload=tuple((payload or {"code/main.bin": b"\x00main"}).items()),
        )
        return write_artifact(artifact, target)

    return _make
