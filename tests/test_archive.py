import json
import zipfile

import pytest

from ref_embed.artifact.archive import MANIFEST_ENTRY, read_artifact, write_artifact
from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem, Resource
from ref_embed.errors import ReadError, WriteError


def test_write_then_read_preserves_order_and_payload(tmp_path, directive):
    artifact = Artifact(
        name="host",
        metadata=(
            MetadataItem("runtime.AssemblyTitle", ("Host",)),
            directive("EmbedConfig", True, None),
            directive("EmbedInclude", "A", False),
        ),
        references=(ArtifactReference("ref_embed", "0.1.0"), ArtifactReference("runtime")),
        resources=(Resource("Existing.txt", b"hello"),),
        payload=(("code/main.bin", b"\x01\x02"), ("meta/notes.txt", b"notes")),
    )

    path = write_artifact(artifact, tmp_path / "host.zip")
    loaded = read_artifact(path)

    assert loaded == artifact
    assert not list(tmp_path.glob(".*.tmp"))


def test_write_replaces_existing_file_in_place(tmp_path):
    path = write_artifact(Artifact(name="host"), tmp_path / "host.zip")
    write_artifact(Artifact(name="host", resources=(Resource("R", b"r"),)), path)

    assert read_artifact(path).resource_names() == {"R"}


def test_missing_artifact_raises_read_error(tmp_path):
    with pytest.raises(ReadError, match="artifact not found"):
        read_artifact(tmp_path / "nope.zip")


def test_non_archive_raises_read_error(tmp_path):
    path = tmp_path / "host.zip"
    path.write_bytes(b"definitely not a zip")

    with pytest.raises(ReadError, match="not a valid archive"):
        read_artifact(path)


def test_archive_without_manifest_raises_read_error(tmp_path):
    path = tmp_path / "host.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("code/main.bin", b"x")

    with pytest.raises(ReadError, match=MANIFEST_ENTRY):
        read_artifact(path)


@pytest.mark.parametrize(
    "manifest",
    [
        "{not json",
        json.dumps([]),
        json.dumps({"metadata": {"type": "x"}}),
        json.dumps({"metadata": [{"args": []}]}),
        json.dumps({"metadata": [{"type": "x", "args": "A"}]}),
        json.dumps({"references": [{"version": "1"}]}),
    ],
)
def test_invalid_manifest_raises_read_error(tmp_path, manifest):
    path = tmp_path / "host.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(MANIFEST_ENTRY, manifest)

    with pytest.raises(ReadError):
        read_artifact(path)


def test_unwritable_target_raises_write_error(tmp_path):
    target = tmp_path / "out.zip"
    target.mkdir()

    with pytest.raises(WriteError):
        write_artifact(Artifact(name="host"), target)

    assert not list(tmp_path.glob(".*.tmp"))
