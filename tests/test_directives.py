import pytest

from ref_embed.artifact.models import Artifact, ArtifactReference, MetadataItem
from ref_embed.errors import DirectiveParseError
from ref_embed.weave.directives import directive_kind, extract_directives, parse_directive
from ref_embed.weave.models import ConfigDirective, ExcludeDirective, IncludeAllDirective, IncludeDirective


def test_directive_kind_requires_exact_namespace():
    assert directive_kind("ref_embed.EmbedConfig") == "EmbedConfig"
    assert directive_kind("ref_embed.EmbedIncludeAll") == "EmbedIncludeAll"
    assert directive_kind("other.EmbedConfig") is None
    assert directive_kind("ref_embed.sub.EmbedInclude") is None
    assert directive_kind("ref_embed.EmbedSomething") is None
    assert directive_kind("custom.EmbedExclude", namespace="custom") == "EmbedExclude"


def test_config_arguments_are_matched_by_type_not_position(directive):
    assert parse_directive(directive("EmbedConfig", "X", True), "EmbedConfig") == ConfigDirective(True, "X")
    assert parse_directive(directive("EmbedConfig", True, "X"), "EmbedConfig") == ConfigDirective(True, "X")
    assert parse_directive(directive("EmbedConfig"), "EmbedConfig") == ConfigDirective(False, None)
    assert parse_directive(directive("EmbedConfig", False, None), "EmbedConfig") == ConfigDirective(False, None)


def test_include_strips_candidate_extension_only(directive):
    parsed = parse_directive(directive("EmbedInclude", "Mono.Cecil.dll", False), "EmbedInclude")
    assert parsed == IncludeDirective(name="Mono.Cecil", compress=False)

    parsed = parse_directive(directive("EmbedInclude", "Mono.Cecil"), "EmbedInclude")
    assert parsed == IncludeDirective(name="Mono.Cecil", compress=None)

    parsed = parse_directive(directive("EmbedExclude", "Tool.EXE"), "EmbedExclude")
    assert parsed == ExcludeDirective(name="Tool")


def test_include_all_and_exclude_shapes(directive):
    assert parse_directive(directive("EmbedIncludeAll"), "EmbedIncludeAll") == IncludeAllDirective()
    assert parse_directive(directive("EmbedExclude", "A"), "EmbedExclude") == ExcludeDirective(name="A")


@pytest.mark.parametrize(
    ("kind", "args"),
    [
        ("EmbedInclude", ()),
        ("EmbedInclude", ("   ",)),
        ("EmbedInclude", ("A", 1)),
        ("EmbedInclude", ("A", "B")),
        ("EmbedInclude", ("A", True, False)),
        ("EmbedExclude", ()),
        ("EmbedExclude", ("A", True)),
        ("EmbedIncludeAll", ("A",)),
        ("EmbedConfig", (1.5,)),
        ("EmbedConfig", (["nested"],)),
    ],
)
def test_malformed_directives_raise_parse_error(kind, args, directive):
    with pytest.raises(DirectiveParseError):
        parse_directive(directive(kind, *args), kind)


def test_extract_removes_directives_and_support_reference(directive):
    title = MetadataItem("runtime.AssemblyTitle", ("Host",))
    version = MetadataItem("runtime.AssemblyVersion", ("1.2.3",))
    artifact = Artifact(
        name="host",
        metadata=(
            title,
            directive("EmbedConfig", True, "X"),
            directive("EmbedInclude", "A"),
            version,
            directive("EmbedInclude"),
            directive("EmbedExclude", "B"),
        ),
        references=(ArtifactReference("ref_embed", "0.1.0"), ArtifactReference("runtime", "8.0")),
    )

    extraction = extract_directives(artifact)

    assert extraction.directives == (
        ConfigDirective(True, "X"),
        IncludeDirective("A"),
        ExcludeDirective("B"),
    )
    assert extraction.artifact.metadata == (title, version)
    assert extraction.artifact.references == (ArtifactReference("runtime", "8.0"),)
    assert len(extraction.removed_items) == 4
    assert extraction.removed_references == (ArtifactReference("ref_embed", "0.1.0"),)
    assert len(extraction.parse_errors) == 1
    # original snapshot untouched
    assert len(artifact.metadata) == 6
    assert len(artifact.references) == 2


def test_extract_removes_adjacent_directives_without_index_shift(directive):
    artifact = Artifact(
        name="host",
        metadata=tuple(directive("EmbedInclude", name) for name in ("A", "B", "C", "D")),
    )

    extraction = extract_directives(artifact)

    assert [d.name for d in extraction.directives] == ["A", "B", "C", "D"]
    assert extraction.artifact.metadata == ()


def test_extract_on_clean_artifact_is_noop():
    artifact = Artifact(
        name="host",
        metadata=(MetadataItem("runtime.AssemblyTitle", ("Host",)),),
        references=(ArtifactReference("runtime"),),
    )

    extraction = extract_directives(artifact)

    assert extraction.directives == ()
    assert extraction.artifact == artifact
