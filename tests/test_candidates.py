import pytest

from ref_embed.ingest.candidates import discover_candidates, load_candidate_list


def test_discover_scans_top_level_matching_files(tmp_path):
    for name in ("a.dll", "B.Lib.exe", "notes.txt", "host.dll"):
        (tmp_path / name).write_bytes(name.encode())
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "c.dll").write_bytes(b"c")

    candidates = discover_candidates(tmp_path, exclude=tmp_path / "host.dll")

    assert [c.name for c in candidates] == ["B.Lib", "a"]
    assert candidates[0].read_bytes() == b"B.Lib.exe"


def test_discover_honours_custom_patterns(tmp_path):
    (tmp_path / "x.so").write_bytes(b"so")
    (tmp_path / "y.dll").write_bytes(b"dll")

    candidates = discover_candidates(tmp_path, ["*.so"])

    assert [c.name for c in candidates] == ["x"]


def test_discover_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        discover_candidates(tmp_path / "missing")


def test_load_candidate_list_mapping_and_path_entries(tmp_path):
    libs = tmp_path / "libs"
    libs.mkdir()
    list_file = tmp_path / "candidates.yaml"
    list_file.write_text(
        "\n".join(
            [
                "candidates:",
                "  - name: Alpha",
                "    path: libs/alpha-1.2.dll",
                "  - libs/Beta.Core.dll",
                f"  - {(libs / 'gamma.exe').as_posix()}",
                "",
            ]
        ),
        encoding="utf-8",
    )

    candidates = load_candidate_list(list_file)

    assert [c.name for c in candidates] == ["Alpha", "Beta.Core", "gamma"]
    assert candidates[0].path == (libs / "alpha-1.2.dll").resolve()
    assert candidates[2].path == libs / "gamma.exe"


def test_load_candidate_list_accepts_bare_list_and_empty_file(tmp_path):
    list_file = tmp_path / "candidates.yaml"
    list_file.write_text("- a.dll\n- b.dll\n", encoding="utf-8")
    assert [c.name for c in load_candidate_list(list_file)] == ["a", "b"]

    list_file.write_text("", encoding="utf-8")
    assert load_candidate_list(list_file) == []


def test_load_candidate_list_rejects_duplicates_and_bad_entries(tmp_path):
    list_file = tmp_path / "candidates.yaml"
    list_file.write_text("candidates:\n  - a.dll\n  - other/a.dll\n", encoding="utf-8")
    with pytest.raises(ValueError, match="duplicate"):
        load_candidate_list(list_file)

    list_file.write_text("candidates:\n  - 42\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_candidate_list(list_file)

    list_file.write_text("candidates: nope\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_candidate_list(list_file)


def test_load_candidate_list_strips_extension_from_explicit_names(tmp_path):
    list_file = tmp_path / "candidates.yaml"
    list_file.write_text("candidates:\n  - name: Foo.dll\n    path: libs/foo-2.0.dll\n", encoding="utf-8")

    (candidate,) = load_candidate_list(list_file)

    assert candidate.name == "Foo"
    assert candidate.path == (tmp_path / "libs" / "foo-2.0.dll").resolve()
