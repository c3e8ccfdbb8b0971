import pytest
from pydantic import ValidationError

from ref_embed.config import EmbedConfig, load_settings


def test_load_settings_resolves_relative_paths_against_project_root(tmp_path):
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config_file = config_dir / "settings.yaml"
    config_file.write_text(
        "paths:\n  reports_root: ./out/reports\nembed:\n  candidate_patterns: ['*.so']\n",
        encoding="utf-8",
    )

    settings = load_settings(config_file)

    assert settings.paths.reports_root == (tmp_path / "out" / "reports").resolve()
    assert settings.embed.candidate_extensions == (".so",)
    assert settings.embed.default_prefix == "ReferenceEmbed"


def test_env_overrides_yaml(tmp_path, monkeypatch):
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config_file = config_dir / "settings.yaml"
    config_file.write_text("embed:\n  default_prefix: FromYaml\n", encoding="utf-8")
    monkeypatch.setenv("REF_EMBED_EMBED__DEFAULT_PREFIX", "FromEnv")

    settings = load_settings(config_file)

    assert settings.embed.default_prefix == "FromEnv"


def test_embed_config_validation():
    assert EmbedConfig().candidate_extensions == (".dll", ".exe")
    with pytest.raises(ValidationError):
        EmbedConfig(candidate_patterns=["lib*"])
    with pytest.raises(ValidationError):
        EmbedConfig(compression_level=11)
