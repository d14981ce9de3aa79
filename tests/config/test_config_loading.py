"""
Tests for fieldops_config: packaged defaults, overrides and the cached
active configuration.
"""

import textwrap

import pytest

from fieldops_config import (
    CONFIG_ENV_VAR,
    compute_checksum,
    get_active_config,
    load_config,
    parse_config,
    reset_active_config,
)
from fieldops_config.loader import merge_config_data
from fieldops_config.schema import DEFAULT_PALETTE, FieldOpsConfig
from fieldops_kernel.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_active_config()
    yield
    reset_active_config()


def _write(tmp_path, body: str):
    path = tmp_path / "override.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class TestDefaults:

    def test_packaged_defaults_match_schema_defaults(self):
        assert load_config() == FieldOpsConfig()

    def test_default_values(self):
        config = load_config()
        assert config.date_format == "%d/%m/%Y"
        assert config.client_ids.prefix == "CL-"
        assert config.client_palette == DEFAULT_PALETTE
        assert config.texts.bulk_import_actor == "Bulk Import"
        assert config.ingestion.unnamed_client == "Sin Nombre"


class TestOverrides:

    def test_section_merges_one_level(self, tmp_path):
        path = _write(tmp_path, """
            client_ids:
              prefix: "CLI-"
            texts:
              default_actor: "Dispatcher"
        """)
        config = load_config(path)

        assert config.client_ids.prefix == "CLI-"
        assert config.client_ids.width == 3
        assert config.texts.default_actor == "Dispatcher"
        assert config.texts.intake_reason == "initial intake"

    def test_palette_replaced_whole(self, tmp_path):
        path = _write(tmp_path, """
            client_palette: ["bg-red-50"]
        """)
        assert load_config(path).client_palette == ("bg-red-50",)

    def test_merge_keeps_unrelated_sections(self):
        merged = merge_config_data({"texts": {"a": 1}, "date_format": "x"}, {"texts": {"b": 2}})
        assert merged == {"texts": {"a": 1, "b": 2}, "date_format": "x"}


class TestValidation:

    def test_unknown_top_level_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"colour_palette": []})
        assert exc_info.value.key == "colour_palette"

    def test_unknown_section_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"texts": {"intake": "x"}})
        assert exc_info.value.key == "texts.intake"

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_config({"ingestion": "nope"})

    def test_empty_palette_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_config({"client_palette": []})

    def test_palette_must_be_strings(self):
        with pytest.raises(ConfigurationError):
            parse_config({"client_palette": [1, 2]})

    def test_non_mapping_file(self, tmp_path):
        path = _write(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")


class TestActiveConfig:

    def test_cached_until_reload(self):
        first = get_active_config()
        assert get_active_config() is first
        assert get_active_config(reload=True) is not first

    def test_env_var_override(self, tmp_path, monkeypatch):
        path = _write(tmp_path, """
            date_format: "%Y-%m-%d"
        """)
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert get_active_config().date_format == "%Y-%m-%d"

    def test_load_is_traced(self, captured_logs):
        get_active_config()
        trace = next(r for r in captured_logs() if r["message"] == "FIELDOPS_CONFIG_TRACE")
        assert trace["config_source"] == "defaults"
        assert trace["checksum"] == compute_checksum(FieldOpsConfig())
        assert trace["palette_size"] == 4


class TestChecksum:

    def test_deterministic(self):
        assert compute_checksum(load_config()) == compute_checksum(load_config())

    def test_sensitive_to_content(self):
        assert compute_checksum(FieldOpsConfig()) != compute_checksum(
            FieldOpsConfig(date_format="%Y-%m-%d")
        )
