import json
from pathlib import Path

import pytest

from rules import ConfigError, ImportStyleOptions, load_options

CASES = Path(__file__).parent / "cases"


def test_load_options_reads_camel_case_yaml():
    options = load_options(CASES / "styles.yaml")
    assert options.extend_default_styles is False
    assert options.check_export_from is True
    assert options.check_import is True
    assert options.styles == {"path": {"namespace": True}, "util": False}


def test_load_options_reads_json(tmp_path):
    config = tmp_path / "options.json"
    config.write_text(
        json.dumps({"check_require": False, "styles": {"chalk": {"named": True}}}),
        encoding="utf-8",
    )
    options = load_options(config)
    assert options.check_require is False
    assert options.styles == {"chalk": {"named": True}}


def test_empty_file_yields_defaults(tmp_path):
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")
    assert load_options(config) == ImportStyleOptions()


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_options(tmp_path / "absent.yaml")


def test_invalid_yaml_raises_config_error(tmp_path):
    config = tmp_path / "broken.yaml"
    config.write_text("styles: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_options(config)


@pytest.mark.parametrize(
    "raw",
    [
        {"checkEverything": True},
        {"checkImport": "yes"},
        {"styles": ["path"]},
        {"styles": {"path": True}},
        {"styles": {"path": {"default": "true"}}},
    ],
)
def test_from_mapping_rejects_malformed_options(raw):
    with pytest.raises(ConfigError):
        ImportStyleOptions.from_mapping(raw)


def test_from_mapping_rejects_non_mapping():
    with pytest.raises(ConfigError):
        ImportStyleOptions.from_mapping(["styles"])
