"""Unit tests for engine configuration loading."""

import json
import subprocess
from unittest.mock import patch, MagicMock

import pytest
import yaml

from tdb.config.engine_config import (
    ConfigError,
    EngineConfig,
    load_engine_config,
    normalize_content,
)
from tdb.config.settings import get_node_bin


class TestNormalizeContent:
    """Test `content` normalization."""

    def test_single_string(self):
        assert normalize_content("./src/**/*.html") == (["./src/**/*.html"], [])

    def test_list_of_patterns(self):
        patterns, raw = normalize_content(["a/*.html", "b/*.js"])
        assert patterns == ["a/*.html", "b/*.js"]
        assert raw == []

    def test_files_mapping(self):
        patterns, _ = normalize_content({"files": ["src/**/*.vue"], "relative": True})
        assert patterns == ["src/**/*.vue"]

    def test_raw_entries(self):
        patterns, raw = normalize_content(["a/*.html", {"raw": "<b class='media-max-1:hidden'>"}])
        assert patterns == ["a/*.html"]
        assert raw == ["<b class='media-max-1:hidden'>"]

    def test_empty_list_allowed(self):
        assert normalize_content([]) == ([], [])

    @pytest.mark.parametrize("content", [42, True, {"paths": []}, ["ok", 3]])
    def test_wrong_type_is_config_error(self, content):
        with pytest.raises(ConfigError):
            normalize_content(content)


class TestLoadEngineConfig:
    """Test loading config files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "tailwind.config.yaml"
        path.write_text(yaml.safe_dump({"content": ["src/**/*.html"], "theme": {}}), encoding="utf-8")

        config = load_engine_config(path)

        assert isinstance(config, EngineConfig)
        assert config.path == path.resolve()
        assert config.content == ["src/**/*.html"]
        assert config.data["theme"] == {}
        assert not config.is_javascript

    def test_load_json_relative_to_cwd(self, tmp_path):
        (tmp_path / "tw.json").write_text(json.dumps({"content": "src/*.html"}), encoding="utf-8")

        config = load_engine_config("tw.json", cwd=tmp_path)

        assert config.content == ["src/*.html"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_engine_config(tmp_path / "tailwind.config.json")

    def test_missing_content(self, tmp_path):
        path = tmp_path / "tailwind.config.json"
        path.write_text(json.dumps({"theme": {}}), encoding="utf-8")

        with pytest.raises(ConfigError, match='"content"'):
            load_engine_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "tailwind.config.yml"
        path.write_text("content: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_engine_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "tailwind.config.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigError, match="object"):
            load_engine_config(path)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "tailwind.config.ts"
        path.write_text("export default {}", encoding="utf-8")

        with pytest.raises(ConfigError, match="Unsupported"):
            load_engine_config(path)


class TestJavascriptConfig:
    """Test JS configs evaluated through Node.js (subprocess mocked)."""

    @pytest.fixture
    def js_config(self, tmp_path):
        path = tmp_path / "tailwind.config.js"
        path.write_text("module.exports = { content: ['./src/**/*.html'] }", encoding="utf-8")
        return path

    @patch("tdb.config.engine_config.subprocess.run")
    def test_evaluates_with_node(self, mock_run, js_config):
        mock_run.return_value = MagicMock(returncode=0, stdout='{"content": ["./src/**/*.html"]}', stderr="")

        config = load_engine_config(js_config)

        assert config.content == ["./src/**/*.html"]
        assert config.is_javascript
        cmd = mock_run.call_args[0][0]
        assert cmd[0] == get_node_bin()
        assert cmd[-1] == str(js_config.resolve())

    @patch("tdb.config.engine_config.subprocess.run")
    def test_node_error_is_config_error(self, mock_run, js_config):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="SyntaxError: Unexpected token")

        with pytest.raises(ConfigError, match="SyntaxError"):
            load_engine_config(js_config)

    @patch("tdb.config.engine_config.subprocess.run", side_effect=FileNotFoundError("node"))
    def test_node_missing_is_config_error(self, mock_run, js_config):
        with pytest.raises(ConfigError, match="Node.js"):
            load_engine_config(js_config)

    @patch("tdb.config.engine_config.subprocess.run")
    def test_default_export_null(self, mock_run, js_config):
        mock_run.return_value = MagicMock(returncode=0, stdout="null", stderr="")

        with pytest.raises(ConfigError):
            load_engine_config(js_config)

    @patch("tdb.config.engine_config.subprocess.run",
           side_effect=subprocess.TimeoutExpired(cmd="node", timeout=1))
    def test_timeout_is_config_error(self, mock_run, js_config):
        with pytest.raises(ConfigError, match="Timed out"):
            load_engine_config(js_config)
