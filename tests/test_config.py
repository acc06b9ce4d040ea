"""Tests for buildrules/config.py and buildrules/console.py."""

import json

import pytest

from buildrules import console
from buildrules.config import DEFAULT_CONFIG, ConfigError, load_config


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config() == DEFAULT_CONFIG


def test_config_file_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "build_config.json").write_text(json.dumps({"port": 5000, "browser": "chromium"}))
    settings = load_config()
    assert settings["port"] == 5000
    assert settings["browser"] == "chromium"
    assert settings["cache_file"] == ".build_cache.json"


def test_explicit_missing_config_file(tmp_path):
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(str(tmp_path / "nope.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config(str(path))


def test_unknown_key(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"prot": 8080}))
    with pytest.raises(ConfigError, match="prot"):
        load_config(str(path))


def test_defaults_not_mutated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"strict": True}))
    load_config(str(path))
    assert DEFAULT_CONFIG["strict"] is False


# ─── console ─────────────────────────────────────────────────────


def test_verbose_messages_hidden_by_default(settings, capsys):
    console.configure(settings)
    console.log("shown")
    console.log_verbose("hidden")
    assert capsys.readouterr().out == "shown\n"


def test_output_file_mirrors_console(settings, tmp_path, capsys):
    output_file = tmp_path / "out.txt"
    output_file.write_text("stale\n")
    settings.update(output_to_file=True, output_file=str(output_file), verbose_output=True)
    console.configure(settings)
    console.log("one")
    console.log_verbose("two")
    console.close()
    assert output_file.read_text() == "Logging to output file requested and started\none\ntwo\n"
    assert capsys.readouterr().out == "one\ntwo\n"
