"""Tests for TOML config file loading."""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from lexlight.cli import build_parser, load_config, main, resolve_grammar_name, resolve_options


def _opts(*argv: str):
    return resolve_options(build_parser().parse_args(list(argv)))


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('grammar = "lua"\n')
        assert load_config(cfg, tmp_path) == {"grammar": "lua"}

    def test_auto_discover_lexlight_toml(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text('theme = "light"\n')
        assert load_config(None, tmp_path) == {"theme": "light"}


class TestConfigMerge:
    def test_config_values_used(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text(
            'grammar = "json"\ntheme = "light"\nmarkup = "html"\ncombine = false\n'
        )
        opts = _opts(str(tmp_path / "doc.txt"))
        assert opts.grammar == "json"
        assert opts.theme == "light"
        assert opts.markup == "html"
        assert opts.combine is False

    def test_cli_overrides_config(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text('grammar = "json"\ntheme = "light"\n')
        opts = _opts(str(tmp_path / "doc.txt"), "-g", "lua", "-t", "default", "-m", "rich-text")
        assert opts.grammar == "lua"
        assert opts.theme == "default"
        assert opts.markup == "rich-text"

    def test_defaults_without_config(self, tmp_path: Path) -> None:
        opts = _opts(str(tmp_path / "doc.lua"))
        assert opts.grammar is None
        assert opts.theme is None
        assert opts.markup == "rich-text"
        assert opts.combine is True
        assert opts.extensions == {}

    def test_theme_file_relative_to_config(self, tmp_path: Path) -> None:
        conf_dir = tmp_path / "conf"
        conf_dir.mkdir()
        cfg = conf_dir / "settings.toml"
        cfg.write_text('theme = "themes/mine.toml"\n')
        opts = _opts(str(tmp_path / "doc.lua"), "--config", str(cfg))
        assert opts.theme == str(conf_dir / "themes" / "mine.toml")

    def test_extensions_table(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text('[extensions]\n".cfg" = "json"\n')
        opts = _opts(str(tmp_path / "app.cfg"))
        assert opts.extensions == {".cfg": "json"}
        assert resolve_grammar_name(opts) == "json"

    def test_invalid_markup(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text('markup = "latex"\n')
        with pytest.raises(argparse.ArgumentTypeError):
            _opts(str(tmp_path / "doc.lua"))

    def test_invalid_combine(self, tmp_path: Path) -> None:
        (tmp_path / "lexlight.toml").write_text('combine = "no"\n')
        with pytest.raises(argparse.ArgumentTypeError):
            _opts(str(tmp_path / "doc.lua"))

    def test_bad_config_exit_code(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "lexlight.toml").write_text("grammar = [\n")
        src = tmp_path / "doc.lua"
        src.write_text("x")
        assert main([str(src)]) == 2
        assert "invalid config" in capsys.readouterr().err


class TestConfigEndToEnd:
    def test_theme_file_from_config(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "mine.toml").write_text('[[rule]]\ntype = "number"\ncolor = "#010203"\n')
        (tmp_path / "lexlight.toml").write_text('theme = "mine.toml"\n')
        src = tmp_path / "doc.lua"
        src.write_text("42")
        assert main([str(src)]) == 0
        assert capsys.readouterr().out == '<font color="#010203">42</font>'
