"""Tests for TOML config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from jlindent.cli import build_parser, load_config, main, resolve_options
from jlindent.errors import ConfigError


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text("indent-unit = 2\n")
        assert load_config(cfg, tmp_path) == {"indent-unit": 2}

    def test_auto_discover_jlindent_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "jlindent.toml"
        cfg.write_text("indent-unit = 3\n")
        assert load_config(None, tmp_path) == {"indent-unit": 3}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "jlindent.toml"
        cfg.write_text("indent-unit = \n")
        with pytest.raises(ConfigError):
            load_config(None, tmp_path)


class TestConfigMerge:
    def test_default(self, tmp_path: Path) -> None:
        src = tmp_path / "a.jl"
        src.write_text("")
        opts = resolve_options(build_parser().parse_args([str(src)]))
        assert opts.indent_unit == 4

    def test_config_indent_unit(self, tmp_path: Path) -> None:
        (tmp_path / "jlindent.toml").write_text("indent-unit = 2\n")
        src = tmp_path / "a.jl"
        src.write_text("")
        opts = resolve_options(build_parser().parse_args([str(src)]))
        assert opts.indent_unit == 2

    def test_cli_overrides_config(self, tmp_path: Path) -> None:
        (tmp_path / "jlindent.toml").write_text("indent-unit = 2\n")
        src = tmp_path / "a.jl"
        src.write_text("")
        ns = build_parser().parse_args([str(src), "--indent-unit", "8"])
        assert resolve_options(ns).indent_unit == 8

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        cfg = tmp_path / "alt.toml"
        cfg.write_text("indent-unit = 6\n")
        src = tmp_path / "a.jl"
        src.write_text("")
        ns = build_parser().parse_args([str(src), "--config", str(cfg)])
        assert resolve_options(ns).indent_unit == 6

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "jlindent.toml").write_text('indent-unit = "two"\n')
        src = tmp_path / "a.jl"
        src.write_text("")
        with pytest.raises(ConfigError):
            resolve_options(build_parser().parse_args([str(src)]))

    def test_invalid_value_exit_code(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "jlindent.toml").write_text("indent-unit = 0\n")
        src = tmp_path / "a.jl"
        src.write_text("x\n")
        assert main([str(src)]) == 2
        assert "indent unit must be at least 1" in capsys.readouterr().err
