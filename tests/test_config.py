"""Tests for configuration loading and saving."""

import pytest

from gemlark.config import (
    Config,
    ConfigError,
    KeyBindings,
    StyleSet,
    get_xdg_config_home,
)


def test_missing_file_gives_defaults(temp_dir):
    assert Config.load(temp_dir / "config.toml") == Config()


def test_save_and_load_round_trip(temp_dir):
    config = Config(
        margin=4,
        homepage="gemini://example.org/",
        keybindings=KeyBindings(quit="x", goto_link="l"),
        styles=StyleSet(header1="1;31", list_text="2"),
    )
    path = config.save(temp_dir / "sub" / "config.toml")
    assert Config.load(path) == config


def test_toml_keys_use_dashes(temp_dir):
    path = Config().save(temp_dir / "config.toml")
    text = path.read_text()
    assert 'goto-link = "g"' in text
    assert 'link-bullet = "1;33"' in text
    assert "[general]" in text


def test_partial_file_keeps_other_defaults(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text('[general]\nmargin = 0\n\n[keybindings]\nback = "p"\n')

    config = Config.load(path)

    assert config.margin == 0
    assert config.homepage == Config().homepage
    assert config.keybindings.back == "p"
    assert config.keybindings.quit == "q"


def test_invalid_toml_fails_loudly(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text("margin = = 2\n")
    with pytest.raises(ConfigError):
        Config.load(path)


def test_style_sequence():
    styles = StyleSet(quote="3", list_text="")
    assert styles.sequence("quote") == "\x1b[3m"
    assert styles.sequence("list-text") == ""


def test_xdg_config_home(monkeypatch, temp_dir):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
    assert get_xdg_config_home() == temp_dir / "gemlark"
    assert Config.config_file_path() == temp_dir / "gemlark" / "config.toml"
