# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading and saving gemlark configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/gemlark/  (default: ~/.config/gemlark/)
#   - Data:    $XDG_DATA_HOME/gemlark/    (default: ~/.local/share/gemlark/)
#   - State:   $XDG_STATE_HOME/gemlark/   (default: ~/.local/state/gemlark/)
#
# Files:
#   - config.toml: User configuration (margin, homepage, keys, styles)
#   - bookmarks.txt: One "<url> <description>" per line (in data directory)
#   - certs/<host>.crt, certs/<host>.key: Client certificates (in data directory)
#   - gemlark.log: Log output (in state directory)
#
# The configuration is read once at startup and never mutated by the
# browsing engine.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "gemlark"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for gemlark.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/gemlark/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def get_xdg_data_home() -> Path:
    """
    Returns the XDG data directory for gemlark.

    Respects $XDG_DATA_HOME if set, otherwise uses ~/.local/share/gemlark/
    This is where bookmarks and client certificates live.
    """
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        base = Path(xdg_data)
    else:
        base = Path.home() / ".local" / "share"
    return base / APP_NAME


def get_xdg_state_home() -> Path:
    """
    Returns the XDG state directory for gemlark.

    Respects $XDG_STATE_HOME if set, otherwise uses ~/.local/state/gemlark/
    The log file is written here.
    """
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        base = Path(xdg_state)
    else:
        base = Path.home() / ".local" / "state"
    return base / APP_NAME


def ensure_directories() -> dict[str, Path]:
    """
    Creates all required XDG directories if they don't exist.

    Returns:
        Dictionary mapping directory type to path.
    """
    dirs = {
        "config": get_xdg_config_home(),
        "data": get_xdg_data_home(),
        "state": get_xdg_state_home(),
    }

    for dir_path in dirs.values():
        dir_path.mkdir(parents=True, exist_ok=True)

    (dirs["data"] / "certs").mkdir(exist_ok=True)

    return dirs


# =============================================================================
# Configuration Data Structures
# =============================================================================

# Terminal escape that ends every styled line
RESET = "\x1b[0m"


@dataclass(frozen=True)
class KeyBindings:
    """
    Single-character keys for each pager command.

    In the TOML file the keys are spelled with dashes (goto-link, go-up, ...).
    """
    quit: str = "q"
    open: str = "o"
    goto_link: str = "g"
    refresh: str = "r"
    back: str = "b"
    home: str = "h"
    go_up: str = "u"
    set_bookmark: str = "a"
    goto_bookmark: str = "B"
    delete_bookmark: str = "d"


@dataclass(frozen=True)
class StyleSet:
    """
    SGR parameters for each rendering category.

    Values are the parameter part of an ANSI "select graphic rendition"
    sequence, e.g. "1;35" for bold magenta. An empty value means unstyled.
    """
    header1: str = "1;4;35"
    header2: str = "1;35"
    header3: str = "35"
    quote: str = "3;32"
    link_bullet: str = "1;33"
    link_text: str = "4;36"
    list_bullet: str = "1;34"
    list_text: str = ""

    def sequence(self, category: str) -> str:
        """
        Escape sequence that starts a line of the given category.

        Example:
            >>> StyleSet().sequence("header2")
            '\\x1b[1;35m'
        """
        params = getattr(self, category.replace("-", "_"))
        return f"\x1b[{params}m" if params else ""


@dataclass(frozen=True)
class Config:
    """
    Main configuration container for gemlark.

    Attributes:
        margin: Blank columns on each side of rendered text.
        homepage: URL opened at startup and by the home command.
        keybindings: Key for each pager command.
        styles: Style for each gemtext category.

    Usage:
        >>> config = Config.load()
        >>> config.keybindings.quit
        'q'
    """
    margin: int = 2
    homepage: str = "gemini://geminiprotocol.net/"
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    styles: StyleSet = field(default_factory=StyleSet)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    @staticmethod
    def bookmarks_path() -> Path:
        """Returns the path to the bookmark list."""
        return get_xdg_data_home() / "bookmarks.txt"

    @staticmethod
    def certificates_dir() -> Path:
        """Returns the directory holding <host>.crt / <host>.key pairs."""
        return get_xdg_data_home() / "certs"

    @staticmethod
    def log_path() -> Path:
        """Returns the path to the log file."""
        return get_xdg_state_home() / "gemlark.log"

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid TOML.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> Path:
        """
        Save configuration to the config file.

        Creates the parent directory if it doesn't exist.

        Returns:
            The path written.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

        return config_path

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        Missing keys fall back to their defaults. Values are not otherwise
        validated.
        """
        defaults = cls()

        general = data.get("general", {})
        keys = data.get("keybindings", {})
        styles = data.get("styles", {})

        return cls(
            margin=int(general.get("margin", defaults.margin)),
            homepage=general.get("homepage", defaults.homepage),
            keybindings=KeyBindings(**_table_values(KeyBindings, keys)),
            styles=StyleSet(**_table_values(StyleSet, styles)),
        )

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["general"] = {
            "margin": self.margin,
            "homepage": self.homepage,
        }

        data["keybindings"] = {
            f.name.replace("_", "-"): getattr(self.keybindings, f.name)
            for f in fields(KeyBindings)
        }

        data["styles"] = {
            f.name.replace("_", "-"): getattr(self.styles, f.name)
            for f in fields(StyleSet)
        }

        return data


def _table_values(cls: type, table: dict[str, Any]) -> dict[str, str]:
    """Pick the dashed TOML keys of `table` that name fields of `cls`."""
    values = {}
    for f in fields(cls):
        key = f.name.replace("_", "-")
        if key in table:
            values[f.name] = str(table[key])
    return values


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print all XDG paths for debugging.
    Useful for users wondering where their config/data is stored.
    """
    print(f"Config:  {get_xdg_config_home()}")
    print(f"Data:    {get_xdg_data_home()}")
    print(f"State:   {get_xdg_state_home()}")
    print()
    print(f"Config file:   {Config.config_file_path()}")
    print(f"Bookmarks:     {Config.bookmarks_path()}")
    print(f"Certificates:  {Config.certificates_dir()}")
    print(f"Log file:      {Config.log_path()}")
