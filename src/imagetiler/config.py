"""Configuration management for imagetiler.

This module handles loading and managing configuration settings using
Dynaconf. Settings are loaded from multiple locations in order of
increasing priority:

1. Global settings (/etc/imagetiler/)
2. User settings (~/.config/imagetiler/)
3. Current directory settings (./)
4. Environment variable specified file (IMAGETILER_SETTINGS_FILE_FOR_DYNACONF)

Single values can also be set with ``IMAGETILER_`` prefixed environment
variables, e.g. ``IMAGETILER_WORKERS=4``.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib

from dynaconf import Dynaconf

USER_DIR = pathlib.Path("~/.config/imagetiler").expanduser()
GLOB_DIR = pathlib.Path("/etc/imagetiler/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("IMAGETILER_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="IMAGETILER",
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)

# Fallbacks used with settings.get when a key is not configured anywhere
DEFAULTS = {
    "workers": 1,
    "save_canvas": False,
    "palette": True,
    "palette_colors": 256,
    "write_manifest": False,
    "max_image_pixels": None,
    "verbose": True,
}


def get(key):
    """Return a setting, falling back to the package default.

    Parameters
    ----------
    key : str
        Setting name, e.g. ``"workers"``.

    Returns
    -------
    object
        The configured value or the entry in ``DEFAULTS``.
    """
    return settings.get(key, DEFAULTS.get(key))


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()
