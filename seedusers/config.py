"""Batch parameters:  presets, YAML config files, and validation.

Parameters are layered with later sources winning:

1.  a named preset (`home` or `nohome`)
2.  a YAML config file,  a flat mapping of BatchConfig field names
3.  explicit command line options
"""

import os
from dataclasses import dataclass, fields

import yaml

from seedusers.types import ConfigError, ShellPath, Uid, UserName

# -----------------------------------------------------------------------------------------
#                                Globals
# -----------------------------------------------------------------------------------------

DEFAULT_PREFIX = "user"
DEFAULT_SHELL = "/bin/bash"
DEFAULT_HOME_ROOT = "/cluster-data/user-homes"

LOCK_FILE = os.environ.get("SEEDUSERS_LOCK_FILE") or None
LOG_JSON = os.environ.get("SEEDUSERS_LOG_JSON") == "1"

PRESETS = {
    # pre-provisioned homes under a shared root, timed
    "home": dict(start=200, end=202, uid_base=100000, home_root=DEFAULT_HOME_ROOT),
    # no home directory at all
    "nohome": dict(start=0, end=10, uid_base=100000, home_root=None),
}

# -----------------------------------------------------------------------------------------


@dataclass
class BatchConfig:
    start: int | None = None
    end: int | None = None
    uid_base: int | None = None
    prefix: str = DEFAULT_PREFIX
    shell: str = DEFAULT_SHELL
    home_root: str | None = None
    strict: bool = False
    timed: bool | None = None
    check_home: bool = False
    lock_file: str | None = LOCK_FILE

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def update(self, values: dict) -> "BatchConfig":
        """Overlay the non-None entries of `values` onto this config."""
        unknown = set(values) - self.field_names()
        if unknown:
            raise ConfigError(f"Unknown batch parameters: {', '.join(sorted(unknown))}")
        for key, value in values.items():
            if value is not None:
                setattr(self, key, value)
        return self

    @property
    def is_timed(self) -> bool:
        """Timing defaults on when homes are configured,  off otherwise."""
        return self.home_root is not None if self.timed is None else self.timed

    def validate(self) -> "BatchConfig":
        for name in ["strict", "check_home", "timed"]:
            value = getattr(self, name)
            if name == "timed" and value is None:
                continue
            if not isinstance(value, bool):
                raise ConfigError(f"Parameter '{name}' must be true or false, not {value!r}")
        for name in ["prefix", "shell", "home_root", "lock_file"]:
            value = getattr(self, name)
            if name in ["home_root", "lock_file"] and value is None:
                continue
            if not isinstance(value, str):
                raise ConfigError(f"Parameter '{name}' must be a string, not {value!r}")
        for name in ["start", "end", "uid_base"]:
            value = getattr(self, name)
            if value is None:
                raise ConfigError(f"Missing required parameter '{name}'")
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f"Parameter '{name}' must be an integer, not {value!r}")
            if value < 0:
                raise ConfigError(f"Parameter '{name}' must not be negative")
        if self.end < self.start:
            raise ConfigError(f"End index {self.end} is before start index {self.start}")
        try:
            ShellPath(self.shell)
            if self.end > self.start:
                Uid(self.uid_base + self.end - 1)
                UserName(f"{self.prefix}{self.end - 1}")
                UserName(f"{self.prefix}{self.start}")
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        if self.home_root is not None and not str(self.home_root).startswith("/"):
            raise ConfigError(f"Home root must be an absolute path: {self.home_root}")
        return self


# -----------------------------------------------------------------------------------------


def load_config(path) -> dict:
    """Load a flat YAML mapping of batch parameters from `path`."""
    try:
        with open(path, "r") as f:
            values = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    unknown = set(values) - BatchConfig.field_names()
    if unknown:
        raise ConfigError(f"Unknown batch parameters in {path}: {', '.join(sorted(unknown))}")
    return values


def resolve_config(preset=None, config_path=None, overrides=None) -> BatchConfig:
    """Layer preset, config file, and overrides into a validated BatchConfig."""
    config = BatchConfig()
    if preset is not None:
        if preset not in PRESETS:
            raise ConfigError(f"Unknown preset '{preset}', choose from {', '.join(PRESETS)}")
        config.update(PRESETS[preset])
    if config_path is not None:
        config.update(load_config(config_path))
    config.update(overrides or {})
    return config.validate()
