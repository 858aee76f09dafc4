from pathlib import Path

import toml
from aw_core.config import load_config_toml

default_config = """
[tracker]
# Name or path of the TimeWarrior executable
binary = "timew"
# Seconds before a timew command is abandoned
timeout = 10.0
# Seconds between availability probes while timew cannot be found
probe_interval = 30.0
# Uncomment to use another TimeWarrior database (sets TIMEWARRIORDB)
# database = "~/.timewarrior"

[reconciler]
# Seconds between polls of `timew export`
poll_interval = 2.0

[history]
# Number of recently used tags to remember
size = 100
# Save the tag history between runs of the command line tool
persist = true
# Defaults to $XDG_DATA_HOME/timew-timer/history.json
# file = "~/.local/share/timew-timer/history.json"
""".strip()


def _plain(cfg) -> dict:
    # aw_core may hand back tomlkit containers; work with plain Python values
    unwrap = getattr(cfg, "unwrap", None)
    return unwrap() if callable(unwrap) else dict(cfg)


config = _plain(load_config_toml("timew-timer", default_config))


def load_custom_config(config_path):
    """Load config from a custom file path, on top of the defaults."""
    global config
    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            custom = toml.load(config_path)
            merged = toml.loads(default_config)
            for section, values in custom.items():
                if isinstance(values, dict) and isinstance(merged.get(section), dict):
                    merged[section].update(values)
                else:
                    merged[section] = values
            config = merged
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")
    return config


def get_section(cfg, name: str) -> dict:
    """Return a config section as a plain dict (empty if missing)."""
    section = cfg.get(name, {}) if cfg else {}
    return dict(section) if isinstance(section, dict) else {}
