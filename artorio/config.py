"""Configuration for the artorio CLI.

Values come from the OS environment first. Keys that are not set there are
filled from a .env file: either the one given with --env-file, or the first
.env found walking up from the working directory. The walk never leaves the
repository (it stops at a directory containing .git, file or dir).

Recognized keys:
  ARTORIO_RULES     default rule file for `convert` (default: cfg.bin)
  ARTORIO_ENVELOPE  default output envelope, game or codec (default: game)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from artorio.rulefile import DEFAULT_RULE_FILE

ENVELOPE_CHOICES = ('game', 'codec')


@dataclass(frozen=True)
class Settings:
    rules_path: str = DEFAULT_RULE_FILE
    envelope: str = 'game'


def find_env_file(start: Path) -> Path | None:
    """Nearest .env at or above start, without crossing a .git boundary."""
    directory = start.resolve()
    while True:
        if (directory / '.env').is_file():
            return directory / '.env'
        if (directory / '.git').exists() or directory.parent == directory:
            return None
        directory = directory.parent


def read_env_file(path: Path) -> dict[str, str]:
    """KEY=value lines; quotes around values are stripped, # lines skipped."""
    values: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if line.startswith('#') or '=' not in line:
            continue
        key, _, value = line.partition('=')
        key = key.strip()
        if key:
            values[key] = value.strip().strip('"').strip("'")
    return values


def load_env(env_file: str | None = None) -> Path | None:
    """Copy .env values into os.environ without overriding. Returns the file used."""
    path = Path(env_file) if env_file else find_env_file(Path.cwd())
    if path is None or not path.is_file():
        return None
    for key, value in read_env_file(path).items():
        os.environ.setdefault(key, value)
    return path


def get_settings() -> Settings:
    envelope = os.environ.get('ARTORIO_ENVELOPE', 'game').strip().lower()
    if envelope not in ENVELOPE_CHOICES:
        envelope = 'game'
    return Settings(
        rules_path=os.environ.get('ARTORIO_RULES') or DEFAULT_RULE_FILE,
        envelope=envelope,
    )
