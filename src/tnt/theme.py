"""Color & style helpers for forest rendering.

Decisions:
- Truecolor preferred; falls back to the 256-color cube if unsupported.
- Disabled when stdout is not a TTY unless FORCE_COLOR=1.
- NO_COLOR disables everything.
- Palette overrides come from the environment or a .env file in the
  current directory (TNT_PRIMARY, TNT_ACTIVE, TNT_MUTED).
"""
from __future__ import annotations
import os, re, sys
from pathlib import Path
from typing import Dict

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_USE_TRUECOLOR = _ENABLE and any(
    tok in os.environ.get("COLORTERM", "").lower() for tok in ("truecolor", "24bit")
)

_HEX_RE = re.compile(r"^#?[0-9a-fA-F]{6}$")
PALETTE_KEYS = ('TNT_PRIMARY', 'TNT_ACTIVE', 'TNT_MUTED')


def _code(part: str) -> str:
    return f"\033[{part}m" if _ENABLE else ''


def _from_hex(hex_code: str) -> str:
    """Convert #rrggbb to a foreground escape sequence."""
    if not _ENABLE:
        return ''
    h = hex_code.lstrip('#')
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    if _USE_TRUECOLOR:
        return f"\033[38;2;{r};{g};{b}m"
    r6, g6, b6 = (int(round(x / 255 * 5)) for x in (r, g, b))
    return f"\033[38;5;{16 + 36 * r6 + 6 * g6 + b6}m"


def read_env_file(path: Path) -> Dict[str, str]:
    """Palette overrides from a KEY=VALUE file; invalid lines are skipped."""
    overrides: Dict[str, str] = {}
    if not path.is_file():
        return overrides
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = (part.strip() for part in line.split('=', 1))
        if key in PALETTE_KEYS and _HEX_RE.match(value):
            overrides[key] = '#' + value.lstrip('#')
    return overrides


_ENV_OVERRIDES: Dict[str, str] = {}
try:
    _ENV_OVERRIDES = read_env_file(Path.cwd() / '.env')
except OSError:
    pass  # unreadable .env keeps the defaults


def _palette(key: str, default: str) -> str:
    # priority: real env var > .env override > default
    value = os.environ.get(key, '')
    if _HEX_RE.match(value):
        return '#' + value.lstrip('#')
    return _ENV_OVERRIDES.get(key, default)


RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')

HEX_PRIMARY = _palette('TNT_PRIMARY', '#476EAE')
HEX_ACTIVE = _palette('TNT_ACTIVE', '#F6FF99')
HEX_MUTED = _palette('TNT_MUTED', '#8A8A8A')

ID_COLOR = _from_hex(HEX_PRIMARY) + BOLD
ACTIVE_COLOR = _from_hex(HEX_ACTIVE) + BOLD
MUTED_COLOR = DIM + _from_hex(HEX_MUTED)


def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to text; plain text when colour is off."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET


__all__ = [
    'color', 'read_env_file', 'RESET', 'BOLD', 'DIM',
    'ID_COLOR', 'ACTIVE_COLOR', 'MUTED_COLOR',
]
