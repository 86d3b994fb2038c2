"""Reads ``NAME=value`` pairs from ``.env`` files used as environment fallbacks."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError

_ASSIGNMENT = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
_QUOTES = ("'", '"')


def parse_dotenv_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse one line; blank lines, comments and anything that is not an assignment give None.

    Quoted values keep their content verbatim. Unquoted values lose a trailing
    `` # comment``.
    """
    match = _ASSIGNMENT.match(line.strip())
    if match is None:
        return None
    name, value = match.group(1), match.group(2).strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return name, value[1:-1]
    comment_at = value.find(" #")
    if comment_at != -1:
        value = value[:comment_at].rstrip()
    return name, value


class DotenvLoader:
    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """Assignments in ``path``; a missing file gives an empty map, a later duplicate wins."""
        if not path.exists():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Failed to read {path}") from exc

        values: Dict[str, str] = {}
        for line in text.splitlines():
            parsed = parse_dotenv_line(line)
            if parsed is not None:
                values[parsed[0]] = parsed[1]
        return values
