"""
Config Document — Typed line records for dotenv-style documents.

A document is an ordered list of ``ConfigLine`` records. Parsing never fails:
lines that are not ``key=value`` are kept as MALFORMED records so callers can
decide how to report them. Rendering joins the raw text of each record.
"""
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


class LineKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    MALFORMED = "malformed"
    BARE = "bare"
    PAIR = "pair"


@dataclass(frozen=True)
class ConfigLine:
    """One line of a configuration document.

    ``number`` is 1-based. ``key`` and ``value`` are only set for BARE and
    PAIR lines; both are stripped of surrounding whitespace.
    """

    number: int
    raw: str
    kind: LineKind
    key: Optional[str] = None
    value: Optional[str] = None

    @property
    def is_pair(self) -> bool:
        return self.kind is LineKind.PAIR

    def with_value(self, value: str) -> "ConfigLine":
        """Return a copy of this line holding ``value``."""
        if self.key is None:
            raise ValueError(f"Line {self.number} has no key to assign a value to")
        return replace(
            self,
            raw=f"{self.key}={value}",
            kind=LineKind.PAIR if value else LineKind.BARE,
            value=value,
        )


def parse_line(raw: str, number: int) -> ConfigLine:
    """Classify a single line.

    The key/value split happens on the first ``=`` only, since base64
    padding and serialized envelopes contain ``=`` characters.
    """
    stripped = raw.strip()
    if not stripped:
        return ConfigLine(number, raw, LineKind.BLANK)
    if stripped.startswith("#"):
        return ConfigLine(number, raw, LineKind.COMMENT)
    if "=" not in stripped:
        return ConfigLine(number, raw, LineKind.MALFORMED)
    key, _, value = stripped.partition("=")
    key, value = key.strip(), value.strip()
    if not value:
        return ConfigLine(number, raw, LineKind.BARE, key=key, value="")
    return ConfigLine(number, raw, LineKind.PAIR, key=key, value=value)


def parse_lines(lines: Iterable[str]) -> list[ConfigLine]:
    return [parse_line(line, idx) for idx, line in enumerate(lines, start=1)]


def parse_document(text: str) -> list[ConfigLine]:
    """Split ``text`` on newlines and parse every line.

    A trailing newline produces a final BLANK record, so rendering the
    result gives back the same text.
    """
    return parse_lines(text.split("\n"))


def render_lines(lines: Iterable[ConfigLine]) -> list[str]:
    return [line.raw for line in lines]


def render_document(lines: Iterable[ConfigLine]) -> str:
    return "\n".join(render_lines(lines))


def is_valid_key(key: str) -> bool:
    return bool(KEY_PATTERN.match(key))


def find_key(lines: Iterable[ConfigLine], key: str) -> Optional[ConfigLine]:
    """Return the first BARE or PAIR line declaring ``key``.

    A line declares ``key`` only when its raw text starts with ``key=``;
    indented or space-padded declarations are not matched.
    """
    prefix = f"{key}="
    for line in lines:
        if line.key is not None and line.raw.startswith(prefix):
            return line
    return None


def upsert(lines: list[ConfigLine], key: str, value: str) -> list[ConfigLine]:
    """Set ``key`` to ``value``, replacing the first declaration in place.

    When ``key`` is not declared a new line is appended, ahead of the
    trailing blank record a final newline produces so the document keeps
    ending with a newline.
    """
    existing = find_key(lines, key)
    if existing is not None:
        return [
            line.with_value(value) if line is existing else line
            for line in lines
        ]
    result = list(lines)
    if result and result[-1].kind is LineKind.BLANK and not result[-1].raw:
        result.pop()
    result.append(ConfigLine(len(result) + 1, f"{key}={value}", LineKind.PAIR, key, value))
    result.append(ConfigLine(len(result) + 1, "", LineKind.BLANK))
    return result
