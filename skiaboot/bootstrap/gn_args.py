"""Serialization of build arguments in the generator's ``key=value`` format.

Values are booleans (``true``/``false``), integers, double-quoted strings or
lists of those. Inside a string, ``\\``, ``"`` and ``$`` are escaped with a
backslash; every backslash is escaped, so Windows paths survive intact.
"""

import re
from collections.abc import Mapping
from typing import Any

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
INTEGER = re.compile(r"-?[0-9]+")
ESCAPABLE = {"\\", '"', "$"}


def quote_string(value: str) -> str:
    """Return value as a quoted string literal."""
    if "\n" in value or "\r" in value:
        raise ValueError(f"Build argument strings cannot contain newlines: {value!r}")
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def format_value(value: Any) -> str:
    """Return the textual form of a single argument value."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        return "[ " + ", ".join(format_value(v) for v in value) + " ]"
    raise TypeError(f"Unsupported build argument type: {type(value).__name__}")


def serialize_gn_args(args: Mapping[str, Any]) -> str:
    """Serialize args to newline-separated ``key=value`` lines, in mapping order."""
    lines = []
    for key, value in args.items():
        if not IDENTIFIER.fullmatch(key):
            raise ValueError(f"Invalid build argument name: {key!r}")
        lines.append(f"{key}={format_value(value)}")
    return "\n".join(lines)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> ValueError:
        line = self.text.count("\n", 0, self.pos) + 1
        return ValueError(f"{message} (line {line})")

    def skip_blank(self) -> None:
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isspace():
                self.pos += 1
            elif char == "#":
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end == -1 else end + 1
            else:
                break

    def at_end(self) -> bool:
        self.skip_blank()
        return self.pos >= len(self.text)

    def expect(self, char: str) -> None:
        self.skip_blank()
        if not self.text.startswith(char, self.pos):
            raise self.error(f"Expected '{char}'")
        self.pos += 1

    def match(self, pattern: re.Pattern[str]) -> str | None:
        self.skip_blank()
        m = pattern.match(self.text, self.pos)
        if m is None:
            return None
        self.pos = m.end()
        return m.group(0)

    def parse_string(self) -> str:
        self.expect('"')
        out: list[str] = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(out)
            if char == "\\" and self.pos + 1 < len(self.text) and self.text[self.pos + 1] in ESCAPABLE:
                out.append(self.text[self.pos + 1])
                self.pos += 2
                continue
            out.append(char)
            self.pos += 1
        raise self.error("Unterminated string")

    def parse_list(self) -> list[Any]:
        self.expect("[")
        items: list[Any] = []
        while True:
            self.skip_blank()
            if self.text.startswith("]", self.pos):
                self.pos += 1
                return items
            items.append(self.parse_value())
            self.skip_blank()
            if self.text.startswith(",", self.pos):
                self.pos += 1
            elif not self.text.startswith("]", self.pos):
                raise self.error("Expected ',' or ']'")

    def parse_value(self) -> Any:
        self.skip_blank()
        if self.text.startswith('"', self.pos):
            return self.parse_string()
        if self.text.startswith("[", self.pos):
            return self.parse_list()
        number = self.match(INTEGER)
        if number is not None:
            return int(number)
        word = self.match(IDENTIFIER)
        if word == "true":
            return True
        if word == "false":
            return False
        raise self.error("Expected a value")

    def parse(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while not self.at_end():
            key = self.match(IDENTIFIER)
            if key is None:
                raise self.error("Expected an argument name")
            self.expect("=")
            result[key] = self.parse_value()
        return result


def parse_gn_args(text: str) -> dict[str, Any]:
    """Parse a ``key=value`` argument block.

    Accepts whitespace around ``=``, ``#`` comments and multi-line lists, as in
    an ``args.gn`` file written by the generator.

    Raises:
        ValueError: If the text is malformed.
    """
    return _Parser(text).parse()
