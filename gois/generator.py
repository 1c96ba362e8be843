"""Domain lists: expansion of ``[charset]{count}`` patterns and list files."""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterator
from pathlib import Path

MAX_UINT64 = 2**64 - 1

_SEGMENT = re.compile(r"\[([^\]]+)\](?:\{(\d+)\})?")
_CHARSET_PIECE = re.compile(r"(.)-(.)|(.)", re.DOTALL)


def expand_charset(charset: str) -> list[str]:
    """Expand a charset body such as ``a-z``, ``0-9`` or ``abc`` into characters."""
    chars: list[str] = []
    for piece in _CHARSET_PIECE.finditer(charset):
        single = piece.group(3)
        if single is not None:
            chars.append(single)
        else:
            start, end = ord(piece.group(1)), ord(piece.group(2))
            chars.extend(chr(code) for code in range(start, end + 1))
    if not chars:
        raise ValueError(f"invalid charset: [{charset}]")
    return chars


def generate_domains_from_pattern(pattern: str) -> tuple[Iterator[str], int]:
    """Return a lazy stream of every domain the pattern describes and their count.

    ``[a-z]``, ``[A-Z]``, ``[0-9]`` and ``[abc]`` are character sets; ``{n}``
    after a set repeats it n times. The count saturates at 2**64 - 1.
    """
    matches = list(_SEGMENT.finditer(pattern))
    if not matches:
        raise ValueError(
            f"invalid pattern: {pattern}. Use the [charset]{{count}} form, e.g. [a-z]{{3}}.com"
        )

    groups: list[list[str]] = []
    literals: list[str] = []
    slots: list[tuple[int, int]] = []
    total = 1
    position = 0

    for match in matches:
        repeat = int(match.group(2)) if match.group(2) else 1
        chars = expand_charset(match.group(1))

        literals.append(pattern[position : match.start()])
        position = match.end()
        slots.append((len(groups), len(groups) + repeat))

        for _ in range(repeat):
            groups.append(chars)
            if total < MAX_UINT64:
                total = min(total * len(chars), MAX_UINT64)

    tail = pattern[position:]
    if not groups:
        raise ValueError(f"cannot generate domains from pattern: {pattern}")

    def domains() -> Iterator[str]:
        for combo in itertools.product(*groups):
            parts: list[str] = []
            for literal, (start, end) in zip(literals, slots):
                parts.append(literal)
                parts.append("".join(combo[start:end]))
            parts.append(tail)
            yield "".join(parts)

    return domains(), total


def load_domains_from_file(file_path: str | Path) -> list[str]:
    """Read one domain per line, skipping blank lines and ``#`` comments."""
    content = Path(file_path).read_text(encoding="utf-8")
    domains = [
        line
        for line in (raw.strip() for raw in content.split("\n"))
        if line and not line.startswith("#")
    ]
    if not domains:
        raise ValueError("no valid domains found in file")
    return domains