"""Version comparison for installed and declared tool versions.

Tools use all kinds of version schemes (``1.6``, ``12.1.1``, ``0.9.5-rc1``,
``2020-11-03``), so versions are not compared as literal strings nor as
PEP 440 versions. Instead they are split into components which compare
numerically where both sides are numbers and lexically otherwise.
"""

import re
from functools import total_ordering

_SEPARATORS = re.compile(r"[.\-_+~]")
_COMPONENT = re.compile(r"\d+|[^\d]+")


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Split a version string into comparable components.

    A leading ``v`` is ignored and trailing zero components are dropped, so
    ``v1.6`` and ``1.6.0`` produce the same key. Numeric components sort
    after textual ones at the same position, which orders ``1.0rc1``
    before ``1.0.1``.

    Args:
        version: Version string as declared or reported.

    Returns:
        Tuple of (kind, value) pairs suitable for ordering.
    """
    text = version.strip()
    if text[:1] in ("v", "V") and text[1:2].isdigit():
        text = text[1:]

    components: list[tuple[int, int | str]] = []
    for part in _SEPARATORS.split(text):
        for token in _COMPONENT.findall(part):
            if token.isdigit():
                components.append((1, int(token)))
            else:
                components.append((0, token.lower()))

    while components and components[-1] == (1, 0):
        components.pop()
    return tuple(components)


@total_ordering
class Version:
    """A tool version compared component by component.

    Example:
        >>> Version("1.5") < Version("1.6")
        True
        >>> Version("1.6") == Version("1.6.0")
        True
    """

    __slots__ = ("_key", "raw")

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self._key = version_key(raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: "Version") -> bool:
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Version({self.raw!r})"
