"""Filtering of metric names by a white- or blacklist of exact names and patterns."""

from __future__ import annotations

import re
from typing import Iterable


class WhiteBlackListError(ValueError):
    """Raised for an invalid white/blacklist configuration or pattern."""


class WhiteBlackList:
    """Decides whether a name is included, using either a whitelist or a blacklist."""

    def __init__(self, white: Iterable[str] = (), black: Iterable[str] = ()) -> None:
        white_items = dict.fromkeys(white)
        black_items = dict.fromkeys(black)
        if white_items and black_items:
            raise WhiteBlackListError(
                "whitelist and blacklist are both set, they are mutually exclusive, "
                "only one of them can be set"
            )
        # Blacklisting is the default when neither list is given.
        self.is_white_list = bool(white_items)
        self._items: dict[str, None] = white_items if self.is_white_list else black_items
        self._patterns: list[re.Pattern[str]] = []

    def parse(self) -> None:
        """Compile every item of the list as a regular expression."""
        patterns = []
        for item in self._items:
            try:
                patterns.append(re.compile(item))
            except re.error as exc:
                raise WhiteBlackListError(f"invalid pattern {item!r}: {exc}") from exc
        self._patterns = patterns

    def include(self, items: Iterable[str]) -> None:
        """Make the given items included."""
        if self.is_white_list:
            self._items.update(dict.fromkeys(items))
        else:
            for item in items:
                self._items.pop(item, None)

    def exclude(self, items: Iterable[str]) -> None:
        """Make the given items excluded."""
        if self.is_white_list:
            for item in items:
                self._items.pop(item, None)
        else:
            self._items.update(dict.fromkeys(items))

    def is_included(self, item: str) -> bool:
        """True if ``item`` passes the list, as last compiled by :meth:`parse`."""
        matched = any(pattern.search(item) for pattern in self._patterns)
        return matched if self.is_white_list else not matched

    def is_excluded(self, item: str) -> bool:
        """True if ``item`` does not pass the list."""
        return not self.is_included(item)

    def status(self) -> str:
        """Describe the list, e.g. for logging."""
        mode = "whitelisting" if self.is_white_list else "blacklisting"
        return f"{mode} the following items: " + ", ".join(self._items)