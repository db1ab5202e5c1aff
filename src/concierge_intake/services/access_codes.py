# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Access code allow-list."""

import hashlib
import re
from collections.abc import Iterable

_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile("[–—]")


def normalize_code(candidate: object) -> str:
    """Normalize a code for comparison.

    Strips all whitespace, maps en/em dashes to ``-`` and uppercases, so
    ``" ic–1234 "`` and ``"IC-1234"`` compare equal.
    """
    if candidate is None:
        return ""
    text = _WHITESPACE.sub("", str(candidate))
    return _DASHES.sub("-", text).upper()


def hash_code(candidate: object) -> str:
    """SHA-256 hex digest of a normalized code."""
    return hashlib.sha256(normalize_code(candidate).encode("utf-8")).hexdigest()


class AccessCodeRegistry:
    """Immutable set of accepted access codes.

    Codes may be configured in plain text or as SHA-256 digests of the
    normalized code. Rotating codes means changing config and restarting;
    there is no runtime mutation API.
    """

    def __init__(self, codes: Iterable[str] = (), hashes: Iterable[str] = ()):
        self._codes = frozenset(c for c in (normalize_code(x) for x in codes) if c)
        self._hashes = frozenset(h.strip().lower() for h in hashes if h and h.strip())

    def __len__(self) -> int:
        return len(self._codes) + len(self._hashes)

    @staticmethod
    def normalize(candidate: object) -> str:
        return normalize_code(candidate)

    def is_valid(self, candidate: object) -> bool:
        """Check whether ``candidate`` is an accepted code."""
        code = normalize_code(candidate)
        if not code:
            return False
        if code in self._codes:
            return True
        return bool(self._hashes) and hash_code(code) in self._hashes
