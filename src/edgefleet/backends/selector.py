"""Reference label-selector matcher.

Understands the equality- and set-based requirements of Kubernetes label
selectors, joined by commas (logical AND)::

    env=prod, tier!=cache, region in (eu-1, eu-2), !legacy, gpu

An empty selector matches every label set.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from edgefleet.errors import SelectorSyntaxError

_KEY = r"[A-Za-z0-9][A-Za-z0-9_./-]*"
_VALUE = r"[A-Za-z0-9_./-]*"

_SET_RE = re.compile(rf"^({_KEY})\s+(in|notin)\s*\(([^()]*)\)$")
_EQUALITY_RE = re.compile(rf"^({_KEY})\s*(!=|==|=)\s*({_VALUE})$")
_ABSENT_RE = re.compile(rf"^!\s*({_KEY})$")
_EXISTS_RE = re.compile(rf"^({_KEY})$")
_VALUE_RE = re.compile(rf"^{_VALUE}$")


@dataclass(frozen=True)
class Requirement:
    """A single selector requirement."""

    key: str
    operator: str  # one of: =, !=, in, notin, exists, !
    values: frozenset[str] = frozenset()

    def matches(self, labels: dict[str, str]) -> bool:
        present = self.key in labels
        if self.operator == "exists":
            return present
        if self.operator == "!":
            return not present
        if self.operator in ("=", "in"):
            return present and labels[self.key] in self.values
        # != and notin also match when the key is absent
        return not present or labels[self.key] not in self.values


def _split_requirements(selector: str) -> list[str]:
    """Split on top-level commas, leaving ``in (a, b)`` groups intact."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in selector:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise SelectorSyntaxError(selector, "unbalanced parentheses")
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if depth != 0:
        raise SelectorSyntaxError(selector, "unbalanced parentheses")
    parts.append("".join(current))
    return [p.strip() for p in parts]


def _parse_requirement(selector: str, text: str) -> Requirement:
    if not text:
        raise SelectorSyntaxError(selector, "empty requirement")

    match = _SET_RE.match(text)
    if match:
        values = [v.strip() for v in match.group(3).split(",")]
        if not all(values) or not all(_VALUE_RE.match(v) for v in values):
            raise SelectorSyntaxError(selector, f"invalid value set in {text!r}")
        return Requirement(match.group(1), match.group(2), frozenset(values))

    match = _EQUALITY_RE.match(text)
    if match:
        operator = "!=" if match.group(2) == "!=" else "="
        return Requirement(match.group(1), operator, frozenset([match.group(3)]))

    match = _ABSENT_RE.match(text)
    if match:
        return Requirement(match.group(1), "!")

    match = _EXISTS_RE.match(text)
    if match:
        return Requirement(match.group(1), "exists")

    raise SelectorSyntaxError(selector, f"invalid requirement {text!r}")


@lru_cache(maxsize=512)
def parse_selector(selector: str) -> tuple[Requirement, ...]:
    """Parse *selector* into its requirements (cached)."""
    if not selector.strip():
        return ()
    return tuple(_parse_requirement(selector, part) for part in _split_requirements(selector))


class LabelSelectorMatcher:
    """Pure-Python :class:`~edgefleet.core.matcher.SelectorMatcher`."""

    def is_label_match(self, selector: str, labels: dict[str, str]) -> bool:
        return all(req.matches(labels) for req in parse_selector(selector))
