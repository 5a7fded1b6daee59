"""
Structured capability keys.

A capability names one generated artifact or cross-plugin contract point,
e.g. ``queries:kysely:User:findById``. The segment before the first colon
is the category. The string form is what the registry stores; this module
gives plugins a structured way to mint and compare them.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

SEPARATOR = ":"


@dataclass(frozen=True)
class Capability:
    """A parsed or minted capability key."""

    category: str
    provider: Optional[str] = None
    path: Tuple[str, ...] = ()

    # Set when the capability was minted with its provider already known.
    # Resolution never rewrites a qualified capability.
    qualified: bool = False

    @classmethod
    def parse(cls, text: str) -> "Capability":
        """Parse a capability string without assuming any provider segment."""
        category, sep, rest = text.partition(SEPARATOR)
        path = tuple(rest.split(SEPARATOR)) if sep else ()
        return cls(category=category, path=path)

    @classmethod
    def qualify(cls, category: str, provider: str, *path: str) -> "Capability":
        """Mint a fully-qualified capability ``category:provider:path...``."""
        return cls(
            category=category, provider=provider, path=tuple(path), qualified=True
        )

    @property
    def segments(self) -> Tuple[str, ...]:
        head = (self.category,) if self.provider is None else (
            self.category,
            self.provider,
        )
        return head + self.path

    @property
    def is_category(self) -> bool:
        """True for a bare category such as ``queries``."""
        return self.provider is None and not self.path

    def child(self, *segments: str) -> "Capability":
        """Return a capability with extra path segments appended."""
        return Capability(
            category=self.category,
            provider=self.provider,
            path=self.path + tuple(segments),
            qualified=self.qualified,
        )

    def matches(self, pattern: str) -> bool:
        """Structural prefix test against a rule or query pattern.

        Whole pattern segments must equal the capability's segments; a final
        pattern segment not followed by a colon only needs to prefix the
        corresponding segment. ``"types:"`` matches ``types:User`` and
        ``"que"`` matches ``queries:kysely:User``.
        """
        if not pattern:
            return True
        parts = pattern.split(SEPARATOR)
        open_tail = parts[-1]
        closed = parts[:-1]
        segments = self.segments
        if len(closed) > len(segments):
            return False
        if tuple(closed) != segments[: len(closed)]:
            return False
        if not open_tail:
            # Pattern ended with a colon: a following segment must exist.
            return len(segments) > len(closed)
        if len(segments) == len(closed):
            return False
        return segments[len(closed)].startswith(open_tail)

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


CapabilityLike = Union[str, Capability]


def capability_key(capability: CapabilityLike) -> str:
    """String form of a capability, used as the registry key."""
    return str(capability)


def category_of(capability: CapabilityLike) -> str:
    """The segment before the first colon."""
    if isinstance(capability, Capability):
        return capability.category
    return capability.partition(SEPARATOR)[0]


def matches_pattern(capability: CapabilityLike, pattern: str) -> bool:
    """Prefix-match any capability (string or structured) against a pattern."""
    if not isinstance(capability, Capability):
        capability = Capability.parse(capability)
    return capability.matches(pattern)
