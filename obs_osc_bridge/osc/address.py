"""
OSC address parsing

Splits an OSC address into its path segments. OSC addresses may not carry
literal spaces, so path segments used as OBS names encode spaces as '_'.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

SPACE_MARKER = "_"


def decode_name(segment: str) -> str:
    """Expand the underscore-for-space encoding of a path segment."""
    return segment.replace(SPACE_MARKER, " ")


@dataclass(frozen=True)
class ParsedAddress:
    """An OSC address split into ordered path segments."""

    address: str
    segments: Tuple[str, ...]

    @property
    def verb(self) -> Optional[str]:
        """The leading segment, used as the command keyword by prefixed commands."""
        return self.segments[0] if self.segments else None

    def is_exactly(self, verb: str) -> bool:
        """True when the address is the single segment ``/<verb>``."""
        return self.segments == (verb,)

    def contains(self, keyword: str) -> bool:
        """Substring test against the whole address.

        Suffixed commands (``/<scene>/<item>/visible``) are detected this way,
        so target names must not themselves contain a reserved keyword.
        """
        return keyword in self.address

    def targets(self, count: int = 2) -> Optional[Tuple[str, ...]]:
        """Decoded leading target names for a suffixed command.

        Returns None unless the address carries ``count`` target segments
        followed by at least one keyword segment.
        """
        if len(self.segments) <= count:
            return None
        names = self.segments[:count]
        if not all(names):
            return None
        return tuple(decode_name(name) for name in names)

    def segment_after(self, keyword: str) -> Optional[str]:
        """The decoded segment following the first segment equal to ``keyword``."""
        try:
            position = self.segments.index(keyword)
        except ValueError:
            return None
        if position + 1 >= len(self.segments) or not self.segments[position + 1]:
            return None
        return decode_name(self.segments[position + 1])


def parse_address(address: str) -> ParsedAddress:
    """Split ``address`` on '/' and drop the empty leading segment.

    >>> parse_address("/Wide/VOX/visible").segments
    ('Wide', 'VOX', 'visible')
    """
    segments = address.split("/")
    if segments and segments[0] == "":
        segments = segments[1:]
    return ParsedAddress(address=address, segments=tuple(segments))
