"""Fixed sub-pixel sampling patterns for anti-aliasing.

Each pattern is a table of (dx, dy) displacements, in pixels, from the pixel
center. A pixel's color is the mean of the shaded colors of the first
``samples`` offsets of the selected pattern. Samples that hit nothing count
as black but still count in the mean.

Patterns:
    square: the 4 corners and 4 edge midpoints of a unit square (8 offsets)
    circle: 8 points on a circle of radius 0.5, 45 degrees apart
    hexagon: the 6 corners of a hexagon of radius 0.5

Example:
    >>> from mirrortrace.core.sampling import SamplingPattern, get_offsets
    >>> offsets = get_offsets(SamplingPattern.HEXAGON, 6)
    >>> len(offsets)
    6
"""

from enum import IntEnum


class SamplingPattern(IntEnum):
    """Available sub-pixel sampling layouts."""

    SQUARE = 0
    CIRCLE = 1
    HEXAGON = 2


_SQUARE = (
    (-0.5, 0.5),
    (0.5, 0.5),
    (0.5, -0.5),
    (-0.5, -0.5),
    (0.0, 0.5),
    (0.5, 0.0),
    (0.0, -0.5),
    (-0.5, 0.0),
)

_CIRCLE = (
    (-0.3535533906, 0.3535533906),
    (0.3535533906, 0.3535533906),
    (0.3535533906, -0.3535533906),
    (-0.3535533906, -0.3535533906),
    (0.0, 0.5),
    (0.5, 0.0),
    (0.0, -0.5),
    (-0.5, 0.0),
)

_HEXAGON = (
    (-0.4330127019, 0.25),
    (0.4330127019, 0.25),
    (0.4330127019, -0.25),
    (-0.4330127019, -0.25),
    (0.0, 0.5),
    (0.0, -0.5),
)

PATTERN_OFFSETS: dict[SamplingPattern, tuple[tuple[float, float], ...]] = {
    SamplingPattern.SQUARE: _SQUARE,
    SamplingPattern.CIRCLE: _CIRCLE,
    SamplingPattern.HEXAGON: _HEXAGON,
}

# Largest table size; the render kernel preallocates this many offsets
MAX_SAMPLES = max(len(table) for table in PATTERN_OFFSETS.values())


def parse_pattern(pattern: "SamplingPattern | str | int") -> SamplingPattern:
    """Resolve a pattern given as enum member, name or value.

    Raises:
        ValueError: If the pattern is unknown.
    """
    if isinstance(pattern, str):
        try:
            return SamplingPattern[pattern.upper()]
        except KeyError:
            raise ValueError(f"Unknown sampling pattern: {pattern!r}") from None
    try:
        return SamplingPattern(pattern)
    except ValueError:
        raise ValueError(f"Unknown sampling pattern: {pattern!r}") from None


def pattern_size(pattern: "SamplingPattern | str | int") -> int:
    """Return the number of offsets a pattern defines."""
    return len(PATTERN_OFFSETS[parse_pattern(pattern)])


def get_offsets(
    pattern: "SamplingPattern | str | int",
    samples: int,
) -> tuple[tuple[float, float], ...]:
    """Return the first ``samples`` offsets of a pattern.

    Args:
        pattern: The sampling pattern.
        samples: Number of offsets requested, between 1 and the pattern size.

    Returns:
        Tuple of (dx, dy) offsets in pixels.

    Raises:
        ValueError: If the pattern is unknown or the sample count is out of range.
    """
    table = PATTERN_OFFSETS[parse_pattern(pattern)]
    if samples < 1 or samples > len(table):
        raise ValueError(
            f"Sample count {samples} is outside [1, {len(table)}] for pattern "
            f"{parse_pattern(pattern).name.lower()}"
        )
    return table[:samples]
