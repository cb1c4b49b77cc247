"""Tests for sub-pixel sampling patterns."""

import math

import pytest


class TestPatternTables:
    """Tests for the fixed offset tables."""

    def test_pattern_sizes(self):
        from mirrortrace.core.sampling import MAX_SAMPLES, SamplingPattern, pattern_size

        assert pattern_size(SamplingPattern.SQUARE) == 8
        assert pattern_size(SamplingPattern.CIRCLE) == 8
        assert pattern_size(SamplingPattern.HEXAGON) == 6
        assert MAX_SAMPLES == 8

    @pytest.mark.parametrize("name", ["circle", "hexagon"])
    def test_round_patterns_have_radius_half(self, name):
        """Test circle and hexagon offsets lie half a pixel from the center."""
        from mirrortrace.core.sampling import PATTERN_OFFSETS, parse_pattern

        for dx, dy in PATTERN_OFFSETS[parse_pattern(name)]:
            assert abs(math.hypot(dx, dy) - 0.5) < 1e-9

    def test_square_offsets_stay_within_pixel(self):
        from mirrortrace.core.sampling import PATTERN_OFFSETS, SamplingPattern

        offsets = PATTERN_OFFSETS[SamplingPattern.SQUARE]
        assert len(set(offsets)) == 8
        assert all(abs(dx) <= 0.5 and abs(dy) <= 0.5 for dx, dy in offsets)


class TestGetOffsets:
    """Tests for selecting a prefix of a pattern."""

    def test_prefix_of_table(self):
        from mirrortrace.core.sampling import PATTERN_OFFSETS, SamplingPattern, get_offsets

        offsets = get_offsets(SamplingPattern.CIRCLE, 5)
        assert offsets == PATTERN_OFFSETS[SamplingPattern.CIRCLE][:5]

    @pytest.mark.parametrize(
        "pattern,samples",
        [("square", 0), ("square", 9), ("circle", -1), ("hexagon", 7)],
    )
    def test_sample_count_out_of_range(self, pattern, samples):
        from mirrortrace.core.sampling import get_offsets

        with pytest.raises(ValueError, match="outside"):
            get_offsets(pattern, samples)

    def test_full_hexagon(self):
        from mirrortrace.core.sampling import get_offsets

        assert len(get_offsets("hexagon", 6)) == 6


class TestParsePattern:
    """Tests for resolving pattern names and values."""

    def test_parse_by_name_value_and_member(self):
        from mirrortrace.core.sampling import SamplingPattern, parse_pattern

        assert parse_pattern("Hexagon") is SamplingPattern.HEXAGON
        assert parse_pattern(0) is SamplingPattern.SQUARE
        assert parse_pattern(SamplingPattern.CIRCLE) is SamplingPattern.CIRCLE

    @pytest.mark.parametrize("pattern", ["triangle", 7])
    def test_unknown_pattern(self, pattern):
        from mirrortrace.core.sampling import parse_pattern

        with pytest.raises(ValueError, match="Unknown sampling pattern"):
            parse_pattern(pattern)
