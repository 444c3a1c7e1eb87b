"""
Tests for sampled pixel-difference change detection.
"""

import numpy as np
import pytest
from PIL import Image

from screendiff.capture.diff import check_change, compute_diff_percent, has_changed
from tests.fakes import BLACK, WHITE, solid


def noise(width: int, height: int, seed: int = 0) -> Image.Image:
    rng = np.random.default_rng(seed)
    return Image.fromarray(rng.integers(0, 256, (height, width, 4), dtype=np.uint8))


class TestBaseline:
    """Tests for the missing-baseline and dimension rules."""

    def test_no_previous_is_changed(self):
        """Without a baseline every frame counts as changed."""
        assert has_changed(None, solid(4, 4), 30, 0.5) is True

    @pytest.mark.parametrize("size", [(4, 5), (5, 4), (2, 2), (100, 100)])
    def test_dimension_change_is_changed(self, size):
        """A size change is a change regardless of content or thresholds."""
        assert has_changed(solid(4, 4), solid(*size), 255, 1000.0) is True

    def test_result_details_without_baseline(self):
        result = check_change(None, solid(4, 4), 30, 0.5)
        assert result.changed is True
        assert result.diff_percent is None


class TestScenarios:
    """Reference scenarios."""

    def test_identical_black_frames_unchanged(self):
        """Scenario A: identical 4x4 black frames."""
        assert has_changed(solid(4, 4, BLACK), solid(4, 4, BLACK), 30, 0.5) is False

    def test_black_to_white_changed(self):
        """Scenario B: 4x4 black to 4x4 white."""
        result = check_change(solid(4, 4, BLACK), solid(4, 4, WHITE), 30, 0.5)
        assert result.changed is True
        assert result.diff_percent == pytest.approx(100.0)
        assert result.sampled_pixels == 4
        assert result.differing_pixels == 4

    @pytest.mark.parametrize("seed", [0, 1, 2])
    @pytest.mark.parametrize("percent", [0.001, 0.5, 50.0])
    def test_identical_content_unchanged(self, seed, percent):
        """Identical frames never change when the percentage threshold is positive."""
        image = noise(31, 17, seed)
        assert has_changed(image, image.copy(), 0, percent) is False


class TestSampling:
    """Tests for the stride-2 grid and its weighting."""

    def test_single_sampled_pixel_weighted_by_four(self):
        """One differing sample in a 4x4 frame estimates 4 of 16 pixels."""
        current = solid(4, 4)
        current.putpixel((0, 0), WHITE)

        percent, sampled, differing = compute_diff_percent(solid(4, 4), current, 30)

        assert sampled == 4
        assert differing == 1
        assert percent == pytest.approx(25.0)

    def test_change_threshold_is_inclusive(self):
        current = solid(4, 4)
        current.putpixel((2, 2), WHITE)

        assert has_changed(solid(4, 4), current, 30, 25.0) is True
        assert has_changed(solid(4, 4), current, 30, 25.01) is False

    def test_odd_coordinates_are_not_sampled(self):
        """Pixels on odd rows or columns are invisible to the comparison."""
        current = solid(4, 4)
        for xy in [(1, 0), (0, 1), (1, 1), (3, 3), (3, 0), (0, 3)]:
            current.putpixel(xy, WHITE)

        percent, _, differing = compute_diff_percent(solid(4, 4), current, 30)

        assert differing == 0
        assert percent == 0.0
        assert has_changed(solid(4, 4), current, 30, 0.5) is False

    def test_odd_dimensions_sample_last_even_index(self):
        """A 5x5 frame samples columns and rows 0, 2 and 4."""
        current = solid(5, 5)
        current.putpixel((4, 4), WHITE)

        percent, sampled, differing = compute_diff_percent(solid(5, 5), current, 30)

        assert sampled == 9
        assert differing == 1
        assert percent == pytest.approx(4 / 25 * 100)

    def test_stride_one_compares_every_pixel(self):
        current = solid(4, 4)
        current.putpixel((1, 1), WHITE)

        percent, sampled, differing = compute_diff_percent(solid(4, 4), current, 30, stride=1)

        assert sampled == 16
        assert differing == 1
        assert percent == pytest.approx(100 / 16)

    def test_invalid_stride(self):
        with pytest.raises(ValueError, match="stride"):
            compute_diff_percent(solid(4, 4), solid(4, 4), 30, stride=0)


class TestChannelTolerance:
    """Tests for per-channel comparison."""

    def test_delta_equal_to_threshold_is_not_different(self):
        """The per-channel comparison is strictly greater-than."""
        current = solid(2, 2, (30, 0, 0, 255))
        assert compute_diff_percent(solid(2, 2), current, 30)[0] == 0.0

    @pytest.mark.parametrize("color", [(31, 0, 0, 255), (0, 31, 0, 255), (0, 0, 31, 255)])
    def test_any_rgb_channel_over_threshold_differs(self, color):
        assert compute_diff_percent(solid(2, 2), solid(2, 2, color), 30)[0] == pytest.approx(100.0)

    def test_decrease_counts_like_increase(self):
        previous = solid(2, 2, (200, 200, 200, 255))
        current = solid(2, 2, (100, 200, 200, 255))
        assert has_changed(previous, current, 30, 0.5) is True

    def test_alpha_is_ignored(self):
        previous = solid(4, 4, (10, 20, 30, 255))
        current = solid(4, 4, (10, 20, 30, 0))
        assert has_changed(previous, current, 0, 0.5) is False

    def test_threshold_monotonicity(self):
        """Raising diff_threshold never raises the measured percentage."""
        previous, current = noise(40, 30, 1), noise(40, 30, 2)

        percents = [compute_diff_percent(previous, current, t)[0] for t in range(0, 256, 5)]

        assert all(later <= earlier for earlier, later in zip(percents, percents[1:]))
        assert percents[0] > 0
        assert percents[-1] == 0.0


class TestPermissiveThresholds:
    """Out-of-range thresholds are accepted and behave predictably."""

    def test_zero_percent_reports_identical_frames_as_changed(self):
        assert has_changed(solid(4, 4), solid(4, 4), 30, 0.0) is True

    def test_negative_percent_always_changed(self):
        assert has_changed(solid(4, 4), solid(4, 4), 30, -1.0) is True

    def test_percent_above_hundred_never_changed(self):
        assert has_changed(solid(4, 4, BLACK), solid(4, 4, WHITE), 30, 150.0) is False


class TestPurity:
    """The detector must not touch its inputs."""

    def test_inputs_not_mutated(self):
        previous, current = noise(9, 7, 3), noise(9, 7, 4)
        before = (previous.tobytes(), current.tobytes())

        has_changed(previous, current, 10, 1.0)

        assert (previous.tobytes(), current.tobytes()) == before
        assert previous.mode == "RGBA"
        assert current.mode == "RGBA"

    def test_accepts_rgb_images(self):
        previous = Image.new("RGB", (4, 4), (0, 0, 0))
        current = Image.new("RGB", (4, 4), (255, 255, 255))
        assert has_changed(previous, current, 30, 0.5) is True
        assert previous.mode == "RGB"
