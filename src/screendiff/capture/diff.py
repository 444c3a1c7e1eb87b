"""
Sampled Pixel-Difference Change Detection for screendiff

Decides whether two consecutive screen images represent a material change.
Only every other row and column is compared (a stride-2 grid covering a
quarter of the pixels), and each differing sample is weighted by 4 so the
running count estimates a full-resolution count.

A sampled pixel differs when any of its red, green or blue channels moved by
more than `diff_threshold`. Alpha is ignored.
"""

import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Sampling stride on both axes. Thresholds in the wild are tuned for 2.
DEFAULT_SAMPLE_STRIDE = 2


@dataclass
class DiffResult:
    """Result of comparing two frames."""

    changed: bool
    diff_percent: float | None
    sampled_pixels: int
    differing_pixels: int


def _rgb_samples(image: Image.Image, stride: int) -> np.ndarray:
    """Return the stride-sampled RGB channels of an image as int16."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    pixels = np.asarray(image)
    return pixels[::stride, ::stride, :3].astype(np.int16)


def compute_diff_percent(
    previous: Image.Image,
    current: Image.Image,
    diff_threshold: int,
    stride: int = DEFAULT_SAMPLE_STRIDE,
) -> tuple[float, int, int]:
    """
    Compute the estimated percentage of pixels that differ between two frames.

    Both images must have the same dimensions.

    Args:
        previous: Baseline frame
        current: Newly captured frame
        diff_threshold: Per-channel tolerance; a channel differs when the
            absolute delta is strictly greater than this value
        stride: Sampling stride on both axes

    Returns:
        Tuple of (diff_percent, sampled_pixels, differing_samples)
    """
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got {stride}")
    if previous.size != current.size:
        raise ValueError(f"Image sizes differ: {previous.size} vs {current.size}")

    width, height = current.size
    before = _rgb_samples(previous, stride)
    after = _rgb_samples(current, stride)

    differs = (np.abs(after - before) > diff_threshold).any(axis=2)
    differing_samples = int(np.count_nonzero(differs))
    sampled_pixels = int(differs.size)

    total_pixels = width * height
    if total_pixels == 0:
        return 0.0, sampled_pixels, differing_samples

    weighted = differing_samples * stride * stride
    return weighted / total_pixels * 100.0, sampled_pixels, differing_samples


def check_change(
    previous: Image.Image | None,
    current: Image.Image,
    diff_threshold: int,
    change_threshold_percent: float,
    stride: int = DEFAULT_SAMPLE_STRIDE,
) -> DiffResult:
    """
    Compare a new frame against the baseline.

    A missing baseline or a change of dimensions always counts as a change,
    regardless of thresholds.

    Args:
        previous: Baseline frame, or None if there is none yet
        current: Newly captured frame
        diff_threshold: Per-channel tolerance (0-255)
        change_threshold_percent: Minimum percentage of differing pixels
            (inclusive) to report a change
        stride: Sampling stride on both axes

    Returns:
        DiffResult with the verdict and the measured percentage
    """
    if previous is None:
        return DiffResult(changed=True, diff_percent=None, sampled_pixels=0, differing_pixels=0)

    if previous.size != current.size:
        logger.debug(f"Frame size changed: {previous.size} -> {current.size}")
        return DiffResult(changed=True, diff_percent=None, sampled_pixels=0, differing_pixels=0)

    diff_percent, sampled, differing = compute_diff_percent(
        previous, current, diff_threshold, stride=stride
    )

    return DiffResult(
        changed=diff_percent >= change_threshold_percent,
        diff_percent=diff_percent,
        sampled_pixels=sampled,
        differing_pixels=differing,
    )


def has_changed(
    previous: Image.Image | None,
    current: Image.Image,
    diff_threshold: int,
    change_threshold_percent: float,
    stride: int = DEFAULT_SAMPLE_STRIDE,
) -> bool:
    """Return True if `current` differs materially from `previous`."""
    return check_change(
        previous, current, diff_threshold, change_threshold_percent, stride=stride
    ).changed


if __name__ == "__main__":
    import fire

    def compare(
        path1: str,
        path2: str,
        diff_threshold: int = 30,
        change_threshold_percent: float = 0.5,
    ):
        """Compare two image files."""
        with Image.open(path1) as first, Image.open(path2) as second:
            result = check_change(
                first.convert("RGBA"),
                second.convert("RGBA"),
                diff_threshold,
                change_threshold_percent,
            )
        return {
            "changed": result.changed,
            "diff_percent": result.diff_percent,
            "sampled_pixels": result.sampled_pixels,
            "differing_pixels": result.differing_pixels,
        }

    fire.Fire({"compare": compare})
