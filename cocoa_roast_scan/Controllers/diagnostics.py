"""
Pixel Diagnostics - Optional Observability Hooks

Samples a grid of pixels at each pipeline stage and flags images that are
likely to classify badly (washed-out or nearly uniform photos). Observers are
plain callables taking a PixelStats; the pipeline only computes stats when at
least one observer is registered.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from ..config import DEFAULT_DIAGNOSTICS_CONFIG, DiagnosticsConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelStats:
    min: int
    max: int
    avg: float


@dataclass(frozen=True)
class PixelStats:
    """Sampled pixel statistics of one pipeline stage."""
    stage: str
    width: int
    height: int
    red: ChannelStats
    green: ChannelStats
    blue: ChannelStats
    brightness: float   # Mean of the channel averages, 0-255
    variation: int      # Largest channel spread (max - min), 0-255
    very_bright: bool
    low_variation: bool

    @property
    def blank(self) -> bool:
        """Mostly white/blank: very bright and nearly uniform."""
        return self.very_bright and self.low_variation


PixelObserver = Callable[[PixelStats], None]


def _sample_positions(width: int, height: int, grid: int) -> Tuple[np.ndarray, np.ndarray]:
    i = np.arange(grid * grid)
    xs = np.minimum((i % grid) * max(width // grid, 1), width - 1)
    ys = np.minimum((i // grid) * max(height // grid, 1), height - 1)
    return ys, xs


def analyze_pixels(
    image: np.ndarray,
    stage: str,
    config: DiagnosticsConfig = DEFAULT_DIAGNOSTICS_CONFIG,
) -> PixelStats:
    """
    Sample a grid x grid set of pixels and summarize them.

    Args:
        image: (H, W, 3) RGB uint8 array
        stage: Pipeline stage name ("original", "rotated", "preprocessed")
        config: Grid size and flag thresholds

    Returns:
        PixelStats: Per-channel min/max/avg, brightness, variation and flags
    """
    height, width = image.shape[:2]
    ys, xs = _sample_positions(width, height, config.grid)
    samples = image[ys, xs, :3].astype(np.int64)

    channels = [
        ChannelStats(
            min=int(samples[:, c].min()),
            max=int(samples[:, c].max()),
            avg=float(samples[:, c].mean()),
        )
        for c in range(3)
    ]
    brightness = sum(ch.avg for ch in channels) / 3
    variation = max(ch.max - ch.min for ch in channels)

    return PixelStats(
        stage=stage,
        width=width,
        height=height,
        red=channels[0],
        green=channels[1],
        blue=channels[2],
        brightness=brightness,
        variation=variation,
        very_bright=brightness > config.bright_threshold,
        low_variation=variation < config.variation_threshold,
    )


def log_pixel_stats(stats: PixelStats) -> None:
    """Observer that writes pixel stats to the log."""
    for name, ch in (("RED", stats.red), ("GREEN", stats.green), ("BLUE", stats.blue)):
        logger.debug(f"{stats.stage} {name:<5} - Min: {ch.min}, Max: {ch.max}, Avg: {int(ch.avg)}")
    logger.debug(
        f"{stats.stage} {stats.width}x{stats.height}: "
        f"brightness {int(stats.brightness)}/255, variation {stats.variation}/255"
    )

    if stats.blank:
        logger.error(f"{stats.stage} image appears to be mostly blank/white, classification may be inaccurate")
    elif stats.very_bright:
        logger.warning(f"{stats.stage} image is very bright (mostly white)")
    elif stats.low_variation:
        logger.warning(f"{stats.stage} image has very low color variation")


class StatsRecorder:
    """Observer that keeps every PixelStats it receives."""

    def __init__(self):
        self.stats = []

    def __call__(self, stats: PixelStats) -> None:
        self.stats.append(stats)

    def by_stage(self, stage: str) -> PixelStats:
        for stats in self.stats:
            if stats.stage == stage:
                return stats
        raise KeyError(stage)
