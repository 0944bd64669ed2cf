from __future__ import annotations
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from .raster import Raster


class Visualizer:
    """Plot helpers (only used when --show). No implicit showing in library paths."""

    @staticmethod
    def show_side_by_side(
        rasters: Sequence[Raster],
        titles: Optional[Sequence[str]] = None,
        figsize: Tuple[int, int] = (12, 6),
        show: bool = True,
    ) -> plt.Figure:
        n = len(rasters)
        titles = titles or [f"Image {i+1}" for i in range(n)]

        fig, axes = plt.subplots(1, n, figsize=figsize)
        if n == 1:
            axes = [axes]

        for ax, raster, title in zip(axes, rasters, titles):
            ax.imshow(raster.pixels)
            ax.set_title(f"{title} ({raster.width}x{raster.height})")
            ax.axis("off")

        fig.tight_layout()
        if show:
            plt.show()
        return fig

    @staticmethod
    def show_before_after(before: Raster, after: Raster, title: str = "", show: bool = True) -> plt.Figure:
        prefix = f"{title}: " if title else ""
        return Visualizer.show_side_by_side(
            [before, after], [f"{prefix}original", f"{prefix}enhanced"], show=show
        )
