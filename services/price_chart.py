"""Line and bar chart rendering for the dashboard using matplotlib."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib import font_manager  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.ticker import FuncFormatter  # noqa: E402

from models.schemas import TopTicker  # noqa: E402
from utils.formatters import format_krw, format_usd  # noqa: E402
from utils.logging_config import get_logger  # noqa: E402

logger = get_logger(__name__)

LINE_COLOR = "#F5B63A"
FILL_COLOR = "#F5B63A"
BAR_COLOR = "#3A8DF5"
TEXT_COLOR = "#F4F1EA"
TICK_COLOR = "#9AA4B2"
BACKGROUND = "#101418"
GRID_COLOR = "#FFFFFF"
FALLBACK_FONT = "DejaVu Sans"


class PriceChartRenderer:
    """Render the one-year price line and the top-tickers bar chart."""

    FONT_CANDIDATES = (
        "Apple SD Gothic Neo",
        "AppleGothic",
        "NanumGothic",
        "Noto Sans CJK KR",
        "Noto Sans KR",
        "Malgun Gothic",
    )

    def __init__(self, font_name: Optional[str] = None, max_x_ticks: int = 8):
        self.font_name = font_name
        self.max_x_ticks = max_x_ticks
        self._resolved_font: Optional[str] = None

    def render_price_line(
        self,
        labels: Sequence[str],
        values: Sequence[float],
        title: str,
    ) -> Figure:
        """Line chart of ``values`` against ``labels`` with a USD y-axis."""
        self._apply_font()
        fig, ax = plt.subplots(figsize=(11, 5.2))
        self._style_figure(fig, ax)

        x_values = list(range(len(values)))
        ax.plot(x_values, list(values), color=LINE_COLOR, linewidth=2.0, label=title)
        ax.fill_between(x_values, list(values), min(values), color=FILL_COLOR, alpha=0.2)

        tick_step = max(1, math.ceil(len(x_values) / self.max_x_ticks))
        ax.set_xticks(x_values[::tick_step])
        ax.set_xticklabels(list(labels)[::tick_step], fontsize=8.5)
        ax.yaxis.set_major_formatter(FuncFormatter(lambda value, _pos: format_usd(value)))
        ax.margins(x=0.01)

        legend = ax.legend(loc="upper left", frameon=False)
        for text in legend.get_texts():
            text.set_color(TEXT_COLOR)

        fig.tight_layout()
        return fig

    def render_top_tickers(self, entries: Sequence[TopTicker], title: str) -> Figure:
        """Bar chart of ranked tickers, largest first."""
        self._apply_font()
        fig, ax = plt.subplots(figsize=(11, 4.6))
        self._style_figure(fig, ax)

        labels: List[str] = [entry.label for entry in entries]
        values: List[float] = [entry.value for entry in entries]
        ax.bar(range(len(values)), values, color=BAR_COLOR, alpha=0.85)
        ax.set_xticks(list(range(len(labels))))
        ax.set_xticklabels(labels, rotation=35, ha="right", fontsize=8.5)
        ax.yaxis.set_major_formatter(FuncFormatter(lambda value, _pos: format_krw(value)))
        ax.set_title(title, loc="left", color=TEXT_COLOR, fontsize=11, fontweight="bold")

        fig.tight_layout()
        return fig

    def dispose(self, figure: Figure) -> None:
        """Release a figure created by this renderer."""
        plt.close(figure)

    def _apply_font(self) -> None:
        if self._resolved_font is None:
            self._resolved_font = self._resolve_font_name()
        plt.rcParams["font.family"] = self._resolved_font
        plt.rcParams["axes.unicode_minus"] = False

    def _resolve_font_name(self) -> str:
        if self.font_name:
            return self.font_name
        installed = {font.name for font in font_manager.fontManager.ttflist}
        for name in self.FONT_CANDIDATES:
            if name in installed:
                return name
        logger.warning("korean_font_not_found", fallback=FALLBACK_FONT)
        return FALLBACK_FONT

    def _style_figure(self, fig: Figure, ax) -> None:
        fig.patch.set_facecolor(BACKGROUND)
        ax.set_facecolor(BACKGROUND)
        ax.grid(alpha=0.04, color=GRID_COLOR)
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)
        for side in ("left", "bottom"):
            ax.spines[side].set_color(TICK_COLOR)
        ax.tick_params(axis="both", colors=TICK_COLOR, labelsize=8.5)
