"""
oncoplot/plot/renderers/base
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple, TYPE_CHECKING

import matplotlib.pyplot as plt

from ..style import StyleConfig

if TYPE_CHECKING:
    from ...core.oncoplot import OncoplotData
    from ..layout import PanelDescriptor, PanelPlan


@dataclass(frozen=True)
class RenderContext:
    """
    Data class carrying everything a renderer needs besides the panel data.

    Attributes:
        plan (PanelPlan): Panel plan being rendered.
        style (StyleConfig): Style configuration.
        canvas (Any): Backend drawing target, e.g. the output of `create_figure`.
    """

    plan: PanelPlan
    style: StyleConfig
    canvas: Any = None


class Renderer(Protocol):
    """
    Class for defining the panel drawing interface.
    Protocol only; implement in concrete renderers.
    """

    def draw_panel(
        self,
        panel: PanelDescriptor,
        data: OncoplotData,
        context: RenderContext,
    ) -> None:
        """
        Draws one panel.

        Args:
            panel (PanelDescriptor): Panel to draw.
            data (OncoplotData): Finalized oncoplot data.
            context (RenderContext): Plan, style and canvas.
        """
        # Protocol stub; no runtime implementation
        ...


def create_figure(
    plan: PanelPlan,
    style: Optional[StyleConfig] = None,
) -> Tuple[plt.Figure, Dict[str, plt.Axes]]:
    """
    Creates a Matplotlib figure with one axes per planned panel.

    Args:
        plan (PanelPlan): Panel plan providing the axes boxes.
        style (Optional[StyleConfig]): Style providing the figure size. Defaults to None.

    Returns:
        Tuple[plt.Figure, Dict[str, plt.Axes]]: Figure and axes keyed by panel kind.
    """
    style = style if style is not None else StyleConfig()
    fig = plt.figure(figsize=style["figsize"])
    axes: Dict[str, plt.Axes] = {}
    for panel in plan:
        ax = fig.add_axes(list(panel.bbox))
        ax.set_axis_off()
        axes[panel.kind] = ax
    return fig, axes


def render_plan(
    data: OncoplotData,
    renderer: Renderer,
    *,
    style: Optional[StyleConfig] = None,
    canvas: Any = None,
) -> RenderContext:
    """
    Walks the plan of finalized oncoplot data and draws every panel in order.

    Args:
        data (OncoplotData): Finalized oncoplot data.
        renderer (Renderer): Panel renderer.

    Kwargs:
        style (Optional[StyleConfig]): Style configuration. Defaults to the default style.
        canvas (Any): Backend drawing target passed through to the renderer. Defaults to None.

    Returns:
        RenderContext: The context handed to every draw call.

    Raises:
        TypeError: If the renderer has no `draw_panel` method.
    """
    if not callable(getattr(renderer, "draw_panel", None)):
        raise TypeError("renderer must implement draw_panel(panel, data, context)")
    context = RenderContext(
        plan=data.plan,
        style=style if style is not None else StyleConfig(),
        canvas=canvas,
    )
    for panel in data.plan:
        renderer.draw_panel(panel, data, context)
    return context
