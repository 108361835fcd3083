"""
oncoplot/plot
~~~~~~~~~~~~~
"""

from .layout import LayoutFlags, PanelDescriptor, PanelPlan, plan_layout
from .renderers import RenderContext, Renderer, create_figure, render_plan
from .style import DEFAULT_STYLE, StyleConfig

__all__ = [
    "DEFAULT_STYLE",
    "LayoutFlags",
    "PanelDescriptor",
    "PanelPlan",
    "RenderContext",
    "Renderer",
    "StyleConfig",
    "create_figure",
    "plan_layout",
    "render_plan",
]
