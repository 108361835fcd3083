"""Panel renderer seam."""

from .base import RenderContext, Renderer, create_figure, render_plan

__all__ = [
    "RenderContext",
    "Renderer",
    "create_figure",
    "render_plan",
]
