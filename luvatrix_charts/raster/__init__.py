from .canvas import blend_span, draw_hline, draw_vline, fill_circle, fill_polygon, fill_rect, new_canvas
from .draw_lines import draw_polyline
from .draw_text import draw_text, text_size
from .rasterize import rasterize, save_png

__all__ = [
    "blend_span",
    "draw_hline",
    "draw_vline",
    "draw_polyline",
    "draw_text",
    "fill_circle",
    "fill_polygon",
    "fill_rect",
    "new_canvas",
    "rasterize",
    "save_png",
    "text_size",
]
