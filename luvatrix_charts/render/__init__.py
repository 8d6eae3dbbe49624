from .svg import to_element, to_svg, write_svg

__all__ = ["to_element", "to_svg", "write_svg"]
