"""Backends for sassy output generation (CSS)."""

from .css_renderer import render_css, resolve_selectors, save_css_file

__all__ = ["render_css", "resolve_selectors", "save_css_file"]
