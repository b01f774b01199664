"""Post-processing applied to the bundled artifact."""

from .minify import HtmlMinifier, minify_css

__all__ = ["HtmlMinifier", "minify_css"]
