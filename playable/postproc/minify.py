"""Whitespace and CSS minification for the final HTML artifact."""

from __future__ import annotations

import re

import rcssmin
import rjsmin

from ..config import MinifyConfig

_RAW_BLOCK = re.compile(
    r"(?P<open><(?P<tag>script|style|pre|textarea)\b[^>]*>)(?P<body>.*?)(?P<close></(?P=tag)\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")
_SRC_ATTR = re.compile(r"\bsrc\s*=", re.IGNORECASE)
_TYPE_ATTR = re.compile(r"""\btype\s*=\s*["']?([^"'\s>]+)""", re.IGNORECASE)
_JS_TYPES = {"text/javascript", "application/javascript", "module"}


def minify_css(css: str) -> str:
    """Minify a stylesheet, keeping ``/*! ... */`` license comments."""
    return rcssmin.cssmin(css, keep_bang_comments=True).strip()


class HtmlMinifier:
    """Collapses markup whitespace while leaving raw-text elements intact.

    ``<style>`` bodies go through rcssmin and, when enabled, inline JavaScript
    goes through rjsmin. Everything inside ``script``, ``pre`` and
    ``textarea`` is otherwise copied byte for byte.
    """

    def __init__(self, config: MinifyConfig | None = None) -> None:
        self.config = config or MinifyConfig()

    def minify(self, html: str) -> str:
        pieces: list[str] = []
        position = 0
        for match in _RAW_BLOCK.finditer(html):
            pieces.append(self._collapse(html[position:match.start()]))
            pieces.append(match.group("open"))
            pieces.append(self._raw_body(match.group("tag").lower(), match.group("open"), match.group("body")))
            pieces.append(match.group("close"))
            position = match.end()
        pieces.append(self._collapse(html[position:]))
        return "".join(pieces)

    def _collapse(self, markup: str) -> str:
        if not self.config.collapse_whitespace:
            return markup
        return _WHITESPACE.sub(self._whitespace_replacement, markup)

    def _whitespace_replacement(self, match: re.Match[str]) -> str:
        run = match.group(0)
        if self.config.preserve_line_breaks and ("\n" in run or "\r" in run):
            return "\n"
        return " "

    def _raw_body(self, tag: str, open_tag: str, body: str) -> str:
        if tag == "style" and self.config.minify_css:
            return minify_css(body)
        if tag == "script" and self.config.minify_js and self._is_inline_js(open_tag):
            return rjsmin.jsmin(body)
        return body

    @staticmethod
    def _is_inline_js(open_tag: str) -> bool:
        if _SRC_ATTR.search(open_tag):
            return False
        type_match = _TYPE_ATTR.search(open_tag)
        if type_match is None:
            return True
        return type_match.group(1).lower() in _JS_TYPES


__all__ = ["HtmlMinifier", "minify_css"]
