"""Directive scanning and resolution for inlining assets."""

from .resolver import INFLATE_SNIPPET, DirectiveResolver
from .scanner import IMAGE_KINDS, SCRIPT_KINDS, DirectiveScanner

__all__ = [
    "DirectiveResolver",
    "DirectiveScanner",
    "IMAGE_KINDS",
    "INFLATE_SNIPPET",
    "SCRIPT_KINDS",
]
