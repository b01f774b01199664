"""Directive discovery over raw HTML/JS text."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional

from ..models import Directive, DirectiveKind

SCRIPT_PATTERN = re.compile(
    r'<script [^>]*?(data-)?src="(?P<path>[^"]+?)" embed(="(?P<mode>compress)")?></script>'
)
COMMENT_PATTERN = re.compile(r"// EMBED: (?P<path>[^\r\n]+)")
IMAGE_PATTERN = re.compile(r'var splash_image = "(?P<path>[^"]+?\.(?P<ext>png|jpg))"')

IMAGE_KINDS = frozenset({DirectiveKind.IMAGE})
SCRIPT_KINDS = frozenset({DirectiveKind.SCRIPT, DirectiveKind.COMMENT})


class DirectiveScanner:
    """Tokenizes text into a flat list of embed directives.

    Images are found by one pass, script tags and ``// EMBED:`` comments by a
    second; each pass yields matches in textual order. Scanning holds no
    state, so re-scanning the same text yields the same directives.
    """

    def scan(
        self, text: str, kinds: Optional[Iterable[DirectiveKind]] = None
    ) -> Iterator[Directive]:
        wanted = frozenset(kinds) if kinds is not None else frozenset(DirectiveKind)
        if DirectiveKind.IMAGE in wanted:
            yield from self._scan_images(text)
        if wanted & SCRIPT_KINDS:
            yield from self._scan_scripts(text, wanted)

    def _scan_images(self, text: str) -> Iterator[Directive]:
        for match in IMAGE_PATTERN.finditer(text):
            yield Directive(
                matched_text=match.group(0),
                path=match.group("path").strip(),
                kind=DirectiveKind.IMAGE,
                start=match.start(),
                end=match.end(),
                extension=match.group("ext"),
            )

    def _scan_scripts(self, text: str, wanted: frozenset) -> Iterator[Directive]:
        found: list[Directive] = []
        if DirectiveKind.SCRIPT in wanted:
            for match in SCRIPT_PATTERN.finditer(text):
                found.append(
                    Directive(
                        matched_text=match.group(0),
                        path=match.group("path").strip(),
                        kind=DirectiveKind.SCRIPT,
                        start=match.start(),
                        end=match.end(),
                        compress=match.group("mode") == "compress",
                    )
                )
        if DirectiveKind.COMMENT in wanted:
            for match in COMMENT_PATTERN.finditer(text):
                found.append(
                    Directive(
                        matched_text=match.group(0),
                        path=match.group("path").strip(),
                        kind=DirectiveKind.COMMENT,
                        start=match.start(),
                        end=match.end(),
                    )
                )
        found.sort(key=lambda directive: directive.start)
        yield from found


__all__ = ["DirectiveScanner", "IMAGE_KINDS", "SCRIPT_KINDS"]
