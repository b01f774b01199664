"""Replace embed directives with inlined (optionally compressed) file content."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..compressor import ByteCompressor
from ..errors import MissingAssetFile
from ..logging import get_logger, log_filesize
from ..models import Directive, DirectiveKind
from ..utils import gather_all, read_bytes
from .scanner import IMAGE_PATTERN, DirectiveScanner

INFLATE_SNIPPET = "<script>eval(pako.inflate(atob('{payload}'), {{ to: 'string' }}));</script>"


class DirectiveResolver:
    """Turns scanned directives into replacement text and splices it into the buffer.

    All replacements are computed first and then applied in a single pass over
    the spans captured at scan time, so a failure leaves the input untouched.
    """

    def __init__(
        self,
        compressor: ByteCompressor | None = None,
        scanner: DirectiveScanner | None = None,
    ) -> None:
        self.compressor = compressor or ByteCompressor()
        self.scanner = scanner or DirectiveScanner()
        self.logger = get_logger("resolver")

    async def embed(
        self,
        text: str,
        base_dir: Path,
        kinds: Optional[Iterable[DirectiveKind]] = None,
    ) -> str:
        """Scan ``text`` for directives of ``kinds`` and resolve them."""
        directives = list(self.scanner.scan(text, kinds))
        return await self.resolve(text, directives, base_dir)

    async def resolve(self, text: str, directives: Sequence[Directive], base_dir: Path) -> str:
        ordered = self._order(text, directives)
        if not ordered:
            return text

        for directive in ordered:
            if not (base_dir / directive.path).is_file():
                raise MissingAssetFile(base_dir / directive.path)

        replacements = await gather_all(
            self._replacement(directive, base_dir) for directive in ordered
        )

        pieces: List[str] = []
        position = 0
        for directive, replacement in zip(ordered, replacements):
            pieces.append(text[position:directive.start])
            pieces.append(replacement)
            position = directive.end
        pieces.append(text[position:])
        return "".join(pieces)

    def _order(self, text: str, directives: Sequence[Directive]) -> List[Directive]:
        ordered: List[Directive] = []
        for directive in sorted(directives, key=lambda item: (item.start, item.end)):
            if text[directive.start:directive.end] != directive.matched_text:
                raise ValueError(
                    f"Directive for {directive.path} does not match the buffer at "
                    f"{directive.start}:{directive.end}; rescan before resolving"
                )
            if ordered and ordered[-1].overlaps(directive):
                self.logger.warning(
                    "Skipping %s directive for %s overlapping %s",
                    directive.kind.value,
                    directive.path,
                    ordered[-1].path,
                )
                continue
            ordered.append(directive)
        return ordered

    async def _replacement(self, directive: Directive, base_dir: Path) -> str:
        path = base_dir / directive.path

        if directive.kind is DirectiveKind.IMAGE:
            data = await read_bytes(path)
            uri = f"data:image/{directive.extension};base64," + base64.b64encode(data).decode("ascii")
            match = IMAGE_PATTERN.fullmatch(directive.matched_text)
            if match is None:
                replacement = f'var splash_image = "{uri}"'
            else:
                replacement = (
                    directive.matched_text[: match.start("path")]
                    + uri
                    + directive.matched_text[match.end("path"):]
                )
            log_filesize(self.logger, directive.path, " encoded", len(replacement))
            return replacement

        if directive.compress:
            deflated = await self.compressor.compress(path)
            payload = base64.b64encode(deflated).decode("ascii")
            replacement = INFLATE_SNIPPET.format(payload=payload)
            log_filesize(self.logger, directive.path, " compressed", len(deflated))
            log_filesize(self.logger, directive.path, " encoded", len(replacement))
            return replacement

        source = (await read_bytes(path)).decode("utf-8", errors="replace")
        if directive.kind is DirectiveKind.SCRIPT:
            replacement = "<script>" + source + "\n</script>"
        else:
            replacement = source
        log_filesize(self.logger, directive.path, "", len(replacement))
        return replacement


__all__ = ["DirectiveResolver", "INFLATE_SNIPPET"]
