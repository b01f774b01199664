"""Single-artifact bundling pipeline: embed, patch, minify, write."""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence

from .config import MinifyConfig
from .embed import IMAGE_KINDS, SCRIPT_KINDS, DirectiveResolver
from .errors import MissingAssetFile
from .logging import get_logger, log_filesize
from .postproc.minify import HtmlMinifier


class Stage(str, Enum):
    """Pipeline states, in the order they are reached."""

    LOADED = "loaded"
    IMAGES_EMBEDDED = "images_embedded"
    SCRIPTS_EMBEDDED = "scripts_embedded"
    PATCHES_APPLIED = "patches_applied"
    RENAMED = "renamed"
    MINIFIED = "minified"
    WRITTEN = "written"


@dataclass(frozen=True)
class Patch:
    """A fixed textual rewrite applied to every artifact."""

    name: str
    pattern: re.Pattern[str]
    replacement: str
    count: int = 0

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text, count=self.count)


PATCHES: Sequence[Patch] = (
    # The runtime's WASM feature check trips up the minifier; report no support.
    Patch(
        name="disable-wasm-check",
        pattern=re.compile(r"(isWASMSupported:)[\s\S]+?\}\)\(\),"),
        replacement=r"\1 false,",
        count=1,
    ),
    # The artifact ships its own request implementation under this name.
    Patch(
        name="embedded-http-request",
        pattern=re.compile(r"XMLHttpRequest"),
        replacement="EmbeddedHttpRequest",
    ),
)


@dataclass
class BundleResult:
    """Outcome of a pipeline run."""

    source: Path
    artifact: Path
    size: int
    stage: Stage


class BundlePipeline:
    """Drives ``index.html`` through the embedding stages into ``<title>.html``."""

    def __init__(
        self,
        resolver: DirectiveResolver | None = None,
        minifier: HtmlMinifier | None = None,
        patches: Sequence[Patch] = PATCHES,
        minify_config: MinifyConfig | None = None,
    ) -> None:
        self.resolver = resolver or DirectiveResolver()
        self.minifier = minifier or HtmlMinifier(minify_config)
        self.patches = tuple(patches)
        self.logger = get_logger("pipeline")

    def run(self, bundle_dir: Path, title: str, entry: str = "index.html") -> BundleResult:
        return asyncio.run(self.run_async(bundle_dir, title, entry))

    async def run_async(
        self, bundle_dir: Path, title: str, entry: str = "index.html"
    ) -> BundleResult:
        source = bundle_dir / entry
        if not source.is_file():
            raise MissingAssetFile(source)

        text = source.read_text(encoding="utf-8", errors="replace")
        self._advance(Stage.LOADED, source.name)

        text = await self.resolver.embed(text, bundle_dir, IMAGE_KINDS)
        self._advance(Stage.IMAGES_EMBEDDED)

        text = await self.resolver.embed(text, bundle_dir, SCRIPT_KINDS)
        self._advance(Stage.SCRIPTS_EMBEDDED)

        text = self.apply_patches(text)
        self._advance(Stage.PATCHES_APPLIED)

        artifact = bundle_dir / f"{title}.html"
        self._advance(Stage.RENAMED, artifact.name)

        text = self.minifier.minify(text)
        self._advance(Stage.MINIFIED)

        data = text.encode("utf-8")
        _write_atomic(artifact, data)
        log_filesize(self.logger, artifact.name, " resulting", len(data))
        self._advance(Stage.WRITTEN)

        return BundleResult(source=source, artifact=artifact, size=len(data), stage=Stage.WRITTEN)

    def apply_patches(self, text: str) -> str:
        for patch in self.patches:
            patched = patch.apply(text)
            if patched == text:
                self.logger.debug("Patch %s matched nothing", patch.name)
            text = patched
        return text

    def _advance(self, stage: Stage, detail: str | None = None) -> None:
        if detail:
            self.logger.debug("Stage %s (%s)", stage.value, detail)
        else:
            self.logger.debug("Stage %s", stage.value)


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(handle, "wb") as stream:
            stream.write(data)
        os.chmod(temp_name, 0o644)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


__all__ = ["BundlePipeline", "BundleResult", "PATCHES", "Patch", "Stage"]
