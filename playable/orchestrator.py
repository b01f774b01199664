"""Top-level build sequence: config, toolchain, archive, bundle."""

from __future__ import annotations

import asyncio
import dataclasses
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .combiner import FileCombiner
from .compressor import ByteCompressor
from .config import BundleConfig, load_config
from .embed import DirectiveResolver
from .errors import MissingAssetFile
from .logging import get_logger
from .models import Asset
from .pipeline import BundlePipeline
from .toolchain import BobToolchain


@dataclass
class BuildOutcome:
    """Result of a full playable build."""

    title: str
    artifact: Path
    size: int
    archive: Optional[Path] = None


ToolchainFactory = Callable[[BundleConfig], BobToolchain]


def _default_toolchain(config: BundleConfig) -> BobToolchain:
    return BobToolchain(config.toolchain, config.build_dir)


class Orchestrator:
    """Coordinates the playable build the way the original task series does."""

    def __init__(
        self,
        toolchain_factory: ToolchainFactory = _default_toolchain,
        compressor: ByteCompressor | None = None,
    ) -> None:
        self.toolchain_factory = toolchain_factory
        self._compressor = compressor
        self.logger = get_logger("orchestrator")

    def load(
        self,
        path: str | Path,
        *,
        build_game: bool | None = None,
        minify_js: bool | None = None,
    ) -> BundleConfig:
        config = load_config(Path(path))
        if build_game is not None:
            config.toolchain = dataclasses.replace(config.toolchain, build_game=build_game)
        if minify_js is not None:
            config.minify = dataclasses.replace(config.minify, minify_js=minify_js)
        return config

    def run_build(
        self,
        path: str | Path,
        *,
        skip_toolchain: bool = False,
        build_game: bool | None = None,
        minify_js: bool | None = None,
    ) -> BuildOutcome:
        """Run every step and return the written artifact."""
        config = self.load(path, build_game=build_game, minify_js=minify_js)
        title = self._resolve_title(config)

        if config.toolchain.enabled and not skip_toolchain:
            self.prepare_toolchain(config)
        else:
            self.logger.debug("Skipping toolchain steps")

        bundle_dir = self._bundle_dir(config, title)
        self.stage_inflate_library(config, bundle_dir)
        return asyncio.run(self._bundle(config, title, bundle_dir))

    def run_archive(self, path: str | Path) -> Path:
        """Regenerate only ``<title>_archive.js``."""
        config = self.load(path)
        title = self._resolve_title(config)
        bundle_dir = self._bundle_dir(config, title)
        return asyncio.run(self.combine_archive(config, title, bundle_dir))

    def prepare_toolchain(self, config: BundleConfig) -> Path:
        toolchain = self.toolchain_factory(config)
        jar = toolchain.prepare()
        if config.toolchain.build_game:
            toolchain.build_game(jar, config.project_dir, config.bundle_output_dir)
        return jar

    def stage_inflate_library(self, config: BundleConfig, bundle_dir: Path) -> Path:
        """Copy the client-side inflate library next to index.html."""
        library = config.inflate_library
        if library is None or not library.is_file():
            raise MissingAssetFile(library or config.root)
        target = bundle_dir / library.name
        shutil.copyfile(library, target)
        self.logger.debug("Copied %s to %s", library, target)
        return target

    async def combine_archive(self, config: BundleConfig, title: str, bundle_dir: Path) -> Path:
        combiner = FileCombiner(self._compressor_for(config))
        assets = combiner.collect(bundle_dir, [f"{config.archive_dir}/*"])
        # The title is user text, so the asm.js module is looked up by name, not globbed.
        asmjs = bundle_dir / f"{title}_asmjs.js"
        if asmjs.is_file():
            assets.append(Asset.from_file(asmjs, bundle_dir))
        self.logger.info("* Archiving %d files", len(assets))
        archive = await combiner.combine(assets, f"{title}_archive.js")
        target = bundle_dir / archive.path
        target.write_bytes(archive.content)
        return target

    async def _bundle(self, config: BundleConfig, title: str, bundle_dir: Path) -> BuildOutcome:
        archive = await self.combine_archive(config, title, bundle_dir)
        pipeline = BundlePipeline(
            resolver=DirectiveResolver(self._compressor_for(config)),
            minify_config=config.minify,
        )
        result = await pipeline.run_async(bundle_dir, title)
        return BuildOutcome(title=title, artifact=result.artifact, size=result.size, archive=archive)

    def _resolve_title(self, config: BundleConfig) -> str:
        title = config.resolve_title()
        self.logger.info("* Project title is '%s'", title)
        return title

    @staticmethod
    def _bundle_dir(config: BundleConfig, title: str) -> Path:
        bundle_dir = config.bundle_dir(title)
        if not bundle_dir.is_dir():
            raise MissingAssetFile(bundle_dir)
        return bundle_dir

    def _compressor_for(self, config: BundleConfig) -> ByteCompressor:
        if self._compressor is not None:
            return self._compressor
        return ByteCompressor(config.compressor)


__all__ = ["BuildOutcome", "Orchestrator"]
