"""Combine build files into a single base64 archive module."""

from __future__ import annotations

import base64
import tempfile
from pathlib import Path
from typing import Iterable, List, Sequence

from .compressor import ByteCompressor
from .logging import get_logger, log_filesize
from .models import ArchiveManifest, Asset


class FileCombiner:
    """Compresses a set of assets and emits one ``EMBED_ARCHIVE_DATA`` module."""

    def __init__(self, compressor: ByteCompressor | None = None) -> None:
        self.compressor = compressor or ByteCompressor()
        self.logger = get_logger("combiner")

    @staticmethod
    def collect(base_dir: Path, patterns: Iterable[str]) -> List[Asset]:
        """Return assets matching ``patterns`` under ``base_dir``, sorted by relative path."""
        seen: dict[str, Asset] = {}
        for pattern in patterns:
            for candidate in base_dir.glob(pattern):
                if not candidate.is_file():
                    continue
                asset = Asset.from_file(candidate, base_dir)
                seen.setdefault(asset.path, asset)
        return [seen[key] for key in sorted(seen)]

    async def build_manifest(self, assets: Sequence[Asset]) -> ArchiveManifest:
        ordered = sorted(assets, key=lambda asset: asset.path)
        # The compressor reads from disk, so in-memory assets are spilled first.
        with tempfile.TemporaryDirectory(prefix="playable-combine-") as scratch:
            sources = [
                self._source_for(asset, Path(scratch) / str(index))
                for index, asset in enumerate(ordered)
            ]
            compressed = await self.compressor.compress_many(sources)

        manifest = ArchiveManifest()
        for asset, payload in zip(ordered, compressed):
            manifest.entries[asset.path] = base64.b64encode(payload).decode("ascii")
            self.logger.debug(
                "Archived %s (%d -> %d bytes)", asset.path, asset.size, len(payload)
            )
        return manifest

    @staticmethod
    def _source_for(asset: Asset, scratch: Path) -> Path:
        if asset.source is not None:
            return asset.source
        scratch.mkdir()
        spilled = scratch / Path(asset.path).name
        spilled.write_bytes(asset.content)
        return spilled

    async def combine(self, assets: Sequence[Asset], output_name: str) -> Asset:
        """Return the generated archive module as an asset named ``output_name``."""
        manifest = await self.build_manifest(assets)
        content = manifest.render().encode("utf-8")
        log_filesize(self.logger, output_name, " archive", len(content))
        return Asset(path=output_name, content=content)


__all__ = ["FileCombiner"]
