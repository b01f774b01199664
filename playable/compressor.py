"""Adapter for the external gzip-container compressor binary."""

from __future__ import annotations

import asyncio
import weakref
from pathlib import Path
from typing import Iterable, List

from .config import CompressorConfig
from .errors import CompressionFailure
from .logging import get_logger
from .utils import gather_all


class ByteCompressor:
    """Runs one compressor process per file and returns its stdout bytes.

    Concurrent calls are bounded by ``CompressorConfig.workers`` processes per
    event loop.
    """

    def __init__(self, config: CompressorConfig | None = None) -> None:
        self.config = config or CompressorConfig()
        self.logger = get_logger("compressor")
        self._limits: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore]" = (
            weakref.WeakKeyDictionary()
        )

    async def compress(self, path: Path | str) -> bytes:
        """Return the compressed bytes of ``path``; raises CompressionFailure on non-zero exit."""
        path = Path(path)
        args = [*self.config.arguments, str(path)]
        async with self._limit():
            self.logger.debug("Running %s %s", self.config.executable, " ".join(args))
            try:
                process = await asyncio.create_subprocess_exec(
                    self.config.executable,
                    *args,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as exc:
                raise CompressionFailure(
                    path, detail=f"unable to locate compressor '{self.config.executable}'"
                ) from exc
            try:
                stdout, stderr = await process.communicate()
            except asyncio.CancelledError:
                if process.returncode is None:
                    try:
                        process.kill()
                    except ProcessLookupError:
                        pass
                    await process.wait()
                raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="ignore").strip()
            raise CompressionFailure(path, process.returncode, detail)
        return stdout

    async def compress_many(self, paths: Iterable[Path | str]) -> List[bytes]:
        """Compress every path concurrently; results keep input order."""
        return await gather_all(self.compress(path) for path in paths)

    def _limit(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        semaphore = self._limits.get(loop)
        if semaphore is None:
            semaphore = asyncio.Semaphore(self.config.workers)
            self._limits[loop] = semaphore
        return semaphore


__all__ = ["ByteCompressor"]
