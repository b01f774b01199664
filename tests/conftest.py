from __future__ import annotations

from pathlib import Path

import pytest

from playable.compressor import ByteCompressor
from tests._fixtures.bundle_builder import BundleBuilder
from tests._fixtures.compressors import gzip_compressor_config


@pytest.fixture
def bundle_builder(tmp_path: Path) -> BundleBuilder:
    """Provide a reusable build-output builder rooted at the pytest tmp_path."""
    return BundleBuilder(tmp_path)


@pytest.fixture
def compressor() -> ByteCompressor:
    """A real subprocess-backed compressor producing deterministic gzip output."""
    return ByteCompressor(gzip_compressor_config())
