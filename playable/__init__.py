"""Bundle a web game build into a single self-contained playable ad."""

from .combiner import FileCombiner
from .compressor import ByteCompressor
from .embed import DirectiveResolver, DirectiveScanner
from .errors import (
    BundleError,
    CompressionFailure,
    ConfigurationError,
    MissingAssetFile,
    ToolchainFailure,
)
from .pipeline import BundlePipeline, Stage

__all__ = [
    "BundleError",
    "BundlePipeline",
    "ByteCompressor",
    "CompressionFailure",
    "ConfigurationError",
    "DirectiveResolver",
    "DirectiveScanner",
    "FileCombiner",
    "MissingAssetFile",
    "Stage",
    "ToolchainFailure",
]
