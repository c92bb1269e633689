"""Asset manifest aggregation for build pipelines."""

from .accumulator import ExternalCacheStore, ManifestRound, OwnedSeedStore
from .descriptors import FileDescriptor, extract_descriptors
from .host import Asset, Chunk, Compilation, Compiler, MultiCompiler
from .options import ManifestOptions, ManifestOptionsError
from .paths import is_full_url, normalize
from .pipeline import run_pipeline
from .plugin import ManifestPlugin

__all__ = [
    "Asset",
    "Chunk",
    "Compilation",
    "Compiler",
    "ExternalCacheStore",
    "FileDescriptor",
    "ManifestOptions",
    "ManifestOptionsError",
    "ManifestPlugin",
    "ManifestRound",
    "MultiCompiler",
    "OwnedSeedStore",
    "extract_descriptors",
    "is_full_url",
    "normalize",
    "run_pipeline",
]
