"""Configuration loading for playable (.playable.yml and game.project)."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".playable.yml"
PROJECT_FILENAME = "game.project"
DEFAULT_TITLE = "Unnamed project"


@dataclass
class CompressorConfig:
    """External gzip-container compressor invocation; the file path is appended last."""

    executable: str = "7za"
    arguments: List[str] = field(
        default_factory=lambda: ["a", "dummy.gz", "-tgzip", "-mx=9", "-so"]
    )
    max_workers: Optional[int] = None

    @property
    def workers(self) -> int:
        if self.max_workers is not None and self.max_workers > 0:
            return self.max_workers
        return os.cpu_count() or 1


@dataclass
class MinifyConfig:
    """Final HTML minification switches."""

    collapse_whitespace: bool = True
    preserve_line_breaks: bool = True
    minify_css: bool = True
    minify_js: bool = False


@dataclass
class ToolchainConfig:
    """Settings for fetching and running the external game build tool."""

    enabled: bool = True
    java: str = "java"
    version_info_url: str = "https://d.defold.com/beta/info.json"
    download_url: str = "https://d.defold.com/archive/{sha1}/bob/bob.jar"
    build_game: bool = False
    email: str = "foo@bar.com"
    auth: str = "12345"
    texture_compression: bool = True
    request_timeout: float = 60.0


@dataclass
class BundleConfig:
    """Represents the high-level settings defined in .playable.yml."""

    root: Path
    project_dir: Path
    build_dir: Path
    archive_dir: str = "archive"
    inflate_library: Optional[Path] = None
    title: Optional[str] = None
    compressor: CompressorConfig = field(default_factory=CompressorConfig)
    minify: MinifyConfig = field(default_factory=MinifyConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    @property
    def bundle_output_dir(self) -> Path:
        """Directory the toolchain bundles the js-web build into."""
        return self.build_dir / "playable_ad" / "js-web"

    def bundle_dir(self, title: str) -> Path:
        return self.bundle_output_dir / title

    def resolve_title(self) -> str:
        if self.title:
            return self.title
        return read_project_title(self.project_dir)


def load_config(config_path: Path) -> BundleConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        loaded = _read_config(config_file)
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")
        data = loaded

    project_data = _as_dict(data.get("project"))
    project_dir = root / (_as_str(project_data.get("dir")) or "..")
    title = _as_str(project_data.get("title"))

    build_data = _as_dict(data.get("build"))
    build_dir = root / (_as_str(build_data.get("dir")) or "build")
    archive_dir = _as_str(build_data.get("archive_dir")) or "archive"
    inflate_library = root / (
        _as_str(build_data.get("inflate_library"))
        or "node_modules/pako/dist/pako_inflate.min.js"
    )

    compressor = CompressorConfig()
    compressor_data = _as_dict(data.get("compressor"))
    if compressor_data:
        compressor.executable = _as_str(compressor_data.get("executable")) or compressor.executable
        if "arguments" in compressor_data:
            compressor.arguments = _as_str_list(compressor_data.get("arguments"))
        compressor.max_workers = _as_int(compressor_data.get("max_workers"))

    minify = MinifyConfig()
    minify_data = _as_dict(data.get("minify"))
    for name in ("collapse_whitespace", "preserve_line_breaks", "minify_css", "minify_js"):
        value = _as_bool(minify_data.get(name))
        if value is not None:
            setattr(minify, name, value)

    toolchain = ToolchainConfig()
    toolchain_data = _as_dict(data.get("toolchain"))
    for name in ("enabled", "build_game", "texture_compression"):
        value = _as_bool(toolchain_data.get(name))
        if value is not None:
            setattr(toolchain, name, value)
    for name in ("java", "version_info_url", "download_url", "email", "auth"):
        value = _as_str(toolchain_data.get(name))
        if value:
            setattr(toolchain, name, value)
    timeout = _as_float(toolchain_data.get("request_timeout"))
    if timeout is not None:
        toolchain.request_timeout = timeout

    return BundleConfig(
        root=root,
        project_dir=project_dir.resolve(),
        build_dir=build_dir,
        archive_dir=archive_dir,
        inflate_library=inflate_library,
        title=title,
        compressor=compressor,
        minify=minify,
        toolchain=toolchain,
    )


def read_project_title(project_dir: Path) -> str:
    """Return ``[project] title`` from game.project, or the default title."""
    project_file = project_dir / PROJECT_FILENAME
    if not project_file.exists():
        return DEFAULT_TITLE

    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string(project_file.read_text(encoding="utf-8"), source=str(project_file))
    except configparser.Error as exc:
        raise ConfigurationError(f"Failed to parse {project_file}: {exc}") from exc

    title = parser.get("project", "title", fallback="").strip()
    return title or DEFAULT_TITLE


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "BundleConfig",
    "CompressorConfig",
    "DEFAULT_TITLE",
    "MinifyConfig",
    "ToolchainConfig",
    "load_config",
    "read_project_title",
]
