"""Adapter around the Defold command line builder (bob.jar)."""

from __future__ import annotations

import json
import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import ToolchainConfig
from ..errors import ToolchainFailure
from ..logging import get_logger

ProcessRunner = Callable[..., int]

_SHA1_PATTERN = re.compile(r"^[a-f0-9]{40}$", re.IGNORECASE)


@dataclass(frozen=True)
class VersionInfo:
    """Release metadata published next to the builder downloads."""

    sha1: str
    version: Optional[str] = None

    @property
    def short_sha1(self) -> str:
        return self.sha1[:7]


def _subprocess_runner(
    args: Sequence[str], cwd: Path | None = None, capture_output: bool = False
) -> int:
    try:
        completed = subprocess.run(list(args), cwd=cwd, capture_output=capture_output, check=False)
    except FileNotFoundError as exc:
        raise ToolchainFailure(args[0], f"unable to locate '{args[0]}'") from exc
    return completed.returncode


class BobToolchain:
    """Fetches, verifies and runs bob.jar as an opaque build step."""

    def __init__(
        self,
        config: ToolchainConfig,
        build_dir: Path,
        *,
        runner: ProcessRunner | None = None,
        opener: Callable[..., object] = urlopen,
    ) -> None:
        self.config = config
        self.build_dir = build_dir
        self._runner = runner or _subprocess_runner
        self._opener = opener
        self.logger = get_logger("toolchain")

    def prepare(self) -> Path:
        """Ensure Java and a verified bob.jar are available; return the jar path."""
        self.ensure_java()
        info = self.fetch_version_info()
        jar = self.download(info)
        self.check_jar(jar)
        return jar

    def ensure_java(self) -> None:
        code = self._runner([self.config.java, "-version"], None, capture_output=True)
        if code != 0:
            raise ToolchainFailure("java", "Java is not installed")

    def fetch_version_info(self) -> VersionInfo:
        url = self.config.version_info_url
        self.logger.debug("Fetching builder version info from %s", url)
        raw = self._fetch(Request(url, headers={"Accept": "application/json"}), "version-info")
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ToolchainFailure("version-info", "response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ToolchainFailure("version-info", "response is not a JSON object")

        sha1 = payload.get("sha1")
        if not isinstance(sha1, str) or not _SHA1_PATTERN.match(sha1):
            raise ToolchainFailure("version-info", "Invalid bob.jar SHA-1.")
        version = payload.get("version")
        return VersionInfo(sha1=sha1, version=version if isinstance(version, str) else None)

    def jar_path(self, info: VersionInfo) -> Path:
        return self.build_dir / f"bob_{info.short_sha1}.jar"

    def download(self, info: VersionInfo) -> Path:
        jar = self.jar_path(info)
        if jar.exists():
            self.logger.info("* Using cached %s", jar.name)
            return jar

        url = self.config.download_url.format(sha1=info.sha1)
        self.logger.info("* Downloading %s", url)
        self.build_dir.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=".bob.", suffix=".jar", dir=self.build_dir)
        try:
            with os.fdopen(handle, "wb") as target:
                try:
                    with self._opener(url, timeout=self.config.request_timeout) as response:  # type: ignore[attr-defined]
                        shutil.copyfileobj(response, target)
                except HTTPError as exc:
                    raise ToolchainFailure("download", f"HTTP {exc.code} for {url}") from exc
                except URLError as exc:
                    raise ToolchainFailure("download", f"{exc.reason}") from exc
            os.replace(temp_name, jar)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return jar

    def check_jar(self, jar: Path) -> None:
        code = self._runner([self.config.java, "-jar", str(jar), "--version"], None)
        if code != 0:
            raise ToolchainFailure("check", "bob.jar is invalid.")

    def build_game(self, jar: Path, project_dir: Path, bundle_output: Path) -> None:
        args = [
            self.config.java,
            "-jar",
            str(jar.resolve()),
            "--email",
            self.config.email,
            "--auth",
            self.config.auth,
            "--texture-compression",
            "true" if self.config.texture_compression else "false",
            "--bundle-output",
            str(bundle_output.resolve()),
            "--platform",
            "js-web",
            "--archive",
            "distclean",
            "resolve",
            "build",
            "bundle",
        ]
        self.logger.info("* Building game in %s", project_dir)
        code = self._runner(args, project_dir)
        if code != 0:
            raise ToolchainFailure("build", "Can't build the game.")

    def _fetch(self, request: Request, step: str) -> bytes:
        try:
            with self._opener(request, timeout=self.config.request_timeout) as response:  # type: ignore[attr-defined]
                return response.read()
        except HTTPError as exc:
            raise ToolchainFailure(step, f"HTTP {exc.code}: {exc.reason}") from exc
        except URLError as exc:
            raise ToolchainFailure(step, f"{exc.reason}") from exc


__all__ = ["BobToolchain", "VersionInfo"]
