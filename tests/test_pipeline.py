"""Tests for the single-artifact bundle pipeline."""

from __future__ import annotations

import base64
import gzip
import re
from pathlib import Path

import pytest

from playable.compressor import ByteCompressor
from playable.config import MinifyConfig
from playable.embed import DirectiveResolver
from playable.errors import MissingAssetFile
from playable.pipeline import PATCHES, BundlePipeline, Stage
from tests._fixtures.bundle_builder import BundleBuilder

_INDEX = """
<!DOCTYPE html>
<html>
  <head>
    <style>
      body  {  margin : 0 ;  }
    </style>
  </head>
  <body>
    <script>
      var splash_image = "splash.png";
    </script>
    <script type="text/javascript" src="dmloader.js" embed></script>
    <script type="text/javascript" src="Demo_wasm.js" embed="compress"></script>
    <script>
      // EMBED: extra.js
    </script>
  </body>
</html>
"""

_LOADER = """var Progress = {};
var Module = {
    isWASMSupported: (function() {
        try { return typeof WebAssembly === "object"; } catch (e) {}
        return false;
    })(),
    load: function() { var xhr = new XMLHttpRequest(); return xhr; }
};"""


def _layout(builder: BundleBuilder) -> None:
    builder.write(
        {
            "index.html": _INDEX,
            "splash.png": b"\x89PNGdata",
            "dmloader.js": _LOADER,
            "Demo_wasm.js": "console.log('engine');\n" * 20,
            "extra.js": "window.extra = true;",
        }
    )


def test_pipeline_writes_self_contained_artifact(
    bundle_builder: BundleBuilder, compressor: ByteCompressor
) -> None:
    _layout(bundle_builder)
    pipeline = BundlePipeline(resolver=DirectiveResolver(compressor))

    result = pipeline.run(bundle_builder.bundle_dir, "Demo")

    assert result.stage is Stage.WRITTEN
    assert result.artifact == bundle_builder.bundle_dir / "Demo.html"
    html = result.artifact.read_text(encoding="utf-8")
    assert result.size == result.artifact.stat().st_size

    expected_image = base64.b64encode(b"\x89PNGdata").decode("ascii")
    assert f'var splash_image = "data:image/png;base64,{expected_image}"' in html
    assert "embed" not in html.replace("EmbeddedHttpRequest", "")
    assert "window.extra = true;" in html
    assert "XMLHttpRequest" not in html
    assert "new EmbeddedHttpRequest()" in html
    assert "isWASMSupported: false," in html
    assert "WebAssembly" not in html
    assert "body{margin:0" in html

    payload = re.search(r"atob\('([^']+)'\)", html).group(1)
    assert gzip.decompress(base64.b64decode(payload)) == ("console.log('engine');\n" * 20).encode()

    # index.html itself is left untouched
    assert 'src="dmloader.js" embed' in (bundle_builder.bundle_dir / "index.html").read_text(
        encoding="utf-8"
    )


def test_pipeline_preserves_line_breaks_and_collapses_indentation(
    bundle_builder: BundleBuilder, compressor: ByteCompressor
) -> None:
    _layout(bundle_builder)
    pipeline = BundlePipeline(resolver=DirectiveResolver(compressor))

    html = pipeline.run(bundle_builder.bundle_dir, "Demo").artifact.read_text(encoding="utf-8")

    assert "<!DOCTYPE html>\n<html>\n<head>\n<style>" in html


def test_missing_entry_point_raises(tmp_path: Path) -> None:
    with pytest.raises(MissingAssetFile):
        BundlePipeline().run(tmp_path, "Demo")


def test_index_with_invalid_utf8_is_decoded_with_replacement(
    bundle_builder: BundleBuilder, compressor: ByteCompressor
) -> None:
    bundle_builder.write({"index.html": b"<p>caf\xe9</p>\n"})

    result = BundlePipeline(resolver=DirectiveResolver(compressor)).run(
        bundle_builder.bundle_dir, "Demo"
    )

    assert "<p>caf\ufffd</p>" in result.artifact.read_text(encoding="utf-8")


def test_missing_reference_writes_nothing(
    bundle_builder: BundleBuilder, compressor: ByteCompressor
) -> None:
    bundle_builder.write({"index.html": "<script src='x'></script>\n// EMBED: gone.js\n"})
    pipeline = BundlePipeline(resolver=DirectiveResolver(compressor))

    with pytest.raises(MissingAssetFile):
        pipeline.run(bundle_builder.bundle_dir, "Demo")

    assert not (bundle_builder.bundle_dir / "Demo.html").exists()
    assert [path.name for path in bundle_builder.bundle_dir.iterdir()] == ["index.html"]


def test_wasm_support_patch_only_rewrites_first_occurrence() -> None:
    text = "a = { isWASMSupported: (function(){ x })(), b: 1 }; c = { isWASMSupported: (function(){ y })(), }"

    patched = BundlePipeline(patches=PATCHES[:1]).apply_patches(text)

    assert patched.startswith("a = { isWASMSupported: false, b: 1 };")
    assert patched.count("isWASMSupported: false,") == 1


def test_http_request_patch_renames_every_occurrence() -> None:
    text = "new XMLHttpRequest(); XMLHttpRequest.DONE; window.XMLHttpRequest"

    patched = BundlePipeline(patches=PATCHES[1:]).apply_patches(text)

    assert patched == "new EmbeddedHttpRequest(); EmbeddedHttpRequest.DONE; window.EmbeddedHttpRequest"


def test_pipeline_honours_minify_config(
    bundle_builder: BundleBuilder, compressor: ByteCompressor
) -> None:
    bundle_builder.write({"index.html": "<p>\n    keep   spacing\n</p>\n"})
    pipeline = BundlePipeline(
        resolver=DirectiveResolver(compressor),
        minify_config=MinifyConfig(collapse_whitespace=False),
    )

    html = pipeline.run(bundle_builder.bundle_dir, "Demo").artifact.read_text(encoding="utf-8")

    assert html == "<p>\n    keep   spacing\n</p>\n"
