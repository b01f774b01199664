"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

import pytest

from playable.cli import _build_parser, main
from tests._fixtures.bundle_builder import BundleBuilder
from tests._fixtures.compressors import gzip_compressor_config


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "build"])
    assert args.verbose is True
    assert args.command == "build"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["archive", "--verbose"])
    assert args.verbose is True
    assert args.command == "archive"


def test_cli_build_flags_default_to_config() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build", "workspace"])
    assert args.path == "workspace"
    assert args.skip_toolchain is False
    assert args.build_game is None
    assert args.minify_js is None


def test_cli_build_flags_are_parsed() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build", "--skip-toolchain", "--build-game", "--minify-js"])
    assert args.skip_toolchain is True
    assert args.build_game is True
    assert args.minify_js is True


def test_cli_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--port", "9000"])
    assert args.command == "serve"
    assert args.port == 9000
    assert args.host == "127.0.0.1"


def test_main_build_reports_artifact(bundle_builder: BundleBuilder, capsys) -> None:
    bundle_builder.write_project()
    bundle_builder.write_config(gzip_compressor_config())
    bundle_builder.write_inflate_library()
    bundle_builder.write({"index.html": "<p>hi</p>\n// EMBED: note.js\n", "note.js": "var n;"})

    main(["build", str(bundle_builder.workspace), "--skip-toolchain"])

    output = capsys.readouterr().out
    assert "Playable written to" in output
    assert "Demo.html" in output
    assert (bundle_builder.bundle_dir / "Demo.html").read_text(encoding="utf-8") == "<p>hi</p>\nvar n;\n"


def test_main_build_failure_exits_with_message(bundle_builder: BundleBuilder, capsys) -> None:
    bundle_builder.write_project()
    bundle_builder.write_config(gzip_compressor_config())

    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(bundle_builder.workspace)])

    assert excinfo.value.code == 1
    assert "playable build failed" in capsys.readouterr().err
