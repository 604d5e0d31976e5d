"""
Tests for raw (uncompiled) asset copies.
"""

from pathlib import Path

import pytest

from assetpipe import AssetNotFoundError, Env, RawCopySpec


class TestRawCopySpec:
    """Tests for RawCopySpec targets."""

    def test_directory_target(self):
        spec = RawCopySpec(source=Path("images/a.png"), destination=Path("out/img"))

        assert spec.is_directory_target
        assert spec.target == Path("out/img/a.png")

    def test_file_target(self):
        spec = RawCopySpec(source=Path("images/a.png"), destination=Path("out/logo.png"))

        assert not spec.is_directory_target
        assert spec.target == Path("out/logo.png")


class TestCopyRaw:
    """Tests for Env.copy_raw during initialization."""

    def test_glob_into_directory(self, make_site, sample_assets):
        site = make_site(
            sources=["assets"],
            raw_precompile=[{"source": "images/*.png", "destination": "dist/img"}],
        )

        Env(site)

        target = site.destination / "dist" / "img"
        assert (target / "a.png").read_bytes() == b"\x89PNG-a"
        assert (target / "b.png").read_bytes() == b"\x89PNG-b"

    def test_string_entry_keeps_relative_path(self, make_site, sample_assets):
        site = make_site(sources=["assets"], raw_precompile=["images/*.png"])

        Env(site)

        assert (site.destination / "assets" / "images" / "a.png").exists()
        assert (site.destination / "assets" / "images" / "b.png").exists()

    def test_file_destination_is_overwritten(self, make_site, sample_assets):
        site = make_site(
            sources=["assets"],
            raw_precompile=[{"source": "images/a.png", "destination": "logo.png"}],
        )
        existing = site.destination / "logo.png"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"old")

        Env(site)

        assert existing.read_bytes() == b"\x89PNG-a"

    def test_raw_copies_are_not_compiled(self, make_site, sample_assets):
        site = make_site(sources=["assets"], raw_precompile=["app.js"])

        env = Env(site)

        copied = site.destination / "assets" / "app.js"
        assert copied.read_text() == "// entry point\nconsole.log('app');\n"
        assert len(env.manifest) == 0

    def test_glob_without_matches_is_noop(self, make_site, sample_assets):
        env = Env(make_site(sources=["assets"], raw_precompile=["fonts/*.woff"]))

        assert env.ready

    def test_missing_literal_source(self, make_site, sample_assets):
        site = make_site(sources=["assets"], raw_precompile=["images/missing.png"])

        with pytest.raises(AssetNotFoundError) as exc_info:
            Env(site)

        assert isinstance(exc_info.value, FileNotFoundError)
        assert exc_info.value.path == "images/missing.png"

    def test_copy_raw_with_missing_source(self, make_site, site_dir):
        env = Env(make_site(sources=[]))
        spec = RawCopySpec(source=site_dir / "gone.png", destination=site_dir / "out")

        with pytest.raises(AssetNotFoundError):
            env.copy_raw([spec])

    def test_copy_raw_returns_targets(self, make_site, sample_assets, site_dir):
        env = Env(make_site(sources=[]))
        spec = RawCopySpec(source=site_dir / "assets" / "images" / "a.png", destination=site_dir / "out")

        assert env.copy_raw([spec]) == [site_dir / "out" / "a.png"]
