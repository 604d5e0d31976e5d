"""
Tests for source path registration.
"""

from assetpipe import Env
from assetpipe.config import DEFAULT_SOURCES


class TestSetupSources:
    """Tests for Env.setup_sources."""

    def test_registers_in_config_order(self, make_site, site_dir):
        env = Env(make_site(sources=["vendor", "assets", "lib"]))

        assert env.paths == [site_dir / "vendor", site_dir / "assets", site_dir / "lib"]

    def test_default_sources(self, make_site, site_dir):
        from assetpipe import Site

        env = Env(Site(source=site_dir, config={}))

        assert env.paths == [site_dir / s for s in DEFAULT_SOURCES]

    def test_missing_directories_are_still_registered(self, make_site, site_dir):
        env = Env(make_site(sources=["not-there"]))

        assert env.paths == [site_dir / "not-there"]

    def test_duplicate_entries_register_once(self, make_site, site_dir):
        env = Env(make_site(sources=["assets", "./assets", "assets/../assets"]))

        assert env.paths == [site_dir / "assets"]

    def test_second_call_is_idempotent(self, make_site):
        env = Env(make_site(sources=["assets", "vendor"]))
        before = list(env.paths)

        env.setup_sources()

        assert env.paths == before

    def test_outside_working_directory_is_skipped(self, make_site, tmp_path):
        outside = tmp_path / "shared"
        outside.mkdir()

        env = Env(make_site(sources=["../shared", str(outside), "assets"]))

        assert outside not in env.paths
        assert len(env.paths) == 1

    def test_working_directory_decides(self, make_site, tmp_path, monkeypatch):
        site = make_site(sources=["assets"])
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        env = Env(site)

        assert env.paths == []

    def test_skipped_sources_are_not_errors(self, make_site, caplog):
        import logging

        with caplog.at_level(logging.DEBUG, logger="assetpipe.env"):
            env = Env(make_site(sources=["/"]))

        assert env.ready
        assert any("skipping source" in r.getMessage() for r in caplog.records)
