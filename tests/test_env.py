"""
Tests for Env initialization.

Tests the state machine, hook points, cache selection, safe mode and
the end-to-end behaviour of one build.
"""

from unittest.mock import MagicMock

import pytest

from assetpipe import (
    AssetNotFoundError,
    CompileError,
    ConfigurationError,
    Env,
    EnvironmentStateError,
    EnvState,
)
from assetpipe.cache import FileStore, MemoryStore, NullStore

# =============================================================================
# End-to-end
# =============================================================================


class TestEndToEnd:
    """A full build from config to template payload."""

    def test_precompile_and_payload(self, make_site, sample_assets):
        site = make_site(sources=["assets"], precompile=["app.js"])

        env = Env(site)

        assert env.ready
        assert list(env.manifest.assets) == ["app.js"]
        assets = site.render({})["assets"]
        assert "app.js" in assets
        assert "_partial.js" not in assets

    def test_bogus_cache_type_fails_before_compiling(self, make_site, sample_assets):
        site = make_site(
            sources=["assets"],
            precompile=["app.js"],
            caching={"enabled": True, "type": "bogus"},
        )
        compiler = MagicMock()

        with pytest.raises(ConfigurationError):
            Env(site, compiler=compiler)

        compiler.compile.assert_not_called()
        assert not (site.destination / "assets").exists()

    def test_bogus_cache_type_fails_without_precompile_targets(self, make_site):
        site = make_site(caching={"enabled": True, "type": "bogus"})

        with pytest.raises(ConfigurationError):
            Env(site)

    def test_compiled_output_written_with_digest(self, make_site, sample_assets):
        site = make_site(sources=["assets"], precompile=["app.js"])

        env = Env(site)

        entry = env.manifest.find("app.js")
        assert entry.digest_path == f"app-{entry.digest}.js"
        output = site.destination / "assets" / entry.digest_path
        assert output.read_text() == "console.log('app');\n"

    def test_site_links_to_env(self, make_site):
        site = make_site(sources=[])

        env = Env(site)

        assert site.assets_env is env

    def test_missing_assets_key_is_created(self, site_dir):
        from assetpipe import Site

        site = Site(source=site_dir, config={})
        env = Env(site)

        assert site.config["assets"] == {}
        assert env.asset_config.precompile == []

    def test_malformed_option_is_a_configuration_error(self, make_site):
        site = make_site(sources="assets")

        with pytest.raises(ConfigurationError) as exc_info:
            Env(site)

        assert exc_info.value.key == "sources"
        assert site.assets_env is None


# =============================================================================
# State machine
# =============================================================================


class TestStateMachine:
    """Tests for initialization ordering."""

    def test_reinitialization_is_rejected(self, make_site):
        site = make_site(sources=[])
        env = Env(site)

        with pytest.raises(EnvironmentStateError):
            env.__init__(site)
        assert env.state is EnvState.READY

    def test_before_init_sees_resolved_config_only(self, make_site):
        site = make_site(sources=[])
        seen = {}

        def before(env):
            seen["state"] = env.state
            seen["has_paths"] = hasattr(env, "paths")
            seen["config"] = env.asset_config

        site.hooks.register("env", "before_init", before)
        env = Env(site)

        assert seen["state"] is EnvState.CONFIG_RESOLVED
        assert seen["has_paths"] is False
        assert seen["config"] is env.asset_config

    def test_before_init_may_change_config(self, make_site, sample_assets):
        site = make_site(sources=["assets"])
        site.hooks.register(
            "env", "before_init", lambda env: env.asset_config.precompile.append("app.js")
        )

        env = Env(site)

        assert "app.js" in env.manifest.assets

    def test_after_init_runs_after_raw_copy(self, make_site, sample_assets):
        site = make_site(sources=["assets"], raw_precompile=["images/a.png"])
        seen = {}

        def after(env):
            seen["state"] = env.state
            seen["copied"] = (site.destination / "assets" / "images" / "a.png").exists()

        site.hooks.register("env", "after_init", after)
        Env(site)

        assert seen == {"state": EnvState.RAW_COPIED, "copied": True}

    def test_failed_precompile_leaves_env_not_ready(self, make_site, write_file):
        write_file("assets/broken.js.j2", "{{ undefined_name }}")
        site = make_site(sources=["assets"], precompile=["broken.js"])
        captured = []
        site.hooks.register("env", "before_init", captured.append)

        with pytest.raises(CompileError) as exc_info:
            Env(site)

        env = captured[0]
        assert env.state is EnvState.DROPS_HOOKED
        assert not env.ready
        assert exc_info.value.processor == "jinja"
        assert exc_info.value.__cause__ is not None

    def test_missing_literal_target_aborts(self, make_site, sample_assets):
        site = make_site(sources=["assets"], precompile=["missing.js"])

        with pytest.raises(AssetNotFoundError) as exc_info:
            Env(site)

        assert exc_info.value.path == "missing.js"

    def test_hook_error_aborts_initialization(self, make_site):
        site = make_site(sources=[])

        def broken(env):
            raise RuntimeError("extension failed")

        site.hooks.register("env", "after_init", broken)

        with pytest.raises(RuntimeError, match="extension failed"):
            Env(site)

    def test_explicit_hook_registry(self, make_site):
        from assetpipe import HookRegistry

        site = make_site(sources=[])
        hooks = HookRegistry()
        seen = []
        hooks.register("env", "after_init", seen.append)

        env = Env(site, hooks=hooks)

        assert seen == [env]
        assert not site.hooks.has("site", "pre_render")


# =============================================================================
# Cache
# =============================================================================


class TestCacheSelection:
    """Tests for the lazily built cache."""

    @pytest.mark.parametrize("cache_type", ["memory", "file", "bogus"])
    def test_disabled_caching_uses_null_store(self, make_site, cache_type):
        env = Env(make_site(sources=[], caching={"enabled": False, "type": cache_type}))

        assert isinstance(env.cache.store, NullStore)

    def test_memory(self, make_site):
        env = Env(make_site(sources=[], caching={"type": "memory"}))

        assert isinstance(env.cache.store, MemoryStore)

    def test_file_store_under_site_root(self, make_site, site_dir):
        env = Env(make_site(sources=[], caching={"type": "file", "path": ".cache/assets"}))

        assert isinstance(env.cache.store, FileStore)
        assert env.cache.store.root == site_dir / ".cache" / "assets"

    def test_cache_is_memoized(self, make_site):
        env = Env(make_site(sources=[], caching={"type": "memory"}))

        assert env.cache is env.cache

    def test_compiled_output_is_cached(self, make_site, sample_assets):
        env = Env(make_site(sources=["assets"], caching={"type": "memory"}, precompile=["app.js"]))

        assert len(env.cache.store) == 1


# =============================================================================
# Safe mode & compression
# =============================================================================


class TestSafeMode:
    """Tests for removing dynamic processors in safe mode."""

    def test_templates_render_outside_safe_mode(self, make_site, write_file):
        write_file("assets/app.js.j2", "var x = {{ 1 + 1 }};\n")
        site = make_site(sources=["assets"], precompile=["app.js"])

        env = Env(site)

        entry = env.manifest.find("app.js")
        assert (site.destination / "assets" / entry.digest_path).read_text() == "var x=2;\n"

    def test_safe_mode_removes_template_processor(self, make_site):
        env = Env(make_site(safe=True, sources=[]))

        assert env.processors.transformer_for(".j2") is None

    def test_safe_mode_makes_templates_unresolvable(self, make_site, write_file):
        write_file("assets/app.js.j2", "var x = {{ 1 + 1 }};\n")
        site = make_site(safe=True, sources=["assets"], precompile=["app.js"])

        with pytest.raises(AssetNotFoundError):
            Env(site)

    def test_safe_mode_keeps_other_processors(self, make_site):
        env = Env(make_site(safe=True, sources=[]))

        assert env.processors.compressor_for(".css") is not None

    def test_no_compressors_when_compression_off(self, make_site, sample_assets):
        site = make_site(sources=["assets"], compression=False, precompile=["app.js"])

        env = Env(site)

        entry = env.manifest.find("app.js")
        output = (site.destination / "assets" / entry.digest_path).read_text()
        assert output.startswith("// entry point")
        assert env.processors.compressors == []
