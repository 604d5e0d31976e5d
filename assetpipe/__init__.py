"""
assetpipe - Asset environment for static-site builds.

assetpipe sits between a static-site build and the asset compiler. For
each build it:

- **Resolves configuration**: typed asset options with defaults
- **Selects a cache**: memory, on-disk or none, built on first use
- **Registers sources**: configured directories inside the working tree
- **Applies safe mode**: drops processors that execute embedded code
- **Precompiles**: literal and glob targets into a fingerprinted manifest
- **Copies raw files**: assets that bypass compilation
- **Publishes drops**: an `assets` payload for every page render

Quick Start:
    >>> from assetpipe import Env, Site
    >>>
    >>> site = Site.from_config_file("_config.yml")
    >>> env = Env(site)
    >>> env.manifest.assets
    {'app.js': 'app-5d41....js'}
    >>> site.render({})["assets"]["app.js"].url
    '/assets/app-5d41....js'
"""

__version__ = "0.1.0"
__license__ = "MIT"

from assetpipe.config import AssetConfig, CachingConfig, resolve_config
from assetpipe.drop import AssetDrop
from assetpipe.env import Env, EnvState, RawCopySpec
from assetpipe.errors import (
    AssetNotFoundError,
    AssetPipelineError,
    CompileError,
    ConfigurationError,
    EnvironmentStateError,
)
from assetpipe.hooks import HookRegistration, HookRegistry
from assetpipe.manifest import Manifest, ManifestEntry
from assetpipe.site import Site

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Environment
    "Env",
    "EnvState",
    "RawCopySpec",
    "Site",
    "AssetDrop",
    "Manifest",
    "ManifestEntry",
    # Configuration
    "AssetConfig",
    "CachingConfig",
    "resolve_config",
    # Hooks
    "HookRegistry",
    "HookRegistration",
    # Errors
    "AssetPipelineError",
    "ConfigurationError",
    "AssetNotFoundError",
    "CompileError",
    "EnvironmentStateError",
]
