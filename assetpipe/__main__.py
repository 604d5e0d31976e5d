"""
Command line entry point.

    python -m assetpipe build --config _config.yml [--safe] [--verbose]

Builds one asset environment for the site. Exit codes: 0 on success,
1 when the config or the build is invalid, 2 when the config file does
not exist.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from assetpipe.env import Env
from assetpipe.errors import AssetPipelineError
from assetpipe.site import Site

logger = logging.getLogger("assetpipe")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="assetpipe", description="Build site assets.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Precompile and copy assets for a site")
    build.add_argument("--config", type=Path, default=Path("_config.yml"), help="Site config file")
    build.add_argument("--safe", action="store_true", default=None, help="Force safe mode")
    build.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.config.is_file():
        logger.error(f"Config file not found: {args.config}")
        return 2

    try:
        site = Site.from_config_file(args.config, safe=args.safe)
        env = Env(site)
    except yaml.YAMLError as e:
        logger.error(f"Malformed config file {args.config}: {e}")
        return 1
    except AssetPipelineError as e:
        logger.error(f"Asset build failed: {e}")
        return 1

    logger.info(f"Built {len(env.manifest)} asset(s) into {env.in_dest_dir()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
