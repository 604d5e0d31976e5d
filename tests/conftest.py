"""
Pytest configuration and fixtures for assetpipe tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from assetpipe import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from assetpipe.site import Site  # noqa: E402


@pytest.fixture
def site_dir(tmp_path, monkeypatch):
    """Site root, also the working directory for the test."""
    root = tmp_path / "site"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def write_file(site_dir):
    """Write a file relative to the site root, creating parents."""

    def _write(relative: str, content: str | bytes = "") -> Path:
        path = site_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    return _write


@pytest.fixture
def make_site(site_dir):
    """Build a Site rooted at site_dir with the given `assets` options."""

    def _make(safe: bool = False, **assets) -> Site:
        return Site(source=site_dir, config={"assets": dict(assets)}, safe=safe)

    return _make


@pytest.fixture
def sample_assets(write_file):
    """A small asset tree under assets/."""
    write_file("assets/app.js", "// entry point\nconsole.log('app');\n")
    write_file("assets/_partial.js", "console.log('partial');\n")
    write_file("assets/css/site.css", "body {\n  color: red;\n}\n")
    write_file("assets/images/a.png", b"\x89PNG-a")
    write_file("assets/images/b.png", b"\x89PNG-b")
    return ["app.js", "_partial.js", "css/site.css", "images/a.png", "images/b.png"]
