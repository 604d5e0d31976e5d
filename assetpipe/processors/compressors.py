"""
Output compressors.

Thin processors over rcssmin and rjsmin. Both minifiers are syntactic
only: they remove comments and whitespace and keep string (and, for
JavaScript, template literal) contents as written. `/*! ... */` banner
comments are kept so license headers survive compression.
"""

from __future__ import annotations

from rcssmin import cssmin
from rjsmin import jsmin

from .base import Processor, ProcessorContext


def _finish(data: bytes) -> bytes:
    data = data.strip()
    return data + b"\n" if data else b""


class CssCompressor(Processor):
    """Minify stylesheets with rcssmin."""

    @property
    def name(self) -> str:
        return "css_compressor"

    @property
    def suffix(self) -> str:
        return ".css"

    def process(self, data: bytes, ctx: ProcessorContext) -> bytes:
        return _finish(cssmin(data, keep_bang_comments=True))


class JsCompressor(Processor):
    """Minify scripts with rjsmin."""

    @property
    def name(self) -> str:
        return "js_compressor"

    @property
    def suffix(self) -> str:
        return ".js"

    def process(self, data: bytes, ctx: ProcessorContext) -> bytes:
        return _finish(jsmin(data, keep_bang_comments=True))
