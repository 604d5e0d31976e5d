"""
assetpipe Processors

Content transforms run by the compiler:
- JinjaProcessor: renders `*.j2` templates (dynamic, removed in safe mode)
- CssCompressor / JsCompressor: output minifiers, enabled by `compression`
"""

from .base import Processor, ProcessorContext, ProcessorRegistry
from .compressors import CssCompressor, JsCompressor
from .jinja import JinjaProcessor


def default_transformers() -> list[Processor]:
    """Transformers registered on every new Env."""
    return [JinjaProcessor()]


def default_compressors() -> list[Processor]:
    """Compressors registered when compression is enabled."""
    return [CssCompressor(), JsCompressor()]


__all__ = [
    "Processor",
    "ProcessorContext",
    "ProcessorRegistry",
    "JinjaProcessor",
    "CssCompressor",
    "JsCompressor",
    "default_transformers",
    "default_compressors",
]
