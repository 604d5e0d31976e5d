"""
Jinja2 template processor.

Renders `*.j2` assets (for example `app.js.j2` or `theme.css.j2`) with
the Env, the host site and the asset config in scope. Templates can
call arbitrary Python reachable from those objects, so this processor
is dynamic and is removed in safe mode.
"""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined

from .base import Processor, ProcessorContext


class JinjaProcessor(Processor):
    """Render asset content as a Jinja2 template."""

    dynamic = True

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._jinja = Environment(
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    @property
    def name(self) -> str:
        return "jinja"

    @property
    def suffix(self) -> str:
        return ".j2"

    def process(self, data: bytes, ctx: ProcessorContext) -> bytes:
        template = self._jinja.from_string(data.decode(self._encoding))
        env = ctx.env
        rendered = template.render(
            env=env,
            site=env.site if env is not None else None,
            config=env.asset_config if env is not None else None,
            logical_path=ctx.logical_path,
            **ctx.metadata,
        )
        return rendered.encode(self._encoding)
