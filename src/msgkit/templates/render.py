"""
Jinja2 rendering with the msgkit helper functions.

Helpers are installed as globals, and as filters where Jinja has no builtin
filter of the same name. Rendered data is exposed to templates as `data`.
Extra named templates can be supplied for {% include %} / {% import %}.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from jinja2 import DictLoader, Environment, Template

from msgkit.templates.functions import build_function_map
from msgkit.templates.usage import UsageTracker


def load_template(value: str) -> str:
    """Template source from a file path, or the value itself as inline text."""
    path = Path(value)
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    except OSError:
        # names too long for the filesystem are inline templates
        pass
    return value


class TemplateRenderer:
    """
    Usage:
        renderer = TemplateRenderer(unsafe=False)
        renderer.render("{{ data[0] | upper }}", ["hi"])  # "HI"
    """

    def __init__(
        self,
        unsafe: bool = False,
        tracker: Optional[UsageTracker] = None,
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> None:
        self.unsafe = unsafe
        self.tracker = tracker
        self.functions = dict(functions) if functions is not None else build_function_map(unsafe, tracker)

    def environment(self, templates: Optional[Mapping[str, str]] = None) -> Environment:
        env = Environment(
            loader=DictLoader(dict(templates or {})),
            autoescape=False,
            keep_trailing_newline=True,
        )
        env.globals.update(self.functions)
        for name, fn in self.functions.items():
            env.filters.setdefault(name, fn)
        return env

    def parse(self, source: str, templates: Optional[Mapping[str, str]] = None) -> Template:
        """Compile the main template. Raises jinja2.TemplateSyntaxError."""
        return self.environment(templates).from_string(source)

    def render(
        self,
        source: str,
        data: Any = None,
        templates: Optional[Mapping[str, str]] = None,
    ) -> str:
        out = self.parse(source, templates).render(data=data)
        if self.tracker is not None:
            self.tracker.drain()
        return out
