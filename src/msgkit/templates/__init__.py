"""Template rendering for xprint: helper catalog, usage tracking, Jinja2 renderer."""

from msgkit.templates.functions import (
    FunctionSpec,
    TemplateFunction,
    build_function_map,
    describe_functions,
)
from msgkit.templates.render import TemplateRenderer, load_template
from msgkit.templates.usage import UsageEvent, UsageTracker

__all__ = [
    "FunctionSpec",
    "TemplateFunction",
    "TemplateRenderer",
    "UsageEvent",
    "UsageTracker",
    "build_function_map",
    "describe_functions",
    "load_template",
]
