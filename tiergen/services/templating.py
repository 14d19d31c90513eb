"""
Jinja2 template rendering for generated artifacts.
Templates receive data only; every identifier they print comes from a blueprint.
"""
from __future__ import annotations

from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined

_CSHARP_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def csharp_string(value: Any) -> str:
    """Escape text for use inside a regular C# string literal."""
    return "".join(_CSHARP_ESCAPES.get(ch, ch) for ch in str(value))


def csharp_bool(value: bool) -> str:
    return "true" if value else "false"


def _build_environment() -> Environment:
    env = Environment(  # nosec B701 - generates C# and XML, escaping is explicit per field
        loader=PackageLoader("tiergen", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["csharp_string"] = csharp_string
    env.filters["csharp_bool"] = csharp_bool
    return env


_environment = _build_environment()


def render(template_name: str, **context: Any) -> str:
    return _environment.get_template(template_name).render(**context)
