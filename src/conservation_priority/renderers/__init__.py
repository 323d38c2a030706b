"""Pure rendering functions: pipeline results -> HTML strings.

Renderers follow one pattern:
  - Input: dataclasses from analysis/ or pipeline.py
  - Output: str (HTML)
  - No side effects, no I/O, no Prefect decorators

Used by flows/build.py, which writes the result to the ``outputs/`` tier.
Maps and charts are left to external tools that read the output tables.

Public API:
  - report: build_report_html
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
