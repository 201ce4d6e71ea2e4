"""
Execute a resolved template file with a variable scope.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape


class TemplateExecutor(Protocol):
    def execute(self, path: Path, scope: Mapping[str, Any], helpers: Mapping[str, Callable[..., Any]]) -> str:
        ...


class JinjaExecutor:
    """
    Runs template files through Jinja2.

    Templates are addressed by their path below the document root. The
    environment keeps no compiled-template cache, so every render reads the
    file as it currently is on disk. HTML and XML files are autoescaped;
    helpers that return markup (includes, the head block) return Markup so
    they are inserted as-is.
    """

    def __init__(self, document_root: Path | str):
        self.document_root = Path(document_root)
        self.env = Environment(
            loader=FileSystemLoader(str(self.document_root)),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            cache_size=0,
            keep_trailing_newline=True,
        )

    def template_name(self, path: Path) -> str:
        return Path(path).relative_to(self.document_root).as_posix()

    def execute(self, path: Path, scope: Mapping[str, Any], helpers: Mapping[str, Callable[..., Any]]) -> str:
        template = self.env.get_template(self.template_name(path), globals=dict(helpers))
        return template.render(dict(scope))
