"""
Page composition: an outer template, nested includes and one shared head section.
"""

from __future__ import annotations

import logging
import sys
from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TextIO

from jinja2 import TemplateError
from markupsafe import Markup

from ..config.settings import get_settings
from ..paths import FileSystem, GroupPaths, PathResolver
from ..util import is_absolute_url
from .diagnostics import DeclarationResult, Diagnostic, FailureKind
from .executor import JinjaExecutor, TemplateExecutor
from .head import DEFAULT_LINK_ROOT, HeadAggregator, HeadKind

if TYPE_CHECKING:
    from ..config.models import SiteConfig

logger = logging.getLogger(__name__)

HEAD_PLACEHOLDER = "<!--nestview:head-->"
MAX_INCLUDE_DEPTH = 32


@dataclass
class RenderContext:
    """
    State owned by one render call and handed down to every nested include.

    Attributes:
        head: Aggregator shared by the whole include tree.
        diagnostics: Failures recorded during the render (shared with head).
        depth: Include nesting level of the template bound to this context.
    """
    head: HeadAggregator
    diagnostics: List[Diagnostic]
    depth: int = 0

    def nested(self) -> "RenderContext":
        return RenderContext(head=self.head, diagnostics=self.diagnostics, depth=self.depth + 1)


class PageComposer:
    """
    Renders an outer template that can include further templates.

    Every template sees the instance variables set with ``set_var`` /
    ``set_vars``; an include may pass its own variables, which take precedence
    for that template only. Template bodies get three helpers:

    * ``include_html(filename, vars=None)`` inserts another template.
    * ``set_head(kind, value, value_contains_path=False)`` adds a head entry.
    * ``display_head()`` marks where the head entries go. The marker is filled
      after the whole page has rendered, so entries declared by templates
      included later still show up.

    Missing templates, bad includes and bad head entries never abort a page;
    they are skipped and listed in ``diagnostics`` after the render.
    """

    def __init__(
        self,
        document_root: Path | str | None = None,
        *,
        executor: Optional[TemplateExecutor] = None,
        filesystem: Optional[FileSystem] = None,
        link_root: str = DEFAULT_LINK_ROOT,
    ):
        if not document_root:
            document_root = get_settings().document_root or Path.cwd()
        self.resolver = PathResolver(document_root, filesystem)
        self.groups = GroupPaths(self.resolver.document_root)
        self.head = HeadAggregator(self.resolver, self.groups, link_root)
        self.executor: TemplateExecutor = executor or JinjaExecutor(self.resolver.document_root)
        self.outer: Optional[str] = None
        self.vars: Dict[str, Any] = {}
        self.diagnostics: List[Diagnostic] = []

    @classmethod
    def from_config(cls, config: "SiteConfig", **kwargs: Any) -> "PageComposer":
        """
        Build a composer with the document root, group paths, variables, head
        entries and outer template of a site config.
        """
        composer = cls(config.document_root, link_root=config.link_root, **kwargs)
        for name, path in config.paths.items():
            composer.set_group_path(name, path)
        composer.set_vars(config.vars)
        for entry in config.head:
            composer.set_head(entry.kind, entry.value, entry.value_contains_path)
        if config.outer and composer.set_outer(config.outer) is None:
            logger.warning("Outer template %s from config not found", config.outer)
        return composer

    @property
    def document_root(self) -> Path:
        return self.resolver.document_root

    @property
    def filesystem(self) -> FileSystem:
        return self.resolver.filesystem

    # configuration

    def set_group_path(self, name: str, path: Path | str) -> None:
        self.groups.set(name, path)

    def get_group_path(self, name: str) -> Path | str:
        return self.groups.get(name)

    def set_var(self, name: str, value: Any) -> None:
        self.vars[name] = value

    def set_vars(self, values: Any) -> bool:
        """
        Set several instance variables at once; False for an empty or non-mapping bag.
        """
        if not isinstance(values, Mapping) or not values:
            return False
        self.vars.update(values)
        return True

    def set_head(self, kind: HeadKind | str, value: Any, value_contains_path: bool = False) -> DeclarationResult:
        """
        Add a head entry for every following render of this composer.
        """
        return self.head.declare(kind, value, value_contains_path)

    def display_head(self) -> str:
        return self.head.render()

    def find_file(
        self,
        filename: str,
        directory: Path | str | None = None,
        root_relative: bool = False,
        recursive: bool = True,
    ) -> Optional[str]:
        return self.resolver.resolve(filename, directory, root_relative=root_relative, recursive=recursive)

    def get_files(self, directory: Path | str | None = None, recursive: bool = True) -> List[Path]:
        return self.resolver.list_files(directory, recursive=recursive)

    def find_template(self, filename: str) -> Optional[str]:
        """
        Resolve a template in the ``html`` group path, or the document root when unset.
        """
        if isinstance(filename, str) and is_absolute_url(filename):
            logger.warning("Templates must be local files, got %s", filename)
            return None
        return self.resolver.resolve(filename, self.groups.get("html"))

    def set_outer(self, filename: str) -> Optional[str]:
        """
        Choose the outer template; returns its path, or None (state unchanged) if not found.
        """
        resolved = self.find_template(filename)
        if resolved is None:
            logger.warning("Outer template %s not found under %s", filename, self.groups.get("html"))
            return None
        self.outer = resolved
        return resolved

    def reset(self) -> None:
        """
        Forget the outer template and the instance variables. Group paths and
        head entries set on the composer are kept.
        """
        self.outer = None
        self.vars = {}

    # rendering

    def include(
        self,
        filename: str,
        vars: Optional[Mapping[str, Any]] = None,
        *,
        context: Optional[RenderContext] = None,
    ) -> Optional[str]:
        """
        Render a template with the instance variables, overridden by vars.

        Inside a render, templates call this through ``include_html`` and the
        render's context is passed along. Without a context the template is
        rendered on its own with a fresh head section, and its ``display_head()``
        marker is filled before returning.

        Returns:
            The rendered text, or None when the include was skipped.
        """
        if context is not None:
            return self._include(filename, vars, context)

        context = self._new_context()
        output = self._include(filename, vars, context)
        if output is None:
            return None
        return output.replace(HEAD_PLACEHOLDER, context.head.render())

    def _include(self, filename: str, vars: Optional[Mapping[str, Any]], context: RenderContext) -> Optional[str]:
        if not filename:
            return self._fail(context, FailureKind.INVALID_INPUT, "No template filename given", filename)
        if vars is not None and not isinstance(vars, Mapping):
            return self._fail(
                context, FailureKind.INVALID_INPUT, f"Include variables must be a mapping, got {type(vars).__name__}", filename
            )
        if context.depth >= MAX_INCLUDE_DEPTH:
            return self._fail(
                context, FailureKind.INVALID_INPUT, f"Includes nested deeper than {MAX_INCLUDE_DEPTH} levels", filename
            )

        path = self.find_template(filename)
        if path is None or not self.filesystem.exists(path):
            return self._fail(context, FailureKind.NOT_FOUND, f"Template {filename} not found", filename)

        scope = ChainMap(dict(vars or {}), self.vars)
        return self._execute_guarded(path, scope, context.nested(), filename)

    def render_to_string(self) -> Optional[str]:
        """
        Render the outer template and everything it includes into one string.

        Returns None when no outer template is set, it no longer exists, or it
        fails to render.
        """
        if not self.outer or not self.filesystem.exists(self.outer):
            logger.warning("No outer template to render (%s)", self.outer or "not set")
            return None

        context = self._new_context()
        output = self._execute_guarded(self.outer, ChainMap({}, self.vars), context, self.outer)
        if output is None:
            return None
        return output.replace(HEAD_PLACEHOLDER, context.head.render())

    def render_to_output(self, sink: Optional[TextIO] = None) -> bool:
        """
        Render like ``render_to_string`` and write the result to sink (stdout by default).
        """
        html = self.render_to_string()
        if html is None:
            return False
        target = sink if sink is not None else sys.stdout
        target.write(html)
        return True

    def _new_context(self) -> RenderContext:
        head = self.head.copy()
        self.diagnostics = head.diagnostics
        return RenderContext(head=head, diagnostics=head.diagnostics)

    def _execute_guarded(
        self, path: str, scope: Mapping[str, Any], context: RenderContext, subject: str
    ) -> Optional[str]:
        """
        Execute one template; any error it raises becomes a TEMPLATE_ERROR diagnostic.

        Errors raised by nested includes are caught at their own level, so
        only this template's output is lost.
        """
        logger.debug("Rendering %s at depth %d", path, context.depth)
        try:
            return self.executor.execute(Path(path), scope, self._helpers(context))
        except TemplateError as exc:
            return self._fail(context, FailureKind.TEMPLATE_ERROR, f"{type(exc).__name__}: {exc}", subject)
        except Exception as exc:
            logger.exception("Template %s raised while rendering", path)
            return self._fail(context, FailureKind.TEMPLATE_ERROR, f"{type(exc).__name__}: {exc}", subject)

    def _helpers(self, context: RenderContext) -> Dict[str, Callable[..., Any]]:
        def include_html(filename: str, vars: Optional[Mapping[str, Any]] = None) -> Markup:
            return Markup(self.include(filename, vars, context=context) or "")

        def set_head(kind: str, value: Any, value_contains_path: bool = False) -> str:
            context.head.declare(kind, value, value_contains_path)
            return ""

        def display_head() -> Markup:
            return Markup(HEAD_PLACEHOLDER)

        return {
            "include_html": include_html,
            "set_head": set_head,
            "display_head": display_head,
        }

    def _fail(self, context: RenderContext, kind: FailureKind, message: str, subject: Any) -> None:
        context.diagnostics.append(Diagnostic(kind=kind, message=message, subject=str(subject) if subject else None))
        logger.warning("Skipped %s: %s", subject or "include", message)
        return None
