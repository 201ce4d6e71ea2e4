"""
Collect <head> declarations from every template of a page and render them in order.
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..paths import GroupPaths, PathResolver
from ..util import is_absolute_url
from .diagnostics import DeclarationResult, Diagnostic, FailureKind

logger = logging.getLogger(__name__)

DEFAULT_LINK_ROOT = "view"


class HeadKind(str, Enum):
    TITLE = "title"
    META = "meta"
    LINK = "link"
    CSS = "css"
    SCRIPT = "script"
    CUSTOM = "custom"


_KIND_ALIASES = {"js": HeadKind.SCRIPT}
_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_:][-A-Za-z0-9_:.]*$")


def parse_kind(kind: Any) -> HeadKind:
    """
    Accept a HeadKind or its name (case-insensitive, ``js`` for scripts).

    Raises:
        ValueError: If kind is not a known declaration kind.
    """
    if isinstance(kind, HeadKind):
        return kind
    name = str(kind).strip().lower()
    if name in _KIND_ALIASES:
        return _KIND_ALIASES[name]
    return HeadKind(name)


def _escape(value: Any) -> str:
    return html.escape(str(value), quote=True)


class HeadAggregator:
    """
    Ordered store of title, meta, link, script and custom head entries.

    Declarations never raise: a malformed or unresolvable entry is dropped,
    recorded in ``diagnostics`` and reported through the returned
    DeclarationResult, and later declarations carry on as usual.

    Output order is fixed: title, meta, link, script, custom. Within a kind
    entries keep their declaration order; the title is last-write-wins.
    """

    def __init__(
        self,
        resolver: PathResolver,
        groups: GroupPaths,
        link_root: str = DEFAULT_LINK_ROOT,
    ):
        self.resolver = resolver
        self.groups = groups
        self.link_root = link_root
        self.title: Optional[str] = None
        self.meta: List[Dict[str, Any]] = []
        self.links: List[Dict[str, Any]] = []
        self.scripts: List[str] = []
        self.custom: List[str] = []
        self.diagnostics: List[Diagnostic] = []
        self._handlers: Dict[HeadKind, Callable[[Any, bool], DeclarationResult]] = {
            HeadKind.TITLE: self._declare_title,
            HeadKind.META: self._declare_meta,
            HeadKind.LINK: self._declare_link,
            HeadKind.CSS: self._declare_css,
            HeadKind.SCRIPT: self._declare_script,
            HeadKind.CUSTOM: self._declare_custom,
        }

    def copy(self) -> "HeadAggregator":
        """Independent aggregator holding the same declarations, with no diagnostics."""
        clone = HeadAggregator(self.resolver, self.groups, self.link_root)
        clone.title = self.title
        clone.meta = [dict(entry) for entry in self.meta]
        clone.links = [dict(entry) for entry in self.links]
        clone.scripts = list(self.scripts)
        clone.custom = list(self.custom)
        return clone

    def declare(self, kind: HeadKind | str, value: Any, value_contains_path: bool = False) -> DeclarationResult:
        """
        Add one head entry.

        Args:
            kind: title, meta, link, css, script (or js), custom.
            value: String or mapping depending on kind.
            value_contains_path: For scripts, treat value as ``dir/name.js`` and
                search only that directory instead of the ``js`` group path.
        """
        try:
            head_kind = parse_kind(kind)
        except ValueError:
            return self._reject(FailureKind.INVALID_DECLARATION, f"Unknown head kind {kind!r}", str(kind))
        return self._handlers[head_kind](value, value_contains_path)

    # declaration handlers

    def _declare_title(self, value: Any, _: bool) -> DeclarationResult:
        if value is None:
            return self._reject(FailureKind.INVALID_DECLARATION, "Title cannot be empty", HeadKind.TITLE)
        self.title = str(value)
        return self._accept(self.title)

    def _declare_meta(self, value: Any, _: bool) -> DeclarationResult:
        if not isinstance(value, Mapping) or not value.get("name"):
            return self._reject(FailureKind.INVALID_DECLARATION, "Meta declarations need a name", HeadKind.META)

        if value["name"] == "http-equiv":
            content = value.get("content")
            if not isinstance(content, Mapping) or not content:
                return self._reject(
                    FailureKind.INVALID_DECLARATION,
                    "http-equiv meta needs a mapping of header to value as content",
                    HeadKind.META,
                )
            if len(content) > 1:
                logger.warning(
                    "http-equiv meta carries %d pairs; only %r is rendered",
                    len(content),
                    next(iter(content)),
                )
        elif "content" not in value:
            return self._reject(
                FailureKind.INVALID_DECLARATION, f"Meta {value['name']!r} has no content", HeadKind.META
            )

        entry = dict(value)
        self.meta.append(entry)
        return self._accept(entry)

    def _declare_link(self, value: Any, _: bool) -> DeclarationResult:
        if not isinstance(value, Mapping) or not value.get("href"):
            return self._reject(FailureKind.INVALID_DECLARATION, "Link declarations need an href", HeadKind.LINK)
        if not value.get("rel"):
            return self._reject(FailureKind.INVALID_DECLARATION, "Link declarations need a rel", HeadKind.LINK)
        return self._append_link(dict(value), self.link_root, HeadKind.LINK)

    def _declare_css(self, value: Any, _: bool) -> DeclarationResult:
        if isinstance(value, Mapping):
            entry = dict(value)
            entry["rel"] = "stylesheet"
        elif isinstance(value, str):
            entry = {"rel": "stylesheet", "href": value}
        else:
            return self._reject(
                FailureKind.INVALID_DECLARATION, "Stylesheets are a filename or a mapping", HeadKind.CSS
            )
        if not entry.get("href"):
            return self._reject(FailureKind.INVALID_DECLARATION, "Stylesheets need an href", HeadKind.CSS)
        return self._append_link(entry, self.groups.get("css"), HeadKind.CSS)

    def _append_link(self, entry: Dict[str, Any], directory: Any, kind: HeadKind) -> DeclarationResult:
        # None-valued attributes are omitted from the tag
        entry = {key: value for key, value in entry.items() if value is not None}
        bad_names = [key for key in entry if not isinstance(key, str) or not _ATTRIBUTE_NAME.match(key)]
        if bad_names:
            return self._reject(
                FailureKind.INVALID_DECLARATION, f"Invalid attribute name(s) {bad_names!r}", kind
            )
        href = str(entry["href"])
        resolved = self.resolver.resolve(href, directory, root_relative=True)
        if resolved is None:
            return self._reject(FailureKind.NOT_FOUND, f"{href} not found under {directory}", kind)
        entry["href"] = resolved
        self.links.append(entry)
        return self._accept(entry)

    def _declare_script(self, value: Any, value_contains_path: bool) -> DeclarationResult:
        if not isinstance(value, str) or not value:
            return self._reject(FailureKind.INVALID_DECLARATION, "Scripts are a non-empty filename", HeadKind.SCRIPT)

        if value_contains_path and not is_absolute_url(value):
            directory, _, filename = value.rpartition("/")
            resolved = self.resolver.resolve(filename, directory, root_relative=True)
            where = directory or "/"
        else:
            where = self.groups.get("js")
            resolved = self.resolver.resolve(value, where, root_relative=True)

        if resolved is None:
            return self._reject(FailureKind.NOT_FOUND, f"{value} not found under {where}", HeadKind.SCRIPT)
        self.scripts.append(resolved)
        return self._accept(resolved)

    def _declare_custom(self, value: Any, _: bool) -> DeclarationResult:
        if not isinstance(value, str):
            return self._reject(FailureKind.INVALID_DECLARATION, "Custom head content must be a string", HeadKind.CUSTOM)
        self.custom.append(value)
        return self._accept(value)

    def _accept(self, value: Any) -> DeclarationResult:
        return DeclarationResult(accepted=True, value=value)

    def _reject(self, kind: FailureKind, message: str, subject: HeadKind | str) -> DeclarationResult:
        subject_name = subject.value if isinstance(subject, HeadKind) else subject
        diagnostic = Diagnostic(kind=kind, message=message, subject=subject_name)
        self.diagnostics.append(diagnostic)
        logger.warning("Dropped %s declaration: %s", subject_name, message)
        return DeclarationResult(accepted=False, diagnostic=diagnostic)

    # rendering

    def render_all(self) -> List[str]:
        """
        Markup lines in output order: title, meta, link, script, custom.
        """
        lines: List[str] = []
        if self.title is not None:
            lines.append(f"<title>{_escape(self.title)}</title>")
        lines.extend(_render_meta(entry) for entry in self.meta)
        lines.extend(_render_link(entry) for entry in self.links)
        lines.extend(f'<script src="{_escape(src)}"></script>' for src in self.scripts)
        lines.extend(self.custom)
        return lines

    def render(self) -> str:
        """
        The whole head block, one entry per line.
        """
        return "\n".join(self.render_all())


def _render_meta(entry: Mapping[str, Any]) -> str:
    name = entry["name"]
    if name == "charset":
        return f'<meta charset="{_escape(entry["content"])}">'
    if name == "http-equiv":
        header, value = next(iter(entry["content"].items()))
        return f'<meta http-equiv="{_escape(header)}" content="{_escape(value)}">'
    return f'<meta name="{_escape(name)}" content="{_escape(entry["content"])}">'


def _render_link(entry: Mapping[str, Any]) -> str:
    parts = [f'rel="{_escape(entry["rel"])}"']
    parts.extend(f'{key}="{_escape(value)}"' for key, value in entry.items() if key != "rel")
    return f"<link {' '.join(parts)}>"
