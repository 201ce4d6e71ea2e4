"""
Page composition and head-section rendering.
"""

from .diagnostics import DeclarationResult, Diagnostic, FailureKind
from .engine import HEAD_PLACEHOLDER, MAX_INCLUDE_DEPTH, PageComposer, RenderContext
from .executor import JinjaExecutor, TemplateExecutor
from .head import DEFAULT_LINK_ROOT, HeadAggregator, HeadKind

__all__ = [
    "DeclarationResult",
    "Diagnostic",
    "FailureKind",
    "HEAD_PLACEHOLDER",
    "MAX_INCLUDE_DEPTH",
    "PageComposer",
    "RenderContext",
    "JinjaExecutor",
    "TemplateExecutor",
    "DEFAULT_LINK_ROOT",
    "HeadAggregator",
    "HeadKind",
]
