"""Text scanners for shader and implementation sources."""

from .directives import DirectiveScanner, ShaderDirectives, has_auto_marker, tokenize
from .source import ScopeSpan, SourceTextScanner
from .utils import read_text

__all__ = [
    "DirectiveScanner",
    "ScopeSpan",
    "ShaderDirectives",
    "SourceTextScanner",
    "has_auto_marker",
    "read_text",
    "tokenize",
]
