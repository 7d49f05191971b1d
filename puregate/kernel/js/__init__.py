"""JavaScript front end: typed syntax tree, parser adapter and scope analysis."""

from puregate.kernel.js.parser import (
    MAX_SYNTAX_ERRORS,
    JavaScriptParser,
    ModuleFormat,
    ParseErrorRecord,
    ParseOutcome,
    TreeSitterParser,
    detect_module_format,
)
from puregate.kernel.js.scope import Binding, BindingKind, Reference, ScopeManager, analyze_scopes

__all__ = [
    "MAX_SYNTAX_ERRORS",
    "Binding",
    "BindingKind",
    "JavaScriptParser",
    "ModuleFormat",
    "ParseErrorRecord",
    "ParseOutcome",
    "Reference",
    "ScopeManager",
    "TreeSitterParser",
    "analyze_scopes",
    "detect_module_format",
]
