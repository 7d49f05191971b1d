"""Baseline tables for the purity contract.

Every forbidden identifier and member path carries a category. The category
decides the violation kind (``side_effect`` or ``global_access``) and the
message template used when it is matched.
"""

from __future__ import annotations

from enum import StrEnum

from puregate.kernel.diagnostics.models import ViolationKind


class ForbiddenCategory(StrEnum):
    GLOBAL_OBJECT = "global_object"
    TIMER = "timer"
    NETWORK = "network"
    PROCESS = "process"
    SUBPROCESS = "subprocess"
    NON_DETERMINISTIC = "non_deterministic"
    CONSOLE = "console"
    FILE_IO = "file_io"
    DOM = "dom"
    STORAGE = "storage"
    NAVIGATION = "navigation"


CATEGORY_KINDS: dict[ForbiddenCategory, ViolationKind] = {
    ForbiddenCategory.GLOBAL_OBJECT: ViolationKind.GLOBAL_ACCESS,
    ForbiddenCategory.PROCESS: ViolationKind.GLOBAL_ACCESS,
    ForbiddenCategory.DOM: ViolationKind.GLOBAL_ACCESS,
    ForbiddenCategory.STORAGE: ViolationKind.GLOBAL_ACCESS,
    ForbiddenCategory.NAVIGATION: ViolationKind.GLOBAL_ACCESS,
    ForbiddenCategory.TIMER: ViolationKind.SIDE_EFFECT,
    ForbiddenCategory.NETWORK: ViolationKind.SIDE_EFFECT,
    ForbiddenCategory.SUBPROCESS: ViolationKind.SIDE_EFFECT,
    ForbiddenCategory.NON_DETERMINISTIC: ViolationKind.SIDE_EFFECT,
    ForbiddenCategory.CONSOLE: ViolationKind.SIDE_EFFECT,
    ForbiddenCategory.FILE_IO: ViolationKind.SIDE_EFFECT,
}

CATEGORY_MESSAGES: dict[ForbiddenCategory, str] = {
    ForbiddenCategory.GLOBAL_OBJECT: (
        "Access to global object '{name}' is not allowed; pure functions cannot read global state"
    ),
    ForbiddenCategory.PROCESS: (
        "Access to process-level global '{name}' is not allowed; it exposes the runtime environment"
    ),
    ForbiddenCategory.DOM: (
        "DOM access via '{name}' depends on global browser state and is not allowed"
    ),
    ForbiddenCategory.STORAGE: (
        "Storage access via '{name}' reads or writes global state and is not allowed"
    ),
    ForbiddenCategory.NAVIGATION: (
        "Navigation via '{name}' changes global browser state and is not allowed"
    ),
    ForbiddenCategory.TIMER: (
        "Timer function '{name}' schedules deferred side effects and is not allowed"
    ),
    ForbiddenCategory.NETWORK: "Network access via '{name}' is a side effect and is not allowed",
    ForbiddenCategory.SUBPROCESS: (
        "'{name}' spawns or controls external processes, which is a side effect"
    ),
    ForbiddenCategory.NON_DETERMINISTIC: (
        "'{name}' is non-deterministic; pure functions must be deterministic"
    ),
    ForbiddenCategory.CONSOLE: (
        "'{name}' writes to the console; console logging is a side effect"
    ),
    ForbiddenCategory.FILE_IO: "'{name}' performs file I/O, which is a side effect",
}

MESSAGE_OVERRIDES: dict[str, str] = {
    "RegExp": (
        "Dynamic 'RegExp' construction is not allowed; use a regular expression literal "
        "so matching stays deterministic"
    ),
}

FORBIDDEN_IDENTIFIERS: dict[str, ForbiddenCategory] = {
    "window": ForbiddenCategory.GLOBAL_OBJECT,
    "document": ForbiddenCategory.GLOBAL_OBJECT,
    "global": ForbiddenCategory.GLOBAL_OBJECT,
    "globalThis": ForbiddenCategory.GLOBAL_OBJECT,
    "setTimeout": ForbiddenCategory.TIMER,
    "setInterval": ForbiddenCategory.TIMER,
    "setImmediate": ForbiddenCategory.TIMER,
    "clearTimeout": ForbiddenCategory.TIMER,
    "clearInterval": ForbiddenCategory.TIMER,
    "clearImmediate": ForbiddenCategory.TIMER,
    "requestAnimationFrame": ForbiddenCategory.TIMER,
    "cancelAnimationFrame": ForbiddenCategory.TIMER,
    "fetch": ForbiddenCategory.NETWORK,
    "XMLHttpRequest": ForbiddenCategory.NETWORK,
    "WebSocket": ForbiddenCategory.NETWORK,
    "process": ForbiddenCategory.PROCESS,
    "Buffer": ForbiddenCategory.PROCESS,
    "__dirname": ForbiddenCategory.PROCESS,
    "__filename": ForbiddenCategory.PROCESS,
    "Date": ForbiddenCategory.NON_DETERMINISTIC,
    # Regular expression literals stay allowed.
    "RegExp": ForbiddenCategory.NON_DETERMINISTIC,
}

_CONSOLE_METHODS = (
    "log",
    "error",
    "warn",
    "info",
    "debug",
    "trace",
    "dir",
    "table",
    "time",
    "timeEnd",
    "group",
    "groupEnd",
    "assert",
    "count",
    "clear",
)

_FS_METHODS = (
    "readFile",
    "readFileSync",
    "writeFile",
    "writeFileSync",
    "appendFile",
    "appendFileSync",
    "unlink",
    "unlinkSync",
    "mkdir",
    "mkdirSync",
    "rmdir",
    "rmdirSync",
    "rename",
    "renameSync",
    "copyFile",
    "copyFileSync",
    "access",
    "accessSync",
    "stat",
    "statSync",
    "readdir",
    "readdirSync",
    "existsSync",
    "createReadStream",
    "createWriteStream",
)

_PROCESS_METHODS = ("exit", "abort", "chdir", "kill", "send", "disconnect", "on", "once", "emit")
_DOCUMENT_METHODS = (
    "write",
    "writeln",
    "createElement",
    "getElementById",
    "querySelector",
    "querySelectorAll",
)
_STORAGE_METHODS = ("setItem", "getItem", "removeItem", "clear")
_HISTORY_METHODS = ("pushState", "replaceState", "back", "forward", "go")
_LOCATION_METHODS = ("assign", "replace", "reload")


def _members(root: str, names: tuple[str, ...], category: ForbiddenCategory) -> dict[str, ForbiddenCategory]:
    return {f"{root}.{name}": category for name in names}


FORBIDDEN_MEMBERS: dict[str, ForbiddenCategory] = {
    **_members("console", _CONSOLE_METHODS, ForbiddenCategory.CONSOLE),
    **_members("fs", _FS_METHODS, ForbiddenCategory.FILE_IO),
    "fs.promises.*": ForbiddenCategory.FILE_IO,
    "child_process.*": ForbiddenCategory.SUBPROCESS,
    **_members("process", _PROCESS_METHODS, ForbiddenCategory.PROCESS),
    "Math.random": ForbiddenCategory.NON_DETERMINISTIC,
    "crypto.getRandomValues": ForbiddenCategory.NON_DETERMINISTIC,
    "crypto.randomUUID": ForbiddenCategory.NON_DETERMINISTIC,
    "performance.now": ForbiddenCategory.NON_DETERMINISTIC,
    **_members("document", _DOCUMENT_METHODS, ForbiddenCategory.DOM),
    **_members("localStorage", _STORAGE_METHODS, ForbiddenCategory.STORAGE),
    **_members("sessionStorage", _STORAGE_METHODS, ForbiddenCategory.STORAGE),
    **_members("history", _HISTORY_METHODS, ForbiddenCategory.NAVIGATION),
    **_members("location", _LOCATION_METHODS, ForbiddenCategory.NAVIGATION),
}

_LOOP_MESSAGE = (
    "Loop statements are not allowed; use functional alternatives such as map(), "
    "filter(), reduce() or recursion"
)
_CLASS_MESSAGE = "Classes are not allowed; use factory functions and plain objects instead"

FORBIDDEN_NODE_TYPES: dict[str, str] = {
    "ForStatement": _LOOP_MESSAGE,
    "ForInStatement": _LOOP_MESSAGE,
    "ForOfStatement": _LOOP_MESSAGE,
    "WhileStatement": _LOOP_MESSAGE,
    "DoWhileStatement": _LOOP_MESSAGE,
    "ClassDeclaration": _CLASS_MESSAGE,
    "ClassExpression": _CLASS_MESSAGE,
    "ThisExpression": "'this' is not allowed; use closures or pass context as explicit parameters",
    "WithStatement": "'with' statements inject dynamic scope and are not allowed",
}

# Mutating array method name -> non-mutating alternative
MUTATING_ARRAY_METHODS: dict[str, str] = {
    "push": "[...arr, item] or concat()",
    "pop": "slice(0, -1)",
    "shift": "slice(1)",
    "unshift": "[item, ...arr]",
    "splice": "toSpliced() or slice()",
    "sort": "toSorted()",
    "reverse": "toReversed()",
    "fill": "map() or Array.from()",
    "copyWithin": "slice() and concat()",
}

MUTATING_OBJECT_METHODS: frozenset[str] = frozenset({
    "Object.assign",
    "Object.defineProperty",
    "Object.defineProperties",
    "Object.setPrototypeOf",
    "Reflect.set",
    "Reflect.defineProperty",
    "Reflect.deleteProperty",
    "Reflect.setPrototypeOf",
})

PURE_ARRAY_METHODS: frozenset[str] = frozenset({
    "map",
    "filter",
    "reduce",
    "reduceRight",
    "every",
    "some",
    "find",
    "findIndex",
    "findLast",
    "findLastIndex",
    "includes",
    "indexOf",
    "lastIndexOf",
    "flat",
    "flatMap",
    "concat",
    "slice",
    "join",
    "entries",
    "keys",
    "values",
    "at",
    "with",
    "toReversed",
    "toSorted",
    "toSpliced",
})

PURE_STRING_METHODS: frozenset[str] = frozenset({
    "charAt",
    "charCodeAt",
    "codePointAt",
    "endsWith",
    "localeCompare",
    "match",
    "matchAll",
    "normalize",
    "padEnd",
    "padStart",
    "repeat",
    "replace",
    "replaceAll",
    "search",
    "split",
    "startsWith",
    "substring",
    "toLowerCase",
    "toUpperCase",
    "trim",
    "trimEnd",
    "trimStart",
})

PURE_OBJECT_CALLS: frozenset[str] = frozenset({
    "Object.keys",
    "Object.values",
    "Object.entries",
    "Object.fromEntries",
    "Object.freeze",
    "Object.isFrozen",
    "Object.seal",
    "Object.isSealed",
    "Object.is",
    "Object.hasOwn",
})

PURE_METHODS: frozenset[str] = PURE_ARRAY_METHODS | PURE_STRING_METHODS

# Top-level assignments to these slots wire up the module's exports.
EXPORT_OBJECT = "exports"
EXPORT_MODULE_SLOT = "module.exports"


def describe(category: ForbiddenCategory, name: str) -> str:
    """Render the message for a matched identifier or member path."""
    override = MESSAGE_OVERRIDES.get(name)
    if override is not None:
        return override
    return CATEGORY_MESSAGES[category].format(name=name)
