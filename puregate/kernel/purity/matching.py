"""Dotted member paths and pattern matching.

A member chain such as ``fs.promises.readFile`` reduces to a dotted path
when its root is an identifier and every segment is either a plain property
name or a string/integer literal in brackets. Any other computed segment,
or a root that is not an identifier (a call result, ``this``), yields
``None`` and is never matched.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from puregate.kernel.js.nodes import ChainExpression, Identifier, Literal, MemberExpression, Node


def _segment(node: MemberExpression) -> str | None:
    prop = node.property
    if not node.computed:
        return prop.name if isinstance(prop, Identifier) else None
    if isinstance(prop, Literal) and not prop.is_regex:
        value = prop.value
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
    return None


def unwrap_chain(node: Node) -> Node:
    """Strip the ``ChainExpression`` wrapper of an optional chain."""
    while isinstance(node, ChainExpression):
        node = node.expression
    return node


def property_name(node: MemberExpression) -> str | None:
    """The accessed property name, for plain or string-literal access."""
    return _segment(node)


def member_root(node: Node) -> Node:
    """The innermost object of a member chain."""
    current = unwrap_chain(node)
    while isinstance(current, MemberExpression):
        current = unwrap_chain(current.object)
    return current


def member_chain(node: MemberExpression) -> list[Node]:
    """Inner member expressions and the root of a chain, outermost excluded."""
    chain: list[Node] = []
    current = node.object
    while isinstance(current, MemberExpression | ChainExpression):
        chain.append(current)
        current = current.expression if isinstance(current, ChainExpression) else current.object
    chain.append(current)
    return chain


def member_path(node: Node) -> str | None:
    """Reduce a member chain to a dotted path, or None if it cannot be resolved.

    Examples
    --------
    ``obj.prop``, ``obj?.prop`` and ``obj["prop"]`` all give ``"obj.prop"``; ``obj[key]``
    and ``getObj().prop`` give ``None``.
    """
    parts: list[str] = []
    current = unwrap_chain(node)
    while isinstance(current, MemberExpression):
        segment = _segment(current)
        if segment is None:
            return None
        parts.append(segment)
        current = unwrap_chain(current.object)
    if not isinstance(current, Identifier):
        return None
    parts.append(current.name)
    return ".".join(reversed(parts))


@dataclass(frozen=True, slots=True)
class MemberPattern:
    """An exact dotted path (``a.b``) or a suffix wildcard (``a.b.*``).

    A wildcard matches any path strictly below its prefix.
    """

    text: str

    @property
    def is_wildcard(self) -> bool:
        return self.text.endswith(".*")

    @property
    def prefix(self) -> str:
        return self.text[:-2] if self.is_wildcard else self.text

    def matches(self, path: str) -> bool:
        if self.is_wildcard:
            return path.startswith(self.prefix + ".")
        return path == self.text


class PatternSet:
    """A set of member patterns with deterministic match precedence.

    Exact patterns win over wildcards; among wildcards the longest prefix
    wins.
    """

    __slots__ = ("_exact", "_wildcards")

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        parsed = [MemberPattern(p) for p in patterns]
        self._exact = frozenset(p.text for p in parsed if not p.is_wildcard)
        self._wildcards = sorted(
            (p for p in parsed if p.is_wildcard), key=lambda p: (-len(p.prefix), p.text)
        )

    def __bool__(self) -> bool:
        return bool(self._exact or self._wildcards)

    def match(self, path: str) -> str | None:
        """Return the pattern text that matches ``path``, or None."""
        if path in self._exact:
            return path
        for pattern in self._wildcards:
            if pattern.matches(path):
                return pattern.text
        return None
