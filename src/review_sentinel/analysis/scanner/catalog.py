"""Structural vulnerability catalog for JavaScript/TypeScript syntax trees.

Each ``CatalogEntry`` pairs one or more node predicates with the metadata of
the vulnerability class they detect. Predicates take a tree-sitter ``Node``
and return True on a match; they are evaluated against every node of the
tree, so a predicate must be cheap and must look only at the node and its
immediate children.

The catalog is a module-level tuple built once at import and never mutated.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..models import Severity

if TYPE_CHECKING:
    from tree_sitter import Node

NodePredicate = Callable[["Node"], bool]

# Node types treated as a literal value for credential detection
LITERAL_TYPES = frozenset({"string", "number"})

SECRET_NAME_RE = re.compile(r"key|token|secret|password", re.IGNORECASE)


@dataclass(frozen=True)
class CatalogEntry:
    """One vulnerability class and the node shapes that indicate it."""

    key: str
    label: str
    severity: Severity
    cwe: str
    predicates: tuple[NodePredicate, ...]
    description: str


# ── Node helpers ────────────────────────────────────────────────────────


def node_text(node: Node | None) -> str:
    """Decoded source text of a node ("" for None)."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def property_name(node: Node | None) -> str:
    """Name of an object key / member property, with string quotes removed."""
    text = node_text(node)
    if node is not None and node.type == "string":
        return text.strip("'\"`")
    return text


def member_parts(node: Node | None) -> tuple[str, str] | None:
    """Return ``(object_text, property_name)`` for a member expression."""
    if node is None or node.type != "member_expression":
        return None
    return (
        node_text(node.child_by_field_name("object")),
        property_name(node.child_by_field_name("property")),
    )


def callee(node: Node) -> Node | None:
    """Function part of a call expression."""
    if node.type != "call_expression":
        return None
    return node.child_by_field_name("function")


def first_argument(node: Node) -> Node | None:
    """First argument of a call; the template itself for tagged templates."""
    args = node.child_by_field_name("arguments")
    if args is None:
        return None
    if args.type != "arguments":
        return args
    return args.named_children[0] if args.named_children else None


def is_literal(node: Node | None) -> bool:
    """True for string/number literals and templates without substitutions."""
    if node is None:
        return False
    if node.type in LITERAL_TYPES:
        return True
    if node.type == "template_string":
        return not any(c.type == "template_substitution" for c in node.children)
    return False


def _method_call(obj: str | None, *methods: str) -> NodePredicate:
    """Match ``<obj>.<method>(...)``; ``obj=None`` accepts any receiver."""

    def predicate(node: Node) -> bool:
        parts = member_parts(callee(node))
        if parts is None:
            return False
        return (obj is None or parts[0] == obj) and parts[1] in methods

    return predicate


def _plain_call(name: str) -> NodePredicate:
    """Match a call of a bare identifier, e.g. ``eval(...)``."""

    def predicate(node: Node) -> bool:
        fn = callee(node)
        return fn is not None and fn.type == "identifier" and node_text(fn) == name

    return predicate


def _member_access(obj: str | None, prop: str) -> NodePredicate:
    """Match a member expression ``<obj>.<prop>``; ``obj=None`` accepts any."""

    def predicate(node: Node) -> bool:
        parts = member_parts(node)
        if parts is None:
            return False
        return (obj is None or parts[0] == obj) and parts[1] == prop

    return predicate


# ── Predicates ──────────────────────────────────────────────────────────


def _query_with_template(node: Node) -> bool:
    """``db.query(`...`)`` / ``db.execute(`...`)`` with a template literal."""
    if not _method_call(None, "query", "execute")(node):
        return False
    arg = first_argument(node)
    return arg is not None and arg.type == "template_string"


def _dangerous_html_property(node: Node) -> bool:
    """``{dangerouslySetInnerHTML: ...}`` or the JSX attribute form."""
    if node.type == "pair":
        return property_name(node.child_by_field_name("key")) == (
            "dangerouslySetInnerHTML"
        )
    if node.type == "jsx_attribute":
        named = node.named_children
        return bool(named) and node_text(named[0]) == "dangerouslySetInnerHTML"
    return False


def _inner_html_assignment(node: Node) -> bool:
    """``el.innerHTML = ...`` (plain or compound assignment)."""
    if node.type not in ("assignment_expression", "augmented_assignment_expression"):
        return False
    parts = member_parts(node.child_by_field_name("left"))
    return parts is not None and parts[1] == "innerHTML"


def _secret_declarator(node: Node) -> bool:
    """``const apiKey = "..."``."""
    if node.type != "variable_declarator":
        return False
    name = node.child_by_field_name("name")
    return (
        name is not None
        and name.type == "identifier"
        and bool(SECRET_NAME_RE.search(node_text(name)))
        and is_literal(node.child_by_field_name("value"))
    )


def _secret_property(node: Node) -> bool:
    """``{password: "..."}`` and class fields ``token = "..."``."""
    if node.type == "pair":
        key, value = node.child_by_field_name("key"), node.child_by_field_name("value")
    elif node.type in ("field_definition", "public_field_definition"):
        key = node.child_by_field_name("property") or node.child_by_field_name("name")
        value = node.child_by_field_name("value")
    else:
        return False
    return bool(SECRET_NAME_RE.search(property_name(key))) and is_literal(value)


def _secret_assignment(node: Node) -> bool:
    """``password = "..."`` / ``config.secret = "..."``."""
    if node.type != "assignment_expression":
        return False
    left = node.child_by_field_name("left")
    if left is None:
        return False
    if left.type == "member_expression":
        name = property_name(left.child_by_field_name("property"))
    elif left.type == "identifier":
        name = node_text(left)
    else:
        return False
    return bool(SECRET_NAME_RE.search(name)) and is_literal(
        node.child_by_field_name("right")
    )


def _proto_subscript(node: Node) -> bool:
    """``obj["__proto__"]``."""
    if node.type != "subscript_expression":
        return False
    index = node.child_by_field_name("index")
    return index is not None and property_name(index) == "__proto__"


# ── Catalog ─────────────────────────────────────────────────────────────


SECURITY_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        key="sqlInjection",
        label="SQL Injection",
        severity=Severity.CRITICAL,
        cwe="CWE-89",
        predicates=(_query_with_template, _method_call("mysql", "query")),
        description="Potential SQL injection vulnerability found. Use parameterized queries.",
    ),
    CatalogEntry(
        key="commandInjection",
        label="Command Injection",
        severity=Severity.CRITICAL,
        cwe="CWE-78",
        predicates=(
            _method_call("child_process", "exec"),
            _plain_call("exec"),
            _plain_call("spawn"),
        ),
        description="Command injection vulnerability detected. Validate and sanitize inputs.",
    ),
    CatalogEntry(
        key="xss",
        label="Cross-Site Scripting (XSS)",
        severity=Severity.HIGH,
        cwe="CWE-79",
        predicates=(
            _dangerous_html_property,
            _method_call(None, "innerHTML"),
            _inner_html_assignment,
        ),
        description="XSS vulnerability found. Sanitize user inputs and use safe rendering.",
    ),
    CatalogEntry(
        key="hardcodedSecrets",
        label="Hardcoded Credentials",
        severity=Severity.HIGH,
        cwe="CWE-798",
        predicates=(_secret_declarator, _secret_property, _secret_assignment),
        description="Hardcoded credentials detected. Use environment variables or secure vaults.",
    ),
    CatalogEntry(
        key="insecureRandom",
        label="Weak Random Number Generation",
        severity=Severity.MEDIUM,
        cwe="CWE-338",
        predicates=(_method_call("Math", "random"),),
        description="Weak random number generation. Use crypto.randomBytes() for security.",
    ),
    CatalogEntry(
        key="prototypePollution",
        label="Prototype Pollution",
        severity=Severity.HIGH,
        cwe="CWE-1321",
        predicates=(
            _member_access("Object", "prototype"),
            _member_access(None, "__proto__"),
            _member_access(None, "constructor"),
            _proto_subscript,
        ),
        description="Potential prototype pollution vulnerability. Validate object properties.",
    ),
    CatalogEntry(
        key="insecureDeserialization",
        label="Insecure Deserialization",
        severity=Severity.HIGH,
        cwe="CWE-502",
        predicates=(_method_call("JSON", "parse"), _plain_call("eval")),
        description="Insecure deserialization detected. Validate and sanitize input data.",
    ),
)
