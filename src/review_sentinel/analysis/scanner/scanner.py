"""Syntax-tree security scanner with regex fallback."""

from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from tree_sitter_language_pack import get_parser

from ...config.defaults import LANGUAGE_MAPPINGS, SYNTAX_TREE_LANGUAGES
from ...core.exceptions import ParsingError
from ..models import (
    EXPLOITABILITY_BY_SEVERITY,
    CodeMetrics,
    Confidence,
    FileAnalysis,
    VulnerabilityFinding,
)
from .catalog import SECURITY_CATALOG, CatalogEntry
from .heuristics import run_regex_fallback, run_textual_checks

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

# Node types contributing to complexity and metrics
FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
LOOP_TYPES = frozenset(
    {"for_statement", "for_in_statement", "while_statement", "do_statement"}
)
BRANCH_TYPES = frozenset({"if_statement", "switch_case"})
CONDITIONAL_EXPRESSION_TYPES = frozenset({"ternary_expression"})


def detect_language(filename: str) -> str | None:
    """Map a filename to a language name by extension."""
    return LANGUAGE_MAPPINGS.get(Path(filename).suffix.lower())


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SyntaxScanner:
    """Scans one file at a time for known vulnerability shapes.

    ``scan()`` is total: parse failures switch to the regex fallback pass and
    any other fault degrades to an empty result. A scanner holds no per-call
    state, so one instance can serve concurrent scans from several threads.

    Example:
        >>> scanner = SyntaxScanner()
        >>> analysis = scanner.scan("const apiKey = 'abc';", "src/config.js")
        >>> analysis.vulnerabilities[0].vulnerability_type
        'Hardcoded Credentials'
    """

    def __init__(self, catalog: tuple[CatalogEntry, ...] = SECURITY_CATALOG) -> None:
        self.catalog = catalog

    def scan(self, content: str | None, filename: str) -> FileAnalysis:
        """Scan ``content`` and return its FileAnalysis. Never raises."""
        language = detect_language(filename)

        if not content or not content.strip():
            return FileAnalysis.empty(filename, language)

        try:
            return self._scan(content, filename, language)
        except Exception as e:
            logger.warning(f"Scan failed for {filename}, reporting no findings: {e}")
            return FileAnalysis.empty(filename, language)

    def _scan(self, content: str, filename: str, language: str | None) -> FileAnalysis:
        try:
            tree = self._parse(content, language)
        except ParsingError as e:
            log = logger.warning if language in SYNTAX_TREE_LANGUAGES else logger.debug
            log(f"Falling back to regex analysis for {filename}: {e}")
            findings = run_regex_fallback(content, filename)
            findings.extend(run_textual_checks(content))
            return FileAnalysis(
                filename=filename,
                vulnerabilities=tuple(findings),
                language=language,
                syntax_tree_analyzed=False,
            )

        nodes, metrics, units = self._walk(tree.root_node, content)
        findings = self._match_catalog(nodes, filename)
        findings.extend(run_textual_checks(content))

        complexity = _round_half_up(units / max(1, metrics.functions))

        logger.debug(
            f"Scanned {filename}: {len(findings)} findings, "
            f"complexity {complexity}, {metrics.functions} functions"
        )

        return FileAnalysis(
            filename=filename,
            vulnerabilities=tuple(findings),
            complexity=complexity,
            metrics=metrics,
            language=language,
            syntax_tree_analyzed=True,
        )

    def _parse(self, content: str, language: str | None) -> Tree:
        """Parse content with the tree-sitter grammar for ``language``.

        Raises:
            ParsingError: No grammar for the language, grammar could not be
                loaded, or the tree contains syntax errors
        """
        if language not in SYNTAX_TREE_LANGUAGES:
            raise ParsingError(
                f"No syntax-tree support for {language or 'unknown'} files",
                {"language": language},
            )

        try:
            parser = get_parser(language)
        except Exception as e:
            raise ParsingError(
                f"Tree-sitter grammar unavailable for {language}: {e}",
                {"language": language},
            ) from e

        tree = parser.parse(content.encode("utf-8"))
        if tree.root_node.has_error:
            raise ParsingError(
                f"Syntax errors in {language} source", {"language": language}
            )
        return tree

    def _walk(self, root: Node, content: str) -> tuple[list[Node], CodeMetrics, int]:
        """Collect nodes in document order and tally complexity/metrics.

        Returns:
            Tuple of (nodes, metrics, complexity_units)
        """
        nodes: list[Node] = []
        functions = loops = conditions = max_depth = units = 0

        # Iterative pre-order walk; deep trees would overflow recursion
        stack: list[tuple[Node, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            nodes.append(node)

            # Keyword tokens share type names with constructs ("function")
            node_type = node.type if node.is_named else ""
            child_depth = depth
            if node_type in FUNCTION_TYPES:
                functions += 1
                units += 1
                child_depth += 1
            elif node_type in LOOP_TYPES:
                loops += 1
                units += 1
                child_depth += 1
            elif node_type in BRANCH_TYPES:
                conditions += 1
                units += 1
                child_depth += 1
            elif node_type in CONDITIONAL_EXPRESSION_TYPES:
                units += 1

            max_depth = max(max_depth, child_depth)
            stack.extend((child, child_depth) for child in reversed(node.children))

        metrics = CodeMetrics(
            functions=functions,
            loops=loops,
            conditions=conditions,
            depth=max_depth,
            lines_of_code=len(content.splitlines()),
        )
        return nodes, metrics, units

    def _match_catalog(self, nodes: list[Node], filename: str) -> list[VulnerabilityFinding]:
        """Evaluate every catalog predicate against every node.

        Repeat matches of the same node are kept.
        """
        findings = []
        for entry in self.catalog:
            for predicate in entry.predicates:
                try:
                    matches = [node for node in nodes if predicate(node)]
                except Exception as e:
                    logger.debug(f"Skipping {entry.key} pattern for {filename}: {e}")
                    continue

                for node in matches:
                    findings.append(
                        VulnerabilityFinding(
                            vulnerability_type=entry.label,
                            description=entry.description,
                            location=self._location(node),
                            severity=entry.severity,
                            confidence=Confidence.HIGH,
                            exploitability=EXPLOITABILITY_BY_SEVERITY[entry.severity],
                            cwe=entry.cwe,
                            pattern=entry.key,
                        )
                    )
        return findings

    @staticmethod
    def _location(node: Node) -> str:
        point = getattr(node, "start_point", None)
        if point is None:
            return "Location unknown"
        row, column = point
        return f"Line {row + 1}, Column {column}"
