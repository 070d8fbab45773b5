"""
HPMA — Field-Guide Rule Evaluator

A small condition language matched against the evaluation context (a nested
mapping of scores, archetype probabilities, validity flags and roster
fields).  Conditions are parsed once into a tiny AST and then interpreted.

Grammar::

    condition  := comparison ( " AND " comparison )*
                | comparison ( " OR " comparison )*
    comparison := PATH OP OPERAND
    OP         := ">=" | "<=" | "==" | "!=" | ">" | "<"
    OPERAND    := "thresholds." NAME | 'str' | "str" | true | false
                | null | FLOAT | PATH

AND and OR never appear together in one condition.  A condition that does
not parse is logged once and never matches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import structlog

from hpma.schemas.report import Rule, RuleMatch

logger = structlog.get_logger("hpma.rule_evaluator")

_COMPARISON_RE = re.compile(r"^(.+?)\s*(>=|<=|==|!=|>|<)\s*(.+)$")
_PATH_RE = re.compile(r"^[A-Za-z_]\w*(?:\.\w+)*$")
_THRESHOLD_PREFIX = "thresholds."

MISSING: Any = object()


# ──────────────────────────────────────────────────────────────────────────────
# AST
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PathRef:
    path: str


@dataclass(frozen=True)
class ThresholdRef:
    name: str


@dataclass(frozen=True)
class Constant:
    value: Any


Operand = Union[PathRef, ThresholdRef, Constant]


@dataclass(frozen=True)
class Comparison:
    path: str
    op: str
    operand: Operand


@dataclass(frozen=True)
class AllOf:
    terms: tuple[Comparison, ...]


@dataclass(frozen=True)
class AnyOf:
    terms: tuple[Comparison, ...]


Condition = Union[Comparison, AllOf, AnyOf]


# ──────────────────────────────────────────────────────────────────────────────
# Parsing
# ──────────────────────────────────────────────────────────────────────────────


def _parse_operand(text: str) -> Optional[Operand]:
    if text.startswith(_THRESHOLD_PREFIX):
        name = text[len(_THRESHOLD_PREFIX):]
        return ThresholdRef(name) if name else None
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return Constant(text[1:-1])
    if text == "true":
        return Constant(True)
    if text == "false":
        return Constant(False)
    if text == "null":
        return Constant(None)
    try:
        return Constant(float(text))
    except ValueError:
        pass
    if _PATH_RE.match(text):
        return PathRef(text)
    return None


def _parse_comparison(text: str) -> Optional[Comparison]:
    match = _COMPARISON_RE.match(text.strip())
    if match is None:
        return None
    left, op, right = (part.strip() for part in match.groups())
    if not _PATH_RE.match(left):
        return None
    operand = _parse_operand(right)
    if operand is None:
        return None
    return Comparison(path=left, op=op, operand=operand)


@lru_cache(maxsize=1024)
def parse_condition(text: str) -> Optional[Condition]:
    """Parse *text* into a condition AST, or ``None`` if it is not valid."""
    has_and = " AND " in text
    has_or = " OR " in text
    if has_and and has_or:
        logger.warning("rule.invalid_condition", condition=text, reason="mixed AND/OR")
        return None

    pieces = text.split(" AND ") if has_and else text.split(" OR ")
    terms = tuple(_parse_comparison(piece) for piece in pieces)
    if not terms or any(term is None for term in terms):
        logger.warning("rule.invalid_condition", condition=text, reason="unparseable comparison")
        return None

    if len(terms) == 1:
        return terms[0]
    return AllOf(terms) if has_and else AnyOf(terms)


# ──────────────────────────────────────────────────────────────────────────────
# Interpretation
# ──────────────────────────────────────────────────────────────────────────────


def resolve_path(context: Mapping[str, Any], path: str) -> Any:
    """Walk a dotted path through mappings and sequences; ``MISSING`` if absent."""
    current: Any = context
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, str) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _strict_equal(left: Any, right: Any) -> bool:
    # bool is an int subclass; keep true != 1
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    numeric = (int, float)
    if isinstance(left, numeric) and isinstance(right, numeric):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def compare(left: Any, op: str, right: Any) -> bool:
    if left is MISSING or left is None:
        return op == "==" and (right is MISSING or right is None)
    if op == "==":
        return _strict_equal(left, right)
    if op == "!=":
        return not _strict_equal(left, right)

    try:
        lhs = float(left)
        rhs = float(right)
    except (TypeError, ValueError):
        return False
    if op == ">=":
        return lhs >= rhs
    if op == "<=":
        return lhs <= rhs
    if op == ">":
        return lhs > rhs
    return lhs < rhs


class RuleEvaluator:
    """Evaluates rule conditions against a context with a named-threshold table."""

    def __init__(self, thresholds: Optional[Mapping[str, float]] = None) -> None:
        self.thresholds: Mapping[str, float] = dict(thresholds or {})

    def _operand_value(self, operand: Operand, context: Mapping[str, Any]) -> Any:
        if isinstance(operand, ThresholdRef):
            return self.thresholds.get(operand.name, MISSING)
        if isinstance(operand, Constant):
            return operand.value
        return resolve_path(context, operand.path)

    def _holds(self, term: Comparison, context: Mapping[str, Any]) -> bool:
        left = resolve_path(context, term.path)
        return compare(left, term.op, self._operand_value(term.operand, context))

    def evaluate(self, condition: Optional[Condition], context: Mapping[str, Any]) -> bool:
        if condition is None:
            return False
        if isinstance(condition, Comparison):
            return self._holds(condition, context)
        if isinstance(condition, AllOf):
            return all(self._holds(term, context) for term in condition.terms)
        return any(self._holds(term, context) for term in condition.terms)

    def evaluate_condition(self, text: str, context: Mapping[str, Any]) -> bool:
        return self.evaluate(parse_condition(text), context)

    def evaluate_all(self, rules: Iterable[Rule], context: Mapping[str, Any]) -> list[RuleMatch]:
        """Return a match for every rule whose condition holds, in rule order."""
        matches: list[RuleMatch] = []
        for rule in rules:
            if self.evaluate_condition(rule.when, context):
                matches.append(RuleMatch(
                    rule_id=rule.id,
                    flags=list(rule.add_flags),
                    snippets={path: list(lines) for path, lines in rule.add_snippets.items()},
                ))
        logger.debug("rule.evaluate_all_complete", matched=[m.rule_id for m in matches])
        return matches


def collect_flags(matches: Iterable[RuleMatch]) -> list[str]:
    """Deduplicated flags, first-seen order."""
    return list(dict.fromkeys(flag for match in matches for flag in match.flags))


def merge_snippets(matches: Iterable[RuleMatch]) -> dict[str, list[str]]:
    merged: dict[str, list[str]] = {}
    for match in matches:
        for path, lines in match.snippets.items():
            merged.setdefault(path, []).extend(lines)
    return merged
