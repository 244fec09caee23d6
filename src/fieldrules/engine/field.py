"""FieldEngine: apply one rule chain to one value.

``validate_field`` never short-circuits: every rule runs and every
violation is returned.  ``sanitize_field`` pipes each transform's output
into the next and stops at the first failure.
"""

from __future__ import annotations

import logging
from typing import Any

from fieldrules.domain.chain import RuleSpec, parse_chain
from fieldrules.domain.errors import ErrorCode, Violation
from fieldrules.engine.schema import ChainInput, FieldContext
from fieldrules.rules.registry import Namespace, RegisteredRule, RuleKind, RuleRegistry

logger = logging.getLogger(__name__)


def _require_namespace(registry: RuleRegistry, namespace: Namespace) -> None:
    if registry.namespace is not namespace:
        msg = f"expected a {namespace} registry, got a {registry.namespace} registry"
        raise TypeError(msg)


def _normalize(spec: RuleSpec, outcome: Any) -> Violation | None:
    """Turn whatever a predicate returned into a Violation or None.

    Predicates may return ``None``/``True`` (pass), ``False`` (fail with a
    generic message), a message string, or a :class:`Violation`.
    """
    if outcome is None or outcome is True:
        return None
    if isinstance(outcome, Violation):
        return outcome
    if outcome is False:
        return Violation(
            rule=spec.name, code=ErrorCode.CUSTOM, message=f"field failed {spec.name} validation"
        )
    return Violation(rule=spec.name, code=ErrorCode.CUSTOM, message=str(outcome))


def _evaluate(
    rule: RegisteredRule,
    spec: RuleSpec,
    value: Any,
    context: FieldContext | None,
) -> Violation | None:
    if rule.kind is RuleKind.CROSS_FIELD:
        if context is None:
            return Violation(
                rule=spec.name,
                code=ErrorCode.MISSING_CONTEXT,
                message=f"{spec.name} rule needs the whole record",
            )
        return _normalize(spec, rule.fn(value, spec.parameter, context))
    return _normalize(spec, rule.fn(value, spec.parameter))


def validate_field(
    value: Any,
    chain: ChainInput,
    registry: RuleRegistry,
    *,
    context: FieldContext | None = None,
) -> list[Violation]:
    """Run every rule of *chain* against *value*.

    An unknown rule name yields an ``unknown_rule`` violation and the
    remaining rules still run.  Cross-field rules need *context*; without
    it they report ``missing_context``.

    Returns:
        Violations in rule order.  Empty means the value passed.
    """
    _require_namespace(registry, Namespace.VALIDATE)
    violations: list[Violation] = []
    for spec in parse_chain(chain):
        rule = registry.get(spec.name)
        if rule is None:
            violations.append(
                Violation(
                    rule=spec.name,
                    code=ErrorCode.UNKNOWN_RULE,
                    message=f"unknown validation rule: {spec.name}",
                )
            )
            continue
        violation = _evaluate(rule, spec, value, context)
        if violation is not None:
            violations.append(violation)
    return violations


def sanitize_field(value: Any, chain: ChainInput, registry: RuleRegistry) -> Any:
    """Pipe *value* through every transform of *chain*, left to right.

    Raises:
        UnknownRuleError: If a rule name is not registered.
        InvalidRuleParameterError: If a transform rejects its parameter.
    """
    _require_namespace(registry, Namespace.SANITIZE)
    result = value
    for spec in parse_chain(chain):
        rule = registry.lookup(spec.name)
        result = rule.fn(result, spec.parameter)
    return result
