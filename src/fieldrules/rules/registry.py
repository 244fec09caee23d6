"""RuleRegistry: name -> rule implementation tables.

Two namespaces exist and never share a table:

- ``validate``: predicates ``(value, parameter) -> Violation | str | None``
  and cross-field rules ``(value, parameter, context) -> Violation | str | None``.
- ``sanitize``: transforms ``(value, parameter) -> new value``; they raise
  :class:`InvalidRuleParameterError` on a bad parameter.

Lifecycle: builtins are installed at construction, custom rules may be
added until the registry is frozen (the first time a record is processed),
after which the table is read-only and safe to share between threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from fieldrules.domain.chain import CHAIN_SEPARATOR, PARAM_SEPARATOR
from fieldrules.domain.errors import RegistryFrozenError, UnknownRuleError, Violation

if TYPE_CHECKING:
    from fieldrules.engine.schema import FieldContext

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, str | None], Violation | str | bool | None]
CrossFieldPredicate = Callable[[Any, str | None, "FieldContext"], Violation | str | bool | None]
Transform = Callable[[Any, str | None], Any]


class Namespace(StrEnum):
    """Which engine pass a registry serves."""

    VALIDATE = "validate"
    SANITIZE = "sanitize"


class RuleKind(StrEnum):
    """Calling convention of a registered rule."""

    PREDICATE = "predicate"
    CROSS_FIELD = "cross_field"
    TRANSFORM = "transform"


_ALLOWED_KINDS: dict[Namespace, frozenset[RuleKind]] = {
    Namespace.VALIDATE: frozenset({RuleKind.PREDICATE, RuleKind.CROSS_FIELD}),
    Namespace.SANITIZE: frozenset({RuleKind.TRANSFORM}),
}


@dataclass(frozen=True)
class RegisteredRule:
    """A rule implementation plus its calling convention."""

    name: str
    kind: RuleKind
    fn: Callable[..., Any]


class RuleRegistry:
    """Name -> rule table for one namespace.

    Build one through :func:`validate_registry` or :func:`sanitize_registry`
    and hand it explicitly to every engine call.  Independent registries
    never affect each other.
    """

    def __init__(self, namespace: Namespace | str) -> None:
        self._namespace = Namespace(namespace)
        self._rules: dict[str, RegisteredRule] = {}
        self._frozen = False

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    @property
    def frozen(self) -> bool:
        """Whether the registry has stopped accepting registrations."""
        return self._frozen

    def register(self, name: str, fn: Callable[..., Any], *, kind: RuleKind | None = None) -> None:
        """Install or overwrite a rule.

        *kind* defaults to ``predicate`` in the validate namespace and
        ``transform`` in the sanitize namespace.

        Raises:
            RegistryFrozenError: If the registry is already serving records.
            ValueError: If *name* is empty or contains ``|`` or ``:``.
            TypeError: If *fn* is not callable or *kind* does not belong here.
        """
        if self._frozen:
            msg = f"{self._namespace} registry is frozen; cannot register {name!r}"
            raise RegistryFrozenError(msg)

        normalized = name.strip()
        if not normalized:
            msg = "Rule name must not be empty"
            raise ValueError(msg)
        if CHAIN_SEPARATOR in normalized or PARAM_SEPARATOR in normalized:
            msg = (
                f"Rule name {normalized!r} must not contain "
                f"{CHAIN_SEPARATOR!r} or {PARAM_SEPARATOR!r}"
            )
            raise ValueError(msg)
        if not callable(fn):
            msg = f"Rule {normalized!r} implementation must be callable"
            raise TypeError(msg)

        resolved = kind or self._default_kind()
        if resolved not in _ALLOWED_KINDS[self._namespace]:
            msg = f"{resolved} rules cannot be registered in the {self._namespace} namespace"
            raise TypeError(msg)

        if normalized in self._rules:
            logger.debug("Overriding %s rule %s", self._namespace, normalized)
        self._rules[normalized] = RegisteredRule(name=normalized, kind=resolved, fn=fn)

    def register_cross_field(self, name: str, fn: CrossFieldPredicate) -> None:
        """Install a rule that also receives the sibling field values."""
        self.register(name, fn, kind=RuleKind.CROSS_FIELD)

    def update(self, rules: dict[str, Callable[..., Any]], *, kind: RuleKind | None = None) -> None:
        """Register every ``name -> fn`` pair of *rules* in insertion order."""
        for name, fn in rules.items():
            self.register(name, fn, kind=kind)

    def lookup(self, name: str) -> RegisteredRule:
        """Return the rule registered under *name*.

        Raises:
            UnknownRuleError: If nothing is registered under *name*.
        """
        try:
            return self._rules[name]
        except KeyError:
            raise UnknownRuleError(name, self._namespace) from None

    def get(self, name: str) -> RegisteredRule | None:
        return self._rules.get(name)

    def names(self) -> list[str]:
        """Registered rule names, sorted."""
        return sorted(self._rules)

    def freeze(self) -> None:
        """Stop accepting registrations.  Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.debug("Froze %s registry with %d rules", self._namespace, len(self._rules))

    def copy(self) -> RuleRegistry:
        """Return an unfrozen copy with the same rules."""
        clone = RuleRegistry(self._namespace)
        clone._rules = dict(self._rules)
        return clone

    def _default_kind(self) -> RuleKind:
        if self._namespace is Namespace.SANITIZE:
            return RuleKind.TRANSFORM
        return RuleKind.PREDICATE

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"RuleRegistry({self._namespace.value!r}, rules={len(self._rules)}, {state})"


def validate_registry(*, builtins: bool = True) -> RuleRegistry:
    """Create a validate-namespace registry, optionally with the builtin catalogue."""
    registry = RuleRegistry(Namespace.VALIDATE)
    if builtins:
        from fieldrules.rules.cross_field import BUILTIN_CROSS_FIELD
        from fieldrules.rules.validators import BUILTIN_PREDICATES

        registry.update(BUILTIN_PREDICATES, kind=RuleKind.PREDICATE)
        registry.update(BUILTIN_CROSS_FIELD, kind=RuleKind.CROSS_FIELD)
    return registry


def sanitize_registry(*, builtins: bool = True) -> RuleRegistry:
    """Create a sanitize-namespace registry, optionally with the builtin catalogue."""
    registry = RuleRegistry(Namespace.SANITIZE)
    if builtins:
        from fieldrules.rules.sanitizers import BUILTIN_TRANSFORMS

        registry.update(BUILTIN_TRANSFORMS, kind=RuleKind.TRANSFORM)
    return registry
