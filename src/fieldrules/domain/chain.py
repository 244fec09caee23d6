"""Rule mini-language: parsing rule tokens and rule chains.

A chain is a ``|``-separated list of tokens; each token is ``name`` or
``name:param``.  Only the first colon splits the name from the parameter,
so parameters may themselves contain colons (``date:%H:%M``).

INVARIANT: Chain order is preserved exactly as written.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

CHAIN_SEPARATOR = "|"
PARAM_SEPARATOR = ":"


@dataclass(frozen=True)
class RuleSpec:
    """One named rule plus its optional string parameter."""

    name: str
    parameter: str | None = None

    def __str__(self) -> str:
        if self.parameter is None:
            return self.name
        return f"{self.name}{PARAM_SEPARATOR}{self.parameter}"


def parse_rule(token: str) -> RuleSpec:
    """Parse a single rule token.

    Examples:
        >>> parse_rule("required")
        RuleSpec(name='required', parameter=None)
        >>> parse_rule("min_length:3")
        RuleSpec(name='min_length', parameter='3')
        >>> parse_rule("date:%H:%M")
        RuleSpec(name='date', parameter='%H:%M')
    """
    name, sep, param = token.strip().partition(PARAM_SEPARATOR)
    return RuleSpec(name=name.strip(), parameter=param if sep else None)


def parse_chain(chain: str | Iterable[str | RuleSpec] | None) -> tuple[RuleSpec, ...]:
    """Parse a rule chain into an ordered tuple of :class:`RuleSpec`.

    Accepts the ``|``-separated string form, an iterable of tokens or
    already-parsed specs, or ``None`` for an empty chain.  Blank tokens
    (``"trim||lowercase"``) are dropped.
    """
    if chain is None:
        return ()
    if isinstance(chain, str):
        tokens: Iterable[str | RuleSpec] = chain.split(CHAIN_SEPARATOR)
    else:
        tokens = chain

    specs: list[RuleSpec] = []
    for token in tokens:
        if isinstance(token, RuleSpec):
            specs.append(token)
            continue
        if not token.strip():
            continue
        specs.append(parse_rule(token))
    return tuple(specs)


def format_chain(specs: Iterable[RuleSpec]) -> str:
    """Render parsed specs back into the ``|``-separated string form."""
    return CHAIN_SEPARATOR.join(str(spec) for spec in specs)
