"""fieldrules: declarative field-rule engine.

Sanitize and validate structured records from rule-chain strings such as
``"required|min_length:3|alpha_numeric"``.
"""

from fieldrules.domain.chain import RuleSpec, parse_chain, parse_rule
from fieldrules.domain.errors import (
    ErrorCode,
    FieldRulesError,
    InvalidRuleParameterError,
    RecordTypeError,
    RegistryFrozenError,
    SanitizationError,
    UnknownRuleError,
    ValidationFailedError,
    Violation,
)
from fieldrules.domain.report import ValidationError, ValidationErrorSet
from fieldrules.engine.pipeline import Pipeline, validate_and_sanitize
from fieldrules.engine.schema import (
    FieldDescriptor,
    RecordSchema,
    SchemaBuilder,
    rules,
    schema_for,
    schema_from_mapping,
)
from fieldrules.rules.registry import RuleRegistry, sanitize_registry, validate_registry

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "FieldDescriptor",
    "FieldRulesError",
    "InvalidRuleParameterError",
    "Pipeline",
    "RecordSchema",
    "RecordTypeError",
    "RegistryFrozenError",
    "RuleRegistry",
    "RuleSpec",
    "SanitizationError",
    "SchemaBuilder",
    "UnknownRuleError",
    "ValidationError",
    "ValidationErrorSet",
    "ValidationFailedError",
    "Violation",
    "__version__",
    "parse_chain",
    "parse_rule",
    "rules",
    "sanitize_registry",
    "schema_for",
    "schema_from_mapping",
    "validate_and_sanitize",
    "validate_registry",
]
