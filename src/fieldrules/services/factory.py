"""Build configured pipelines from settings.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fieldrules.engine.pipeline import Pipeline
from fieldrules.engine.request import RequestSanitizer

if TYPE_CHECKING:
    from fieldrules.config.settings import FieldRulesSettings

logger = logging.getLogger(__name__)


def build_pipeline(settings: FieldRulesSettings) -> tuple[Pipeline, list[str]]:
    """Create a Pipeline with builtin rules plus every plugin-provided rule.

    Returns the pipeline and any plugin warnings.
    """
    pipeline = Pipeline()
    warnings: list[str] = []
    if not settings.plugins.enabled:
        return pipeline, warnings

    from fieldrules.plugins.manager import PluginManager

    manager = PluginManager()
    try:
        loaded = manager.discover_and_load(local_dir=settings.plugin_dir)
    except Exception:
        logger.warning("Plugin discovery failed", exc_info=True)
        warnings.append("Plugin discovery failed; continuing with builtin rules")
        return pipeline, warnings

    if loaded:
        logger.debug("Loaded plugins: %s", ", ".join(loaded))
    warnings.extend(manager.install_rules(pipeline.validators, pipeline.sanitizers))
    return pipeline, warnings


def build_request_sanitizer(settings: FieldRulesSettings, pipeline: Pipeline) -> RequestSanitizer:
    """RequestSanitizer over *pipeline*'s sanitize registry and the configured chain.

    Raises:
        UnknownRuleError: If the configured chain names an unregistered rule.
    """
    return RequestSanitizer(pipeline.sanitizers, chain=settings.engine.request_chain)
