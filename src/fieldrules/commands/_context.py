"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy pipeline construction (plugins are
only discovered when a command needs rules) and centralized result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fieldrules.output.formatters import OutputSettings, format_result
from fieldrules.services.result import SANITIZE_FAILED

if TYPE_CHECKING:
    from fieldrules.config.settings import FieldRulesSettings
    from fieldrules.engine.pipeline import Pipeline
    from fieldrules.services.records import RecordService
    from fieldrules.services.result import ServiceResult

EXIT_FAILURE = 1
EXIT_SANITIZE_FAILED = 2


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The pipeline is lazily
    built on first use so ``--help`` and ``--version`` never load plugins.
    """

    def __init__(self, settings: FieldRulesSettings) -> None:
        self.settings = settings
        self._pipeline: Pipeline | None = None
        self._plugin_warnings: list[str] = []

        # Configure structured logging
        from fieldrules.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def pipeline(self) -> Pipeline:
        """The configured pipeline (built lazily on first access)."""
        if self._pipeline is None:
            from fieldrules.services.factory import build_pipeline

            self._pipeline, self._plugin_warnings = build_pipeline(self.settings)
        return self._pipeline

    @property
    def service(self) -> RecordService:
        from fieldrules.services.records import RecordService

        pipeline = self.pipeline
        return RecordService(pipeline, warnings=self._plugin_warnings)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Sanitize failure: writes to stderr, exits with code 2.
        * Any other failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            return

        click.echo(output, err=True)
        if result.error is not None and result.error.code == SANITIZE_FAILED:
            raise SystemExit(EXIT_SANITIZE_FAILED)
        raise SystemExit(EXIT_FAILURE)
