"""Domain layer: rule specs, error taxonomy, and the validation report.

This layer depends only on stdlib.
It must never import from rules, engine, services, commands, or config.
"""
