"""Service layer: engine operations returning ServiceResult.

Services may import from domain, rules, engine, config and plugins.
They must never import from commands or output.
"""
