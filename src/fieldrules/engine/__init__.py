"""Engine layer: field engine, record schemas, record engine, and pipeline.

Depends on the domain and rules layers.  Holds no global rule tables:
every entry point takes its registries explicitly.
"""
