"""Rule layer: the registry and the builtin rule catalogue."""
