"""Extension layer: custom rules via pluggy.

Discovery: entry_points (pip-installed) plus single-file plugins in the
local plugin directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from fieldrules.plugins.hookspecs import hookimpl
from fieldrules.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
