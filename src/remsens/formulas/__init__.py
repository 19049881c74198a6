"""Formula modules.

Importing this package registers every formula and freezes the registry.
"""

from remsens import conversions
from remsens.formulas import el_opt, em, muwave, photographic, ranged
from remsens.registry import freeze

freeze()

__all__ = ["conversions", "el_opt", "em", "muwave", "photographic", "ranged"]
