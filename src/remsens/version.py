"""Version helpers.

``__version__`` is the Python package version (PEP 440). This is what
pip/packaging sees; :mod:`remsens` re-exports it.
"""

from __future__ import annotations


__version__ = "0.3.0"
