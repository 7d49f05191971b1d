"""Public API layer for puregate.

Both the CLI and library callers go through these functions.

Available submodules
--------------------
- validation: Full, syntax-only and batch validation
"""

from puregate.api import validation

__all__ = ["validation"]
