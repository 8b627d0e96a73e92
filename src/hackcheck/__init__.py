"""hackcheck package root."""

from hackcheck.exceptions import InputError, NeverRaise, NeverThrown
from hackcheck.invariants import never

__all__ = ["__version__", "InputError", "NeverRaise", "NeverThrown", "never"]

__version__ = "0.1.0"
