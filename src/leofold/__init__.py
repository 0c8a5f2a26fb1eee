"""
leofold - a constant-folding optimizer for Leo programs.

Parses a Leo function of let-bindings over arithmetic expressions, folds
every sub-expression built only from integer literals into its value using
checked fixed-width arithmetic, and renders the result back to Leo source.
"""

from leofold.compiler import fold_constants, optimize_source, parse_source
from leofold.compiler.const_fold import ConstantFolder, FoldResult
from leofold.formatter import format_program

__version__ = "0.1.0"
__all__ = [
    "parse_source",
    "fold_constants",
    "optimize_source",
    "format_program",
    "ConstantFolder",
    "FoldResult",
]
