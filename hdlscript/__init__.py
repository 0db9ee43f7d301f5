"""
hdlscript: EDA compile-script generation from resolved HDL source trees.

Filters a hierarchical source description by target and package, flattens it
in compile order, and renders a script for a simulator, synthesis, formal or
FPGA backend (or a flat file list).
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

from .cli import cli

__all__ = ["cli"]
