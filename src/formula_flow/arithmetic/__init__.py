"""
Aritmética decimal usada por corpos de fórmula.
"""

from .decimal_ops import decimal_add, decimal_divide, decimal_multiply, decimal_subtract

__all__ = ["decimal_add", "decimal_divide", "decimal_multiply", "decimal_subtract"]
