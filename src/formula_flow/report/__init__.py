"""
Report — renderização de resultados.

Componentes:
    - markdown → render_results_md (tabela determinística)
    - frame    → batch_to_frame (pandas.DataFrame por item do batch)
"""

from .frame import batch_to_frame
from .markdown import render_results_md

__all__ = ["batch_to_frame", "render_results_md"]
