"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Composition stage: turns aggregated unit results into a response document.
"""

from .context import CompositionContext
from .pipeline import TransformerPipeline
from .transformers import BaseTransformer, Transformer

__all__ = [
    "CompositionContext",
    "Transformer",
    "BaseTransformer",
    "TransformerPipeline",
]
