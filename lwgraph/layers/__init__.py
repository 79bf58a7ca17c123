# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Layer Stack Evaluators

Numeric kernels used inside transform nodes:
- activations: activation registry
- core: dense, normalization, highway, maxout
- recurrent: lstm, gru, embedding
- stack: Stack and RecurrentStack
"""

from .activations import ActivationRegistry
from .core import DenseLayer, HighwayLayer, MaxoutLayer, NormalizationLayer
from .recurrent import EmbeddingLayer, GRULayer, LSTMLayer
from .stack import RecurrentStack, Stack

__all__ = [
    "ActivationRegistry",
    "DenseLayer",
    "HighwayLayer",
    "MaxoutLayer",
    "NormalizationLayer",
    "EmbeddingLayer",
    "GRULayer",
    "LSTMLayer",
    "RecurrentStack",
    "Stack",
]
