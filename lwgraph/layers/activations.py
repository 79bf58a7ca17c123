# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Activation Functions

Maps activation names to numpy implementations using a
decorator-based registry:
- linear, abs
- sigmoid, hard_sigmoid, tanh
- rectified, leaky_relu, elu, swish
- softmax

Every function accepts a vector or a matrix (rows are time steps) and
works along the last axis.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from lwgraph.core.config import Activation, ActivationConfig
from lwgraph.errors import ConfigurationError

# Signature: (x, alpha) -> y
ActivationFunc = Callable[[np.ndarray, Optional[float]], np.ndarray]


class ActivationRegistry:
    """
    Registry of activation implementations.

    Example:
        @ActivationRegistry.register(Activation.TANH)
        def tanh(x, alpha):
            return np.tanh(x)

        fn = ActivationRegistry.get(ActivationConfig(Activation.TANH))
        fn(np.zeros(3))
    """

    _registry: dict[Activation, ActivationFunc] = {}
    _defaults: dict[Activation, Optional[float]] = {}

    @classmethod
    def register(
        cls,
        activation: Activation,
        default_alpha: Optional[float] = None,
    ) -> Callable[[ActivationFunc], ActivationFunc]:
        """
        Decorator to register an activation implementation.

        Args:
            activation: Activation name.
            default_alpha: Parameter used when the config gives none.
        """

        def decorator(func: ActivationFunc) -> ActivationFunc:
            cls._registry[activation] = func
            cls._defaults[activation] = default_alpha
            return func

        return decorator

    @classmethod
    def get(cls, config: ActivationConfig) -> Callable[[np.ndarray], np.ndarray]:
        """
        Bind an activation config to a single-argument function.

        Raises:
            ConfigurationError: If the activation is not registered.
        """
        if config.function not in cls._registry:
            raise ConfigurationError(
                f"activation '{config.function.value}' not registered, "
                f"supported: {cls.list_activations()}"
            )
        func = cls._registry[config.function]
        alpha = config.alpha
        if alpha is None:
            alpha = cls._defaults[config.function]
        return lambda x: func(x, alpha)

    @classmethod
    def is_supported(cls, activation: Activation) -> bool:
        return activation in cls._registry

    @classmethod
    def list_activations(cls) -> list[str]:
        return sorted(a.value for a in cls._registry)


@ActivationRegistry.register(Activation.LINEAR)
def linear(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    return x


@ActivationRegistry.register(Activation.ABS)
def absolute(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    return np.abs(x)


@ActivationRegistry.register(Activation.SIGMOID)
def sigmoid(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    """Y = 1 / (1 + exp(-X)), evaluated without overflow."""
    return np.exp(-np.logaddexp(0.0, -x))


@ActivationRegistry.register(Activation.HARD_SIGMOID)
def hard_sigmoid(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    """Y = clip(0.2 * X + 0.5, 0, 1)"""
    return np.clip(0.2 * x + 0.5, 0.0, 1.0)


@ActivationRegistry.register(Activation.TANH)
def tanh(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    return np.tanh(x)


@ActivationRegistry.register(Activation.RECTIFIED)
def rectified(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    return np.maximum(0.0, x)


@ActivationRegistry.register(Activation.LEAKY_RELU, default_alpha=0.01)
def leaky_relu(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    """Y = X if X >= 0, else alpha * X"""
    return np.where(x >= 0, x, alpha * x)


@ActivationRegistry.register(Activation.ELU, default_alpha=1.0)
def elu(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    """Y = X if X >= 0, else alpha * (exp(X) - 1)"""
    return np.where(x >= 0, x, alpha * np.expm1(np.minimum(x, 0.0)))


@ActivationRegistry.register(Activation.SWISH, default_alpha=1.0)
def swish(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    """Y = X * sigmoid(alpha * X)"""
    return x * sigmoid(alpha * x, None)


@ActivationRegistry.register(Activation.SOFTMAX)
def softmax(x: np.ndarray, alpha: Optional[float]) -> np.ndarray:
    if x.shape[-1] == 0:
        return x
    exp_x = np.exp(x - np.max(x, axis=-1, keepdims=True))
    return exp_x / np.sum(exp_x, axis=-1, keepdims=True)
