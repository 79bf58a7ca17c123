# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
lwgraph Error Hierarchy

Two error kinds cover every failure of the engine:

- ConfigurationError: raised while building a Graph, a layer stack,
  a LightweightGraph or while parsing a model description
- EvaluationError: raised while evaluating a built graph

Both carry a message, suggestions and a context dictionary, formatted
into the exception text.
"""

from typing import Optional


class LwGraphError(Exception):
    """
    Base class for all lwgraph errors.

    Attributes:
        message: Human-readable error message
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


class ConfigurationError(LwGraphError):
    """
    Error while building a graph from its description.

    Raised when:
    - A node or stack reference is out of range or points forward
    - Layer weights do not match the declared widths
    - A default output is missing or ambiguous
    """

    def __init__(
        self,
        message: str,
        node_index: Optional[int] = None,
        layer_index: Optional[int] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.node_index = node_index
        self.layer_index = layer_index

        context = {}
        if node_index is not None:
            context["node_index"] = node_index
        if layer_index is not None:
            context["layer_index"] = layer_index

        default_suggestions = [
            "Check that nodes are listed after every node they reference",
            "Verify layer weights against the declared input widths",
        ]

        super().__init__(
            message=f"Configuration error: {message}",
            suggestions=suggestions or default_suggestions,
            context=context,
        )


class EvaluationError(LwGraphError):
    """
    Error while evaluating a built graph.

    Raised when:
    - A requested output or input is not declared
    - A source slot is out of range
    - A node is asked for a capability it does not have
    """

    def __init__(
        self,
        message: str,
        node_index: Optional[int] = None,
        name: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.node_index = node_index
        self.name = name

        context = {}
        if node_index is not None:
            context["node_index"] = node_index
        if name:
            context["name"] = name

        super().__init__(
            message=f"Evaluation failed: {message}",
            suggestions=suggestions,
            context=context,
        )


def format_width_mismatch(
    expected: int,
    received: int,
    what: str,
    node_index: Optional[int] = None,
) -> EvaluationError:
    """Create an EvaluationError for a vector or matrix width mismatch."""
    return EvaluationError(
        f"{what} width mismatch: expected {expected}, got {received}",
        node_index=node_index,
        suggestions=["Check the input preprocessing against the model inputs"],
    )
