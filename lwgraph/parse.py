# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
JSON Model Description Parser

Reads the JSON document a trained network is exported to and returns
a GraphConfig. Layout:

    {
      "inputs": [{"name": "jet", "variables": [
          {"name": "pt", "offset": -40.0, "scale": 0.05}, ...]}],
      "input_sequences": [{"name": "tracks", "variables": [...]}],
      "nodes": [
          {"type": "input", "sources": [0], "size": 2},
          {"type": "feed_forward", "sources": [0], "layer_index": 0},
          {"type": "concatenate", "sources": [1, 3]},
          {"type": "input_sequence", "sources": [0], "size": 4},
          {"type": "sequence", "sources": [3], "layer_index": 1}],
      "layers": [{"sublayers": [
          {"architecture": "dense", "activation": "rectified",
           "weights": [...], "bias": [...]}]}],
      "outputs": {"scores": {"node_index": 2, "labels": ["b", "c"]}}
    }
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any, Union

from lwgraph.core.config import (
    Activation,
    ActivationConfig,
    Architecture,
    EmbeddingConfig,
    GraphConfig,
    InputNodeConfig,
    InputVariable,
    LayerConfig,
    NodeConfig,
    NodeType,
    OutputNodeConfig,
    StackConfig,
)
from lwgraph.errors import ConfigurationError

logger = logging.getLogger("lwgraph.parse")

NODE_TYPES = {
    "input": NodeType.INPUT,
    "feed_forward": NodeType.TRANSFORM,
    "transform": NodeType.TRANSFORM,
    "concatenate": NodeType.CONCATENATE,
    "input_sequence": NodeType.INPUT_SEQUENCE,
    "sequence": NodeType.RECURRENT_TRANSFORM,
    "time_distributed": NodeType.RECURRENT_TRANSFORM,
    "recurrent_transform": NodeType.RECURRENT_TRANSFORM,
}

ACTIVATION_ALIASES = {
    "relu": Activation.RECTIFIED,
    "leakyrelu": Activation.LEAKY_RELU,
}


def parse_json_graph(document: Union[str, bytes, IO]) -> GraphConfig:
    """
    Parse a JSON model description.

    Args:
        document: JSON text, or a readable file object.

    Raises:
        ConfigurationError: If the document is not valid JSON or does
            not describe a graph.
    """
    try:
        if isinstance(document, (str, bytes, bytearray)):
            data = json.loads(document)
        else:
            data = json.load(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"invalid JSON model description: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("model description must be a JSON object")

    try:
        config = GraphConfig(
            inputs=[_input_node(n) for n in data.get("inputs", [])],
            input_sequences=[_input_node(n) for n in data.get("input_sequences", [])],
            nodes=[_node(n) for n in data.get("nodes", [])],
            layers=[_stack(s) for s in data.get("layers", [])],
            outputs={
                name: OutputNodeConfig(
                    node_index=int(out["node_index"]),
                    labels=[str(label) for label in out["labels"]],
                )
                for name, out in data.get("outputs", {}).items()
            },
        )
    except KeyError as e:
        raise ConfigurationError(f"model description is missing key {e}") from e
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"malformed model description: {e}") from e

    logger.debug(
        "parsed %d nodes, %d stacks, %d outputs",
        len(config.nodes),
        len(config.layers),
        len(config.outputs),
    )
    return config


def _input_node(data: dict[str, Any]) -> InputNodeConfig:
    return InputNodeConfig(
        name=str(data["name"]),
        variables=[
            InputVariable(
                name=str(v["name"]),
                offset=float(v.get("offset", 0.0)),
                scale=float(v.get("scale", 1.0)),
            )
            for v in data["variables"]
        ],
    )


def _node(data: dict[str, Any]) -> NodeConfig:
    type_name = data["type"]
    if type_name not in NODE_TYPES:
        raise ConfigurationError(
            f"unknown node type '{type_name}'",
            suggestions=[f"Known types: {sorted(NODE_TYPES)}"],
        )
    node_type = NODE_TYPES[type_name]
    sources = [int(s) for s in data.get("sources", [])]

    if node_type in (NodeType.INPUT, NodeType.INPUT_SEQUENCE):
        index = data.get("index", sources[0] if sources else -1)
        return NodeConfig(node_type, sources=[], index=int(index), size=int(data["size"]))
    if node_type == NodeType.CONCATENATE:
        return NodeConfig(node_type, sources=sources)
    index = data.get("layer_index", data.get("index", -1))
    return NodeConfig(node_type, sources=sources, index=int(index))


def _stack(data: dict[str, Any]) -> StackConfig:
    return StackConfig(sublayers=[_layer(layer) for layer in data["sublayers"]])


def _activation(data: Any, default: Activation) -> ActivationConfig:
    if data is None:
        return ActivationConfig(default)
    alpha = None
    if isinstance(data, dict):
        alpha = data.get("alpha")
        data = data["function"]
    name = str(data).lower()
    if name in ACTIVATION_ALIASES:
        return ActivationConfig(ACTIVATION_ALIASES[name], alpha)
    try:
        return ActivationConfig(Activation(name), None if alpha is None else float(alpha))
    except ValueError:
        raise ConfigurationError(f"unknown activation '{name}'") from None


def _floats(data: dict[str, Any], key: str) -> list[float]:
    return [float(x) for x in data.get(key, [])]


def _layer(data: dict[str, Any]) -> LayerConfig:
    try:
        architecture = Architecture(data.get("architecture", "dense"))
    except ValueError:
        raise ConfigurationError(
            f"unknown architecture '{data.get('architecture')}'"
        ) from None
    return LayerConfig(
        architecture=architecture,
        activation=_activation(data.get("activation"), Activation.LINEAR),
        inner_activation=_activation(data.get("inner_activation"), Activation.SIGMOID),
        weights=_floats(data, "weights"),
        bias=_floats(data, "bias"),
        U=_floats(data, "U"),
        components={
            str(name): _layer(component)
            for name, component in data.get("components", {}).items()
        },
        sublayers=[_layer(sub) for sub in data.get("sublayers", [])],
        embedding=[
            EmbeddingConfig(
                index=int(e["index"]),
                n_out=int(e["n_out"]),
                weights=tuple(float(w) for w in e["weights"]),
            )
            for e in data.get("embedding", [])
        ],
    )
