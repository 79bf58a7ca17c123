# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
LightweightGraph - named inputs in, named outputs out.

Bridges human-readable names and the integer-indexed Graph: owns the
Graph and the input preprocessors, resolves the default output, and
turns the numeric result of a node into a label -> value mapping.

Example:
    from lwgraph import LightweightGraph

    graph = LightweightGraph.from_json(open("model.json"))
    scores = graph.evaluate({"jet": {"pt": 40.0, "eta": 0.3}})
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import IO, Mapping, Optional, Union

from lwgraph.core import (
    Graph,
    GraphConfig,
    InputNode,
    InputSequenceNode,
    Result,
    VectorSource,
)
from lwgraph.errors import ConfigurationError, EvaluationError, LwGraphError
from lwgraph.observability import (
    GraphLogger,
    InferenceMetrics,
    MetricsCollector,
    get_metrics_collector,
)
from lwgraph.preprocess import InputPreprocessor, InputVectorPreprocessor, SequenceInput

NodeMap = Mapping[str, Mapping[str, float]]
SeqNodeMap = Mapping[str, SequenceInput]
ValueMap = dict[str, float]


@dataclass
class EvaluationConfig:
    """
    Configuration for a LightweightGraph.

    Attributes:
        name: Identifier used in logs and metrics
        memoize: Evaluate nodes shared by several consumers once per call
        collect_metrics: Record per-call latency and errors
        metrics: Collector to record into; the global one if None
        verbose: Logger verbosity (0-4) to set on construction, if given
    """

    name: str = "graph"
    memoize: bool = False
    collect_metrics: bool = False
    metrics: Optional[MetricsCollector] = None
    verbose: Optional[int] = None

    def get_metrics(self) -> Optional[MetricsCollector]:
        if not self.collect_metrics:
            return None
        return self.metrics if self.metrics is not None else get_metrics_collector()


class LightweightGraph:
    """
    A Graph with named inputs and named outputs.

    Args:
        config: Model description.
        default_output: Output used when a call names none. May be
            omitted only when exactly one output is declared.
        eval_config: Evaluation options.

    Raises:
        ConfigurationError: If the graph is malformed or the default
            output cannot be resolved.
    """

    def __init__(
        self,
        config: GraphConfig,
        default_output: str = "",
        eval_config: Optional[EvaluationConfig] = None,
    ):
        start_time = time.perf_counter()
        self.config = eval_config or EvaluationConfig()
        self._metrics = self.config.get_metrics()
        if self.config.verbose is not None:
            GraphLogger.get().set_verbosity(self.config.verbose)

        self._graph = Graph(config.nodes, config.layers)
        self._preprocs = tuple(
            (node.name, InputPreprocessor(node.variables)) for node in config.inputs
        )
        self._vec_preprocs = tuple(
            (node.name, InputVectorPreprocessor(node.variables))
            for node in config.input_sequences
        )
        self._check_inputs()

        outputs = []
        output_indices = {}
        for name, node in config.outputs.items():
            self._check_output(name, node.node_index, node.labels)
            output_indices[name] = len(outputs)
            outputs.append((node.node_index, tuple(node.labels)))
        self._outputs = tuple(outputs)
        self._output_indices = output_indices
        self._output_names = tuple(config.outputs)

        if default_output:
            if default_output not in output_indices:
                raise ConfigurationError(
                    f"no output node '{default_output}'",
                    suggestions=[f"Declared outputs: {list(self._output_names)}"],
                )
            self._default_output = output_indices[default_output]
        elif len(outputs) == 1:
            self._default_output = 0
        elif not outputs:
            raise ConfigurationError("graph declares no outputs")
        else:
            raise ConfigurationError(
                f"ambiguous default output among {len(outputs)} outputs",
                suggestions=["Pass default_output with one of the output names"],
            )

        GraphLogger.get().debug(
            "Graph built",
            component="graph",
            graph_name=self.config.name,
            operation="build",
            duration_ms=(time.perf_counter() - start_time) * 1000,
            nodes=self._graph.n_nodes,
            outputs=list(self._output_names),
        )

    @classmethod
    def build(
        cls,
        config: GraphConfig,
        default_output: str = "",
        eval_config: Optional[EvaluationConfig] = None,
    ) -> Result["LightweightGraph"]:
        """Construct, returning a Result instead of raising."""
        try:
            return Result.success(cls(config, default_output, eval_config))
        except ConfigurationError as e:
            return Result.failure(e)

    @classmethod
    def from_json(
        cls,
        document: Union[str, bytes, IO],
        default_output: str = "",
        eval_config: Optional[EvaluationConfig] = None,
    ) -> "LightweightGraph":
        """Parse a JSON model description and construct from it."""
        from lwgraph.parse import parse_json_graph

        return cls(parse_json_graph(document), default_output, eval_config)

    def _check_inputs(self) -> None:
        """Every input node must match the preprocessor feeding its slot."""
        for index in range(self._graph.n_nodes):
            node = self._graph.node(index)
            if isinstance(node, InputNode):
                preprocs, kind = self._preprocs, "input"
            elif isinstance(node, InputSequenceNode):
                preprocs, kind = self._vec_preprocs, "input sequence"
            else:
                continue
            if node.slot >= len(preprocs):
                raise ConfigurationError(
                    f"node reads {kind} slot {node.slot}, "
                    f"only {len(preprocs)} {kind}s are declared",
                    node_index=index,
                )
            name, preproc = preprocs[node.slot]
            if preproc.n_variables != node.width:
                raise ConfigurationError(
                    f"{kind} '{name}' has {preproc.n_variables} variables, "
                    f"node declares width {node.width}",
                    node_index=index,
                )

    def _check_output(self, name: str, node_index: int, labels) -> None:
        if not 0 <= node_index < self._graph.n_nodes:
            raise ConfigurationError(
                f"output '{name}' refers to node {node_index}, "
                f"graph has {self._graph.n_nodes} nodes",
                node_index=node_index,
            )
        node = self._graph.node(node_index)
        if not node.produces_vector:
            raise ConfigurationError(
                f"output '{name}' refers to a {node.kind.value} node, "
                "which does not produce a vector",
                node_index=node_index,
            )
        if node.width != len(labels):
            raise ConfigurationError(
                f"output '{name}' has {len(labels)} labels, "
                f"node produces {node.width} values",
                node_index=node_index,
            )
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"output '{name}' has duplicate labels")

    # ------------------------------------------------------------------
    # Evaluation

    def evaluate(
        self,
        inputs: NodeMap,
        sequences: Optional[SeqNodeMap] = None,
        output: Union[str, int, None] = None,
    ) -> ValueMap:
        """
        Evaluate one output.

        Args:
            inputs: Input name -> variable name -> raw value.
            sequences: Input sequence name -> per-step variables.
            output: Output name, output position, or None for the
                default output.

        Returns:
            Output label -> value.

        Raises:
            EvaluationError: If the output is unknown or an input is
                missing. No partial result is returned.
        """
        start_time = time.perf_counter()
        try:
            position = self._output_position(output)
            values = self._evaluate(inputs, sequences or {}, position)
        except LwGraphError:
            if self._metrics is not None:
                self._metrics.record_error()
            raise
        if self._metrics is not None:
            self._metrics.record_inference(
                InferenceMetrics(
                    latency_ms=(time.perf_counter() - start_time) * 1000,
                    output_name=self._output_names[position],
                    graph_name=self.config.name,
                )
            )
        return values

    def try_evaluate(
        self,
        inputs: NodeMap,
        sequences: Optional[SeqNodeMap] = None,
        output: Union[str, int, None] = None,
    ) -> Result[ValueMap]:
        """Like `evaluate`, returning a Result instead of raising."""
        try:
            return Result.success(self.evaluate(inputs, sequences, output))
        except LwGraphError as e:
            return Result.failure(e)

    def _output_position(self, output: Union[str, int, None]) -> int:
        if output is None:
            return self._default_output
        if isinstance(output, str):
            if output not in self._output_indices:
                raise EvaluationError(
                    f"no output node '{output}'",
                    name=output,
                    suggestions=[f"Declared outputs: {list(self._output_names)}"],
                )
            return self._output_indices[output]
        if isinstance(output, bool) or not isinstance(output, int):
            raise TypeError(
                f"output must be a name or a position, got {type(output).__name__}"
            )
        if not 0 <= output < len(self._outputs):
            raise EvaluationError(
                f"output position {output} out of range, "
                f"{len(self._outputs)} outputs declared"
            )
        return output

    def _evaluate(self, inputs: NodeMap, sequences: SeqNodeMap, position: int) -> ValueMap:
        vectors = []
        for name, preproc in self._preprocs:
            if name not in inputs:
                raise EvaluationError(f"input node not found: '{name}'", name=name)
            vectors.append(preproc(inputs[name]))
        matrices = []
        for name, preproc in self._vec_preprocs:
            if name not in sequences:
                raise EvaluationError(
                    f"input sequence node not found: '{name}'", name=name
                )
            matrices.append(preproc(sequences[name]))

        source = VectorSource(vectors, matrices)
        node_index, labels = self._outputs[position]
        result = self._graph.compute(source, node_index, memoize=self.config.memoize)
        return {label: float(value) for label, value in zip(labels, result)}

    # ------------------------------------------------------------------
    # Introspection

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def output_names(self) -> tuple[str, ...]:
        return self._output_names

    @property
    def default_output(self) -> str:
        return self._output_names[self._default_output]

    @property
    def input_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._preprocs)

    @property
    def sequence_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._vec_preprocs)

    def output_labels(self, output: Union[str, int, None] = None) -> tuple[str, ...]:
        return self._outputs[self._output_position(output)][1]

    def output_node(self, output: Union[str, int, None] = None) -> int:
        return self._outputs[self._output_position(output)][0]

    def __repr__(self) -> str:
        return (
            f"LightweightGraph(name='{self.config.name}', "
            f"inputs={list(self.input_names)}, "
            f"sequences={list(self.sequence_names)}, "
            f"outputs={list(self._output_names)}, "
            f"default='{self.default_output}')"
        )
