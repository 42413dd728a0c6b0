"""Schema index over a Neo4j graph model.

A graph model is described by node descriptors (a label and the properties seen
on nodes carrying it), relationship descriptors (a type and its properties) and,
per relationship type, the label sets that may appear at its start and end.
A label set is the full set of labels carried by one graph node.

The incoming/outgoing relationship indices are inverted from the start/end
maps once, when the model is built. A ``GraphModel`` never changes afterwards
and may be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import GraphModelError, ModelNotInitializedError
from .models import LabelSet

MODEL_PATH_ENV = "PATHQUERY_GRAPH_MODEL_PATH"


@dataclass(frozen=True)
class NodeDescriptor:
    label: str
    properties: frozenset[str] = field(default_factory=frozenset)

    def has_label(self, label: str) -> bool:
        return self.label == label

    def has_property(self, name: str) -> bool:
        return name in self.properties


@dataclass(frozen=True)
class RelationshipDescriptor:
    type: str
    properties: frozenset[str] = field(default_factory=frozenset)

    def has_type(self, rel_type: str) -> bool:
        return self.type == rel_type

    def has_property(self, name: str) -> bool:
        return name in self.properties


class GraphModel:
    def __init__(
        self,
        nodes: Iterable[NodeDescriptor] | None = None,
        relationships: Iterable[RelationshipDescriptor] | None = None,
        start_nodes: Mapping[str, Iterable[Iterable[str]]] | None = None,
        end_nodes: Mapping[str, Iterable[Iterable[str]]] | None = None,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._initialized = not (
            nodes is None
            and relationships is None
            and start_nodes is None
            and end_nodes is None
        )
        self._nodes = frozenset(nodes or ())
        self._relationships = frozenset(relationships or ())
        self._start_nodes = _freeze_endpoints(start_nodes or {})
        self._end_nodes = _freeze_endpoints(end_nodes or {})
        self._outgoing = _invert(self._start_nodes)
        self._incoming = _invert(self._end_nodes)

        self._label_properties = _group_properties(
            (node.label, node.properties) for node in self._nodes
        )
        self._type_properties = _group_properties(
            (rel.type, rel.properties) for rel in self._relationships
        )
        self._outgoing_by_label = _by_single_label(self._outgoing)
        self._incoming_by_label = _by_single_label(self._incoming)
        if not self._initialized:
            return
        self._logger.debug(
            "graph model indexed: %d node descriptors, %d relationship descriptors, "
            "%d start label sets, %d end label sets",
            len(self._nodes),
            len(self._relationships),
            len(self._outgoing),
            len(self._incoming),
        )

    @classmethod
    def empty(cls) -> "GraphModel":
        return cls()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GraphModel":
        try:
            parsed = GraphModelPayload.model_validate(payload)
        except ValidationError as exc:
            raise GraphModelError(
                "Invalid graph model payload",
                [
                    f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: "
                    f"{error['msg']}"
                    for error in exc.errors()
                ],
            ) from exc
        return parsed.to_model()

    @classmethod
    def load(cls, path: Path) -> "GraphModel":
        suffix = path.suffix.lower()
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise GraphModelError(f"Cannot read graph model {path}: {exc}") from exc
        if suffix in {".yaml", ".yml"}:
            import yaml

            try:
                raw = yaml.safe_load(content)
            except yaml.YAMLError as exc:
                raise GraphModelError(f"Malformed YAML in {path}: {exc}") from exc
        elif suffix == ".json":
            import json

            try:
                raw = json.loads(content)
            except json.JSONDecodeError as exc:
                raise GraphModelError(f"Malformed JSON in {path}: {exc}") from exc
        else:
            raise GraphModelError(f"Unsupported graph model format: {suffix}")
        if not isinstance(raw, dict):
            raise GraphModelError(f"Graph model in {path} must be a mapping")
        return cls.from_payload(raw)

    @classmethod
    def load_default(cls) -> "GraphModel":
        """Load the model named by $PATHQUERY_GRAPH_MODEL_PATH, or an uninitialized one."""
        env_path = os.environ.get(MODEL_PATH_ENV)
        if not env_path:
            return cls.empty()
        return cls.load(Path(env_path))

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def nodes(self) -> frozenset[NodeDescriptor] | None:
        return self._nodes if self._initialized else None

    @property
    def relationships(self) -> frozenset[RelationshipDescriptor] | None:
        return self._relationships if self._initialized else None

    @property
    def start_nodes(self) -> Mapping[str, frozenset[LabelSet]] | None:
        return self._start_nodes if self._initialized else None

    @property
    def end_nodes(self) -> Mapping[str, frozenset[LabelSet]] | None:
        return self._end_nodes if self._initialized else None

    @property
    def outgoing_relationships(self) -> Mapping[LabelSet, frozenset[str]] | None:
        return self._outgoing if self._initialized else None

    @property
    def incoming_relationships(self) -> Mapping[LabelSet, frozenset[str]] | None:
        return self._incoming if self._initialized else None

    def has_node_label(self, label: str) -> bool:
        self._require("has_node_label")
        return label in self._label_properties

    def has_relationship_type(self, rel_type: str) -> bool:
        self._require("has_relationship_type")
        return rel_type in self._type_properties

    def label_has_property(self, label: str, name: str) -> bool:
        self._require("label_has_property")
        return name in self._label_properties.get(label, frozenset())

    def relationship_has_property(self, rel_type: str, name: str) -> bool:
        self._require("relationship_has_property")
        return name in self._type_properties.get(rel_type, frozenset())

    def get_incoming_relationships(self, label: str) -> frozenset[str]:
        self._require("get_incoming_relationships")
        return self._incoming_by_label.get(label, frozenset())

    def get_outgoing_relationships(self, label: str) -> frozenset[str]:
        self._require("get_outgoing_relationships")
        return self._outgoing_by_label.get(label, frozenset())

    def get_incoming_label_set_relationships(
        self, labels: Iterable[str]
    ) -> frozenset[str]:
        self._require("get_incoming_label_set_relationships")
        return self._incoming.get(frozenset(labels), frozenset())

    def get_outgoing_label_set_relationships(
        self, labels: Iterable[str]
    ) -> frozenset[str]:
        self._require("get_outgoing_label_set_relationships")
        return self._outgoing.get(frozenset(labels), frozenset())

    def get_label_properties(self, label: str) -> frozenset[str]:
        self._require("get_label_properties")
        return self._label_properties.get(label, frozenset())

    def get_relationship_properties(self, rel_type: str) -> frozenset[str]:
        # Union across descriptors, like get_label_properties.
        self._require("get_relationship_properties")
        return self._type_properties.get(rel_type, frozenset())

    def describe(self) -> str:
        if not self._initialized:
            return "GraphModel (uninitialized)"
        lines = ["Nodes:"]
        lines.extend(
            f"  {node.label}: {_format_names(node.properties)}"
            for node in sorted(self._nodes, key=_descriptor_key)
        )
        lines.append("Relationships:")
        lines.extend(
            f"  {rel.type}: {_format_names(rel.properties)}"
            for rel in sorted(self._relationships, key=_descriptor_key)
        )
        lines.append("Start nodes:")
        lines.extend(_format_endpoint_lines(self._start_nodes))
        lines.append("End nodes:")
        lines.extend(_format_endpoint_lines(self._end_nodes))
        lines.append("Incoming relationships:")
        lines.extend(_format_index_lines(self._incoming))
        lines.append("Outgoing relationships:")
        lines.extend(_format_index_lines(self._outgoing))
        return "\n".join(lines)

    def __repr__(self) -> str:
        if not self._initialized:
            return "GraphModel(uninitialized)"
        return (
            f"GraphModel(nodes={len(self._nodes)}, "
            f"relationships={len(self._relationships)})"
        )

    def _require(self, operation: str) -> None:
        if not self._initialized:
            raise ModelNotInitializedError(operation)


class NodePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str | None = None
    labels: list[str] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_label(self) -> "NodePayload":
        if self.label is None and not self.labels:
            raise ValueError("node entry needs 'label' or 'labels'")
        return self

    def to_descriptors(self) -> list[NodeDescriptor]:
        labels = list(self.labels)
        if self.label is not None and self.label not in labels:
            labels.insert(0, self.label)
        properties = frozenset(self.properties)
        return [NodeDescriptor(label=label, properties=properties) for label in labels]


class RelationshipPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    properties: list[str] = Field(default_factory=list)

    def to_descriptor(self) -> RelationshipDescriptor:
        return RelationshipDescriptor(type=self.type, properties=frozenset(self.properties))


class GraphModelPayload(BaseModel):
    nodes: list[NodePayload] = Field(default_factory=list)
    relationships: list[RelationshipPayload] = Field(default_factory=list)
    start_nodes: dict[str, list[list[str]]] = Field(default_factory=dict)
    end_nodes: dict[str, list[list[str]]] = Field(default_factory=dict)

    def to_model(self) -> GraphModel:
        nodes = [
            descriptor for node in self.nodes for descriptor in node.to_descriptors()
        ]
        return GraphModel(
            nodes=nodes,
            relationships=[rel.to_descriptor() for rel in self.relationships],
            start_nodes=self.start_nodes,
            end_nodes=self.end_nodes,
        )


def _freeze_endpoints(
    endpoints: Mapping[str, Iterable[Iterable[str]]],
) -> Mapping[str, frozenset[LabelSet]]:
    frozen = {
        rel_type: frozenset(frozenset(labels) for labels in label_sets)
        for rel_type, label_sets in endpoints.items()
    }
    return MappingProxyType(frozen)


def _invert(
    endpoints: Mapping[str, frozenset[LabelSet]],
) -> Mapping[LabelSet, frozenset[str]]:
    mapping: dict[LabelSet, set[str]] = {}
    for rel_type, label_sets in endpoints.items():
        for label_set in label_sets:
            mapping.setdefault(label_set, set()).add(rel_type)
    return MappingProxyType(
        {label_set: frozenset(types) for label_set, types in mapping.items()}
    )


def _by_single_label(
    index: Mapping[LabelSet, frozenset[str]],
) -> dict[str, frozenset[str]]:
    mapping: dict[str, set[str]] = {}
    for label_set, types in index.items():
        for label in label_set:
            mapping.setdefault(label, set()).update(types)
    return {label: frozenset(types) for label, types in mapping.items()}


def _group_properties(
    entries: Iterable[tuple[str, frozenset[str]]],
) -> dict[str, frozenset[str]]:
    mapping: dict[str, set[str]] = {}
    for name, properties in entries:
        mapping.setdefault(name, set()).update(properties)
    return {name: frozenset(properties) for name, properties in mapping.items()}


def _descriptor_key(
    descriptor: NodeDescriptor | RelationshipDescriptor,
) -> tuple[str, tuple[str, ...]]:
    name = (
        descriptor.label
        if isinstance(descriptor, NodeDescriptor)
        else descriptor.type
    )
    return name, tuple(sorted(descriptor.properties))


def _format_names(names: Iterable[str]) -> str:
    ordered = sorted(names)
    if not ordered:
        return "-"
    return ", ".join(ordered)


def _format_label_set(label_set: LabelSet) -> str:
    return ":".join(sorted(label_set))


def _format_endpoint_lines(endpoints: Mapping[str, frozenset[LabelSet]]) -> list[str]:
    return [
        f"  {rel_type}: "
        + "; ".join(sorted(_format_label_set(labels) for labels in endpoints[rel_type]))
        for rel_type in sorted(endpoints)
    ]


def _format_index_lines(index: Mapping[LabelSet, frozenset[str]]) -> list[str]:
    keys = sorted(index, key=_format_label_set)
    return [f"  {_format_label_set(key)}: {_format_names(index[key])}" for key in keys]
