"""Manifest document models

A decoded manifest is an untyped tree of mappings, sequences and scalars.
``ManifestNode`` wraps one position in that tree and exposes type-checked
accessors so traversal code never has to guess at the shape of a value.
Nodes are views: mutating a node mutates the underlying decoded document.
"""

from enum import Enum
from typing import Any, Dict, Iterator, Optional


class NodeKind(Enum):
    """Shape of a manifest tree node"""
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


class ManifestNode:
    """Tagged view over a decoded YAML/JSON value"""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    @property
    def kind(self) -> NodeKind:
        if isinstance(self.value, dict):
            return NodeKind.MAPPING
        if isinstance(self.value, list):
            return NodeKind.SEQUENCE
        return NodeKind.SCALAR

    @property
    def is_mapping(self) -> bool:
        return self.kind is NodeKind.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind is NodeKind.SEQUENCE

    def get(self, key: str) -> Optional["ManifestNode"]:
        """Child node under ``key`` or None when absent or not a mapping"""
        if not self.is_mapping or key not in self.value:
            return None
        return ManifestNode(self.value[key])

    def mapping(self, key: str) -> Optional["ManifestNode"]:
        """Child under ``key`` only if it holds a mapping"""
        child = self.get(key)
        if child is not None and child.is_mapping:
            return child
        return None

    def sequence(self, key: str) -> Optional["ManifestNode"]:
        """Child under ``key`` only if it holds a sequence"""
        child = self.get(key)
        if child is not None and child.is_sequence:
            return child
        return None

    def string(self, key: str) -> Optional[str]:
        """Value under ``key`` only if it is a string"""
        child = self.get(key)
        if child is not None and isinstance(child.value, str):
            return child.value
        return None

    def set(self, key: str, value: Any) -> None:
        if not self.is_mapping:
            raise TypeError(f"Cannot set '{key}' on a {self.kind.value} node")
        self.value[key] = value

    def elements(self) -> Iterator["ManifestNode"]:
        """Elements of a sequence node"""
        if self.is_sequence:
            for item in self.value:
                yield ManifestNode(item)

    def children(self) -> Iterator["ManifestNode"]:
        """Values of a mapping node, in insertion order"""
        if self.is_mapping:
            for item in self.value.values():
                yield ManifestNode(item)


class ManifestDocument(ManifestNode):
    """Top level manifest object carrying kind and metadata.name"""

    __slots__ = ()

    @property
    def name(self) -> Optional[str]:
        metadata = self.mapping("metadata")
        if metadata is None:
            return None
        return metadata.string("name")

    @property
    def object_kind(self) -> Optional[str]:
        return self.string("kind")

    def to_dict(self) -> Dict[str, Any]:
        return self.value
