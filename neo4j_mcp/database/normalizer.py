"""
Neo4j Value Normalizer

Converts values returned by the Neo4j driver (graph entities, paths,
temporal and spatial values, records) into plain nested dicts, lists and
scalars that any JSON transport can carry.
"""

import datetime
import math
import numbers
from collections.abc import Mapping
from typing import Any, Dict, List, Union

from neo4j.graph import Node, Path, Relationship
from neo4j.spatial import Point
from neo4j.time import Date, DateTime, Duration, Time

Identity = Union[int, str]

_TEMPORAL_TYPES = (Date, Time, DateTime, Duration)
_NATIVE_TEMPORAL_TYPES = (datetime.date, datetime.time, datetime.datetime)


def entity_identity(entity: Union[Node, Relationship]) -> Identity:
    """
    Numeric identity of a node or relationship.

    Element ids look like ``"4:<db-uuid>:7"`` on Neo4j 5 and ``"7"`` on
    Neo4j 4; the trailing number is the identity. Ids without a numeric tail
    are returned unchanged.
    """
    element_id = str(entity.element_id)
    tail = element_id.rsplit(":", 1)[-1]
    if tail.isdigit():
        return int(tail)
    return element_id


def normalize_node(node: Node) -> Dict[str, Any]:
    result = {key: normalize_value(value) for key, value in node.items()}
    result["id"] = entity_identity(node)
    result["labels"] = list(node.labels)
    return result


def normalize_relationship(relationship: Relationship) -> Dict[str, Any]:
    result = {key: normalize_value(value) for key, value in relationship.items()}
    result["id"] = entity_identity(relationship)
    result["type"] = relationship.type
    result["startNodeId"] = _endpoint_identity(relationship.start_node)
    result["endNodeId"] = _endpoint_identity(relationship.end_node)
    return result


def _endpoint_identity(node):
    return entity_identity(node) if node is not None else None


def normalize_path(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """
    One segment per relationship, in traversal order.

    Segment endpoints come from the path's node sequence rather than the
    relationship's own start/end, so reversed hops keep their walk direction.
    """
    nodes = list(path.nodes)
    segments = []
    for index, relationship in enumerate(path.relationships):
        segments.append({
            "start": normalize_node(nodes[index]),
            "relationship": normalize_relationship(relationship),
            "end": normalize_node(nodes[index + 1]),
        })
    return {"segments": segments}


def normalize_value(value: Any) -> Any:
    """
    Recursively convert a driver value into plain data.

    Args:
        value: Any value found in a Neo4j record

    Returns:
        Any: None, bool, int, float, str, list or dict (nested); graph
        entities become dicts with ``id``/``labels`` or ``id``/``type``/
        ``startNodeId``/``endNodeId`` keys, paths become ``{"segments": [...]}``
    """
    if value is None or isinstance(value, bool):
        return value

    if isinstance(value, Node):
        return normalize_node(value)
    if isinstance(value, Relationship):
        return normalize_relationship(value)
    if isinstance(value, Path):
        return normalize_path(value)

    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, float):
        # JSON has no NaN or Infinity
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        return value

    if isinstance(value, _TEMPORAL_TYPES):
        return value.iso_format()
    if isinstance(value, _NATIVE_TEMPORAL_TYPES):
        return value.isoformat()

    # Point subclasses tuple, so it must be matched before sequences
    if isinstance(value, Point):
        return {"srid": value.srid, "coordinates": [float(c) for c in value]}

    # Record subclasses both tuple and Mapping; keep its keys
    if isinstance(value, Mapping):
        return {str(key): normalize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_value(item) for item in value]

    return value


def normalize_record(record: Mapping) -> Dict[str, Any]:
    """
    Normalize a driver record into a dict keyed by the record's keys.

    Args:
        record: A neo4j.Record or any mapping

    Returns:
        Dict[str, Any]: Column name to normalized value
    """
    return {str(key): normalize_value(record[key]) for key in record.keys()}


__all__ = [
    "entity_identity",
    "normalize_node",
    "normalize_relationship",
    "normalize_path",
    "normalize_value",
    "normalize_record",
]
