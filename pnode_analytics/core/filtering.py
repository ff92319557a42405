"""Filtering and sorting of annotated pNodes for list views."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from pnode_analytics.core.formatting import MISSING_SORT_KEY, sort_key
from pnode_analytics.datastructures.node_types import AnnotatedNode, NodeStatus
from pnode_analytics.datastructures.type_aliases import VersionString

ALL = "all"


class SortField(Enum):
    """Sortable list-view fields."""

    HEALTH_SCORE = "health_score"
    UPTIME = "uptime"
    STORAGE = "storage"
    STORAGE_USED = "storage_used"
    LAST_SEEN = "last_seen"
    VERSION = "version"
    PUBKEY = "pubkey"

    @property
    def attribute(self) -> str:
        """AnnotatedNode attribute holding the values for this field."""
        return _SORT_ATTRIBUTES.get(self, self.value)


_SORT_ATTRIBUTES = {
    SortField.STORAGE: "storage_committed",
    SortField.LAST_SEEN: "last_seen_timestamp",
}


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class NodeFilters:
    """Filter criteria; None or empty means "no constraint"."""

    status: NodeStatus | None = None
    version: VersionString | None = None
    search: str = ""
    sort_by: SortField | None = None
    sort_order: SortOrder = SortOrder.DESC

    @classmethod
    def from_mapping(cls, params: Mapping[str, str | None]) -> NodeFilters:
        """Parse query-style parameters (``status``, ``version``, ``search``,
        ``sort_by``, ``sort_order``); ``"all"`` or empty means no filter.

        Raises ValueError for an unknown status, sort field or sort order.
        """

        def _value(name: str) -> str | None:
            raw = params.get(name)
            if raw is None:
                return None
            raw = raw.strip()
            if not raw or raw.lower() == ALL:
                return None
            return raw

        status = _value("status")
        version = _value("version")
        sort_by = _value("sort_by")
        sort_order = _value("sort_order")
        return cls(
            status=NodeStatus(status.lower()) if status else None,
            version=version,
            search=(params.get("search") or "").strip(),
            sort_by=SortField(sort_by) if sort_by else None,
            sort_order=SortOrder(sort_order.lower()) if sort_order else SortOrder.DESC,
        )


def _predicates(filters: NodeFilters) -> list[Callable[[AnnotatedNode], bool]]:
    predicates: list[Callable[[AnnotatedNode], bool]] = []
    if filters.status is not None:
        status = filters.status
        predicates.append(lambda node: node.status is status)
    if filters.version is not None:
        version = filters.version
        predicates.append(lambda node: node.version == version)
    if filters.search:
        needle = filters.search.lower()
        predicates.append(
            lambda node: needle in node.pubkey.lower()
            or needle in node.ip.lower()
            or needle in node.address.lower()
        )
    return predicates


def filter_nodes(
    nodes: Sequence[AnnotatedNode], filters: NodeFilters
) -> list[AnnotatedNode]:
    """Nodes matching every supplied criterion, in input order."""
    predicates = _predicates(filters)
    return [node for node in nodes if all(check(node) for check in predicates)]


def sort_nodes(
    nodes: Sequence[AnnotatedNode],
    sort_by: SortField,
    sort_order: SortOrder = SortOrder.DESC,
) -> list[AnnotatedNode]:
    """Stable sort; equal keys keep their input order in both directions.

    Nodes without a value for the field (None or NaN) come last whichever
    way the list is sorted.
    """
    attribute = sort_by.attribute
    keyed = [(sort_key(getattr(node, attribute)), node) for node in nodes]
    present = [(key, node) for key, node in keyed if key != MISSING_SORT_KEY]
    missing = [node for key, node in keyed if key == MISSING_SORT_KEY]
    present.sort(key=lambda item: item[0], reverse=sort_order is SortOrder.DESC)
    return [node for _, node in present] + missing


def apply_filters(
    nodes: Sequence[AnnotatedNode], filters: NodeFilters
) -> list[AnnotatedNode]:
    """Filter, then sort when a sort field is given. Returns a new list."""
    matched = filter_nodes(nodes, filters)
    if filters.sort_by is None:
        return matched
    return sort_nodes(matched, filters.sort_by, filters.sort_order)
