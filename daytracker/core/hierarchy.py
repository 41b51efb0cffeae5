from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, Protocol, TypeVar

from loguru import logger

from daytracker.core.models import ChildOf, ParentRef


class Nestable(Protocol):
    id: str
    done: bool
    parent: ParentRef


T = TypeVar("T", bound=Nestable)


@dataclass(slots=True)
class Node(Generic[T]):
    item: T
    children: list[T] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return effective_done(self)

    @property
    def children_done(self) -> int:
        return sum(1 for child in self.children if child.done)


def effective_done(node: Node) -> bool:
    """
    A parent without children keeps its own stored flag.
    A parent with children is done only when every child is done.
    """
    if not node.children:
        return bool(node.item.done)
    return all(child.done for child in node.children)


def organize_into_forest(items: Iterable[T]) -> list[Node[T]]:
    """
    Turn a flat list into roots with their children attached (one level).

    Roots keep input order. A child whose parent is missing from ``items``,
    or whose parent is itself a child, is kept as a root in its input position.
    Only the stored parent reference counts: children of such a promoted item
    are promoted as well rather than attached to it.
    """
    ordered = list(items)
    nodes: dict[str, Node[T]] = {item.id: Node(item) for item in ordered}

    roots: list[Node[T]] = []
    for item in ordered:
        node = nodes[item.id]
        if not isinstance(item.parent, ChildOf):
            roots.append(node)
            continue
        parent = nodes.get(item.parent.parent_id)
        if parent is None or isinstance(parent.item.parent, ChildOf):
            logger.debug("forest orphan id={} parent_id={}", item.id, item.parent.parent_id)
            roots.append(node)
            continue
        parent.children.append(item)
    return roots

