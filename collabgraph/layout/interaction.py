# hover / select highlighting shared by the 3-D network and the orbit view.
# dimmed things get a low opacity, they are never hidden

from dataclasses import dataclass
from typing import Iterable, Optional, Set

from collabgraph.constants import (
    ACTIVE_OPACITY, DIMMED_EDGE_OPACITY, DIMMED_NODE_OPACITY,
    IDLE_EDGE_OPACITY, IDLE_NODE_OPACITY,
)


def active_neighbor_set(edges: Iterable, active: Optional[str]) -> Set[str]:
    """every node directly connected to the active one (either direction)"""
    if active is None:
        return set()
    out = set()
    for e in edges:
        if e.source == active:
            out.add(e.target)
        elif e.target == active:
            out.add(e.source)
    out.discard(active)
    return out


def node_opacity(node_id: str, active: Optional[str], neighbors: Set[str]) -> float:
    if active is None:
        return IDLE_NODE_OPACITY
    if node_id == active or node_id in neighbors:
        return ACTIVE_OPACITY
    return DIMMED_NODE_OPACITY


def edge_opacity(source: str, target: str, active: Optional[str]) -> float:
    if active is None:
        return IDLE_EDGE_OPACITY
    if active in (source, target):
        return ACTIVE_OPACITY
    return DIMMED_EDGE_OPACITY


@dataclass
class HighlightState:
    hovered: Optional[str] = None
    selected: Optional[str] = None

    @property
    def active(self) -> Optional[str]:
        # a click wins over a hover
        return self.selected if self.selected is not None else self.hovered

    def hover(self, node_id: Optional[str]):
        self.hovered = node_id

    def unhover(self):
        self.hovered = None

    def click(self, node_id: str):
        # clicking the selected node again releases it
        self.selected = None if self.selected == node_id else node_id

    def clear(self):
        self.hovered = None
        self.selected = None

    def prune(self, valid_ids: Iterable[str]):
        """drop hover / selection that point at nodes which no longer exist"""
        valid = set(valid_ids)
        if self.hovered not in valid:
            self.hovered = None
        if self.selected not in valid:
            self.selected = None
