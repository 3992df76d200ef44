"""
orbit view: one member in the middle, collaborators on three rings.

inner  - paired, and at least half as intense as the strongest collaborator
middle - paired, but less intense
outer  - no pairing at all (wait only)

fully deterministic, no physics. the view object on top adds manual node
dragging and zoom; zoom only changes the visible box, never the coordinates.
"""

import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from collabgraph.constants import (
    ORBIT_CENTER_RADIUS, ORBIT_CURVE_MAX, ORBIT_CURVE_PER_COUNT, ORBIT_CURVE_RATIO,
    ORBIT_HEIGHT, ORBIT_INNER_INTENSITY, ORBIT_NODE_MIN_RADIUS, ORBIT_NODE_RADIUS_SPAN,
    ORBIT_RING_RADII, ORBIT_WIDTH, ORBIT_ZOOM_MAX, ORBIT_ZOOM_MIN, PAIR, UNKNOWN_GROUP, WAIT,
)
from collabgraph.data_loader import WorkItem
from collabgraph.graph_builder import resolve_groups
from collabgraph.layout.interaction import (
    HighlightState, active_neighbor_set, edge_opacity, node_opacity,
)
from collabgraph.relations import is_pair, is_wait

RINGS = ('inner', 'middle', 'outer')
BOTH = 'both'

Point = Tuple[float, float]


@dataclass
class OrbitNode:
    name: str
    relation: str        # pair / pre / both
    pair_count: int
    wait_count: int
    total_count: int
    group: str
    ring: str
    angle: float
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class OrbitEdge:
    source: str
    target: str
    relation: str
    count: int
    start: Point
    control: Point
    end: Point
    width: float
    arrow: bool


@dataclass
class OrbitLayout:
    member: str
    group: str
    center: Point
    width: float
    height: float
    nodes: List[OrbitNode] = field(default_factory=list)

    def node(self, name: str) -> Optional[OrbitNode]:
        for n in self.nodes:
            if n.name == name:
                return n
        return None


def collaborator_counts(items: Sequence[WorkItem], member: str) -> "OrderedDict[str, dict]":
    """
    per collaborator: pairs I logged, plus waits in both directions
    (me waiting on them, them waiting on me)
    """
    items = list(items or [])
    counts = OrderedDict()

    def entry(name):
        return counts.setdefault(name, {'pair': 0, 'wait': 0})

    mine = [i for i in items if i.owner == member]

    for item in mine:
        for name, rel in item.references():
            if name != member and is_pair(rel):
                entry(name)['pair'] += 1

    for item in mine:
        for name, rel in item.references():
            if name != member and is_wait(rel):
                entry(name)['wait'] += 1

    for item in items:
        if item.owner == member:
            continue
        for name, rel in item.references():
            if name == member and is_wait(rel):
                entry(item.owner)['wait'] += 1

    return counts


def assign_ring(pair_count: int, total: int, max_total: int) -> str:
    if pair_count > 0 and total / max(max_total, 1) >= ORBIT_INNER_INTENSITY:
        return 'inner'
    if pair_count > 0:
        return 'middle'
    return 'outer'


def ring_angles(n: int) -> List[float]:
    # evenly spaced, first one straight up (12 o'clock, screen y points down)
    start = -math.pi / 2.0
    return [start + 2.0 * math.pi * i / max(n, 1) for i in range(n)]


def node_radius(total: int, max_total: int) -> float:
    return ORBIT_NODE_MIN_RADIUS + (total / max(max_total, 1)) * ORBIT_NODE_RADIUS_SPAN


def compute_orbit(
    items: Sequence[WorkItem],
    member: str,
    width: float = ORBIT_WIDTH,
    height: float = ORBIT_HEIGHT,
) -> OrbitLayout:

    items = list(items or [])
    groups = resolve_groups(items)
    counts = collaborator_counts(items, member)
    cx, cy = width / 2.0, height / 2.0

    totals = {name: c['pair'] + c['wait'] for name, c in counts.items()}
    max_total = max(list(totals.values()) + [1])

    by_ring = {ring: [] for ring in RINGS}
    for name, c in counts.items():
        by_ring[assign_ring(c['pair'], totals[name], max_total)].append(name)

    nodes = []
    for ring in RINGS:
        names = by_ring[ring]
        orbit_r = ORBIT_RING_RADII[ring]
        for name, angle in zip(names, ring_angles(len(names))):
            c = counts[name]
            if c['pair'] and c['wait']:
                relation = BOTH
            elif c['pair']:
                relation = PAIR
            else:
                relation = WAIT
            nodes.append(OrbitNode(
                name=name,
                relation=relation,
                pair_count=c['pair'],
                wait_count=c['wait'],
                total_count=totals[name],
                group=groups.get(name, UNKNOWN_GROUP),
                ring=ring,
                angle=angle,
                x=cx + orbit_r * math.cos(angle),
                y=cy + orbit_r * math.sin(angle),
                radius=node_radius(totals[name], max_total),
            ))

    return OrbitLayout(
        member=member,
        group=groups.get(member, UNKNOWN_GROUP),
        center=(cx, cy),
        width=width,
        height=height,
        nodes=nodes,
    )


def curve_path(frm: Point, to: Point, from_radius: float, to_radius: float, count: int = 1):
    """
    quadratic curve rim to rim. bend grows with the relation count, capped.
    None when both ends sit on the same spot
    """
    dx, dy = to[0] - frm[0], to[1] - frm[1]
    dist = math.hypot(dx, dy)
    if dist == 0:
        return None

    ux, uy = dx / dist, dy / dist
    start = (frm[0] + ux * from_radius, frm[1] + uy * from_radius)
    end = (to[0] - ux * to_radius, to[1] - uy * to_radius)

    bend = 1.0 + ORBIT_CURVE_PER_COUNT * max(count - 1, 0)
    offset = min(dist * ORBIT_CURVE_RATIO * bend, ORBIT_CURVE_MAX)
    control = ((start[0] + end[0]) / 2.0 - uy * offset, (start[1] + end[1]) / 2.0 + ux * offset)
    return start, control, end


def orbit_edge(layout: OrbitLayout, node: OrbitNode, position: Point) -> Optional[OrbitEdge]:
    # pair wins when both exist, wait-only links get an arrow and a gap for it
    if node.pair_count > 0:
        relation, count = PAIR, node.pair_count
        width, to_radius, arrow = min(count + 1.5, 4.0), node.radius, False
    elif node.wait_count > 0:
        relation, count = WAIT, node.wait_count
        width, to_radius, arrow = min(count + 1.0, 3.0), node.radius + 6.0, True
    else:
        return None

    path = curve_path(layout.center, position, ORBIT_CENTER_RADIUS, to_radius, count)
    if path is None:
        return None
    start, control, end = path
    return OrbitEdge(
        source=layout.member, target=node.name, relation=relation, count=count,
        start=start, control=control, end=end, width=width, arrow=arrow,
    )


class OrbitView:
    """orbit layout plus the bits a user can change: dragged nodes, zoom, highlight"""

    def __init__(self, layout: OrbitLayout):
        self.layout = layout
        self.zoom = 1.0
        self.overrides: Dict[str, Point] = {}
        self.highlight = HighlightState()
        self.dragging: Optional[str] = None

    # positions

    def position(self, name: str) -> Optional[Point]:
        if name == self.layout.member:
            return self.layout.center
        if name in self.overrides:
            return self.overrides[name]
        node = self.layout.node(name)
        return (node.x, node.y) if node else None

    def reset_positions(self):
        self.overrides.clear()

    # zoom

    def set_zoom(self, zoom: float) -> float:
        self.zoom = max(ORBIT_ZOOM_MIN, min(ORBIT_ZOOM_MAX, zoom))
        return self.zoom

    def zoom_by(self, factor: float) -> float:
        return self.set_zoom(self.zoom * factor)

    def viewbox(self) -> Tuple[float, float, float, float]:
        """visible (x, y, w, h) in layout coordinates, centered on the focal member"""
        w = self.layout.width / self.zoom
        h = self.layout.height / self.zoom
        cx, cy = self.layout.center
        return cx - w / 2.0, cy - h / 2.0, w, h

    def to_layout(self, sx: float, sy: float) -> Point:
        # screen pixel (0..width, 0..height) -> layout coordinates under the current zoom
        vx, vy, _, _ = self.viewbox()
        return vx + sx / self.zoom, vy + sy / self.zoom

    # drag

    def begin_node_drag(self, name: str) -> bool:
        if self.layout.node(name) is None:
            return False
        self.dragging = name
        self.highlight.unhover()
        return True

    def drag_to(self, sx: float, sy: float) -> bool:
        if self.dragging is None:
            return False
        self.overrides[self.dragging] = self.to_layout(sx, sy)
        return True

    def end_drag(self):
        self.dragging = None

    def pointer_leave(self):
        self.end_drag()
        self.highlight.unhover()

    # geometry

    def edges(self) -> List[OrbitEdge]:
        out = []
        for node in self.layout.nodes:
            edge = orbit_edge(self.layout, node, self.position(node.name))
            if edge is not None:
                out.append(edge)
        return out

    def render(self) -> dict:
        edges = self.edges()
        active = self.highlight.active
        neighbors = active_neighbor_set(edges, active)

        nodes = []
        for node in self.layout.nodes:
            x, y = self.position(node.name)
            nodes.append({
                'name': node.name,
                'group': node.group,
                'ring': node.ring,
                'relation': node.relation,
                'x': x,
                'y': y,
                'radius': node.radius,
                'opacity': node_opacity(node.name, active, neighbors),
                'is_bottleneck': node.wait_count >= 2,
            })

        return {
            'center': {'name': self.layout.member, 'group': self.layout.group,
                       'x': self.layout.center[0], 'y': self.layout.center[1],
                       'radius': ORBIT_CENTER_RADIUS},
            'nodes': nodes,
            'edges': [{'edge': e, 'opacity': edge_opacity(e.source, e.target, active)} for e in edges],
            'viewbox': self.viewbox(),
        }
