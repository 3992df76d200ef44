"""
the interactive 3-D network: relaxed snapshot + camera + highlight state.

everything is driven by the host's event loop. the host calls tick() on every
animation frame while it gets frames back, and forwards pointer events. there
is no thread and no module level state, one scene per mounted view.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from collabgraph.constants import GROUP_PALETTE, UNKNOWN_GROUP, UNKNOWN_GROUP_COLOR
from collabgraph.graph_builder import CollaborationGraph
from collabgraph.layout.camera import CameraState, Viewport, project_edges, project_nodes
from collabgraph.layout.force_sim import ForceLayoutSimulator, LayoutSnapshot
from collabgraph.layout.interaction import (
    HighlightState, active_neighbor_set, edge_opacity, node_opacity,
)
from collabgraph.relations import is_pair, relation_color

logger = logging.getLogger(__name__)

NODE_MIN_RADIUS = 16.0
NODE_MAX_RADIUS = 32.0


class FrameLoop:
    """on/off switch for per frame work. stopped loops hand out nothing"""

    def __init__(self, on_frame: Callable[[float], object]):
        self._on_frame = on_frame
        self.running = False
        self.frames = 0

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def tick(self, dt: float):
        if not self.running:
            return None
        self.frames += 1
        return self._on_frame(dt)


@dataclass(frozen=True)
class RenderNode:
    id: str
    group: str
    color: str
    x: float
    y: float
    depth: float
    radius: float
    opacity: float
    is_active: bool


@dataclass(frozen=True)
class RenderEdge:
    source: str
    target: str
    relation: str
    color: str
    x1: float
    y1: float
    x2: float
    y2: float
    depth: float
    width: float
    opacity: float
    directed: bool


@dataclass(frozen=True)
class RenderFrame:
    nodes: List[RenderNode] = field(default_factory=list)
    edges: List[RenderEdge] = field(default_factory=list)
    active: Optional[str] = None


def group_colors(graph: CollaborationGraph) -> dict:
    colors = {UNKNOWN_GROUP: UNKNOWN_GROUP_COLOR}
    for n in graph.nodes:
        if n.group not in colors:
            colors[n.group] = GROUP_PALETTE[(len(colors) - 1) % len(GROUP_PALETTE)]
    return colors


class NetworkScene:

    def __init__(
        self,
        graph: CollaborationGraph,
        simulator: Optional[ForceLayoutSimulator] = None,
        viewport: Optional[Viewport] = None,
        camera: Optional[CameraState] = None,
    ):
        self.simulator = simulator or ForceLayoutSimulator()
        self.viewport = viewport or Viewport()
        self.camera = camera or CameraState()
        self.highlight = HighlightState()
        self.loop = FrameLoop(self._advance)
        self.visible = False
        self.graph = graph
        self.snapshot: LayoutSnapshot = self.simulator.layout(graph)
        self._colors = group_colors(graph)

    # data

    def set_graph(self, graph: CollaborationGraph):
        # the simulator only re-relaxes when the structure actually changed
        self.graph = graph
        self.snapshot = self.simulator.layout(graph)
        self._colors = group_colors(graph)
        self.highlight.prune(graph.node_ids())
        logger.debug("scene graph set: %d nodes, %d edges", len(graph.nodes), len(graph.edges))

    # lifecycle

    def show(self):
        self.visible = True
        if self.camera.auto_rotate:
            self.loop.start()

    def hide(self):
        self.visible = False
        self.loop.stop()
        self.camera.end_drag()

    def set_auto_rotate(self, enabled: bool):
        self.camera.auto_rotate = enabled
        if enabled and self.visible and not self.camera.dragging:
            self.loop.start()
        elif not enabled:
            self.loop.stop()

    def tick(self, dt: float) -> Optional[RenderFrame]:
        """one animation frame. None means nothing is animating, stop scheduling"""
        return self.loop.tick(dt)

    def _advance(self, dt: float) -> RenderFrame:
        self.camera.tick(dt)
        return self.render()

    # pointer

    def pointer_down(self, x: float, y: float):
        # two motion sources would fight, the drag wins
        self.loop.stop()
        self.camera.begin_drag(x, y)

    def pointer_move(self, x: float, y: float) -> Optional[RenderFrame]:
        if self.camera.drag_to(x, y):
            return self.render()
        return None

    def pointer_up(self):
        self.camera.end_drag()

    def pointer_leave(self):
        self.camera.end_drag()
        self.highlight.unhover()

    def hover(self, node_id: Optional[str]):
        if node_id is None or self.snapshot.index_of(node_id) is not None:
            self.highlight.hover(node_id)

    def click(self, node_id: str):
        if self.snapshot.index_of(node_id) is not None:
            self.highlight.click(node_id)

    # geometry

    def _radius(self, degree: int, max_degree: int) -> float:
        return NODE_MIN_RADIUS + (NODE_MAX_RADIUS - NODE_MIN_RADIUS) * degree / max_degree

    def render(self) -> RenderFrame:

        active = self.highlight.active
        neighbors = active_neighbor_set(self.graph.edges, active)
        info = {n.id: n for n in self.graph.nodes}
        max_degree = max([n.degree for n in self.graph.nodes] + [1])

        nodes = []
        for p in project_nodes(self.snapshot, self.camera, self.viewport):
            node = info.get(p.id)
            group = node.group if node else UNKNOWN_GROUP
            degree = node.degree if node else 0
            nodes.append(RenderNode(
                id=p.id,
                group=group,
                color=self._colors.get(group, UNKNOWN_GROUP_COLOR),
                x=p.x,
                y=p.y,
                depth=p.depth,
                radius=self._radius(degree, max_degree) * p.scale,
                opacity=node_opacity(p.id, active, neighbors),
                is_active=p.id == active,
            ))

        edges = [
            RenderEdge(
                source=e.source,
                target=e.target,
                relation=e.relation,
                color=relation_color(e.relation),
                x1=e.x1, y1=e.y1, x2=e.x2, y2=e.y2,
                depth=e.depth,
                width=e.width,
                opacity=edge_opacity(e.source, e.target, active),
                directed=not is_pair(e.relation),
            )
            for e in project_edges(self.snapshot, self.graph.edges, self.camera, self.viewport)
        ]

        return RenderFrame(nodes=nodes, edges=edges, active=active)
