# per frame part of the 3-D view: camera angles, drag to rotate, perspective projection.
# cheap enough to run every animation tick, it never touches the simulation

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from collabgraph.constants import AUTO_ROTATE_SPEED, DRAG_SENSITIVITY, MAX_TILT
from collabgraph.graph_builder import Edge
from collabgraph.layout.force_sim import LayoutSnapshot

MIN_DEPTH = 1.0


@dataclass(frozen=True)
class Viewport:
    width: float = 400.0
    height: float = 400.0
    focal_length: float = 400.0
    camera_distance: float = 600.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


@dataclass
class CameraState:
    rotation_y: float = 0.0     # around the vertical axis
    rotation_x: float = 0.0     # tilt
    auto_rotate: bool = True
    speed: float = AUTO_ROTATE_SPEED
    sensitivity: float = DRAG_SENSITIVITY
    dragging: bool = False
    last_pointer: Optional[Tuple[float, float]] = None

    def tick(self, dt: float) -> bool:
        """advance auto rotation, returns True if the angle moved"""
        if not self.auto_rotate or self.dragging or dt <= 0:
            return False
        self.rotation_y = (self.rotation_y + self.speed * dt) % (2.0 * math.pi)
        return True

    def begin_drag(self, x: float, y: float):
        # manual rotation takes over, auto rotation stays off until asked again
        self.dragging = True
        self.auto_rotate = False
        self.last_pointer = (x, y)

    def drag_to(self, x: float, y: float) -> bool:
        if not self.dragging or self.last_pointer is None:
            return False
        px, py = self.last_pointer
        self.rotation_y = (self.rotation_y + (x - px) * self.sensitivity) % (2.0 * math.pi)
        self.rotation_x = max(-MAX_TILT, min(MAX_TILT, self.rotation_x + (y - py) * self.sensitivity))
        self.last_pointer = (x, y)
        return True

    def end_drag(self):
        self.dragging = False
        self.last_pointer = None


@dataclass(frozen=True)
class ProjectedNode:
    id: str
    x: float
    y: float
    depth: float
    scale: float


@dataclass(frozen=True)
class ProjectedEdge:
    source: str
    target: str
    relation: str
    count: int
    x1: float
    y1: float
    x2: float
    y2: float
    depth: float
    width: float


def rotate(positions: np.ndarray, rotation_y: float, rotation_x: float) -> np.ndarray:
    """yaw around the vertical axis, then tilt around the horizontal one"""
    if len(positions) == 0:
        return np.zeros((0, 3))
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]

    cy, sy = math.cos(rotation_y), math.sin(rotation_y)
    x1 = x * cy + z * sy
    z1 = -x * sy + z * cy

    cx, sx = math.cos(rotation_x), math.sin(rotation_x)
    y2 = y * cx - z1 * sx
    z2 = y * sx + z1 * cx

    return np.column_stack([x1, y2, z2])


def _project_points(snapshot: LayoutSnapshot, camera: CameraState, viewport: Viewport):
    rotated = rotate(snapshot.positions, camera.rotation_y, camera.rotation_x)
    depth = np.maximum(rotated[:, 2] + viewport.camera_distance, MIN_DEPTH)
    scale = viewport.focal_length / depth
    cx, cy = viewport.center
    sx = cx + rotated[:, 0] * scale
    sy = cy - rotated[:, 1] * scale     # screen y grows downward
    return sx, sy, depth, scale


def project_nodes(snapshot: LayoutSnapshot, camera: CameraState, viewport: Viewport) -> List[ProjectedNode]:
    """screen position + depth scale per node, far to near (paint order)"""
    if len(snapshot) == 0:
        return []
    sx, sy, depth, scale = _project_points(snapshot, camera, viewport)
    nodes = [
        ProjectedNode(id=node_id, x=float(sx[i]), y=float(sy[i]), depth=float(depth[i]), scale=float(scale[i]))
        for i, node_id in enumerate(snapshot.node_ids)
    ]
    return sorted(nodes, key=lambda n: n.depth, reverse=True)


def edge_base_width(count: int) -> float:
    return min(count * 1.5 + 1.0, 4.0)


def project_edges(
    snapshot: LayoutSnapshot,
    edges: Sequence[Edge],
    camera: CameraState,
    viewport: Viewport,
) -> List[ProjectedEdge]:

    if len(snapshot) == 0:
        return []
    sx, sy, depth, scale = _project_points(snapshot, camera, viewport)
    index = {node_id: i for i, node_id in enumerate(snapshot.node_ids)}

    out = []
    for e in edges:
        a, b = index.get(e.source), index.get(e.target)
        if a is None or b is None:
            continue
        mean_scale = (scale[a] + scale[b]) / 2.0
        out.append(ProjectedEdge(
            source=e.source, target=e.target, relation=e.relation, count=e.count,
            x1=float(sx[a]), y1=float(sy[a]), x2=float(sx[b]), y2=float(sy[b]),
            depth=float((depth[a] + depth[b]) / 2.0),
            width=float(edge_base_width(e.count) * mean_scale),
        ))
    return sorted(out, key=lambda e: e.depth, reverse=True)
