"""
3-D force directed layout.

initialize -> relax -> snapshot. runs once per structural change of the
graph, never per frame. the per frame part (rotation + projection) lives in
camera.py and only reads the snapshot.
"""

import hashlib
import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from collabgraph.graph_builder import CollaborationGraph

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


@dataclass(frozen=True)
class ForceLayoutConfig:
    radius: float = 200.0
    iterations: int = 100
    repulsion: float = 5000.0
    spring: float = 0.02
    damping: float = 0.85
    max_speed: float = 40.0
    min_distance: float = 1.0

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        if not 0.0 < self.damping < 1.0:
            raise ValueError(f"damping must be in (0, 1), got {self.damping}")
        if self.max_speed <= 0 or self.min_distance <= 0:
            raise ValueError("max_speed and min_distance must be positive")

    def equilibrium_distance(self, weight: float = 1.0) -> float:
        # two nodes, one spring: repulsion / d^2 == spring * weight * d
        return (self.repulsion / (self.spring * weight)) ** (1.0 / 3.0)


@dataclass(frozen=True, eq=False)
class LayoutSnapshot:
    key: str
    node_ids: Tuple[str, ...]
    positions: np.ndarray   # (n, 3), read only

    def index_of(self, node_id: str) -> Optional[int]:
        try:
            return self.node_ids.index(node_id)
        except ValueError:
            return None

    def position(self, node_id: str) -> Optional[Tuple[float, float, float]]:
        i = self.index_of(node_id)
        if i is None:
            return None
        x, y, z = self.positions[i]
        return float(x), float(y), float(z)

    def __len__(self):
        return len(self.node_ids)


def structure_key(graph: CollaborationGraph) -> str:
    """
    identity of what the simulation depends on: node order (initial placement)
    and the weighted edge set
    """
    h = hashlib.sha1()
    for node_id in graph.node_ids():
        h.update(b'n\x00' + node_id.encode('utf-8') + b'\x00')
    for s, t, r, c in sorted((e.source, e.target, e.relation, e.count) for e in graph.edges):
        h.update(f"e\x00{s}\x00{t}\x00{r}\x00{c}\x00".encode('utf-8'))
    return h.hexdigest()


def sphere_positions(n: int, radius: float) -> np.ndarray:
    """equal area spread over a sphere (golden angle spiral), indexed by node order"""
    if n <= 0:
        return np.zeros((0, 3))
    i = np.arange(n, dtype=float)
    y = 1.0 - 2.0 * (i + 0.5) / n
    r = np.sqrt(1.0 - y * y)
    theta = GOLDEN_ANGLE * i
    return radius * np.column_stack([np.cos(theta) * r, y, np.sin(theta) * r])


def _edge_arrays(graph: CollaborationGraph, index: Dict[str, int]):
    src, dst, weight = [], [], []
    for e in graph.edges:
        s, t = index.get(e.source), index.get(e.target)
        if s is None or t is None or s == t:
            continue
        src.append(s)
        dst.append(t)
        weight.append(float(e.count))
    return np.array(src, dtype=int), np.array(dst, dtype=int), np.array(weight, dtype=float)


def relax(positions: np.ndarray, src, dst, weight, config: ForceLayoutConfig) -> np.ndarray:

    pos = np.array(positions, dtype=float, copy=True)
    n = len(pos)
    if n == 0:
        return pos

    vel = np.zeros_like(pos)
    min_d2 = config.min_distance ** 2

    for _ in range(config.iterations):
        forces = np.zeros_like(pos)

        # inverse square repulsion between every pair
        if n > 1:
            delta = pos[:, None, :] - pos[None, :, :]
            d2 = np.maximum((delta ** 2).sum(axis=-1), min_d2)
            np.fill_diagonal(d2, np.inf)
            magnitude = config.repulsion / (d2 * np.sqrt(d2))
            forces += (delta * magnitude[:, :, None]).sum(axis=1)

        # linear springs along edges, stronger for repeated collaboration
        if len(src):
            pull = config.spring * weight[:, None] * (pos[dst] - pos[src])
            np.add.at(forces, src, pull)
            np.add.at(forces, dst, -pull)

        vel = (vel + forces) * config.damping

        speed = np.linalg.norm(vel, axis=1)
        too_fast = speed > config.max_speed
        if too_fast.any():
            vel[too_fast] *= (config.max_speed / speed[too_fast])[:, None]

        pos += vel

    return pos - pos.mean(axis=0)


class ForceLayoutSimulator:
    """
    keeps the last relaxed snapshot and hands it back while the graph
    structure is unchanged. a different structure replaces it wholesale
    """

    def __init__(self, config: Optional[ForceLayoutConfig] = None):
        self.config = config or ForceLayoutConfig()
        self._snapshot: Optional[LayoutSnapshot] = None
        self.relax_count = 0

    @property
    def snapshot(self) -> Optional[LayoutSnapshot]:
        return self._snapshot

    def invalidate(self):
        self._snapshot = None

    def layout(self, graph: CollaborationGraph) -> LayoutSnapshot:
        key = structure_key(graph)
        if self._snapshot is not None and self._snapshot.key == key:
            logger.debug("layout cache hit (%s)", key[:8])
            return self._snapshot

        self._snapshot = self.compute(graph, key)
        return self._snapshot

    def compute(self, graph: CollaborationGraph, key: Optional[str] = None) -> LayoutSnapshot:

        started = time.perf_counter()
        node_ids = tuple(graph.node_ids())
        index = {node_id: i for i, node_id in enumerate(node_ids)}
        src, dst, weight = _edge_arrays(graph, index)

        initial = sphere_positions(len(node_ids), self.config.radius)
        final = relax(initial, src, dst, weight, self.config)
        final.setflags(write=False)
        self.relax_count += 1

        logger.debug(
            "relaxed %d nodes / %d springs in %.1f ms",
            len(node_ids), len(src), (time.perf_counter() - started) * 1000.0,
        )
        return LayoutSnapshot(key=key or structure_key(graph), node_ids=node_ids, positions=final)
