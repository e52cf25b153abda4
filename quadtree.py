import numpy as np
from typing import List, Optional


class QuadNode:
    __slots__ = ['center', 'size', 'mass', 'com', 'children', 'body_indices', 'is_leaf', 'depth']

    def __init__(self, center: np.ndarray, size: float, depth: int = 0):
        self.center = center
        self.size = size
        self.depth = depth
        self.mass = 0.0
        self.com = np.zeros(2, dtype=np.float64)  # Center of mass
        self.children: List[Optional["QuadNode"]] = [None] * 4  # NW, NE, SW, SE
        self.body_indices: List[int] = []  # Store indices instead of body objects
        self.is_leaf = True

    def contains(self, pos: np.ndarray) -> bool:
        half = self.size / 2
        return (abs(pos[0] - self.center[0]) <= half) and (abs(pos[1] - self.center[1]) <= half)


class QuadTree:
    def __init__(self, theta: float = 0.5, epsilon: float = 1e-3, leaf_capacity: int = 8,
                 max_depth: int = 32):
        self.theta = theta
        self.epsilon = epsilon
        self.leaf_capacity = leaf_capacity
        self.max_depth = max_depth
        self.root: Optional[QuadNode] = None
        self.positions: Optional[np.ndarray] = None
        self.masses: Optional[np.ndarray] = None

    def build(self, positions: np.ndarray, masses: np.ndarray) -> None:
        self.positions = np.asarray(positions, dtype=np.float64)
        self.masses = np.asarray(masses, dtype=np.float64)
        n_bodies = len(self.masses)
        if n_bodies == 0:
            self.root = None
            return

        # Find bounds
        min_pos = np.min(self.positions, axis=0)
        max_pos = np.max(self.positions, axis=0)
        center = (min_pos + max_pos) / 2
        size = max(max_pos[0] - min_pos[0], max_pos[1] - min_pos[1]) * 1.1 or 1.0

        self.root = QuadNode(center, size)
        self.root.body_indices = list(range(n_bodies))
        self._subdivide(self.root)

    def _subdivide(self, node: QuadNode) -> None:
        if len(node.body_indices) <= self.leaf_capacity or node.depth >= self.max_depth:
            # Compute center of mass for leaf node
            node.mass = float(np.sum(self.masses[node.body_indices]))
            if node.mass > 0:
                node.com = np.average(self.positions[node.body_indices],
                                      weights=self.masses[node.body_indices],
                                      axis=0)
            return

        # Create child nodes
        node.is_leaf = False
        half_size = node.size / 2

        for i in range(4):
            dx = half_size / 2 * (1 if i in [1, 3] else -1)
            dy = half_size / 2 * (1 if i in [0, 1] else -1)
            child_center = node.center + np.array([dx, dy], dtype=np.float64)
            node.children[i] = QuadNode(child_center, half_size, node.depth + 1)

        # Distribute bodies to children
        for idx in node.body_indices:
            quadrant = self._get_quadrant(self.positions[idx], node.center)
            node.children[quadrant].body_indices.append(idx)

        # Clear parent node's body indices
        node.body_indices = []

        # Recursively subdivide children and accumulate mass upward
        node.mass = 0.0
        node.com = np.zeros(2, dtype=np.float64)
        for child in node.children:
            if child.body_indices:
                self._subdivide(child)
                node.mass += child.mass
                node.com += child.mass * child.com

        if node.mass > 0:
            node.com /= node.mass

    def _get_quadrant(self, pos: np.ndarray, center: np.ndarray) -> int:
        if pos[0] >= center[0]:
            return 1 if pos[1] >= center[1] else 3
        return 0 if pos[1] >= center[1] else 2

    def compute_acceleration(self, body_idx: int, G: float = 1.0) -> np.ndarray:
        """Gravitational acceleration on one body from all others."""
        acc = np.zeros(2, dtype=np.float64)
        if self.root is not None:
            self._accumulate(self.root, body_idx, G, acc)
        return acc

    def _accumulate(self, node: QuadNode, body_idx: int, G: float, acc: np.ndarray) -> None:
        if node.mass <= 0:
            return
        pos = self.positions[body_idx]
        eps2 = self.epsilon * self.epsilon

        if node.is_leaf:
            for j in node.body_indices:
                if j == body_idx:
                    continue
                r = self.positions[j] - pos
                r_sq = float(np.dot(r, r)) + eps2
                acc += G * self.masses[j] * r / (r_sq * np.sqrt(r_sq))
            return

        # Vector from body to node's center of mass
        r = node.com - pos
        r_sq = float(np.dot(r, r)) + eps2
        r_mag = np.sqrt(r_sq)

        # Far enough away and not containing the body: treat as a point mass
        if r_mag > 0 and node.size / r_mag < self.theta and not node.contains(pos):
            acc += G * node.mass * r / (r_sq * r_mag)
            return

        for child in node.children:
            if child is not None and child.mass > 0:
                self._accumulate(child, body_idx, G, acc)

    def _collect_nodes(self, node: QuadNode, nodes: List[tuple]) -> None:
        """Collect node boundaries for visualization."""
        if node is None:
            return

        half_size = node.size / 2
        min_x = node.center[0] - half_size
        min_y = node.center[1] - half_size
        nodes.append(((min_x, min_y), node.size, node.depth))

        if not node.is_leaf:
            for child in node.children:
                if child is not None and child.mass > 0:
                    self._collect_nodes(child, nodes)

    def get_boundaries(self) -> List[tuple]:
        """Get all node boundaries for visualization.
        Returns:
            List of tuples: (min_corner, size, depth)
        """
        nodes = []
        if self.root:
            self._collect_nodes(self.root, nodes)
        return nodes
