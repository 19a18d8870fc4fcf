""" Shared mesh fixtures.

Meshes are handed out as ``(points, faces)`` pairs, factories for
parametrized meshes return such pairs when called.
"""

import math

import numpy as np
import pytest


@pytest.fixture
def triangle():
    points = [[0.0, 0.0, 0.0],
              [1.0, 0.0, 0.0],
              [0.0, 1.0, 0.0]]

    return np.array(points), [[0, 1, 2]]


@pytest.fixture
def tetrahedron():
    points = [[0.0, 0.0, 0.0],
              [1.0, 0.0, 0.0],
              [0.0, 1.0, 0.0],
              [0.0, 0.0, 1.0]]
    faces = [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]]

    return np.array(points), faces


@pytest.fixture
def octahedron():
    points = [[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0],
              [0.0, 1.0, 0.0], [0.0, -1.0, 0.0],
              [0.0, 0.0, 1.0], [0.0, 0.0, -1.0]]
    faces = [[0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
             [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5]]

    return np.array(points), faces


@pytest.fixture
def grid():
    """ Factory for triangulated planar square grids.

    Vertex ``(i, j)`` has index ``i + j * (n + 1)``, each square is split
    along the diagonal from ``(i, j)`` to ``(i + 1, j + 1)``.
    """

    def make(n=2, spacing=1.0):
        points = [[i * spacing, j * spacing, 0.0]
                  for j in range(n + 1) for i in range(n + 1)]
        faces = []

        for j in range(n):
            for i in range(n):
                a = i + j * (n + 1)
                b, c, d = a + 1, a + n + 1, a + n + 2

                faces.append([a, b, d])
                faces.append([a, d, c])

        return np.array(points), faces

    return make


@pytest.fixture
def hexagon():
    """ Factory for regular triangulations of planar hexagons.

    Returns vertex coordinates, faces and the six corner points. Edges of
    the initial triangulation have length `spacing`, the hexagon has
    `radius` edges per side.
    """

    def make(radius=2, spacing=1.0):
        index = dict()
        points = []

        for j in range(-radius, radius + 1):
            for i in range(-radius, radius + 1):
                if abs(i + j) <= radius:
                    index[i, j] = len(points)
                    points.append([(i + 0.5 * j) * spacing,
                                   0.5 * math.sqrt(3.0) * j * spacing, 0.0])

        faces = []

        # Lattice cells with lower left corner (i, j). The corner itself
        # may lie outside the hexagon while the upper triangle does not.
        for j in range(-radius - 1, radius + 1):
            for i in range(-radius - 1, radius + 1):
                a = index.get((i, j))
                b = index.get((i + 1, j))
                c = index.get((i, j + 1))
                d = index.get((i + 1, j + 1))

                if None not in (a, b, c):
                    faces.append([a, b, c])

                if None not in (b, c, d):
                    faces.append([b, d, c])

        assert len(faces) == 6 * radius**2

        points = np.array(points)
        corners = [points[index[k]] for k in ((radius, 0), (0, radius),
                                              (-radius, radius), (-radius, 0),
                                              (0, -radius), (radius, -radius))]

        return points, faces, np.array(corners)

    return make
