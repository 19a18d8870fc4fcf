import numpy as np
import pytest

from isoremesh.hds import Mesh
from isoremesh.surface import Polyline, TriangleSurface


@pytest.fixture
def surface(triangle):
    return TriangleSurface(*triangle)


@pytest.mark.parametrize('point, expected', [
    ([0.2, 0.2, 1.0], [0.2, 0.2, 0.0]),     # interior
    ([2.0, -1.0, 0.0], [1.0, 0.0, 0.0]),    # vertex
    ([0.5, -1.0, 0.0], [0.5, 0.0, 0.0]),    # edge
    ([1.0, 1.0, 0.0], [0.5, 0.5, 0.0]),     # hypotenuse
    ([-1.0, -1.0, 5.0], [0.0, 0.0, 0.0]),   # vertex, off plane
])
def test_closest_point(surface, point, expected):
    assert np.allclose(surface.closest_point(point), expected)


def test_closest_point_multiple_triangles(octahedron):
    surface = TriangleSurface.from_mesh(Mesh(*octahedron))

    assert len(surface) == 8
    assert np.allclose(surface.closest_point([2.0, 0.0, 0.0]),
                       [1.0, 0.0, 0.0])
    assert np.allclose(surface.closest_point([1.0, 1.0, 1.0]),
                       np.full(3, 1.0 / 3.0))


def test_ray_intersect(surface):
    t, point = surface.ray_intersect([0.2, 0.2, 1.0], [0.0, 0.0, -1.0])

    assert t == pytest.approx(1.0)
    assert np.allclose(point, [0.2, 0.2, 0.0])

    assert surface.ray_intersect([0.2, 0.2, 1.0], [0.0, 0.0, 1.0]) is None
    assert surface.ray_intersect([2.0, 2.0, 1.0], [0.0, 0.0, -1.0]) is None

    # Rays parallel to the triangle never hit.
    assert surface.ray_intersect([0.2, 0.2, 0.0], [1.0, 0.0, 0.0]) is None


def test_ray_intersect_nearest_hit(octahedron):
    surface = TriangleSurface(*octahedron)
    t, point = surface.ray_intersect([0.0, 0.0, 0.0], [0.1, 0.1, 2.0])

    assert 0.0 < t < 1.0
    assert np.allclose(point, t * np.array([0.1, 0.1, 2.0]))
    assert np.sum(np.abs(point)) == pytest.approx(1.0)

    t, point = surface.ray_intersect([0.2, 0.2, 5.0], [0.0, 0.0, -1.0])

    assert t == pytest.approx(4.4)
    assert np.allclose(point, [0.2, 0.2, 0.6])


def test_surface_from_mesh_is_a_snapshot(triangle):
    mesh = Mesh(*triangle)
    surface = TriangleSurface.from_mesh(mesh)

    mesh.vertices[0].point = [0.0, 0.0, 1.0]

    assert np.allclose(surface.closest_point([0.0, 0.0, 1.0]), 0.0)


def test_invalid_surface():
    with pytest.raises(ValueError):
        TriangleSurface(np.eye(3), np.empty((0, 3), dtype=int))

    with pytest.raises(ValueError):
        TriangleSurface(np.eye(2), [[0, 1, 2]])


def test_polyline_closest_point():
    curve = Polyline([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0]])

    t, point = curve.closest_point([2.0, 0.5, 0.0])

    assert t == pytest.approx(1.5)
    assert np.allclose(point, [1.0, 0.5, 0.0])

    t, point = curve.closest_point([-1.0, -1.0, 0.0])

    assert t == 0.0
    assert np.allclose(point, 0.0)

    assert curve.length == pytest.approx(2.0)
    assert np.allclose(curve.point_at(1.5), [1.0, 0.5, 0.0])
    assert np.allclose(curve.point_at(5.0), [1.0, 1.0, 0.0])


def test_closed_polyline():
    square = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0],
              [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]

    curve = Polyline(square, closed=True)

    assert curve.closed
    assert len(curve.points) == 5
    assert curve.length == pytest.approx(4.0)

    # The closing segment is part of the curve.
    t, point = curve.closest_point([-0.5, 0.25, 0.0])

    assert t == pytest.approx(3.75)
    assert np.allclose(point, [0.0, 0.25, 0.0])

    assert Polyline(square).length == pytest.approx(3.0)


def test_degenerate_segments():
    curve = Polyline([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    t, point = curve.closest_point([0.5, 1.0, 0.0])

    assert t == pytest.approx(0.5)
    assert np.allclose(point, [0.5, 0.0, 0.0])


def test_invalid_polyline():
    with pytest.raises(ValueError):
        Polyline([[0.0, 0.0, 0.0]])

    with pytest.raises(ValueError):
        Polyline([[0.0, 0.0], [1.0, 0.0]])
