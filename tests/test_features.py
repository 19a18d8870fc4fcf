import numpy as np
import pytest

from isoremesh.features import FeatureTracker
from isoremesh.hds import Mesh
from isoremesh.surface import Polyline


@pytest.fixture
def edge_curve():
    return Polyline([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])


def test_anchors(triangle):
    mesh = Mesh(*triangle)

    FeatureTracker(points=[[0.0, 0.0, 0.0]]).seed(mesh)

    assert mesh.anchors == [0, None, None]
    assert mesh.vertices[0].anchor == 0

    FeatureTracker(points=[[0.02, 0.0, 0.0]], tolerance=0.01).seed(mesh)

    assert mesh.anchors == [None, None, None]


def test_nearest_anchor_wins(triangle):
    mesh = Mesh(*triangle)
    points = [[0.005, 0.0, 0.0], [0.001, 0.0, 0.0], [1.0, 0.0, 0.0]]

    FeatureTracker(points=points).seed(mesh)

    assert mesh.anchors == [1, 2, None]


def test_features(triangle, edge_curve):
    mesh = Mesh(*triangle)
    tracker = FeatureTracker(curves=[edge_curve])
    tracker.seed(mesh)

    v = mesh.vertices

    assert mesh.features == [0, 0, None]
    assert mesh.find_halfedge(v[0], v[1]).feature == 0
    assert mesh.find_halfedge(v[1], v[2]).feature is None
    assert mesh.find_halfedge(v[2], v[0]).feature is None

    assert tracker.curve(v[0]) is edge_curve
    assert tracker.curve(v[2]) is None


def test_edge_needs_both_endpoints(grid, edge_curve):
    # Only vertices 0 and 1 of the grid lie on the curve.
    mesh = Mesh(*grid(2))
    FeatureTracker(curves=[edge_curve]).seed(mesh)

    tagged = [h for h in mesh.edges if h.feature is not None]

    assert mesh.features[:3] == [0, 0, None]
    assert len(tagged) == 1
    assert {x.index for x in tagged[0]} == {0, 1}


def test_seed_is_deterministic(hexagon):
    points, faces, corners = hexagon(2)
    curve = Polyline([[-3.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
    tracker = FeatureTracker(points=corners, curves=[curve])

    first = Mesh(points, faces)
    second = Mesh(points, faces)

    tracker.seed(first)
    tracker.seed(second)

    assert first.anchors == second.anchors
    assert first.features == second.features
    assert first.edge_features == second.edge_features

    assert sum(a is not None for a in first.anchors) == 6
    assert sum(f is not None for f in first.features) == 5
    assert sum(f is not None for f in first.edge_features) == 4


def test_reseeding_replaces_tags(triangle, edge_curve):
    mesh = Mesh(*triangle)

    FeatureTracker(points=[[0.0, 0.0, 0.0]], curves=[edge_curve]).seed(mesh)
    FeatureTracker().seed(mesh)

    assert mesh.anchors == [None] * 3
    assert mesh.features == [None] * 3
    assert mesh.edge_features == [None] * 3


def test_split_propagation(triangle, edge_curve):
    mesh = Mesh(*triangle)
    tracker = FeatureTracker(points=[[0.0, 0.0, 0.0]], curves=[edge_curve])
    tracker.seed(mesh)

    u, w, x = mesh.vertices
    h = mesh.find_halfedge(u, w)

    v = mesh.split_edge(h)
    tracker.on_split(v, (u, w), 0)

    assert v.anchor is None
    assert v.feature == 0
    assert mesh.find_halfedge(u, v).feature == 0
    assert mesh.find_halfedge(v, w).feature == 0
    assert mesh.find_halfedge(v, x).feature is None

    # Splits never touch the tags of existing vertices.
    assert u.anchor == 0
    assert w.anchor is None


def test_split_without_feature(triangle, edge_curve):
    mesh = Mesh(*triangle)
    tracker = FeatureTracker(curves=[edge_curve])
    tracker.seed(mesh)

    _, w, x = mesh.vertices
    v = mesh.split_edge(mesh.find_halfedge(w, x))
    tracker.on_split(v, (w, x), None)

    assert v.feature is None
    assert all(h.feature is None for h in v._hiter())


def test_compact(hexagon):
    points, faces, corners = hexagon(2)
    curve = Polyline([[-3.0, 0.0, 0.0], [3.0, 0.0, 0.0]])

    mesh = Mesh(points, faces)
    tracker = FeatureTracker(points=corners, curves=[curve])
    tracker.seed(mesh)

    # Vertex 9 is the center of the hexagon and lies on the curve.
    center = mesh.vertices[9]
    target = mesh.vertices[10]

    assert np.allclose(center.point, 0.0)
    assert center.feature == target.feature == 0

    mesh.collapse_halfedge(mesh.find_halfedge(center, target))
    tracker.compact(mesh)
    mesh._check()

    assert len(mesh.anchors) == len(mesh.vertices) == 18
    assert target.feature == 0
    assert target.index == 9

    anchors, features = list(mesh.anchors), list(mesh.features)
    tracker.compact(mesh)

    assert mesh.anchors == anchors
    assert mesh.features == features


def test_anchor_point(triangle):
    mesh = Mesh(*triangle)
    tracker = FeatureTracker(points=[[1.0, 0.0, 0.005]])
    tracker.seed(mesh)

    assert np.array_equal(tracker.anchor_point(mesh.vertices[1]),
                          [1.0, 0.0, 0.005])


@pytest.mark.parametrize('tolerance', [0.0, -1.0])
def test_invalid_tolerance(tolerance):
    with pytest.raises(ValueError):
        FeatureTracker(tolerance=tolerance)


def test_accessors(edge_curve):
    tracker = FeatureTracker(points=[0.0, 0.0, 1.0], curves=(edge_curve,),
                             tolerance=0.1)

    assert tracker.points.shape == (1, 3)
    assert tracker.curves == [edge_curve]
    assert tracker.tolerance == 0.1

    assert FeatureTracker().points.shape == (0, 3)
    assert FeatureTracker().curves == []
