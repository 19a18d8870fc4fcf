# Copyright 2025, isoremesh
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Feature tags.

Vertices may be pinned to fixed points (anchors) or constrained to feature
curves, edges may be constrained to feature curves. Tags are integer
indices into the sequences of fixed points and feature curves, or
:obj:`None`. They are stored as mesh data blocks:

    - ``mesh.anchors`` / ``vertex.anchor``
    - ``mesh.features`` / ``vertex.feature``
    - ``mesh.edge_features`` / ``halfedge.feature``

The mesh extends these blocks when it creates vertices and edges and
shrinks them when it removes deleted items, hence tags stay attached to
their items under all topological modifications.
"""

import numpy as np

import isoremesh.linalg as linalg


class FeatureTracker:
    """ Anchor and feature curve bookkeeping.

    Parameters
    ----------
    points : array_like, shape (n, 3), optional
        Fixed points.
    curves : sequence, optional
        Feature curves. Objects with a ``closest_point(point)`` method
        returning a pair ``(t, point)``.
    tolerance : float, optional
        Proximity tolerance.

    Raises
    ------
    ValueError
        For a non-positive tolerance.
    """

    def __init__(self, points=(), curves=(), tolerance=0.01):
        if not tolerance > 0.0:
            raise ValueError(f'tolerance has to be positive, got {tolerance}')

        self._points = np.asarray(points, dtype=float).reshape(-1, 3)
        self._curves = list(curves)
        self._tolerance = tolerance

    @property
    def points(self):
        """ Fixed points.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def curves(self):
        """ Feature curves.

        :type: list
        """
        return self._curves

    @property
    def tolerance(self):
        """ Proximity tolerance.

        :type: float
        """
        return self._tolerance

    def seed(self, mesh):
        """ Initialize tags.

        A vertex is anchored to the nearest fixed point closer than the
        tolerance and tagged with the nearest feature curve closer than
        the tolerance. An edge is tagged with the feature curve that is
        closer than the tolerance to both endpoints, ties are broken by
        the larger of the two endpoint distances. Existing tags are
        replaced.

        Parameters
        ----------
        mesh : Mesh
            Mesh without deleted items.
        """
        for name in ('anchors', 'features', 'edge_features'):
            if hasattr(mesh, name):
                delattr(mesh, name)

        # Distances of all vertices to all curves, one column per curve.
        dist = np.empty((len(mesh.vertices), len(self._curves)))

        for i, v in enumerate(mesh.vertices):
            for j, curve in enumerate(self._curves):
                _, point = curve.closest_point(v.point)
                dist[i, j] = linalg.norm(point - v.point)

        mesh.add_vertex_data('anchors', 'anchor',
                             [self._nearest_point(v.point)
                              for v in mesh.vertices])

        mesh.add_vertex_data('features', 'feature',
                             [_argmin_below(row, self._tolerance)
                              for row in dist])

        edge_features = [None] * (len(mesh.halfedges) // 2)

        for h in mesh.edges:
            row = np.maximum(dist[h.origin.index], dist[h.target.index])
            edge_features[h.edge] = _argmin_below(row, self._tolerance)

        mesh.add_edge_data('edge_features', 'feature', edge_features)

    def on_split(self, vertex, ends, feature):
        """ Propagate tags after an edge split.

        The new vertex is tagged with the feature of the split edge and is
        never anchored. The two sub-edges inherit the feature of the split
        edge, all other new edges carry no feature.

        Parameters
        ----------
        vertex : Vertex
            Vertex inserted by the split.
        ends : (Vertex, Vertex)
            Endpoints of the split edge.
        feature : int
            Feature of the split edge or :obj:`None`.
        """
        vertex.anchor = None
        vertex.feature = feature

        for w in ends:
            h = vertex._mesh.find_halfedge(vertex, w)

            assert h is not None
            h.feature = feature

    def compact(self, mesh):
        """ Remove deleted items and their tags.

        Parameters
        ----------
        mesh : Mesh
            Mesh seeded by this tracker.
        """
        mesh.clean()

        assert len(mesh.anchors) == len(mesh.vertices)
        assert len(mesh.features) == len(mesh.vertices)
        assert len(mesh.edge_features) == len(mesh.halfedges) // 2

    def anchor_point(self, vertex):
        """ Fixed point of an anchored vertex.

        Parameters
        ----------
        vertex : Vertex
            Anchored vertex.

        Returns
        -------
        ~numpy.ndarray, shape (3, )
            Fixed point.
        """
        return self._points[vertex.anchor]

    def curve(self, vertex):
        """ Feature curve of a vertex.

        Parameters
        ----------
        vertex : Vertex
            Vertex of a seeded mesh.

        Returns
        -------
        object
            Feature curve or :obj:`None`.
        """
        if vertex.feature is None:
            return None

        return self._curves[vertex.feature]

    def _nearest_point(self, point):
        """ Index of nearest fixed point within tolerance.
        """
        if not len(self._points):
            return None

        return _argmin_below(np.linalg.norm(self._points - point, axis=1),
                             self._tolerance)


def _argmin_below(values, bound):
    """ Index of the smallest value if it is below `bound`.

    Parameters
    ----------
    values : ~numpy.ndarray
        One-dimensional array.
    bound : float
        Exclusive upper bound.

    Returns
    -------
    int
        Index of the first minimal entry or :obj:`None`.
    """
    if not len(values):
        return None

    i = int(np.argmin(values))

    return i if values[i] < bound else None
