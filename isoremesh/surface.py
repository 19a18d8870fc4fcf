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

""" Target geometry.

Projection targets used during remeshing. A target surface provides

    - ``closest_point(point)`` returning a point or :obj:`None`,
    - ``ray_intersect(origin, direction)`` returning a pair
      ``(t, point)`` or :obj:`None`,

a feature curve provides ``closest_point(point)`` returning a pair
``(t, point)``. Any object with these methods can be used, the classes
in this module are brute-force implementations based on vectorized NumPy
code. They are fine for meshes of moderate size.
"""

import numpy as np


class TriangleSurface:
    """ Triangle soup projection target.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Vertex coordinates.
    faces : array_like, shape (m, 3)
        Triangles, 0-based vertex indexing.

    Raises
    ------
    ValueError
        If there are no triangles or the arrays have the wrong shape.

    Note
    ----
    Every query tests all triangles, there is no spatial index. A
    projection pass over a mesh with `n` vertices therefore costs
    :math:`O(nm)` operations. Wrap a BVH or octree based query object
    with the same two methods for large targets.
    """

    def __init__(self, points, faces):
        points = np.asarray(points, dtype=float)
        faces = np.asarray(faces, dtype=int)

        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError('points have to be of shape (n, 3)')

        if faces.ndim != 2 or faces.shape[1] != 3 or not len(faces):
            raise ValueError('faces have to be of shape (m, 3), m > 0')

        self._a = points[faces[:, 0]]
        self._b = points[faces[:, 1]]
        self._c = points[faces[:, 2]]

    @classmethod
    def from_mesh(cls, mesh):
        """ Projection target from a triangle mesh.

        Parameters
        ----------
        mesh : Mesh
            Triangle mesh, deleted items are ignored.

        Returns
        -------
        TriangleSurface
            Projection target. Independent of later changes to `mesh`.
        """
        return cls(*mesh.to_arrays())

    def __len__(self):
        return len(self._a)

    def closest_point(self, point):
        """ Closest point query.

        Parameters
        ----------
        point : array_like, shape (3, )
            Query point.

        Returns
        -------
        ~numpy.ndarray, shape (3, )
            Closest point on the surface or :obj:`None` if no triangle
            yields a finite result.
        """
        p = np.asarray(point, dtype=float)
        a, b, c = self._a, self._b, self._c

        ab = b - a
        ac = c - a
        ap = p - a
        bp = p - b
        cp = p - c

        d1 = np.einsum('ij,ij->i', ab, ap)
        d2 = np.einsum('ij,ij->i', ac, ap)
        d3 = np.einsum('ij,ij->i', ab, bp)
        d4 = np.einsum('ij,ij->i', ac, bp)
        d5 = np.einsum('ij,ij->i', ab, cp)
        d6 = np.einsum('ij,ij->i', ac, cp)

        va = d3*d6 - d5*d4
        vb = d5*d2 - d1*d6
        vc = d1*d4 - d3*d2

        # Voronoi regions of a triangle's vertices, edges and interior.
        # Later assignments take precedence.
        with np.errstate(divide='ignore', invalid='ignore'):
            denom = 1.0 / (va + vb + vc)
            result = a + ab * (vb*denom)[:, None] + ac * (vc*denom)[:, None]

            w = (d4 - d3) / ((d4 - d3) + (d5 - d6))
            mask = (va <= 0.0) & (d4 - d3 >= 0.0) & (d5 - d6 >= 0.0)
            result[mask] = (b + (c - b) * w[:, None])[mask]

            w = d2 / (d2 - d6)
            mask = (vb <= 0.0) & (d2 >= 0.0) & (d6 <= 0.0)
            result[mask] = (a + ac * w[:, None])[mask]

            mask = (d6 >= 0.0) & (d5 <= d6)
            result[mask] = c[mask]

            v = d1 / (d1 - d3)
            mask = (vc <= 0.0) & (d1 >= 0.0) & (d3 <= 0.0)
            result[mask] = (a + ab * v[:, None])[mask]

            mask = (d3 >= 0.0) & (d4 <= d3)
            result[mask] = b[mask]

            mask = (d1 <= 0.0) & (d2 <= 0.0)
            result[mask] = a[mask]

        dist = np.einsum('ij,ij->i', result - p, result - p)
        dist[~np.isfinite(dist)] = np.inf

        i = np.argmin(dist)

        if not np.isfinite(dist[i]):
            return None

        return result[i]

    def ray_intersect(self, origin, direction, eps=1e-12):
        r""" Ray intersection query.

        Möller-Trumbore intersection of the ray :math:`\mathbf{o} + t
        \mathbf{d}` with all triangles. Only hits with :math:`t > 0` are
        reported.

        Parameters
        ----------
        origin : array_like, shape (3, )
            Ray origin.
        direction : array_like, shape (3, )
            Ray direction, not necessarily of unit length.
        eps : float, optional
            Tolerance for parallel rays and hits at the origin.

        Returns
        -------
        t : float
            Ray parameter of the nearest hit.
        point : ~numpy.ndarray, shape (3, )
            Point of intersection.

        Note
        ----
        Returns :obj:`None` (not a pair) if the ray misses.
        """
        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)

        e1 = self._b - self._a
        e2 = self._c - self._a

        pvec = np.cross(d, e2)
        det = np.einsum('ij,ij->i', e1, pvec)

        valid = np.abs(det) > eps

        with np.errstate(divide='ignore', invalid='ignore'):
            inv = 1.0 / det

            tvec = o - self._a
            u = np.einsum('ij,ij->i', tvec, pvec) * inv

            qvec = np.cross(tvec, e1)
            v = (qvec @ d) * inv
            t = np.einsum('ij,ij->i', e2, qvec) * inv

        hit = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > eps)

        if not hit.any():
            return None

        t = np.where(hit, t, np.inf)
        i = np.argmin(t)

        return float(t[i]), o + t[i] * d


class Polyline:
    """ Polyline feature curve.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Polyline vertices, n > 1.
    closed : bool, optional
        Connect last and first vertex.

    Raises
    ------
    ValueError
        If less than two vertices are given.
    """

    def __init__(self, points, closed=False):
        points = np.asarray(points, dtype=float)

        if points.ndim != 2 or points.shape[1] != 3 or len(points) < 2:
            msg = 'polyline requires an array of shape (n, 3), n > 1'
            raise ValueError(msg)

        if closed:
            points = np.vstack((points, points[:1]))

        self._points = points
        self._closed = closed

        lengths = np.linalg.norm(np.diff(points, axis=0), axis=1)
        self._params = np.concatenate(([0.0], np.cumsum(lengths)))

    @property
    def points(self):
        """ Polyline vertices.

        For closed polylines the first vertex is repeated at the end.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def closed(self):
        """ Closed polyline flag.

        :type: bool
        """
        return self._closed

    @property
    def length(self):
        """ Polyline length.

        :type: float
        """
        return float(self._params[-1])

    def point_at(self, t):
        """ Evaluate at arc-length parameter.

        Parameters
        ----------
        t : float
            Arc-length parameter, clamped to ``[0, length]``.

        Returns
        -------
        ~numpy.ndarray, shape (3, )
            Point on the polyline.
        """
        return np.array([np.interp(t, self._params, self._points[:, k])
                         for k in range(3)])

    def closest_point(self, point):
        """ Closest point query.

        Parameters
        ----------
        point : array_like, shape (3, )
            Query point.

        Returns
        -------
        t : float
            Arc-length parameter of the closest point.
        point : ~numpy.ndarray, shape (3, )
            Closest point on the polyline.
        """
        p = np.asarray(point, dtype=float)

        a = self._points[:-1]
        ab = self._points[1:] - a

        sqrd = np.einsum('ij,ij->i', ab, ab)

        # Degenerate segments are represented by their first vertex.
        with np.errstate(divide='ignore', invalid='ignore'):
            s = np.einsum('ij,ij->i', p - a, ab) / sqrd

        s = np.clip(np.nan_to_num(s, nan=0.0), 0.0, 1.0)

        closest = a + ab * s[:, None]
        dist = np.einsum('ij,ij->i', closest - p, closest - p)

        i = np.argmin(dist)
        t = self._params[i] + s[i] * (self._params[i+1] - self._params[i])

        return float(t), closest[i]
