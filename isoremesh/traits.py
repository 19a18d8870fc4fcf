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

""" Geometric mesh traits.

Convenience functions to compute geometric mesh traits used during
remeshing: vertex normals, Laplace vectors and edge length statistics.
"""

import numpy as np

import isoremesh.linalg as linalg


def vertex_normal(vertex):
    """ Vertex normal.

    Compute vertex normal as area weighted average of triangle normals,
    i.e., the normalized sum of cross products of consecutive edges
    around the vertex. Pairs of edges that do not border a face are
    skipped.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector. The zero vector if all incident triangles
        are degenerate.

    Note
    ----
    Vertex normals are not well defined for isolated vertices, the
    result has :obj:`np.nan` entries in this case.
    """
    if vertex.isolated:
        return np.full_like(vertex.point, np.nan)

    normal = np.zeros_like(vertex.point)

    for h in vertex._hiter():
        if h._face is not None:
            normal += linalg.cross(h._prev.vector, h.vector)

    return linalg.unit(normal)


def cotan_weight(halfedge):
    r""" Cotangent weight of an edge.

    The sum :math:`|\cot \alpha| + |\cot \beta|` of the angles opposite
    the edge in its (at most two) incident triangles. Degenerate
    triangles do not contribute.

    Parameters
    ----------
    halfedge : Halfedge
        Either halfedge of the edge.

    Returns
    -------
    float
        Non-negative weight.
    """
    weight = 0.0

    for h in (halfedge, halfedge._pair):
        if h._face is None:
            continue

        apex = h._prev._origin.point

        u = h._origin.point - apex
        v = h._pair._origin.point - apex

        length = linalg.norm(linalg.cross(u, v))

        if length > 0.0:
            weight += abs(u.dot(v) / length)

    return weight


def cotan_laplacian(vertex):
    """ Cotangent weighted Laplacian.

    Weighted average of the vectors from `vertex` to its neighbors,
    weighted by :func:`cotan_weight`.

    Parameters
    ----------
    vertex : Vertex
        Non-isolated vertex.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Laplace vector. The zero vector if all weights vanish.
    """
    vector = np.zeros(3)
    weights = 0.0

    for h in vertex._hiter():
        weight = cotan_weight(h)

        vector += weight * h.vector
        weights += weight

    if weights == 0.0:
        return vector

    return vector / weights


def uniform_laplacian(vertex):
    """ Umbrella operator.

    Vector from `vertex` to the centroid of its neighbors.

    Parameters
    ----------
    vertex : Vertex
        Non-isolated vertex.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Laplace vector.
    """
    centroid = np.mean([w.point for w in vertex._viter()], axis=0)

    return centroid - vertex.point


def edge_length(mesh):
    """ Edge length statistics.

    Minimal, maximal, and average edge length of a mesh not accounting
    for deleted edges.

    Parameters
    ----------
    mesh : Mesh
        Mesh instance.

    Returns
    -------
    min : float
        Minimal edge length.
    max : float
        Maximal edge length.
    avg : float
        Average edge length.
    """
    min, max = np.inf, -np.inf
    avg, cnt = 0.0, 0

    for h in mesh.edges:
        length = linalg.norm(h.vector)

        avg += length
        cnt += 1

        min = length if length < min else min
        max = length if length > max else max

    return min, max, avg / cnt
