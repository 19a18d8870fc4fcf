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

""" Target edge length functions.

A length field is any object with a method ``evaluate(mesh, halfedge)``
returning the desired length of the edge of `halfedge` as positive float.
The result may only depend on the geometry of the edge, both halfedges
of an edge have to give the same result.
"""

import numpy as np


class ConstantLength:
    """ Uniform target edge length.

    Parameters
    ----------
    value : float
        Target edge length.
    """

    def __init__(self, value):
        self.value = float(value)

    def __repr__(self):
        return f'ConstantLength({self.value!r})'

    def evaluate(self, mesh, halfedge):
        return self.value


class DensityLength:
    r""" Inverse distance weighted target edge length.

    The length at a point :math:`\mathbf{x}` is a weighted average of
    sizes :math:`s_j` prescribed at sample points :math:`\mathbf{p}_j`
    and a background size :math:`s_0`,

    .. math::

        L(\mathbf{x}) = \frac{w_0 s_0 + \sum_j w_j s_j}{w_0 + \sum_j w_j},
        \quad w_j = \| \mathbf{x} - \mathbf{p}_j \|^{-k},

    evaluated at edge midpoints.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Sample points.
    sizes : array_like, shape (n, )
        Target lengths at sample points.
    falloff : int, optional
        Exponent :math:`k` of the inverse distance weights.
    base : float, optional
        Background size :math:`s_0`.
    weight : float, optional
        Background weight :math:`w_0`.

    Raises
    ------
    ValueError
        If the number of points and sizes do not match.
    """

    def __init__(self, points, sizes, falloff=2, base=1.0, weight=1.0):
        self.points = np.asarray(points, dtype=float).reshape(-1, 3)
        self.sizes = np.asarray(sizes, dtype=float).reshape(-1)

        if len(self.points) != len(self.sizes):
            raise ValueError(f'got {len(self.points)} points and ' +
                             f'{len(self.sizes)} sizes')

        self.falloff = falloff
        self.base = float(base)
        self.weight = float(weight)

    def __call__(self, point):
        """ Evaluate at a point.

        Parameters
        ----------
        point : array_like, shape (3, )
            Location in space.

        Returns
        -------
        float
            Target length. The size of a sample point that coincides
            with `point`.
        """
        dist = np.linalg.norm(self.points - point, axis=1)

        hit = np.flatnonzero(dist == 0.0)

        if len(hit):
            return float(self.sizes[hit[0]])

        weights = dist ** (-float(self.falloff))
        total = self.weight + weights.sum()

        return float((self.weight * self.base + weights @ self.sizes) / total)

    def evaluate(self, mesh, halfedge):
        return self(halfedge.midpoint)
