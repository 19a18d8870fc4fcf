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

""" Basic vector math.

Non-vectorized helpers for single vectors in 3-space. For the small
vectors handled one at a time during local mesh updates these are faster
than their vectorized NumPy counterparts.
"""

import math
import numpy as np


def angle(v, w):
    r""" Angle between vectors.

    Unsigned angle between vectors :math:`\mathbf{v}` and :math:`\mathbf{w}`
    in radians.

    Parameters
    ----------
    v, w : ~numpy.ndarray, shape (3, )
        Vector in 3-space.

    Returns
    -------
    float
        Angle in the closed interval :math:`[0, \pi]`.

    Note
    ----
    None of the vectors may be the zero vector.
    """
    return math.acos(clamp(v.dot(w) / (norm(v) * norm(w)), -1.0, 1.0))


def clamp(x, lo, hi):
    """ Clamp value to range.

    Clamp `x` to the closed interval [`lo`, `hi`].

    Parameters
    ----------
    x : float
        Value to clamp.
    lo : float
        Lower bound.
    hi : float
        Upper bound.

    Returns
    -------
    float
        Clamped value.
    """
    assert lo <= hi

    # The order of arguments keeps the data type of x if it is within
    # bounds.
    return max(min(x, hi), lo)


def cross(u, v):
    r""" Cross product.

    Alternative to NumPy's vectorized :func:`~numpy.cross` function.

    Parameters
    ----------
    u, v : array_like, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Cross product of vectors :math:`\mathbf{u}` and :math:`\mathbf{v}`.
    """
    # Unpack the arrays. This will also catch any problem with array shape.
    u0, u1, u2 = u
    v0, v1, v2 = v

    return np.array([u1*v2 - u2*v1,
                     u2*v0 - u0*v2,
                     u0*v1 - u1*v0])


def norm(u):
    r""" Length of vector.

    Alternative to NumPy's vectorized :func:`~numpy.linalg.norm` function.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (n, )
        Vector in :math:`\mathbb{R}^n`.

    Returns
    -------
    float
        Euclidean length of the vector :math:`\mathbf{u}`.
    """
    return math.sqrt(u.dot(u))


def unit(u):
    r""" Vector normalization.

    Convenience function to normalize a vector.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Normalized copy of input vector. The zero vector is returned
        unchanged.
    """
    length = norm(u)

    if length == 0.0:
        return u.copy()

    return u / length


def reject(u, n):
    r""" Tangential component.

    Removes the component of :math:`\mathbf{u}` along the unit vector
    :math:`\mathbf{n}`, i.e., computes :math:`\mathbf{u} - (\mathbf{u}^T
    \mathbf{n}) \mathbf{n}`.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Vector in :math:`\mathbb{R}^3`.
    n : ~numpy.ndarray, shape (3, )
        Unit vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Vector orthogonal to :math:`\mathbf{n}`.
    """
    return u - n * u.dot(n)
