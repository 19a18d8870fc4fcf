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

""" Incremental isotropic remeshing.

A :class:`Remesher` drives a triangle mesh towards a prescribed local edge
length. Each iteration runs the following passes in order:

    1. target length evaluation,
    2. splitting of long edges,
    3. collapsing of short edges,
    4. edge flips (valence or angle based),
    5. tangential smoothing,
    6. projection onto the target surface and feature curves,
    7. removal of deleted mesh items.

Vertices touched by a split or collapse are marked as visited and do not
take part in further splits or collapses during the same iteration.
Anchored vertices never move, feature vertices slide along their curves.

The remesher is meant to be called repeatedly: the first call (or a call
with ``reset=True``) builds the mesh and its feature tags, every later
call performs a fixed number of iterations on the retained mesh.
"""

import math
from time import perf_counter

import numpy as np

import isoremesh.linalg as linalg
import isoremesh.traits as traits

from isoremesh.features import FeatureTracker
from isoremesh.hds import Mesh
from isoremesh.surface import TriangleSurface


class Remesher:
    """ Incremental remeshing engine.

    Parameters
    ----------
    length : object
        Target length field, an object with an ``evaluate(mesh, halfedge)``
        method, see :mod:`isoremesh.fields`.
    surface : object, optional
        Projection target with ``closest_point(point)`` and
        ``ray_intersect(origin, direction)`` methods. Defaults to the
        input mesh of the most recent reset.
    points : array_like, shape (n, 3), optional
        Fixed points. Vertices closer than `tolerance` are anchored.
    curves : sequence, optional
        Feature curves, objects with a ``closest_point(point)`` method.
    tolerance : float, optional
        Proximity tolerance for anchors and features.
    pull : float, optional
        Strength of the pull towards the target surface in [0, 1]. A value
        of zero enables minimal surface mode: cotangent smoothing, no
        surface projection.
    flip : {'angle', 'valence'}, optional
        Edge flip criterion. Valence based flipping requires ``pull > 0``,
        angle based flipping is used otherwise.
    iterations : int, optional
        Number of iterations per :meth:`step`.
    smooth : float, optional
        Smoothing strength.
    length_tol : float, optional
        Width of the tolerance band around the target length.
    quiet : bool, optional
        Suppress console output.

    Raises
    ------
    ValueError
        For invalid parameter values.
    """

    def __init__(self, length, *, surface=None, points=(), curves=(),
                 tolerance=0.01, pull=0.8, flip='angle', iterations=1,
                 smooth=0.8, length_tol=0.15, quiet=True):
        if not 0.0 <= pull <= 1.0:
            raise ValueError(f'pull strength {pull} not in [0, 1]')

        if flip not in ('angle', 'valence'):
            raise ValueError(f"unknown flip criterion '{flip}'")

        if iterations < 1:
            raise ValueError(f'iteration count {iterations} < 1')

        if smooth < 0.0:
            raise ValueError(f'smoothing strength {smooth} < 0')

        if not 0.0 <= length_tol < 1.0:
            raise ValueError(f'length tolerance {length_tol} not in [0, 1)')

        self.length = length
        self.surface = surface
        self.tracker = FeatureTracker(points, curves, tolerance)

        self.pull = pull
        self.flip = flip
        self.iterations = iterations
        self.strength = smooth
        self.length_tol = length_tol
        self.quiet = quiet

        self.mesh = None

        # Projection target of the current mesh.
        self._target = None

        # Per iteration scratch data.
        self._visited = set()
        self._lengths = dict()

    def __call__(self, points=None, faces=None, *, reset=False):
        """ Reset or step.

        The first call and any call with ``reset=True`` rebuild the mesh
        from the arguments without relaxing it. All other calls ignore
        the mesh arguments and perform :attr:`iterations` iterations.

        Parameters
        ----------
        points : array_like or Mesh, optional
            Vertex coordinates or a mesh.
        faces : array_like, optional
            Face definitions, 0-based vertex indexing.
        reset : bool, optional
            Force a reset.

        Raises
        ------
        ValueError
            If a reset is due and no input mesh is given.

        Returns
        -------
        Mesh
            The current mesh.
        """
        if reset or self.mesh is None:
            if points is None:
                raise ValueError('reset requires an input mesh')

            return self.reset(points, faces)

        return self.step()

    @property
    def stepping(self):
        """ Engine state.

        :obj:`False` until the first reset, :obj:`True` afterwards.

        :type: bool
        """
        return self.mesh is not None

    def reset(self, points, faces=None):
        """ (Re)initialize the engine.

        Builds the mesh, seeds anchors and features and selects the
        projection target. No relaxation takes place.

        Parameters
        ----------
        points : array_like or Mesh
            Vertex coordinates or a mesh. A mesh argument is copied.
        faces : array_like, optional
            Face definitions, required unless `points` is a mesh.

        Returns
        -------
        Mesh
            The new mesh.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        if isinstance(points, Mesh):
            mesh = points.copy()
            mesh.clean()
        else:
            mesh = Mesh(points, faces)

        self.tracker.seed(mesh)

        if self.surface is None:
            self._target = TriangleSurface.from_mesh(mesh)
        else:
            self._target = self.surface

        self.mesh = mesh
        self._visited = set()
        self._lengths = dict()

        if not self.quiet:
            num_anchors = sum(1 for a in mesh.anchors if a is not None)
            num_features = sum(1 for f in mesh.features if f is not None)

            print(f'{CBOLD}reset{CEND} {mesh.size[0]} vertices, ' +
                  f'{mesh.size[2]} faces')
            print(f'\t├─ {num_anchors} anchored vertices')
            print(f'\t└─ {num_features} feature vertices')

        return mesh

    def step(self):
        """ Relax the mesh.

        Performs :attr:`iterations` iterations.

        Raises
        ------
        RuntimeError
            If called before :meth:`reset`.
        TargetLengthError
            For invalid target lengths.

        Returns
        -------
        Mesh
            The current mesh.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        if self.mesh is None:
            raise RuntimeError('step() called before reset()')

        for k in range(self.iterations):
            start = perf_counter()

            self._visited = set()
            self.evaluate_lengths()

            splits = self.split_long_edges()
            collapses = self.collapse_short_edges()
            flips = self.flip_edges()

            self.smooth()
            self.project()
            self.compact()

            if not self.quiet:
                v, e, f = self.mesh.size
                lmin, lmax, lavg = traits.edge_length(self.mesh)

                print(f'iteration {CBOLD}{k + 1}/{self.iterations}{CEND}: ' +
                      f'{splits} splits, {collapses} collapses, ' +
                      f'{flips} flips ({perf_counter() - start:.3f} sec)')
                print(f'\t├─ {v} vertices, {e} edges, {f} faces')
                print(f'\t└─ edge length {lmin:.4f} / {lavg:.4f} / ' +
                      f'{lmax:.4f}')

        return self.mesh

    def evaluate_lengths(self):
        """ Target length evaluation.

        Evaluates the target length of every edge. Edges created later
        during the same iteration are evaluated on demand.

        Returns
        -------
        dict
            Maps the halfedge of an edge at even position to the target
            length of the edge.

        Raises
        ------
        TargetLengthError
            If the length field returns a non-positive or non-finite
            value.
        """
        self._lengths = dict()

        for h in self.mesh.edges:
            self._target_length(h)

        return self._lengths

    def split_long_edges(self):
        r""" Split pass.

        Splits edges longer than :math:`(1 + t) \frac{4}{3} L` at their
        midpoints. Only edges that exist at the beginning of the pass and
        whose endpoints are not visited are considered.

        Returns
        -------
        int
            Number of splits.
        """
        mesh = self.mesh
        visited = self._visited
        bound = (1.0 + self.length_tol) * 4.0 / 3.0

        count = 0

        for h in list(mesh.edges):
            u, w = h.origin, h.target

            if u in visited or w in visited:
                continue

            if not h.length > bound * self._target_length(h):
                continue

            feature = h.feature
            v = mesh.split_edge(h)

            if v is None:
                continue

            self.tracker.on_split(v, (u, w), feature)

            visited.add(v)
            visited.update(v.neighbors())

            count += 1

        return count

    def collapse_short_edges(self):
        r""" Collapse pass.

        Collapses edges shorter than :math:`(1 - t) \frac{4}{5} L`.
        Edges between free vertices with equal features collapse to their
        midpoint, otherwise the edge collapses towards the constrained
        endpoint. Edges between two anchored vertices never collapse, an
        anchored vertex only absorbs a feature vertex along a feature edge.

        Returns
        -------
        int
            Number of collapses.
        """
        mesh = self.mesh
        visited = self._visited
        bound = (1.0 - self.length_tol) * 4.0 / 5.0

        count = 0

        for h in list(mesh.edges):
            if h.deleted:
                continue

            u, w = h.origin, h.target

            if u in visited or w in visited:
                continue

            if u.anchor is not None and w.anchor is not None:
                continue

            if not h.length < bound * self._target_length(h):
                continue

            # Collapsing h.pair merges w into u, collapsing h merges u
            # into w.
            if u.anchor is None and w.anchor is None:
                if u.feature == w.feature:
                    survivor = mesh.collapse_halfedge(h.pair, h.midpoint)
                elif w.feature is None:
                    survivor = mesh.collapse_halfedge(h.pair)
                elif u.feature is None:
                    survivor = mesh.collapse_halfedge(h)
                else:
                    continue
            elif u.anchor is not None:
                if h.feature is None and w.feature is not None:
                    continue

                survivor = mesh.collapse_halfedge(h.pair)
            else:
                if h.feature is None and u.feature is not None:
                    continue

                survivor = mesh.collapse_halfedge(h)

            if survivor is None:
                continue

            visited.update(survivor.neighbors())
            count += 1

        return count

    def flip_edges(self):
        """ Flip pass.

        Interior edges without a feature tag are flipped if this improves
        the valence distribution (valence mode) or if the angles opposite
        the edge sum up to more than the angles opposite the other
        diagonal (angle mode, Delaunay criterion).

        Returns
        -------
        int
            Number of flips.
        """
        mesh = self.mesh

        if self.flip == 'valence' and self.pull > 0.0:
            improves = _improves_valence
        else:
            improves = _improves_angles

        count = 0

        for h in list(mesh.edges):
            if h.boundary or h.pair.boundary or h.feature is not None:
                continue

            if improves(h) and mesh.flip_edge(h) is not None:
                count += 1

        return count

    def smooth(self):
        """ Smoothing pass.

        Interior vertices that are neither anchored nor carry a feature
        are moved tangentially towards the centroid of their neighbors,
        preceded by cotangent smoothing in minimal surface mode. Vertices
        on the boundary or on a feature curve are moved towards their
        neighbors on the boundary or on the same curve instead.
        """
        mesh = self.mesh
        strength = self.strength

        free = [v for v in mesh.vertices
                if not v.deleted and not v.isolated and v.anchor is None]
        interior = [v for v in free if not v.boundary]

        if self.pull == 0.0:
            moves = [0.5 * strength * traits.cotan_laplacian(v)
                     for v in interior]

            for v, move in zip(interior, moves):
                if v.feature is None:
                    v.point = v.point + move

        moves = [strength * traits.uniform_laplacian(v) for v in interior]

        for v, move in zip(interior, moves):
            if v.feature is not None:
                continue

            normal = traits.vertex_normal(v)
            v.point = v.point + linalg.reject(move, normal)

        points = mesh.points

        for v in free:
            if v.naked:
                neighbors = [w for w in v.neighbors() if w.naked]

                if neighbors:
                    index = [w.index for w in neighbors]
                    average = np.mean(points[index], axis=0)
                    v.point = v.point + strength * (average - v.point)

            if v.feature is not None:
                neighbors = [w for w in v.neighbors()
                             if w.feature == v.feature or w.anchor is not None]

                if neighbors:
                    index = [w.index for w in neighbors]
                    average = np.mean(points[index], axis=0)
                    v.point = v.point + strength * (average - v.point)

    def project(self):
        """ Projection pass.

        Free vertices are pulled towards the target surface (unless in
        minimal surface mode), feature vertices are then moved onto their
        curves, anchored vertices are placed at their fixed points.
        """
        for v in self.mesh.vertices:
            if v.deleted:
                continue

            if v.anchor is not None:
                v.point = self.tracker.anchor_point(v)
                continue

            if self.pull > 0.0 and not v.isolated:
                target = self._surface_point(v)

                if target is not None:
                    v.point = (1.0 - self.pull) * v.point + self.pull * target

            curve = self.tracker.curve(v)

            if curve is not None:
                _, v.point = curve.closest_point(v.point)

    def compact(self):
        """ Remove deleted mesh items along with their tags.
        """
        self.tracker.compact(self.mesh)

    def _target_length(self, halfedge):
        """ Cached target length of an edge.
        """
        h = halfedge if not halfedge.index & 1 else halfedge.pair
        length = self._lengths.get(h, None)

        if length is None:
            length = float(self.length.evaluate(self.mesh, h))

            if not (math.isfinite(length) and length > 0.0):
                raise TargetLengthError(f'target length {length!r} of edge ' +
                                        f'{h.edge} at {h.midpoint} is not ' +
                                        'a positive number')

            self._lengths[h] = length

        return length

    def _surface_point(self, vertex):
        """ Projection of a vertex onto the target surface.

        Casts rays along the vertex normal in both directions and picks
        the nearer hit closer than one unit, falls back to the closest
        point otherwise.

        Returns
        -------
        ~numpy.ndarray, shape (3, )
            Target point or :obj:`None`.
        """
        point = vertex.point.copy()
        normal = traits.vertex_normal(vertex)

        hits = []

        if np.all(np.isfinite(normal)) and normal.any():
            for direction in (normal, -normal):
                hit = self._target.ray_intersect(point, direction)

                if hit is not None and 0.0 < hit[0] < 1.0:
                    hits.append(hit)

        if hits:
            return min(hits, key=lambda hit: hit[0])[1]

        return self._target.closest_point(point)


def _improves_valence(halfedge):
    """ Valence based flip criterion.

    Vertices incident to boundary edges count two virtual neighbors.
    """
    h = halfedge
    verts = (h.origin, h.target, h.prev.origin, h.pair.prev.origin)

    valences = [v.degree + 2 if v.naked else v.degree for v in verts]

    current = sum(abs(val - 6) for val in valences)
    flipped = sum(abs(val - opt) for val, opt in zip(valences, (7, 7, 5, 5)))

    return current > flipped


def _improves_angles(halfedge):
    """ Angle based flip criterion.

    Compares the angles at the endpoints of the edge (opposite the other
    diagonal) with the angles at the apex vertices (opposite the edge).
    """
    h = halfedge

    p1 = h.origin.point
    p2 = h.target.point
    p3 = h.prev.origin.point
    p4 = h.pair.prev.origin.point

    at_ends = linalg.angle(p3 - p1, p4 - p1) + linalg.angle(p4 - p2, p3 - p2)
    at_apexes = linalg.angle(p1 - p4, p2 - p4) + linalg.angle(p2 - p3, p1 - p3)

    return at_apexes > at_ends


class TargetLengthError(ValueError):
    """ Invalid target edge length.

    Raised if a length field returns a non-positive or non-finite value.
    """

    pass
