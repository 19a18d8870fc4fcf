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

""" Halfedge data structure.

An orientable 2-manifold triangle mesh (with or without boundary) is
described by three containers:

    - a list of :class:`Vertex` objects,
    - a list of :class:`Halfedge` objects,
    - and a list of :class:`Face` objects.

The halfedge list is organized by edges: the two halfedges of edge ``i``
are stored at positions ``2*i`` and ``2*i+1``. Mesh items are stable
handles. Topological modifications mark items as deleted instead of
removing them, :meth:`Mesh.clean` removes deleted items and assigns new
contiguous indices without changing the relative order of the surviving
items.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

from pathlib import Path
from time import perf_counter

import numpy as np

import isoremesh.obj as obj


class Mesh:
    """ Mesh kernel.

    The combinatorics of a mesh can be built by reading from a file or
    by converting a sequence of vertex coordinates and a sequence of face
    definitions to its halfedge representation. Polygonal faces are
    split into triangle fans.

    Parameters
    ----------
    points : array_like, shape (n, 3), optional
        Vertex coordinates.
    faces : array_like, optional
        Face definitions, 0-based vertex indexing.
    name : str, optional
        Name tag.

    Raises
    ------
    NonManifoldError
        When trying to initialize a mesh from non-manifold data.
    ValueError
        For invalid face definitions or coordinate arrays.
    IndexError
        If a face refers to a vertex that does not exist.
    """

    def __init__(self, points=None, faces=None, *, name=None):
        """ Initialize from vertex and face lists.
        """
        CWHITERED = '\33[41m'               # white on red background
        CEND = '\33[0m'

        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        # Always copy. The coordinate array is replaced when vertices are
        # added or removed, external views are never resized.
        if points is None:
            self._points = np.empty((0, 3))
        else:
            self._points = np.array(points, dtype=float)

        if self._points.ndim != 2 or self._points.shape[1] != 3:
            msg = f'points of shape {self._points.shape}, expected (n, 3)'
            raise ValueError(msg)

        self._verts = [Vertex(i, parent=self)
                       for i in range(len(self._points))]
        self._halfs = []
        self._faces = []

        # User defined vertex and edge data. Each container holds tuples
        # (name, attr, default) that describe the mesh attribute name, the
        # mesh item property name and the default value when adding a new
        # mesh item of the respective type.
        self._vattr = []
        self._eattr = []

        if faces is not None:
            self._build(faces)

        if any(v.isolated for v in self._verts):
            print(f'{CWHITERED}there are isolated vertices{CEND}')

        self.name = name

    def __iter__(self):
        """ Face iterator.

        The returned iterator visits all faces of a mesh that are **not**
        marked as deleted in order of ascending face indices.

        Yields
        ------
        Face
            Next face in insertion order traversal.
        """
        return (f for f in self._faces if not f._deleted)

    def __bool__(self):
        return True

    @property
    def points(self):
        """ Vertex coordinate array.

        Direct read and write access to vertex coordinates. Changing the
        size of the coordinate array breaks the halfedge data structure.

        :type: ~numpy.ndarray

        Note
        ----
        The vertex coordinate array contains coordinate entries of deleted
        vertices. Calling :meth:`clean` removes those entries.
        """
        return self._points

    @points.setter
    def points(self, value):
        value = np.asarray(value, dtype=float)

        if value.shape != self._points.shape:
            raise ValueError(f'coordinate array of shape {value.shape} ' +
                             f'does not match {self._points.shape}')

        self._points = value

    @property
    def vertices(self):
        """ Vertex list.

        Read access to the vertex list. This list should not be modified
        directly. It may contain deleted vertices.

        :type: list[Vertex]
        """
        return self._verts

    @property
    def halfedges(self):
        """ Halfedge list.

        Read access to the halfedge list. The pair of the halfedge at
        position ``i`` is found at position ``i ^ 1``. It may contain
        deleted halfedges.

        :type: list[Halfedge]
        """
        return self._halfs

    @property
    def edges(self):
        """ Edge iterator.

        Visits the halfedges at even positions of the halfedge list that
        are not marked as deleted, i.e., one halfedge per live edge in
        ascending edge index order.

        :type: generator
        """
        return (h for h in self._halfs[::2] if not h._deleted)

    @property
    def faces(self):
        """ Face list.

        Read access to the face list. This list should not be modified
        directly. It may contain deleted faces.

        :type: list[Face]
        """
        return self._faces

    @property
    def size(self):
        """ Mesh size.

        Mesh size **not** accounting for deleted items. The attribute value
        :math:`(v, e, f)` holds the number of vertices, the number of edges,
        and the number of faces.

        :type: (int, int, int)
        """
        return (sum(1 for v in self._verts if not v._deleted),
                sum(1 for _ in self.edges),
                sum(1 for _ in self))

    @property
    def name(self):
        """ Name property.

        :type: str

        Note
        ----
        The returned string does not include a directory prefix or a type
        suffix.
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value if value is None else Path(value).stem

    @classmethod
    def read(cls, filename, quiet=True):
        """ Read mesh from file.

        Parameters
        ----------
        filename : str
            Name of an OBJ file.
        quiet : bool, optional
            Suppress console output.

        Returns
        -------
        Mesh
            Mesh object.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        if not quiet:
            start = perf_counter()
            print(f'reading {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        verts, faces = obj.read(filename)

        if not quiet:
            print(f' done ({perf_counter()-start:.3f} sec)')
            print(f'\t├─ {len(verts)} vertices')
            print(f'\t└─ {len(faces)} faces')

        return cls(verts, faces, name=filename)

    def write(self, filename, quiet=True):
        """ Write mesh to file.

        Deleted mesh items are skipped, the written vertex indices are
        the indices the vertices would have after :meth:`clean`.

        Parameters
        ----------
        filename : str
            Name of an OBJ file.
        quiet : bool, optional
            Suppress console output.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        if not quiet:
            start = perf_counter()
            print(f'writing {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        points, faces = self.to_arrays()
        obj.write(filename, points, faces)

        if not quiet:
            print(f' done ({perf_counter()-start:.3f} sec)')

    def copy(self):
        """ Mesh copy.

        Copies the combinatorics, the coordinate array and all data
        blocks. Deleted items are copied as deleted items without
        references, indices are preserved.

        Returns
        -------
        Mesh
            Independent copy.
        """
        other = self.__class__(name=self._name)
        other._points = self._points.copy()

        other._verts = [Vertex(v._idx, parent=other) for v in self._verts]
        other._halfs = [Halfedge(h._idx, None) for h in self._halfs]
        other._faces = [Face(f._idx) for f in self._faces]

        verts, halfs, faces = other._verts, other._halfs, other._faces

        for v, x in zip(self._verts, verts):
            x._deleted = v._deleted

            if not v._deleted and v._halfedge is not None:
                x._halfedge = halfs[v._halfedge._idx]

        for h, x in zip(self._halfs, halfs):
            x._deleted = h._deleted
            x._pair = halfs[h._idx ^ 1]

            if not h._deleted:
                x._origin = verts[h._origin._idx]
                x._next = halfs[h._next._idx]
                x._prev = halfs[h._prev._idx]
                x._face = None if h._face is None else faces[h._face._idx]

        for f, x in zip(self._faces, faces):
            x._deleted = f._deleted

            if not f._deleted:
                x._halfedge = halfs[f._halfedge._idx]

        for name, attr, default in self._vattr + self._eattr:
            setattr(other, name, list(getattr(self, name)))

        other._vattr = list(self._vattr)
        other._eattr = list(self._eattr)

        return other

    def to_arrays(self):
        """ Export vertex coordinates and face definitions.

        Returns
        -------
        points : ~numpy.ndarray, shape (n, 3)
            Coordinates of vertices not marked as deleted.
        faces : ~numpy.ndarray, shape (m, 3)
            Triangles, indexing into `points`.
        """
        vidx = [i for i, v in enumerate(self._verts) if not v._deleted]
        vmap = {old: new for new, old in enumerate(vidx)}

        points = self._points[vidx].copy()
        faces = np.array([[vmap[v._idx] for v in f] for f in self],
                         dtype=int).reshape(-1, 3)

        return points, faces

    def add_vertex(self, point):
        """ Create and add new vertex.

        Parameters
        ----------
        point : array_like, shape (3, )
            Vertex coordinates.

        Raises
        ------
        ValueError
            If `point` has the wrong shape.

        Returns
        -------
        Vertex
            The newly created, isolated :class:`Vertex` instance.

        Note
        ----
        All vertex data blocks are extended by the `default` value
        specified when the data block was added.
        """
        self._points = obj._array_append(self._points, point)

        v = Vertex(len(self._verts), parent=self)

        self._verts.append(v)
        self._add_attr_values(*self._vattr)

        return v

    def add_vertex_data(self, name, attr, data, default=None):
        """ Add vertex data.

        The data block as a whole can be accessed via ``self.name`` and
        the value ``data[v]`` as ``v.attr``. The mesh keeps the data block
        aligned with its vertex list: new vertices append `default`,
        :meth:`clean` drops the entries of deleted vertices.

        Parameters
        ----------
        name : str
            Name of the data block.
        attr : str
            Name of vertex attribute.
        data : list
            Data object, one entry per vertex.
        default : object, optional
            Immutable default vertex attribute value.

        Raises
        ------
        ValueError
            If a data block of the same name already exists or if the
            length of `data` does not match the number of vertices.
        """

        def get(self):
            # self refers to a vertex instance
            return getattr(self._mesh, private_name)[self._idx]

        def get_data(self):
            # self refers to a mesh instance
            return getattr(self, private_name)

        def set(self, value):
            getattr(self._mesh, private_name)[self._idx] = value

        def set_data(self, value):
            setattr(self, private_name, value)

        def del_data(self):
            self._vattr[:] = [a for a in self._vattr if a[0] != private_name]
            delattr(self, private_name)

        private_name = '_' + name

        if hasattr(self, private_name):
            raise ValueError(f"data block '{name}' already exists")

        if len(data) != len(self._verts):
            msg = (f"data block '{name}' has {len(data)} entries, " +
                   f"expected {len(self._verts)}")
            raise ValueError(msg)

        setattr(self, private_name, data)

        # Memory management functions need this information.
        self._vattr.append((private_name, attr, default))

        # Attribute access via properties. One global property bound to
        # the mesh and local properties bound to vertices.
        setattr(self.__class__, name, property(get_data, set_data, del_data))
        setattr(Vertex, attr, property(get, set))

    def add_edge_data(self, name, attr, data, default=None):
        """ Add edge data.

        The data block as a whole can be accessed via ``self.name`` and
        the value ``data[h.edge]`` as ``h.attr``. Both halfedges of an edge
        share the same value.

        Parameters
        ----------
        name : str
            Name of the data block.
        attr : str
            Name of halfedge attribute.
        data : list
            Data object, one entry per edge.
        default : object, optional
            Immutable default edge attribute value.

        Raises
        ------
        ValueError
            If a data block of the same name already exists or if the
            length of `data` does not match the number of edges.

        Note
        ----
        See :meth:`~Mesh.add_vertex_data` for a discussion of data block
        management.
        """

        def get(self):
            # self refers to a halfedge instance
            return getattr(self._origin._mesh, private_name)[self._idx >> 1]

        def get_data(self):
            # self refers to a mesh instance
            return getattr(self, private_name)

        def set(self, value):
            getattr(self._origin._mesh, private_name)[self._idx >> 1] = value

        def set_data(self, value):
            setattr(self, private_name, value)

        def del_data(self):
            self._eattr[:] = [a for a in self._eattr if a[0] != private_name]
            delattr(self, private_name)

        private_name = '_' + name

        if hasattr(self, private_name):
            raise ValueError(f"data block '{name}' already exists")

        if len(data) != len(self._halfs) // 2:
            msg = (f"data block '{name}' has {len(data)} entries, " +
                   f"expected {len(self._halfs) // 2}")
            raise ValueError(msg)

        setattr(self, private_name, data)
        self._eattr.append((private_name, attr, default))

        setattr(self.__class__, name, property(get_data, set_data, del_data))
        setattr(Halfedge, attr, property(get, set))

    def find_halfedge(self, v, w):
        """ Halfedge lookup.

        Parameters
        ----------
        v : Vertex
            Origin vertex.
        w : Vertex
            Target vertex.

        Returns
        -------
        Halfedge
            The halfedge pointing from `v` to `w` or :obj:`None` if the
            vertices are not adjacent.
        """
        for h in v._hiter():
            if h._pair._origin is w:
                return h

        return None

    def clean(self):
        """ Garbage collection.

        Removes all deleted mesh items from the respective containers and
        shrinks all data blocks accordingly. Surviving items keep their
        relative order. Previously obtained indices may become invalid,
        item handles stay valid.

        Note
        ----
        Calling this method on a mesh without deleted items has no
        effect.
        """
        assert len(self._points) == len(self._verts)

        vidx = [i for i, v in enumerate(self._verts) if not v._deleted]
        eidx = [i for i, h in enumerate(self._halfs[::2]) if not h._deleted]

        # Attribute data blocks have to be rearranged before changing the
        # corresponding mesh item container!
        for attr, idx in ((self._vattr, vidx), (self._eattr, eidx)):
            for name, _, _ in attr:
                data = getattr(self, name)
                data[:] = [data[i] for i in idx]

        self._points = self._points[vidx]

        # Invalidate all attributes of items removed from the mesh. This
        # should prevent accidental access by triggering assertions.
        for item in (*self._verts, *self._halfs, *self._faces):
            if item._deleted:
                item._invalidate()

        self._verts[:] = [self._verts[i] for i in vidx]
        self._halfs[:] = [h for i in eidx for h in self._halfs[2*i:2*i+2]]
        self._faces[:] = [f for f in self._faces if not f._deleted]

        for container in (self._verts, self._halfs, self._faces):
            for i, item in enumerate(container):
                item._idx = i

    def split_edge(self, halfedge, point=None):
        """ Split edge.

        Subdivides an edge by inserting a new vertex. Each adjacent
        triangle is split into two triangles by connecting the new vertex
        with the apex opposite the edge.

        Parameters
        ----------
        halfedge : Halfedge
            Either halfedge of the edge to split.
        point : array_like, optional
            Coordinates of the inserted vertex. By default the edge's
            :attr:`~Halfedge.midpoint` is used.

        Returns
        -------
        Vertex
            The newly inserted vertex or :obj:`None` if `halfedge` is
            marked as deleted or the split would produce a duplicate
            edge.

        Note
        ----
        The edge index of `halfedge` is kept by the sub-edge incident
        with ``halfedge.origin``. The sub-edge incident with the former
        target gets a new edge index.
        """
        if halfedge._deleted:
            return None

        h0 = halfedge
        p0 = h0._pair

        u = h0._origin
        w = p0._origin

        left = h0._face
        right = p0._face

        # Two triangles sharing all three vertices. The two new diagonals
        # would connect the same pair of vertices.
        if (left is not None and right is not None
                and h0._prev._origin is p0._prev._origin):
            return None

        if point is None:
            point = h0.midpoint

        if left is not None:
            hn, hp = h0._next, h0._prev
            a = hp._origin

        if right is not None:
            pn, pp = p0._next, p0._prev
            b = pp._origin

        v = self.add_vertex(point)

        # The halfedge h0 now ends at v, hence its pair has to start at v.
        # The second half of the edge is a new edge (v, w).
        h1, p1 = self._add_edge(v, w)

        p0._origin = v
        v._halfedge = h1

        if w._halfedge is p0:
            w._halfedge = p1

        if left is not None:
            d, dp = self._add_edge(v, a)

            self._link(h0, d, hp, left)
            self._link(h1, hn, dp, self._add_face())
        else:
            # Boundary loop (..., h0, h1, ...).
            h1._next = h0._next
            h1._next._prev = h1
            h0._next = h1
            h1._prev = h0

        if right is not None:
            e, ep = self._add_edge(v, b)

            self._link(p0, pn, ep, right)
            self._link(p1, e, pp, self._add_face())
        else:
            # Boundary loop (..., p1, p0, ...).
            p1._prev = p0._prev
            p1._prev._next = p1
            p0._prev = p1
            p1._next = p0

        return v

    def collapse_halfedge(self, halfedge, point=None):
        """ Perform edge collapse.

        Merge the :attr:`~Halfedge.origin` of `halfedge` into its
        :attr:`~Halfedge.target`. The edge and the (at most two) triangles
        incident with the edge are marked as deleted, as are the edges
        from the origin to the apex vertices, which merge with the edges
        from the target to the apex vertices.

        Parameters
        ----------
        halfedge : Halfedge
            Halfedge to be contracted.
        point : array_like, optional
            New coordinates of the surviving vertex.

        Returns
        -------
        Vertex
            The surviving vertex, i.e., the former target of `halfedge`,
            or :obj:`None` if the halfedge is marked as deleted or not
            :attr:`~Halfedge.collapsible`. The mesh is not modified in
            the latter case.
        """
        if halfedge._deleted or not halfedge.collapsible:
            return None

        h = halfedge
        p = h._pair

        v = h._origin                       # removed
        w = p._origin                       # survives

        left = h._face
        right = p._face

        # Outgoing halfedges of v before any modification.
        ring = list(v._hiter())

        if left is not None:
            hn, hp = h._next, h._prev
            q = hp._pair
            a = hp._origin

            # Edge (w, a) takes the place of edge (v, a) in the face on
            # the other side of (v, a).
            self._replace(q, hn)

            if a._halfedge is hp:
                a._halfedge = hn._pair

            left._deleted = True
            hp._deleted = q._deleted = True
        else:
            h._prev._next = h._next
            h._next._prev = h._prev

        if right is not None:
            pn, pp = p._next, p._prev
            r = pn._pair
            b = pp._origin

            self._replace(r, pp)

            if b._halfedge is r:
                b._halfedge = pp

            right._deleted = True
            pn._deleted = r._deleted = True
        else:
            p._prev._next = p._next
            p._next._prev = p._prev

        h._deleted = p._deleted = True
        v._deleted = True

        for x in ring:
            if not x._deleted:
                x._origin = w

        w._halfedge = hn if left is not None else h._next

        if point is not None:
            w.point = point

        return w

    def flip_edge(self, halfedge):
        """ Flip edge.

        Replaces an interior edge by the other diagonal of the
        quadrilateral formed by its two incident triangles.

        Parameters
        ----------
        halfedge : Halfedge
            The halfedge to be flipped.

        Returns
        -------
        Halfedge
            The halfedge resulting from the edge flip (same handle, same
            edge index) or :obj:`None` if the edge is not
            :attr:`~Halfedge.flippable`.
        """
        if not halfedge.flippable:
            return None

        h = halfedge
        p = h._pair

        u = h._origin
        w = p._origin

        hn, hp = h._next, h._prev
        pn, pp = p._next, p._prev

        a = hp._origin
        b = pp._origin

        # Unconditional re-assignment of outgoing halfedges. Not always
        # necessary.
        u._halfedge = pn
        w._halfedge = hn

        h._origin = b
        p._origin = a

        self._link(h, hp, pn, h._face)
        self._link(p, pp, hn, p._face)

        return h

    def _add_attr_values(self, *args):
        """ Add attribute values.

        Extend data blocks by their default values.

        Parameters
        ----------
        *args : list
            List of data block descriptors.
        """
        for name, _, default in args:
            getattr(self, name).append(default)

    def _add_edge(self, v, w):
        """ Create and add a pair of halfedges.

        The :attr:`~Halfedge.next`, :attr:`~Halfedge.prev`, and
        :attr:`~Halfedge.face` attributes retain their default
        :obj:`None` values.

        Parameters
        ----------
        v : Vertex
            Origin vertex of the first halfedge.
        w : Vertex
            Origin vertex of the second halfedge.

        Returns
        -------
        h : Halfedge
            Halfedge pointing from `v` to `w`.
        hbar : Halfedge
            Halfedge pointing from `w` to `v`.
        """
        assert v is not w

        h = Halfedge(len(self._halfs), v)
        hbar = Halfedge(len(self._halfs) + 1, w)

        h._pair = hbar
        hbar._pair = h

        self._halfs.append(h)
        self._halfs.append(hbar)
        self._add_attr_values(*self._eattr)

        return h, hbar

    def _add_face(self):
        """ Create and add new face without incident halfedge.
        """
        f = Face(len(self._faces))
        self._faces.append(f)

        return f

    def _link(self, h0, h1, h2, face):
        """ Link three halfedges to a triangle.
        """
        for h, next in ((h0, h1), (h1, h2), (h2, h0)):
            h._next = next
            next._prev = h
            h._face = face

        face._halfedge = h0

    def _replace(self, old, new):
        """ Let `new` take over the face loop position of `old`.
        """
        new._face = old._face
        new._next = old._next
        new._prev = old._prev

        old._prev._next = new
        old._next._prev = new

        if old._face is not None and old._face._halfedge is old:
            old._face._halfedge = new

    def _build(self, faces):
        """ Build halfedge structure from face definitions.

        Parameters
        ----------
        faces : iterable
            Face definitions, 0-based vertex indexing.
        """
        # Maps pairs of vertices to halfedges during construction.
        halfs = dict()

        for face in faces:
            face = [int(i) for i in face]
            n = len(face)

            if len(set(face)) != n:
                raise ValueError('face contains duplicate vertices')

            if n < 3:
                raise ValueError('face has less than three vertices')

            if min(face) < 0 or max(face) >= len(self._verts):
                raise IndexError(f'face {face} refers to missing vertices')

            # Triangle fan with apex face[0].
            for k in range(1, n - 1):
                self._add_triangle([self._verts[i] for i in
                                    (face[0], face[k], face[k + 1])], halfs)

        # Link boundary halfedges to boundary loops. A manifold vertex has
        # at most one outgoing boundary halfedge.
        bout = dict()

        for h in self._halfs:
            if h._face is None:
                if h._origin in bout:
                    msg = f'vertex #{h._origin._idx} is non-manifold'
                    raise NonManifoldError(msg)

                bout[h._origin] = h

        for h in bout.values():
            next = bout[h._pair._origin]
            h._next = next
            next._prev = h

        count = dict.fromkeys(self._verts, 0)

        for h in self._halfs:
            h._origin._halfedge = h
            count[h._origin] += 1

        # A single (open or closed) fan of triangles around each vertex
        # visits all outgoing halfedges.
        for v in self._verts:
            if v._halfedge is not None and v.degree != count[v]:
                raise NonManifoldError(f'vertex #{v._idx} is non-manifold')

    def _add_triangle(self, verts, halfs):
        """ Add triangle during mesh construction.
        """
        for k in range(3):
            v, w = verts[k], verts[(k + 1) % 3]
            h = halfs.get((v, w), None)

            if h is not None and h._face is not None:
                msg = f'edge ({v._idx}, {w._idx}) is non-manifold'
                raise NonManifoldError(msg)

        loop = []

        for k in range(3):
            v, w = verts[k], verts[(k + 1) % 3]
            h = halfs.get((v, w), None)

            if h is None:
                h, hbar = self._add_edge(v, w)
                halfs[v, w] = h
                halfs[w, v] = hbar

            loop.append(h)

        self._link(*loop, self._add_face())

    def _check(self):
        """ Perform sanity checks.
        """
        count = dict()

        for i, h in enumerate(self._halfs):
            assert h._idx == i
            assert h._pair is self._halfs[i ^ 1]

            if h._deleted:
                assert h._pair._deleted
                continue

            assert h._pair._pair is h
            assert h._next._prev is h
            assert h._prev._next is h
            assert h._next._origin is h._pair._origin
            assert not h._origin._deleted
            assert h._next._face is h._face
            assert not (h._face is None and h._pair._face is None)

            if h._face is not None:
                assert not h._face._deleted
                assert h._next._next._next is h

            count[h._origin] = count.get(h._origin, 0) + 1

        for i, v in enumerate(self._verts):
            assert v._idx == i

            if v._deleted or v._halfedge is None:
                assert v not in count
                continue

            assert not v._halfedge._deleted
            assert v._halfedge._origin is v
            assert v.degree == count[v]

        for i, f in enumerate(self._faces):
            assert f._idx == i

            if not f._deleted:
                assert not f._halfedge._deleted
                assert f._halfedge._face is f

        assert len(self._points) == len(self._verts)

        for private_name, _, _ in self._vattr:
            assert len(getattr(self, private_name)) == len(self._verts)

        for private_name, _, _ in self._eattr:
            assert len(getattr(self, private_name)) == len(self._halfs) // 2


class Vertex:
    """ Vertex base class.

    Vertices are considered as abstract topological entities. Vertex
    coordinates are stored by the parent mesh and accessed via the
    :attr:`point` property.

    Parameters
    ----------
    index : int
        Vertex index.
    parent : Mesh, optional
        The parent mesh object.

    Note
    ----
    The special function :meth:`~object.__index__` makes it possible to
    use vertex instances as list and array indices.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None
        self._deleted = False

    def __repr__(self):
        return f'Vertex({self._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def index(self):
        """ Vertex index.

        :type: int
        """
        return self._idx

    @property
    def point(self):
        """ Vertex coordinates.

        Read and write access to vertex coordinates. View of a row of
        the parent mesh's coordinate array.

        :type: ~numpy.ndarray
        """
        return self._mesh._points[self._idx]

    @point.setter
    def point(self, value):
        self._mesh._points[self._idx] = value

    @property
    def halfedge(self):
        """ Outward pointing halfedge.

        A halfedge that starts at the vertex or :obj:`None` for isolated
        vertices.

        :type: Halfedge
        """
        assert not self._deleted
        return self._halfedge

    @property
    def degree(self):
        """ Vertex degree.

        The number of adjacent vertices, equivalent to the number of
        incident edges -- also called the valence of a vertex.

        :type: int
        """
        return sum(1 for _ in self._hiter())

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A vertex is a boundary vertex if it is incident to a boundary
        halfedge.

        :type: bool
        """
        return any(h._face is None for h in self._hiter())

    @property
    def naked(self):
        """ Number of incident boundary edges.

        :type: int
        """
        return sum(1 for h in self._hiter()
                   if h._face is None or h._pair._face is None)

    @property
    def isolated(self):
        """ Topological state.

        :type: bool
        """
        assert not self._deleted
        return self._halfedge is None

    def neighbors(self):
        """ Adjacent vertices.

        Returns
        -------
        list[Vertex]
            Adjacent vertices in counter-clockwise order.
        """
        return list(self._viter())

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._mesh = None
        self._halfedge = None

    def _hiter(self):
        """ Outgoing halfedge iterator.
        """
        assert not self._deleted
        h = self._halfedge

        if h is None:
            return

        while True:
            yield h
            h = h._prev._pair

            if h is self._halfedge:
                return

    def _viter(self):
        """ Adjacent vertex iterator.
        """
        return (h._pair._origin for h in self._hiter())


class Halfedge:
    """ Halfedge base class.

    Halfedges store references to their origin vertex, the successor,
    predecessor, and twin halfedge as well as the incident face -- the face
    to its left. The target vertex is the origin of the twin.

    Parameters
    ----------
    index : int
        Position in the halfedge list of the parent mesh.
    origin : Vertex
        Origin vertex of the halfedge.
    """

    def __init__(self, index, origin):
        self._idx = index
        self._origin = origin

        self._next = None
        self._prev = None
        self._pair = None
        self._face = None

        self._deleted = False

    def __repr__(self):
        if self._deleted:
            return f'Halfedge({self._idx}, deleted)'

        return f'Halfedge({self._origin._idx}, {self._pair._origin._idx})'

    def __bool__(self):
        return True

    def __index__(self):
        return self._idx

    def __iter__(self):
        """ Vertex iterator.

        Yields
        ------
        Vertex
            Origin and target vertex.
        """
        yield self.origin
        yield self.target

    def __contains__(self, vertex):
        assert not self._deleted
        return vertex is self._origin or vertex is self._pair._origin

    @property
    def index(self):
        """ Halfedge index.

        :type: int
        """
        return self._idx

    @property
    def edge(self):
        """ Edge index.

        Both halfedges of an edge share the same edge index.

        :type: int
        """
        return self._idx >> 1

    @property
    def origin(self):
        """ Halfedge origin vertex.

        :type: Vertex
        """
        assert not self._deleted
        return self._origin

    @property
    def target(self):
        """ Halfedge target vertex.

        :type: Vertex
        """
        assert not self._deleted
        return self._pair._origin

    @property
    def vector(self):
        """ Halfedge direction vector.

        :type: ~numpy.ndarray
        """
        assert not self._deleted
        return self._pair._origin.point - self._origin.point

    @property
    def midpoint(self):
        """ Halfedge midpoint.

        :type: ~numpy.ndarray
        """
        assert not self._deleted
        return 0.5 * (self._origin.point + self._pair._origin.point)

    @property
    def length(self):
        """ Edge length.

        :type: float
        """
        return float(np.linalg.norm(self.vector))

    @property
    def next(self):
        """ Successor halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._next

    @property
    def prev(self):
        """ Predecessor halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._prev

    @property
    def pair(self):
        """ Opposite halfedge.

        :type: Halfedge
        """
        return self._pair

    @property
    def face(self):
        """ Incident face.

        The face to left of the halfedge or :obj:`None` in case of
        a boundary halfedge.

        :type: Face
        """
        assert not self._deleted
        return self._face

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A halfedge is called a boundary halfedge if its :attr:`face`
        attribute evaluates to :obj:`None`.

        :type: bool
        """
        assert not self._deleted
        return self._face is None

    @property
    def collapsible(self):
        """ Topological state.

        An edge of a triangle mesh is collapsible if the neighborhoods of
        its endpoints intersect exactly in the apex vertices of its
        incident triangles (link condition). Interior edges that join two
        boundary vertices, edges of a boundary loop of length three and
        edges of a tetrahedron are not collapsible.

        :type: bool
        """
        if self._deleted:
            return False

        h = self
        p = self._pair

        if h._face is None and p._face is None:
            return False

        v = h._origin
        w = p._origin

        v_neigh = {x for x in v._viter() if x is not w}
        w_neigh = {x for x in w._viter() if x is not v}

        apexes = set()

        if h._face is not None:
            apexes.add(h._prev._origin)

        if p._face is not None:
            apexes.add(p._prev._origin)

        if h._face is not None and p._face is not None:
            # Both triangles share all three vertices.
            if len(apexes) == 1:
                return False

            # Result would be a non-manifold vertex.
            if v.boundary and w.boundary:
                return False

            if v_neigh == w_neigh:
                return False
        else:
            boundary = h if h._face is None else p

            # The adjacent boundary loop is a triangle. Collapsing would
            # close the hole.
            if boundary._compute_loop_len() == 3:
                return False

        return v_neigh & w_neigh == apexes

    @property
    def flippable(self):
        """ Topological state.

        A non-boundary edge of a triangle mesh can be flipped if the
        vertices opposite the edge are not adjacent.

        :type: bool
        """
        if self._deleted or self._face is None or self._pair._face is None:
            return False

        a = self._prev._origin
        b = self._pair._prev._origin

        if a is b:
            return False

        return all(x is not b for x in a._viter())

    def _compute_loop_len(self):
        """ Length of halfedge loop.

        Returns
        -------
        int
            Number of halfedges in the loop starting at ``self``.
        """
        assert not self._deleted

        loop_len = 0
        h = self

        while True:
            loop_len += 1
            h = h._next

            if h is self:
                return loop_len

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._origin = None
        self._pair = None
        self._next = None
        self._prev = None
        self._face = None


class Face:
    """ Face base class.

    A face is defined by the closed loop of halfedges starting at the
    :attr:`halfedge` attribute.

    Parameters
    ----------
    index : int
        Face index.
    """

    def __init__(self, index):
        self._idx = index
        self._halfedge = None
        self._deleted = False

    def __repr__(self):
        return f'Face({self._idx})'

    def __index__(self):
        return self._idx

    def __len__(self):
        return sum(1 for _ in self._hiter())

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertex iterator.

        Yields
        ------
        Vertex
            Next vertex in counter-clockwise traversal, starting with
            ``self.halfedge.origin``.
        """
        return (h._origin for h in self._hiter())

    @property
    def index(self):
        """ Face index.

        :type: int
        """
        return self._idx

    @property
    def halfedge(self):
        """ Incident halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._halfedge

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._halfedge = None

    def _hiter(self):
        """ Incident halfedge iterator.
        """
        assert not self._deleted
        h = self._halfedge

        while True:
            yield h
            h = h._next

            if h is self._halfedge:
                return


class NonManifoldError(Exception):
    """ Manifold exception base class.

    Raised if an operation results in a topological configuration that
    violates the manifold condition.
    """

    pass
