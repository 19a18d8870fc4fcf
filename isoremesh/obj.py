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

""" OBJ file I/O.

Low-level functions to read and write the geometry subset of the OBJ
format: vertex lines ('v') and polygonal face lines ('f'). Texture and
normal indices in face definitions are parsed but dropped.
"""

import numpy as np


def _array_append(array, item):
    """ Append to array.

    Parameters
    ----------
    array : ~numpy.ndarray or None
        Array object to be augmented. A new array of shape
        ``(1, *item.shape)`` will be created if :obj:`None`.
    item : array_like
        Item to be added as new element of the first axis. The
        shapes ``array.shape[1:]`` and ``item.shape`` have to agree.

    Raises
    ------
    ValueError
        In case of dimension mismatch.

    Returns
    -------
    ~numpy.ndarray
        The enlarged array. Always a new array, views of the input array
        keep referring to the old data.
    """
    if isinstance(array, np.ndarray) and len(array):
        if array[-1].shape != np.shape(item):
            msg = f'cannot add item with shape {np.shape(item)}'
            raise ValueError(msg)

        result = np.empty((len(array) + 1, *array.shape[1:]))
        result[:-1] = array
    else:
        result = np.empty((1, *np.shape(item)))

    # Assign to the 'free' space at the end of the extended array.
    result[-1, ...] = item

    return result


def _parse_vertex(block):
    """ Parse vertex reference of a face statement.

    Parameters
    ----------
    block : str
        A v, v/vt, v//vn or v/vt/vn string.

    Raises
    ------
    ValueError
        If the string could not be parsed.

    Returns
    -------
    int
        Vertex index as written in the file (1-based or negative).
    """
    head = block.split('/', 1)[0]

    if not head:
        raise ValueError('invalid vertex definition: ' + block)

    return int(head)


def read(filename):
    """ Read from file.

    Parameters
    ----------
    filename : str
        Name of an OBJ file.

    Raises
    ------
    ValueError
        If a line could not be parsed.

    Returns
    -------
    verts : ~numpy.ndarray, shape (n, 3)
        Vertex coordinates.
    faces : list[list[int]]
        Face definitions, 0-based vertex indexing.
    """
    verts = []
    faces = []

    with open(filename, 'r') as file:
        for line in file:
            blocks = line.split()

            if not blocks:
                continue

            if blocks[0] == 'v':
                # Vertex colors may follow the coordinates.
                verts.append([float(block) for block in blocks[1:4]])
            elif blocks[0] == 'f':
                face = []

                for block in blocks[1:]:
                    v = _parse_vertex(block)

                    # Negative indices count backwards from the most
                    # recently read vertex.
                    face.append(len(verts) + v if v < 0 else v - 1)

                faces.append(face)

    return np.array(verts, dtype=float).reshape(-1, 3), faces


def write(filename, verts, faces):
    """ Write to file.

    Parameters
    ----------
    filename : str
        Name of output file.
    verts : array_like, shape (n, 3)
        Vertex coordinates.
    faces : iterable
        Face definitions, 0-based vertex indexing.
    """
    with open(filename, 'w') as file:
        for row in verts:
            file.write('v')

            for element in row:
                file.write(f' {float(element)!r}')

            file.write('\n')

        for face in faces:
            file.write('f')

            for vertex in face:
                file.write(f' {int(vertex) + 1}')

            file.write('\n')
