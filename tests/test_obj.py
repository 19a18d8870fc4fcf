import numpy as np
import pytest

import isoremesh.obj as obj

from isoremesh.hds import Mesh


def test_read_face_formats(tmp_path):
    filename = tmp_path / 'quad.obj'
    filename.write_text('# comment\n'
                        'v 0 0 0\n'
                        'v 1 0 0 0.5 0.5 0.5\n'
                        'v 1 1 0\n'
                        'vt 0 0\n'
                        'v 0 1 0\n'
                        '\n'
                        'f 1/1 2//1 3/1/1\n'
                        'f -4 -2 -1\n')

    verts, faces = obj.read(filename)

    assert verts.shape == (4, 3)
    assert faces == [[0, 1, 2], [0, 2, 3]]


def test_read_invalid_vertex_reference(tmp_path):
    filename = tmp_path / 'broken.obj'
    filename.write_text('v 0 0 0\nf /1 2 3\n')

    with pytest.raises(ValueError):
        obj.read(filename)


def test_write_skips_deleted_items(tmp_path, octahedron):
    mesh = Mesh(*octahedron)
    mesh.collapse_halfedge(mesh.find_halfedge(mesh.vertices[0],
                                              mesh.vertices[2]))

    filename = tmp_path / 'octahedron.obj'
    mesh.write(filename)

    other = Mesh.read(filename)
    other._check()

    mesh.clean()

    assert other.size == mesh.size == (5, 9, 6)
    assert other.name == 'octahedron'
    assert np.array_equal(other.points, mesh.points)


def test_console_output(tmp_path, triangle, capsys):
    filename = tmp_path / 'triangle.obj'

    Mesh(*triangle).write(filename, quiet=False)
    Mesh.read(filename, quiet=False)

    out = capsys.readouterr().out

    assert 'writing' in out
    assert 'reading' in out
    assert '1 faces' in out


def test_array_append():
    array = obj._array_append(None, [1.0, 2.0, 3.0])
    view = array[0]

    array = obj._array_append(array, [4.0, 5.0, 6.0])

    assert array.shape == (2, 3)
    assert np.array_equal(view, [1.0, 2.0, 3.0])

    with pytest.raises(ValueError):
        obj._array_append(array, [1.0, 2.0])
