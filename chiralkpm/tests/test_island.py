# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import numpy as np
from numpy.testing import assert_almost_equal
import pytest
from pytest import raises

from chiralkpm import lattice
from chiralkpm.lattice import Boundary
from chiralkpm.physics import island


def test_magnetization():
    lat = lattice.square(9)
    m = island.magnetization(lat, 2., radius=2, boundary_width=0.5)
    assert m.shape == (9, 9)
    center = (np.pi / 2 + np.arctan(4)) / np.pi
    assert_almost_equal(m[4, 4], 2 * center)
    assert m[4, 4] > m[4, 6] > m[0, 0] > 0
    # Halfway across the boundary
    assert_almost_equal(m[4, 6], 1)
    assert_almost_equal(m, m.T)
    with raises(ValueError):
        island.magnetization(lat, 1, radius=2, boundary_width=0)


def test_order_parameters():
    lat = lattice.Lattice(3, 2)
    d_s, d_t = island.order_parameters(lat, 0.1, 0.2j)
    assert d_s.shape == d_t.shape == (3, 2)
    assert np.all(d_s == 0.1) and np.all(d_t == 0.2j)


@pytest.mark.parametrize('boundary', list(Boundary))
def test_hermitian(boundary):
    lat = lattice.Lattice(3, 4, boundary)
    model = island.make_model(lat, mu=0.3, t=1 + 0.2j, d_s=0.2 - 0.1j,
                              d_t=0.3j, alpha=0.2 + 0.1j, v_z=1.5,
                              radius=1, boundary_width=0.7)
    ham = model.finalized()
    dense = ham.hamiltonian_submatrix(sparse=False)
    assert_almost_equal(dense, dense.conj().T)
    assert np.all(dense.diagonal().imag == 0)


def test_particle_hole_symmetry():
    lat = lattice.square(4)
    ham = island.make_model(lat, mu=0.3, t=1, d_s=0.2, d_t=0.3, alpha=0.2,
                            v_z=1.5, radius=1, boundary_width=0.7).finalized()
    energies = np.linalg.eigvalsh(ham.hamiltonian_submatrix(sparse=False))
    assert_almost_equal(energies, -energies[::-1])


def test_couplings():
    lat = lattice.square(3)
    mu, t, d_s, d_t, alpha, v_z = 0.3, 1., 0.2, 0.4, 0.25, 1.5
    model = island.make_model(lat, mu=mu, t=t, d_s=d_s, d_t=d_t,
                              alpha=alpha, v_z=v_z, radius=1,
                              boundary_width=0.7)
    m = island.magnetization(lat, v_z, 1, 0.7)[1, 1]

    # on-site terms
    assert_almost_equal(model[(1, 1, 0), (1, 1, 0)], -mu - m)
    assert_almost_equal(model[(1, 1, 1), (1, 1, 1)], -mu + m)
    assert_almost_equal(model[(1, 1, 2), (1, 1, 2)], mu + m)
    assert_almost_equal(model[(1, 1, 3), (1, 1, 3)], mu - m)
    assert_almost_equal(model[(1, 1, 3), (1, 1, 0)], -d_s)
    assert_almost_equal(model[(1, 1, 2), (1, 1, 1)], d_s)

    # along x
    assert_almost_equal(model[(2, 1, 0), (1, 1, 0)], -t)
    assert_almost_equal(model[(2, 1, 2), (1, 1, 2)], t)
    assert_almost_equal(model[(2, 1, 1), (1, 1, 0)], -alpha)
    assert_almost_equal(model[(2, 1, 0), (1, 1, 1)], alpha)
    assert_almost_equal(model[(2, 1, 2), (1, 1, 0)], d_t)
    assert_almost_equal(model[(2, 1, 3), (1, 1, 1)], -d_t)

    # along y
    assert_almost_equal(model[(1, 2, 0), (1, 1, 0)], -t)
    assert_almost_equal(model[(1, 2, 1), (1, 1, 0)], -1j * alpha)
    assert_almost_equal(model[(1, 2, 3), (1, 1, 2)], -1j * alpha)
    assert_almost_equal(model[(1, 2, 2), (1, 1, 0)], 1j * d_t)
    assert_almost_equal(model[(1, 1, 0), (1, 2, 1)], 1j * alpha)

    # no bonds across the open boundary
    assert model[(0, 1, 0), (2, 1, 0)] == 0


def test_periodic_bonds():
    open_lat = lattice.square(3)
    periodic = lattice.square(3, boundary=Boundary.PERIODIC)
    # Hopping only, 8 matrix elements per bond.
    assert island.make_normal_model(open_lat, t=1).finalized().nnz == 12 * 8
    ham = island.make_normal_model(periodic, t=1).finalized()
    assert ham.nnz == 18 * 8
    assert ham.element(periodic.index((0, 1, 0)),
                       periodic.index((2, 1, 0))) == -1
