# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import numpy as np
from numpy.testing import assert_almost_equal
from pytest import raises

from chiralkpm import builder, lattice, system
from chiralkpm.builder import CouplingTerm, HermConj, Model
from chiralkpm._common import (OutOfBoundsError, InvalidModelError,
                               IndexOutOfRangeError)


def make_hopping_model(size=3):
    lat = lattice.square(size)
    model = Model(lat)
    for to, from_ in lat.bonds((1, 0)):
        for s in range(4):
            sign = -1 if s < 2 else 1
            model << CouplingTerm(sign, (*to, s), (*from_, s)) + HermConj
    return model


def test_coupling_term():
    term = CouplingTerm(2, (1, 0, 0), (0, 0, 3))
    assert term.amplitude == 2 and isinstance(term.amplitude, complex)
    assert term.to == (1, 0, 0)
    assert term.from_ == (0, 0, 3)
    conj = CouplingTerm(1 + 2j, (1, 0, 0), (0, 0, 3)).hermitian_conjugate()
    assert conj == CouplingTerm(1 - 2j, (0, 0, 3), (1, 0, 0))
    assert repr(term + HermConj).endswith('+ HermConj')
    with raises(TypeError):
        CouplingTerm('1', (0, 0, 0), (0, 0, 0))
    with raises(TypeError):
        term + 1
    assert builder.herm_conj(np.array([[1j, 2]])).shape == (2, 1)


def test_accumulation():
    lat = lattice.square(2)
    model = Model(lat)
    assert not model
    model.add_coupling(1, (1, 0, 0), (0, 0, 0))
    model.add(CouplingTerm(0.5j, (1, 0, 0), (0, 0, 0)))
    model << CouplingTerm(-1, (1, 0, 0), (0, 0, 0))
    assert len(model) == 1
    assert model[(1, 0, 0), (0, 0, 0)] == 0.5j
    assert model[(0, 0, 0), (1, 0, 0)] == 0

    model.update([CouplingTerm(1, (0, 1, 2), (0, 1, 2)),
                  CouplingTerm(1, (0, 1, 2), (0, 1, 2))])
    assert model[(0, 1, 2), (0, 1, 2)] == 2
    assert len(list(model.terms())) == 2
    assert model.to_coo().nnz == 2


def test_hermitian_conjugate():
    lat = lattice.square(2)
    a, b = (1, 0, 1), (0, 1, 3)
    for add in [lambda m: m.add_coupling(2 + 1j, a, b, True),
                lambda m: m.add(CouplingTerm(2 + 1j, a, b), True),
                lambda m: m.add(CouplingTerm(2 + 1j, a, b) + HermConj),
                lambda m: m << CouplingTerm(2 + 1j, a, b) + HermConj]:
        model = Model(lat)
        add(model)
        assert model[a, b] == 2 + 1j
        assert model[b, a] == 2 - 1j
        assert model.finalized().is_hermitian()


def test_failed_addition_leaves_model_unchanged():
    model = make_hopping_model()
    before = dict(model.H)
    for to, from_ in [((3, 0, 0), (0, 0, 0)), ((0, 0, 0), (0, 3, 0)),
                      ((0, 0, 4), (0, 0, 0)), ((-1, 0, 0), (0, 0, 0))]:
        with raises(OutOfBoundsError):
            model.add_coupling(1, to, from_, hermitian_conjugate=True)
        with raises(OutOfBoundsError):
            model << CouplingTerm(1, to, from_) + HermConj
    assert model.H == before


def test_invalid_model():
    lat = lattice.square(2)

    model = Model(lat)
    model.add_coupling(1j, (0, 0, 0), (0, 0, 0))
    with raises(InvalidModelError):
        model.finalized()

    model = Model(lat)
    model.add_coupling(1, (1, 0, 0), (0, 0, 0))
    with raises(InvalidModelError):
        model.finalized()
    # Completing the pair repairs the model.
    model.add_coupling(1, (0, 0, 0), (1, 0, 0))
    model.finalized()

    model = Model(lat)
    model.add_coupling(1j, (1, 0, 0), (0, 0, 0))
    model.add_coupling(1j, (0, 0, 0), (1, 0, 0))
    with raises(InvalidModelError):
        model.finalized()

    # Deviations below the tolerance are accepted.
    model = Model(lat)
    model.add_coupling(1 + 1e-14j, (0, 0, 0), (0, 0, 0))
    ham = model.finalized()
    assert ham.element(0, 0) == 1


def test_finalized():
    model = make_hopping_model()
    ham = model.finalized()
    assert isinstance(ham, system.SparseHamiltonian)
    assert ham.shape == (36, 36)
    # 6 bonds along x, 4 sectors, both directions
    assert ham.nnz == 48
    assert ham == model.finalized()

    # Finalized Hamiltonians are independent of later additions.
    model.add_coupling(5, (0, 0, 0), (0, 0, 0))
    ham2 = model.finalized()
    assert ham != ham2
    assert ham.element(0, 0) == 0
    assert ham2.element(0, 0) == 5


def test_sparse_hamiltonian():
    model = make_hopping_model()
    ham = model.finalized()
    lat = ham.lattice
    row, col = lat.index((1, 0, 0)), lat.index((0, 0, 0))
    assert ham.element(row, col) == -1
    assert ham.element(lat.index((1, 0, 2)), lat.index((0, 0, 2))) == 1

    for array in (ham.matrix.data, ham.matrix.indices, ham.matrix.indptr):
        with raises(ValueError):
            array[0] = 0

    dense = ham.hamiltonian_submatrix(sparse=False)
    assert_almost_equal(dense, dense.conj().T)
    sub = ham.hamiltonian_submatrix([row], [col, row])
    assert_almost_equal(sub.toarray(), [[-1, 0]])
    copy = ham.hamiltonian_submatrix()
    copy.data[:] = 0
    assert ham.element(row, col) == -1

    vector = np.zeros(len(ham))
    vector[col] = 1
    assert_almost_equal(ham.dot(vector), dense[:, col])

    assert ham.gershgorin_bound() == 2
    assert ham.is_hermitian()

    for index in [-1, len(ham), 1.5, 2., None]:
        with raises(IndexOutOfRangeError):
            ham.element(index, 0)
        with raises(IndexOutOfRangeError):
            ham.hamiltonian_submatrix([index])
