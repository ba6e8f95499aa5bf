# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Finalized, immutable Hamiltonians"""

__all__ = ['SparseHamiltonian']

import numbers

import numpy as np
from scipy import sparse

from ._common import IndexOutOfRangeError


class SparseHamiltonian:
    """A finalized Hamiltonian stored as a compressed sparse row matrix.

    Instances are created by `~chiralkpm.builder.Model.finalized` and are
    never modified afterwards: the underlying arrays are flagged read-only.
    They may therefore be shared between solvers and threads.

    Attributes
    ----------
    lattice : `~chiralkpm.lattice.Lattice`
        The lattice that defines the basis.
    matrix : `scipy.sparse.csr_matrix`
        The matrix, with duplicate entries summed and a real diagonal.
    """

    def __init__(self, lattice, matrix):
        matrix = sparse.csr_matrix(matrix, dtype=complex, copy=True)
        if matrix.shape != (len(lattice), len(lattice)):
            raise ValueError('Matrix of shape {} does not match the basis of '
                             '{}.'.format(matrix.shape, lattice))
        matrix.sum_duplicates()
        # The diagonal has been checked to be real up to a tolerance; make
        # it exactly real.
        rows = np.repeat(np.arange(matrix.shape[0]), np.diff(matrix.indptr))
        on_diagonal = rows == matrix.indices
        matrix.data[on_diagonal] = matrix.data[on_diagonal].real
        matrix.eliminate_zeros()
        # Read-only arrays must already be in canonical format.
        matrix.sum_duplicates()
        for array in (matrix.data, matrix.indices, matrix.indptr):
            array.flags.writeable = False
        self.lattice = lattice
        self.matrix = matrix

    def __repr__(self):
        return '<{} with {} orbitals and {} nonzero elements>'.format(
            self.__class__.__name__, self.shape[0], self.nnz)

    def __eq__(self, other):
        if not isinstance(other, SparseHamiltonian):
            return NotImplemented
        return (self.lattice == other.lattice
                and (self.matrix != other.matrix).nnz == 0)

    __hash__ = None

    def __len__(self):
        return self.shape[0]

    @property
    def shape(self):
        return self.matrix.shape

    @property
    def nnz(self):
        return self.matrix.nnz

    def dot(self, vector):
        """Return ``H @ vector``; ``vector`` may also be a block of columns."""
        return self.matrix.dot(vector)

    matvec = dot

    def check_index(self, index):
        """Return ``index`` as an int, or raise `IndexOutOfRangeError`."""
        n = self.shape[0]
        if not isinstance(index, numbers.Integral):
            raise IndexOutOfRangeError('{!r} is not a basis index.'
                                       .format(index))
        if not 0 <= index < n:
            raise IndexOutOfRangeError(
                'Basis index {!r} is outside of [0, {}).'.format(index, n))
        return int(index)

    def element(self, to, from_):
        """Return ``H[to, from_]`` for two basis indices."""
        return complex(self.matrix[self.check_index(to),
                                   self.check_index(from_)])

    def hamiltonian_submatrix(self, to_sites=None, from_sites=None,
                              sparse=True):
        """Return a submatrix of the Hamiltonian.

        Parameters
        ----------
        to_sites, from_sites : sequence of basis indices, optional
            Rows and columns to select.  All of them if not given.
        sparse : bool, default: True
            Return a `scipy.sparse.csr_matrix` if true, a dense array
            otherwise.
        """
        matrix = self.matrix
        if to_sites is not None:
            matrix = matrix[[self.check_index(i) for i in to_sites], :]
        if from_sites is not None:
            matrix = matrix[:, [self.check_index(i) for i in from_sites]]
        # Slicing returns a new matrix; the full one is copied explicitly to
        # keep the stored one read-only.
        if matrix is self.matrix:
            matrix = matrix.copy()
        return matrix if sparse else matrix.toarray()

    def is_hermitian(self, tol=1e-12):
        difference = self.matrix - self.matrix.conj().T
        return difference.nnz == 0 or abs(difference).max() <= tol

    def gershgorin_bound(self):
        """Return an upper bound of the spectral radius.

        The largest absolute row sum bounds all eigenvalues by Gershgorin's
        circle theorem.
        """
        if self.nnz == 0:
            return 0.
        return float(abs(self.matrix).sum(axis=1).max())
