# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import numbers
import operator
import collections

import numpy as np
from scipy import sparse

from . import system
from .lattice import Lattice
from ._common import ensure_isinstance, InvalidModelError

__all__ = ['CouplingTerm', 'HermConj', 'Model', 'herm_conj']


################ Coupling terms

def herm_conj(value):
    """
    Calculate the hermitian conjugate of a python object.

    If the object is neither a complex number nor a matrix, the original value
    is returned.
    """
    if hasattr(value, 'conjugate'):
        value = value.conjugate()
        if hasattr(value, 'transpose'):
            value = value.transpose()
    return value


class CouplingTerm(tuple):
    """A single matrix element ``H[to, from_] += amplitude``.

    Parameters
    ----------
    amplitude : complex
        The value added to the matrix element.
    to, from_ : triples ``(x, y, sector)``
        Coordinates of the row and the column of the matrix element.

    Notes
    -----
    The Hermitian conjugate of a term can be added together with the term
    itself by writing ``model << term + HermConj``.
    """
    __slots__ = ()

    amplitude = property(operator.itemgetter(0),
                         doc="The complex amplitude of the term.")
    to = property(operator.itemgetter(1),
                  doc="Coordinate of the row of the matrix element.")
    from_ = property(operator.itemgetter(2),
                     doc="Coordinate of the column of the matrix element.")

    def __new__(cls, amplitude, to, from_):
        if not isinstance(amplitude, numbers.Number):
            raise TypeError('The amplitude of a coupling must be a number, '
                            'not {}.'.format(type(amplitude).__name__))
        return tuple.__new__(cls, (complex(amplitude), tuple(to),
                                   tuple(from_)))

    def __repr__(self):
        return 'CouplingTerm({!r}, {!r}, {!r})'.format(*self)

    def __add__(self, other):
        if other is HermConj:
            return _WithHermConj(self)
        return NotImplemented

    def hermitian_conjugate(self):
        """Return the conjugate term, with swapped endpoints."""
        return CouplingTerm(herm_conj(self.amplitude), self.from_, self.to)


class _HermConjType:
    __slots__ = ()

    def __repr__(self):
        return 'HermConj'


# Marker requesting that the Hermitian conjugate of a term is added as well.
HermConj = _HermConjType()


class _WithHermConj(tuple):
    __slots__ = ()

    def __new__(cls, term):
        return tuple.__new__(cls, (term,))

    def __repr__(self):
        return '{!r} + HermConj'.format(self[0])


################ Model

class Model:
    """Accumulator of coupling terms over the basis of a `Lattice`.

    A model collects matrix elements ``H[to, from_]``.  Terms that target the
    same element are summed.  Once all terms have been added, `finalized`
    turns the model into an immutable `~chiralkpm.system.SparseHamiltonian`
    that can be passed to the solvers.

    Parameters
    ----------
    lattice : `~chiralkpm.lattice.Lattice`
        Defines the coordinates ``(x, y, sector)`` that may be used, and the
        order of the basis.

    Notes
    -----
    Terms can be added in three equivalent ways::

        model.add_coupling(-t, (1, 0, 0), (0, 0, 0), hermitian_conjugate=True)
        model.add(CouplingTerm(-t, (1, 0, 0), (0, 0, 0)),
                  hermitian_conjugate=True)
        model << CouplingTerm(-t, (1, 0, 0), (0, 0, 0)) + HermConj

    Unlike a Kwant builder, a model does *not* add Hermitian conjugates on
    its own: whether the conjugate is added is decided per term.  The
    Hermiticity of the result is verified upon finalization.

    Examples
    --------
    >>> lat = chiralkpm.lattice.square(4)
    >>> model = chiralkpm.Model(lat)
    >>> for tag in lat.sites():
    ...     model.add_coupling(-1, (*tag, 0), (*tag, 0))
    >>> ham = model.finalized()
    """

    def __init__(self, lattice):
        ensure_isinstance(lattice, Lattice)
        self.lattice = lattice
        # Maps (row, col) index pairs to accumulated amplitudes, in the order
        # of their first appearance.
        self.H = collections.OrderedDict()

    def __len__(self):
        return len(self.H)

    def __bool__(self):
        return bool(self.H)

    def __repr__(self):
        return '<{} on {} with {} matrix elements>'.format(
            self.__class__.__name__, self.lattice, len(self))

    def __getitem__(self, key):
        """Return the accumulated amplitude of ``H[to, from_]``."""
        to, from_ = key
        lat = self.lattice
        return self.H.get((lat.index(to), lat.index(from_)), 0j)

    def add_coupling(self, amplitude, to, from_, hermitian_conjugate=False):
        """Add ``amplitude`` to ``H[to, from_]``.

        Parameters
        ----------
        amplitude : complex
        to, from_ : triples ``(x, y, sector)``
        hermitian_conjugate : bool, default: False
            Also add ``conj(amplitude)`` to ``H[from_, to]``.

        Raises
        ------
        OutOfBoundsError
            If one of the coordinates is not part of the lattice.  The model
            is not modified in that case.
        """
        self.add(CouplingTerm(amplitude, to, from_), hermitian_conjugate)
        return self

    def add(self, term, hermitian_conjugate=False):
        """Add a `CouplingTerm` (or ``term + HermConj``) to the model."""
        if isinstance(term, _WithHermConj):
            term, hermitian_conjugate = term[0], True
        ensure_isinstance(term, CouplingTerm)
        # Both indices are computed before anything is stored, so that an
        # invalid term leaves the model untouched.
        row = self.lattice.index(term.to)
        col = self.lattice.index(term.from_)
        self._accumulate(row, col, term.amplitude)
        if hermitian_conjugate:
            self._accumulate(col, row, herm_conj(term.amplitude))
        return self

    def __lshift__(self, term):
        return self.add(term)

    def update(self, terms):
        """Add every term of an iterable of terms."""
        for term in terms:
            self.add(term)
        return self

    def _accumulate(self, row, col, amplitude):
        self.H[row, col] = self.H.get((row, col), 0j) + amplitude

    def terms(self):
        """Iterate over the accumulated terms as `CouplingTerm` instances."""
        coord = self.lattice.coordinate
        for (row, col), amplitude in self.H.items():
            yield CouplingTerm(amplitude, coord(row), coord(col))

    def to_coo(self):
        """Return the accumulated elements as a COO matrix."""
        n = len(self.lattice)
        if not self.H:
            return sparse.coo_matrix((n, n), dtype=complex)
        keys = np.array(list(self.H.keys()), dtype=int)
        data = np.fromiter(self.H.values(), dtype=complex, count=len(self.H))
        return sparse.coo_matrix((data, (keys[:, 0], keys[:, 1])),
                                 shape=(n, n))

    def finalized(self, tol=1e-10):
        """Return an immutable `~chiralkpm.system.SparseHamiltonian`.

        Parameters
        ----------
        tol : float, default: 1e-10
            Tolerance of the Hermiticity check, relative to the largest
            absolute matrix element (and absolute for elements below one).

        Raises
        ------
        InvalidModelError
            If a diagonal element has an imaginary part, or if ``H[a, b]`` is
            not the complex conjugate of ``H[b, a]`` for some pair.

        Notes
        -----
        This method does not modify the model.  Calling it again after more
        terms have been added returns a new Hamiltonian; previously
        finalized ones are not affected.
        """
        matrix = self.to_coo().tocsr()
        matrix.sum_duplicates()
        scale = max(1., abs(matrix).max()) if matrix.nnz else 1.
        threshold = tol * scale

        diagonal = matrix.diagonal()
        bad = np.flatnonzero(abs(diagonal.imag) > threshold)
        if len(bad):
            i = bad[0]
            raise InvalidModelError(
                'Diagonal element at {} has imaginary part {:g}.'
                .format(self.lattice.coordinate(i), diagonal[i].imag))

        difference = (matrix - matrix.conj().T).tocoo()
        bad = np.flatnonzero(abs(difference.data) > threshold)
        if len(bad):
            i = bad[0]
            row, col = difference.row[i], difference.col[i]
            coord = self.lattice.coordinate
            raise InvalidModelError(
                'The model is not Hermitian: H[{0}, {1}] = {2} but '
                'H[{1}, {0}] = {3}.'.format(
                    coord(row), coord(col), matrix[row, col],
                    matrix[col, row]))

        return system.SparseHamiltonian(self.lattice, matrix)
