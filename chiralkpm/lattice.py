# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Square lattices with a Bogoliubov-de Gennes basis on every site"""

__all__ = ['Sector', 'Boundary', 'Lattice', 'square']

import enum
import numbers

import tinyarray as ta

from ._common import (OutOfBoundsError, IndexOutOfRangeError,
                      ensure_positive_int)


class Sector(enum.IntEnum):
    """The four components of the BdG basis on a single site.

    The first two sectors are electrons with spin up and down, the last two
    the particle-hole conjugates of these.
    """
    UP = 0
    DOWN = 1
    HOLE_UP = 2
    HOLE_DOWN = 3

    @property
    def spin(self):
        """Physical spin of the sector: 0 for up, 1 for down."""
        return self % 2

    @property
    def is_hole(self):
        return self >= 2

    @property
    def conjugate(self):
        """The sector of the same spin in the other particle-hole block."""
        return Sector((self + 2) % 4)

    @property
    def flipped(self):
        """The sector of opposite spin in the same particle-hole block."""
        return Sector(self - self.spin + (self.spin + 1) % 2)

    @classmethod
    def particle(cls, spin):
        return cls(_check_spin(spin))

    @classmethod
    def hole(cls, spin):
        return cls(_check_spin(spin) + 2)


def _check_spin(spin):
    if spin not in (0, 1):
        raise ValueError('Spin must be 0 (up) or 1 (down), not {!r}.'
                         .format(spin))
    return int(spin)


class Boundary(enum.Enum):
    """What happens to a bond that leaves the lattice.

    With `OPEN` the bond does not exist.  With `PERIODIC` it re-enters the
    lattice on the opposite edge.
    """
    OPEN = 'open'
    PERIODIC = 'periodic'


class Lattice:
    """A finite two-dimensional square lattice with four sectors per site.

    The lattice defines the basis of the Hilbert space: every coordinate
    ``(x, y, s)`` with ``0 <= x < size_x``, ``0 <= y < size_y`` and ``s`` a
    `Sector` is mapped to a unique integer in ``[0, N)`` where
    ``N = size_x * size_y * 4``.  The mapping is ordered first by ``x``, then
    by ``y`` and finally by the sector, so that the four sectors of a site
    are contiguous.

    Parameters
    ----------
    size_x, size_y : positive int
        Extents of the lattice.
    boundary : `Boundary` or str, default: ``Boundary.OPEN``
        Policy for bonds that leave the lattice, see `neighbor`.

    Notes
    -----
    Site tags are `tinyarray` integer vectors ``(x, y)``, so that they are
    hashable and support arithmetic with offsets.
    """

    num_sectors = len(Sector)

    def __init__(self, size_x, size_y, boundary=Boundary.OPEN):
        self.size_x = ensure_positive_int(size_x, 'size_x', ValueError)
        self.size_y = ensure_positive_int(size_y, 'size_y', ValueError)
        self.boundary = Boundary(boundary)
        self.shape = ta.array((self.size_x, self.size_y))

    def __repr__(self):
        return '{}({}, {}, boundary={})'.format(
            self.__class__.__name__, self.size_x, self.size_y,
            self.boundary)

    def __str__(self):
        return '<{} {}x{} lattice with {} orbitals>'.format(
            self.boundary.value, self.size_x, self.size_y, len(self))

    def __eq__(self, other):
        try:
            return (self.size_x, self.size_y, self.boundary) == (
                other.size_x, other.size_y, other.boundary)
        except AttributeError:
            return False

    def __hash__(self):
        return hash((self.size_x, self.size_y, self.boundary))

    def __len__(self):
        return self.num_sites * self.num_sectors

    @property
    def num_sites(self):
        return self.size_x * self.size_y

    @property
    def center(self):
        """The tag of the central site, ``(size_x // 2, size_y // 2)``."""
        return ta.array((self.size_x // 2, self.size_y // 2))

    def normalize_tag(self, tag):
        """Return ``tag`` as a tinyarray, or raise `OutOfBoundsError`."""
        try:
            x, y = tag
        except (TypeError, ValueError):
            raise OutOfBoundsError('A site tag must be a pair of integers, '
                                   'not {!r}.'.format(tag))
        if not (isinstance(x, numbers.Integral)
                and isinstance(y, numbers.Integral)):
            raise OutOfBoundsError('Site tags must be integers, not {!r}.'
                                   .format(tag))
        if not (0 <= x < self.size_x and 0 <= y < self.size_y):
            raise OutOfBoundsError('Site {} lies outside of the {}x{} lattice.'
                                   .format((x, y), self.size_x, self.size_y))
        return ta.array((x, y), int)

    def contains(self, tag):
        try:
            self.normalize_tag(tag)
        except OutOfBoundsError:
            return False
        return True

    def index(self, coord):
        """Return the basis index of the coordinate ``(x, y, sector)``.

        Raises
        ------
        OutOfBoundsError
            If the site is outside of the lattice or the sector is not one of
            0, 1, 2, 3.
        """
        try:
            x, y, s = coord
        except (TypeError, ValueError):
            raise OutOfBoundsError('A coordinate must be a triple (x, y, s), '
                                   'not {!r}.'.format(coord))
        x, y = self.normalize_tag((x, y))
        if not isinstance(s, numbers.Integral) or not 0 <= s < 4:
            raise OutOfBoundsError('Sector must be one of 0, 1, 2, 3, not {!r}.'
                                   .format(s))
        return (x * self.size_y + y) * self.num_sectors + int(s)

    def site_indices(self, tag):
        """Return the four basis indices of a site, in sector order."""
        x, y = self.normalize_tag(tag)
        first = (x * self.size_y + y) * self.num_sectors
        return range(first, first + self.num_sectors)

    def coordinate(self, index):
        """Return the coordinate ``(x, y, sector)`` of a basis index.

        Raises
        ------
        IndexOutOfRangeError
            If ``index`` is not in ``[0, N)``.
        """
        if (not isinstance(index, numbers.Integral)
                or not 0 <= index < len(self)):
            raise IndexOutOfRangeError(
                'Basis index {!r} is outside of [0, {}).'
                .format(index, len(self)))
        site, s = divmod(int(index), self.num_sectors)
        x, y = divmod(site, self.size_y)
        return x, y, Sector(s)

    def sites(self):
        """Iterate over all site tags in basis order."""
        for x in range(self.size_x):
            for y in range(self.size_y):
                yield ta.array((x, y))

    def neighbor(self, tag, delta):
        """Return the tag of the site at ``tag + delta``, or None.

        Under open boundaries ``None`` is returned when the neighbor lies
        outside of the lattice.  Under periodic boundaries the coordinates
        are taken modulo the lattice extents.
        """
        tag = self.normalize_tag(tag)
        x, y = tag + ta.array(delta, int)
        if self.boundary is Boundary.PERIODIC:
            return ta.array((x % self.size_x, y % self.size_y))
        if 0 <= x < self.size_x and 0 <= y < self.size_y:
            return ta.array((x, y))
        return None

    def bonds(self, delta):
        """Iterate over all existing bonds with the given offset.

        Yields ``(to, from_)`` pairs of site tags with ``to`` the neighbor of
        ``from_`` along ``delta``.  A bond that would connect a site to
        itself (periodic lattice of extent 1) is skipped.
        """
        for tag in self.sites():
            other = self.neighbor(tag, delta)
            if other is not None and other != tag:
                yield other, tag


def square(size_x, size_y=None, boundary=Boundary.OPEN):
    """Return a `Lattice`; a square one if ``size_y`` is not given."""
    if size_y is None:
        size_y = size_x
    return Lattice(size_x, size_y, boundary)
