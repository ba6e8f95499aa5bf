# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Containers for spectral properties computed on a lattice"""

__all__ = ['LDOS', 'SpinPolarizedLDOS']

import numpy as np
import tinyarray as ta
from scipy.integrate import trapezoid


class _SiteResolved:
    """Common part of properties that are resolved by lattice site."""

    def __init__(self, coordinates, energies, densities):
        self.coordinates = tuple(ta.array(c, int) for c in coordinates)
        self.energies = np.asarray(energies, dtype=float)
        self.densities = np.asarray(densities, dtype=float)
        if len(self.densities) != len(self.coordinates):
            raise ValueError('There must be one density per coordinate.')
        if self.densities.shape[-1:] != self.energies.shape:
            raise ValueError('The last axis of the densities must match the '
                             'energies.')
        self._position = {c: i for i, c in enumerate(self.coordinates)}

    def __len__(self):
        return len(self.coordinates)

    def __iter__(self):
        return iter(self.coordinates)

    def __contains__(self, tag):
        return ta.array(tag, int) in self._position

    def __getitem__(self, tag):
        return self.densities[self._position[ta.array(tag, int)]]

    def integrate(self):
        """Trapezoidal integral of the densities over the energy window."""
        return trapezoid(self.densities, self.energies, axis=-1)


class LDOS(_SiteResolved):
    """Local density of states.

    Attributes
    ----------
    coordinates : tuple of tinyarrays
        The site tags ``(x, y)``, in the order in which they were requested.
    energies : 1d array of floats
        Ascending energies at which the densities are sampled.
    densities : 2d array of floats
        ``densities[i, j]`` is the density at ``coordinates[i]`` and
        ``energies[j]``.
    """

    def __repr__(self):
        return '<LDOS at {} sites, {} energies>'.format(
            len(self), len(self.energies))


class SpinPolarizedLDOS(_SiteResolved):
    """Local density of states resolved by physical spin.

    The density of each spin channel is the sum of the densities of the
    particle sector and the hole sector of that spin.

    Attributes
    ----------
    coordinates : tuple of tinyarrays
        The site tags ``(x, y)``, in the order in which they were requested.
    energies : 1d array of floats
        Ascending energies at which the densities are sampled.
    densities : 3d array of floats
        ``densities[i, k, j]`` is the density at ``coordinates[i]``, for spin
        ``spins[k]`` and at ``energies[j]``.  All values are non-negative.
    spins : tuple of ints
        The spin channels, 0 for up and 1 for down.
    spin_matrices : 4d array of complex, or None
        If computed, ``spin_matrices[i, j]`` is the 2x2 spin density matrix
        of the particle sector at ``coordinates[i]`` and ``energies[j]``.

    Notes
    -----
    ``ldos[x, y]`` returns the ``(len(spins), len(energies))`` array of
    densities at site ``(x, y)``.
    """

    def __init__(self, coordinates, energies, densities, spins=(0, 1),
                 spin_matrices=None):
        super().__init__(coordinates, energies, densities)
        self.spins = tuple(int(s) for s in spins)
        if self.densities.ndim != 3 or (self.densities.shape[1]
                                        != len(self.spins)):
            raise ValueError('Densities must have the shape '
                             '(coordinates, spins, energies).')
        if spin_matrices is not None:
            spin_matrices = np.asarray(spin_matrices, dtype=complex)
            expected = (len(self), len(self.energies), 2, 2)
            if spin_matrices.shape != expected:
                raise ValueError('Spin matrices must have the shape {}.'
                                 .format(expected))
        self.spin_matrices = spin_matrices

    def __repr__(self):
        return '<SpinPolarizedLDOS at {} sites, {} spins, {} energies>'.format(
            len(self), len(self.spins), len(self.energies))

    def channel(self, spin):
        """Return the ``(coordinates, energies)`` densities of one spin."""
        return self.densities[:, self.spins.index(spin)]

    def total(self):
        """Return the `LDOS` summed over the spin channels."""
        return LDOS(self.coordinates, self.energies,
                    self.densities.sum(axis=1))
