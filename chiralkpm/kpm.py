# -*- coding: utf-8 -*-
# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.
"""Kernel polynomial method for local spectral properties.

The spectral function of a Hamiltonian :math:`H` between two basis states
is expanded in Chebyshev polynomials of the rescaled Hamiltonian
:math:`\\tilde H = H / a`, following `Rev. Mod. Phys., Vol. 78, No. 1 (2006)
<https://arxiv.org/abs/cond-mat/0504627>`_.  The moments

.. math::
   μ_k = \\langle j \\rvert T_k(\\tilde H) \\lvert i \\rangle

are obtained by the three-term recurrence of the Chebyshev polynomials, one
sparse matrix-vector product per moment, and are damped with a kernel to
suppress the Gibbs oscillations caused by truncating the expansion.
"""
import warnings
import numbers
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.polynomial.chebyshev import chebval
from scipy.sparse.linalg import eigsh, ArpackNoConvergence

from .system import SparseHamiltonian
from .lattice import Sector
from .properties import LDOS, SpinPolarizedLDOS
from ._common import (ensure_isinstance, ensure_positive_int, ensure_rng,
                      ConfigurationError, IndexOutOfRangeError,
                      ScaleFactorTooSmallError)

__all__ = ['ChebyshevSolver', 'ChebyshevMoments', 'PropertyExtractor',
           'jackson_kernel', 'lorentz_kernel', 'spectral_bounds',
           'check_scale_factor', 'line_cut']

# Below this size the spectral bounds are obtained by dense diagonalization.
DENSE_LIMIT = 64


class ChebyshevMoments:
    """Chebyshev vectors or moments generated from a single basis state.

    Instances are returned by `ChebyshevSolver.compute_moments`.  Either all
    vectors :math:`T_k(\\tilde H) \\lvert i \\rangle` are retained, or only
    their projections onto a fixed set of destination states.

    Attributes
    ----------
    source : int
        Basis index of the initial state.
    num_moments : int
        Order of the expansion.
    vectors : 2d array of complex, or None
        ``vectors[k]`` is the k-th Chebyshev vector, if retained.
    destinations : tuple of ints
        Indices for which the projections have been streamed.  Empty if the
        full vectors are retained.
    """

    def __init__(self, source, num_moments, size, vectors=None,
                 destinations=(), projections=None):
        self.source = source
        self.num_moments = num_moments
        self.size = size
        self.vectors = vectors
        self.destinations = tuple(destinations)
        self._projections = projections
        self._column = {d: i for i, d in enumerate(self.destinations)}

    def __repr__(self):
        kind = ('vectors' if self.vectors is not None
                else 'projections onto {} states'.format(
                    len(self.destinations)))
        return '<ChebyshevMoments of state {}: {} {}>'.format(
            self.source, self.num_moments, kind)

    def projection(self, destination):
        """Return the moments ``<destination|T_k(H/a)|source>``.

        Raises
        ------
        IndexOutOfRangeError
            If ``destination`` is not a basis index.
        ValueError
            If the vectors were not retained and the projection onto
            ``destination`` was not streamed.
        """
        if (not isinstance(destination, numbers.Integral)
                or not 0 <= destination < self.size):
            raise IndexOutOfRangeError(
                'Basis index {!r} is outside of [0, {}).'
                .format(destination, self.size))
        if self.vectors is not None:
            return self.vectors[:, destination].copy()
        try:
            column = self._column[destination]
        except KeyError:
            raise ValueError('The projection onto state {} has not been '
                             'retained.'.format(destination))
        return self._projections[:, column].copy()


class ChebyshevSolver:
    """Chebyshev expansion of the spectral function of a Hamiltonian.

    Parameters
    ----------
    hamiltonian : `~chiralkpm.system.SparseHamiltonian`
        The finalized Hamiltonian.  It is not modified.
    scale_factor : positive float
        Half-width :math:`a` of the energy range that is mapped onto
        ``[-1, 1]``.  All eigenvalues of the Hamiltonian must lie inside
        ``(-a, a)``.
    check_scale : bool, default: ``True``
        Verify that the spectrum fits inside the scale factor, see
        `check_scale_factor`.
    rng : seed, or random number generator, optional
        Used for the initial vector of the spectral bound estimate.

    Raises
    ------
    ConfigurationError
        If ``scale_factor`` is not positive.
    ScaleFactorTooSmallError
        If ``check_scale`` is true and the spectrum exceeds the scale factor.

    Notes
    -----
    The scale factor is not computed from the spectrum.  It is chosen
    larger than the bandwidth by the caller.  A generous choice costs
    resolution but is always safe, whereas a too small one makes the
    expansion diverge.
    """

    def __init__(self, hamiltonian, scale_factor, *, check_scale=True,
                 rng=None):
        ensure_isinstance(hamiltonian, SparseHamiltonian)
        if (not isinstance(scale_factor, numbers.Real)
                or not scale_factor > 0):
            raise ConfigurationError("'scale_factor' must be positive, not {!r}."
                                     .format(scale_factor))
        self.hamiltonian = hamiltonian
        self.scale_factor = float(scale_factor)
        self.spectral_radius = None
        if check_scale:
            self.spectral_radius = check_scale_factor(
                hamiltonian, self.scale_factor, rng=rng)
        # Hamiltonian rescaled as in Eq. (24)
        self._rescaled = hamiltonian.matrix * (1 / self.scale_factor)

    def __repr__(self):
        return '<{} for {} with scale factor {:g}>'.format(
            self.__class__.__name__, self.hamiltonian, self.scale_factor)

    @property
    def size(self):
        return self.hamiltonian.shape[0]

    def _chebyshev_vectors(self, start, num_moments):
        """Yield ``T_k(H/a) @ start`` for ``k = 0, ..., num_moments - 1``.

        ``start`` may be a single vector or a block of column vectors.
        """
        alpha = start
        yield alpha
        if num_moments == 1:
            return
        alpha_next = self._rescaled.dot(alpha)
        yield alpha_next
        for n in range(2, num_moments):
            alpha_save = alpha_next
            alpha_next = 2 * self._rescaled.dot(alpha_next) - alpha
            alpha = alpha_save
            yield alpha_next

    def compute_moments(self, source, num_moments, destinations=None):
        """Run the Chebyshev recurrence starting from a basis state.

        Parameters
        ----------
        source : int
            Basis index of the initial state.
        num_moments : positive int
            Number of Chebyshev vectors to compute.
        destinations : sequence of ints, optional
            If given, only the projections of the vectors onto these basis
            states are retained, which needs memory for two vectors only.
            Otherwise all vectors are retained.

        Returns
        -------
        moments : `ChebyshevMoments`

        Raises
        ------
        IndexOutOfRangeError
            If ``source`` or one of ``destinations`` is not a basis index.
        """
        check_index = self.hamiltonian.check_index
        source = check_index(source)
        num_moments = ensure_positive_int(num_moments, 'num_moments')
        if destinations is not None:
            destinations = [check_index(d) for d in destinations]

        start = np.zeros(self.size, dtype=complex)
        start[source] = 1
        vectors = self._chebyshev_vectors(start, num_moments)

        if destinations is None:
            retained = np.empty((num_moments, self.size), dtype=complex)
            for k, vector in enumerate(vectors):
                retained[k] = vector
            return ChebyshevMoments(source, num_moments, self.size,
                                    vectors=retained)

        projections = np.empty((num_moments, len(destinations)),
                               dtype=complex)
        for k, vector in enumerate(vectors):
            projections[k] = vector[destinations]
        return ChebyshevMoments(source, num_moments, self.size,
                                destinations=destinations,
                                projections=projections)

    def compute_moment_block(self, sources, num_moments):
        """Return the moments between all pairs of a set of basis states.

        The vectors for all sources are propagated together, and the
        doubling relations :math:`2 T_n T_n = T_{2n} + T_0` and
        :math:`2 T_{n+1} T_n = T_{2n+1} + T_1` (Eqs. (34) and (35)) are used
        so that only ``num_moments // 2`` products with the Hamiltonian are
        needed.

        Parameters
        ----------
        sources : sequence of ints
            Basis indices.
        num_moments : positive int

        Returns
        -------
        moments : 3d array of complex
            ``moments[k, j, i] = <sources[j]|T_k(H/a)|sources[i]>``.
        """
        check_index = self.hamiltonian.check_index
        sources = [check_index(s) for s in sources]
        num_moments = ensure_positive_int(num_moments, 'num_moments')
        num_sources = len(sources)

        alpha = np.zeros((self.size, num_sources), dtype=complex)
        alpha[sources, np.arange(num_sources)] = 1
        moments = np.zeros((num_moments, num_sources, num_sources),
                           dtype=complex)
        moments[0] = alpha[sources]
        if num_moments == 1:
            return moments

        alpha_next = self._rescaled.dot(alpha)
        moments[1] = alpha_next[sources]
        for n in range(1, num_moments // 2):
            alpha_save = alpha_next
            alpha_next = 2 * self._rescaled.dot(alpha_next) - alpha
            alpha = alpha_save
            # Following Eqs. (34) and (35)
            moments[2*n] = 2 * (alpha.conj().T @ alpha) - moments[0]
            moments[2*n+1] = 2 * (alpha_next.conj().T @ alpha) - moments[1]
        if num_moments % 2:
            # odd moment
            moments[num_moments - 1] = (
                2 * (alpha_next.conj().T @ alpha_next) - moments[0])
        return moments

    def _rescale_energies(self, energies):
        energies = np.asarray(energies, dtype=float)
        e = energies / self.scale_factor
        if np.any(np.abs(e) >= 1):
            raise ConfigurationError(
                'Energies must lie strictly inside (-{0:g}, {0:g}).'
                .format(self.scale_factor))
        return e

    def _weighted_moments(self, moments, kernel):
        moments = np.array(moments, dtype=complex)
        # divide by scale factor to reflect the integral rescaling
        moments /= self.scale_factor
        # stabilized moments with a kernel
        moments = kernel(moments)
        # factor 2 comes from the norm of the Chebyshev polynomials
        moments[1:] = 2 * moments[1:]
        return moments

    def spectral_function(self, moments, energies, kernel=None):
        """Evaluate the kernel-damped expansion at the given energies.

        Parameters
        ----------
        moments : array of complex
            Chebyshev moments along the first axis, possibly with extra
            axes (as returned by `compute_moment_block`).
        energies : float or 1d array of floats
            Energies inside ``(-scale_factor, scale_factor)``.
        kernel : callable, optional
            Takes the moments and returns the damped moments.  By default
            the `jackson_kernel` is used.

        Returns
        -------
        spectral_function : array of complex
            Of shape ``moments.shape[1:] + energies.shape``.  It is real
            for moments between a state and itself.
        """
        if kernel is None:
            kernel = jackson_kernel
        e = self._rescale_energies(energies)
        g_e = np.pi * np.sqrt(1 - e) * np.sqrt(1 + e)
        return chebval(e, self._weighted_moments(moments, kernel)) / g_e

    def density(self, moments, energies, kernel=None):
        """Return the non-negative spectral density.

        Same as `spectral_function`, but only the real part is kept and the
        small negative values caused by the truncation of the expansion are
        clamped to zero.
        """
        rho = self.spectral_function(moments, energies, kernel).real
        return np.maximum(rho, 0)

    def greens_function(self, moments, energies, kernel=None):
        """Return the retarded Green's function at the given energies.

        .. math::
           G(E) = \\frac{-i}{a \\sqrt{1 - x^2}} \\sum_k (2 - δ_{k0})
                  g_k μ_k e^{-i k \\arccos x},  \\quad x = E / a.

        For moments between a state and itself, :math:`-\\mathrm{Im}\\,G/π`
        is the spectral density.
        """
        if kernel is None:
            kernel = jackson_kernel
        e = self._rescale_energies(energies)
        moments = self._weighted_moments(moments, kernel)
        k = np.arange(len(moments))
        phases = np.exp(-1j * np.multiply.outer(k, np.arccos(e)))
        g_e = np.sqrt(1 - e) * np.sqrt(1 + e)
        return -1j * np.tensordot(moments, phases, axes=(0, 0)) / g_e


class PropertyExtractor:
    """Compute local spectral properties of a lattice model.

    Parameters
    ----------
    solver : `ChebyshevSolver`
    num_moments : positive int
        Order of the Chebyshev expansion.
    energy_window : triple ``(lower, upper, resolution)``, optional
        Passed to `set_energy_window`.
    kernel : callable, optional
        Kernel applied to the moments.  Defaults to `jackson_kernel`.
    num_workers : positive int, optional
        Number of threads among which the lattice sites are distributed.
        By default the sites are treated one after the other.

    Examples
    --------
    >>> solver = chiralkpm.kpm.ChebyshevSolver(ham, scale_factor=10)
    >>> extractor = chiralkpm.kpm.PropertyExtractor(solver, 1000)
    >>> extractor.set_energy_window(-1, 1, 500)
    >>> ldos = extractor.calculate_spin_polarized_ldos(
    ...     chiralkpm.kpm.line_cut(ham.lattice))
    """

    def __init__(self, solver, num_moments, energy_window=None, *,
                 kernel=None, num_workers=None):
        ensure_isinstance(solver, ChebyshevSolver)
        self.solver = solver
        self.lattice = solver.hamiltonian.lattice
        self.num_moments = ensure_positive_int(num_moments, 'num_moments')
        self.kernel = kernel if kernel is not None else jackson_kernel
        if num_workers is not None:
            num_workers = ensure_positive_int(num_workers, 'num_workers')
        self.num_workers = num_workers
        self.energy_window = None
        self.energies = None
        if energy_window is not None:
            self.set_energy_window(*energy_window)

    def set_energy_window(self, lower, upper, resolution):
        """Set the energies at which properties are evaluated.

        The energies are ``resolution`` equidistant points from ``lower`` to
        ``upper``, both included.

        Raises
        ------
        ConfigurationError
            Unless ``-scale_factor < lower < upper < scale_factor`` and
            ``resolution`` is a positive integer.
        """
        resolution = ensure_positive_int(resolution, 'resolution')
        a = self.solver.scale_factor
        if not -a < lower < upper < a:
            raise ConfigurationError(
                'The energy window [{0}, {1}] must be ordered and lie '
                'strictly inside (-{2:g}, {2:g}).'.format(lower, upper, a))
        self.energy_window = (float(lower), float(upper))
        self.energies = np.linspace(lower, upper, resolution)

    def _require_energies(self):
        if self.energies is None:
            raise ConfigurationError('The energy window has not been set.')
        return self.energies

    def _map(self, function, items):
        if self.num_workers is None or self.num_workers == 1:
            return [function(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            return list(executor.map(function, items))

    def calculate_greens_function(self, to, from_):
        """Return the Green's function between two coordinates.

        Parameters
        ----------
        to, from_ : triples ``(x, y, sector)``

        Returns
        -------
        greens_function : 1d array of complex
            Evaluated at `energies`.
        """
        energies = self._require_energies()
        row = self.lattice.index(to)
        col = self.lattice.index(from_)
        moments = self.solver.compute_moments(col, self.num_moments,
                                              destinations=[row])
        return self.solver.greens_function(moments.projection(row), energies,
                                           self.kernel)

    def _site_spectral_function(self, tag):
        """Spectral function between the four sectors of a site."""
        sources = list(self.lattice.site_indices(tag))
        moments = self.solver.compute_moment_block(sources, self.num_moments)
        return self.solver.spectral_function(moments, self.energies,
                                             self.kernel)

    def calculate_ldos(self, where=None, sectors=None):
        """Return the local density of states.

        Parameters
        ----------
        where : sequence of site tags, or callable, optional
            Sites at which to evaluate the density, see `_normalize_where`.
            All sites of the lattice by default.
        sectors : sequence of `~chiralkpm.lattice.Sector`, optional
            Sectors whose densities are summed.  All four by default.

        Returns
        -------
        ldos : `~chiralkpm.properties.LDOS`
        """
        energies = self._require_energies()
        tags = _normalize_where(self.lattice, where)
        sectors = list(Sector) if sectors is None else [Sector(s)
                                                        for s in sectors]

        def site_ldos(tag):
            indices = self.lattice.site_indices(tag)
            rho = 0
            for s in sectors:
                moments = self.solver.compute_moments(
                    indices[s], self.num_moments, destinations=[indices[s]])
                rho = rho + self.solver.density(
                    moments.projection(indices[s]), energies, self.kernel)
            return rho

        densities = self._map(site_ldos, tags)
        return LDOS(tags, energies,
                    np.reshape(densities, (len(tags), len(energies))))

    def calculate_spin_polarized_ldos(self, where=None, spins=(0, 1),
                                      spin_matrix=False):
        """Return the local density of states resolved by spin.

        For every site and spin, the densities of the particle and the hole
        sector of that spin are added up.  The moments of each basis state
        are computed once, and reused for all sectors of the same site.

        Parameters
        ----------
        where : sequence of site tags, or callable, optional
            Sites at which to evaluate the density, see `_normalize_where`.
            All sites of the lattice by default.
        spins : sequence of ints, default: ``(0, 1)``
            Spin channels to compute, 0 for up and 1 for down.
        spin_matrix : bool, default: ``False``
            Also compute the 2x2 spin density matrix of the particle sector.

        Returns
        -------
        ldos : `~chiralkpm.properties.SpinPolarizedLDOS`
        """
        energies = self._require_energies()
        tags = _normalize_where(self.lattice, where)
        spins = tuple(spins)
        sectors = [(Sector.particle(s), Sector.hole(s)) for s in spins]

        results = self._map(self._site_spectral_function, tags)

        densities = np.zeros((len(tags), len(spins), len(energies)))
        matrices = (np.zeros((len(tags), len(energies), 2, 2), dtype=complex)
                    if spin_matrix else None)
        for i, rho in enumerate(results):
            for j, (particle, hole) in enumerate(sectors):
                densities[i, j] = (np.maximum(rho[particle, particle].real, 0)
                                   + np.maximum(rho[hole, hole].real, 0))
            if spin_matrix:
                matrices[i] = np.moveaxis(rho[:2, :2], -1, 0)
        return SpinPolarizedLDOS(tags, energies, densities, spins, matrices)


def line_cut(lattice, y=None):
    """Return the site tags of the line ``x = 0, ..., size_x - 1`` at ``y``.

    By default ``y`` is the central row, ``size_y // 2``.
    """
    if y is None:
        y = lattice.size_y // 2
    return [lattice.normalize_tag((x, y)) for x in range(lattice.size_x)]


def _normalize_where(lattice, where):
    """Return a list of site tags.

    ``where`` may be None (all sites), a callable that takes a site tag and
    returns a truth value, or a sequence of ``(x, y)`` pairs.
    """
    if where is None:
        return list(lattice.sites())
    if callable(where):
        return [tag for tag in lattice.sites() if where(tag)]
    tags = [lattice.normalize_tag(tag) for tag in where]
    if len(set(tags)) != len(tags):
        raise ValueError("'where' contains duplicate sites.")
    return tags


# ### Auxiliary functions

def jackson_kernel(moments):
    """Convolutes ``moments`` with the Jackson kernel.

    Taken from Eq. (71) of `Rev. Mod. Phys., Vol. 78, No. 1 (2006)
    <https://arxiv.org/abs/cond-mat/0504627>`_.
    """

    n_moments, *extra_shape = moments.shape
    m = np.arange(n_moments)
    kernel_array = ((n_moments - m + 1) *
                    np.cos(np.pi * m/(n_moments + 1)) +
                    np.sin(np.pi * m/(n_moments + 1)) /
                    np.tan(np.pi/(n_moments + 1)))
    kernel_array /= n_moments + 1

    # transposes handle the case of moments with extra axes
    conv_moments = np.transpose(moments.transpose() * kernel_array)
    return conv_moments


def lorentz_kernel(moments, l=4):
    """Convolutes ``moments`` with the Lorentz kernel.

    Taken from Eq. (71) of `Rev. Mod. Phys., Vol. 78, No. 1 (2006)
    <https://arxiv.org/abs/cond-mat/0504627>`_.

    The additional parameter ``l`` controls the decay of the kernel.
    """

    n_moments, *extra_shape = moments.shape

    m = np.arange(n_moments)
    kernel_array = np.sinh(l * (1 - m / n_moments)) / np.sinh(l)

    # transposes handle the case of moments with extra axes
    conv_moments = np.transpose(moments.transpose() * kernel_array)
    return conv_moments


def spectral_bounds(hamiltonian, tol=1e-3, rng=None):
    """Return the lowest and the highest eigenvalue of a Hamiltonian.

    Parameters
    ----------
    hamiltonian : `~chiralkpm.system.SparseHamiltonian`
    tol : float
        Relative tolerance of the eigenvalues.
    rng : seed, or random number generator, optional
        Used for the initial residual vector of the Lanczos iteration.

    Raises
    ------
    scipy.sparse.linalg.ArpackNoConvergence
        If the Lanczos iteration does not converge.
    """
    matrix = hamiltonian.matrix
    if matrix.shape[0] <= DENSE_LIMIT:
        eigenvalues = np.linalg.eigvalsh(matrix.toarray())
        return float(eigenvalues[0]), float(eigenvalues[-1])
    rng = ensure_rng(rng)
    v0 = np.exp(2j * np.pi * rng.random_sample(matrix.shape[0]))
    lmax = eigsh(matrix, k=1, which='LA', return_eigenvectors=False,
                 tol=tol, v0=v0)
    lmin = eigsh(matrix, k=1, which='SA', return_eigenvectors=False,
                 tol=tol, v0=v0)
    return float(np.real(lmin[0])), float(np.real(lmax[0]))


def check_scale_factor(hamiltonian, scale_factor, rng=None):
    """Verify that the spectrum of a Hamiltonian lies inside ``(-a, a)``.

    The Gershgorin bound is tried first.  Only if it exceeds the scale factor
    are the extremal eigenvalues computed.

    Returns
    -------
    bound : float
        An upper bound of the spectral radius that is smaller than
        ``scale_factor``.

    Raises
    ------
    ScaleFactorTooSmallError
        If the spectral radius is not smaller than ``scale_factor``.
    """
    bound = hamiltonian.gershgorin_bound()
    if bound < scale_factor:
        return bound
    try:
        lmin, lmax = spectral_bounds(hamiltonian, rng=rng)
    except ArpackNoConvergence:
        warnings.warn('The spectral radius could not be computed; the scale '
                      'factor {:g} is smaller than the Gershgorin bound {:g} '
                      'and might be too small.'.format(scale_factor, bound),
                      RuntimeWarning, stacklevel=3)
        return bound
    # Allow for the tolerance of the eigenvalue computation.
    radius = max(abs(lmin), abs(lmax)) * (1 + 1e-3)
    if radius >= scale_factor:
        raise ScaleFactorTooSmallError(
            'The spectrum [{:g}, {:g}] does not fit inside the scale factor '
            '{:g}.'.format(lmin, lmax, scale_factor))
    return radius
