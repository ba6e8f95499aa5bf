# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Chiral topological superconducting island in a host superconductor.

The island is defined by a Zeeman field that is large inside a disc of
radius ``radius`` around the center of the lattice and decays over
``boundary_width`` outside of it.  The host is a superconductor with s-wave
and p-wave pairing and Rashba spin-orbit interaction.
"""

__all__ = ['magnetization', 'order_parameters', 'make_model',
           'make_normal_model']

import numpy as np

from ..builder import Model, CouplingTerm, HermConj

# Bond offsets; hoppings along x and y carry different phases.
X_BOND = (1, 0)
Y_BOND = (0, 1)


def _distance_from_center(lattice):
    cx, cy = lattice.center
    x = np.arange(lattice.size_x) - cx
    y = np.arange(lattice.size_y) - cy
    return np.hypot(*np.meshgrid(x, y, indexing='ij'))


def magnetization(lattice, v_z, radius, boundary_width):
    """Return the Zeeman strength on every site as a ``(size_x, size_y)`` array.

    The profile is ``v_z * (pi/2 - arctan((r - radius) / boundary_width)) / pi``
    with ``r`` the distance from the central site, so that it approaches
    ``v_z`` deep inside the island and zero far outside of it.
    """
    if not boundary_width > 0:
        raise ValueError("'boundary_width' must be positive.")
    r = _distance_from_center(lattice)
    profile = (np.pi / 2 - np.arctan((r - radius) / boundary_width)) / np.pi
    return v_z * profile


def order_parameters(lattice, d_s, d_t):
    """Return the s-wave and the p-wave order parameter on every site."""
    shape = (lattice.size_x, lattice.size_y)
    return (np.full(shape, d_s, dtype=complex),
            np.full(shape, d_t, dtype=complex))


def make_model(lattice, mu, t, d_s, d_t, alpha, v_z, radius,
               boundary_width):
    """Build the BdG model of the island.

    Parameters
    ----------
    lattice : `~chiralkpm.lattice.Lattice`
        Also selects open or periodic boundaries.
    mu : complex
        Chemical potential.
    t : complex
        Nearest neighbor hopping.
    d_s, d_t : complex
        s-wave and p-wave pairing amplitudes.
    alpha : complex
        Rashba spin-orbit strength.
    v_z : complex
        Zeeman strength inside the island.
    radius, boundary_width : float
        Shape of the island, see `magnetization`.

    Returns
    -------
    model : `~chiralkpm.builder.Model`
        Not yet finalized.
    """
    model = Model(lattice)
    m = magnetization(lattice, v_z, radius, boundary_width)
    delta_s, delta_p = order_parameters(lattice, d_s, d_t)
    bonds_x = dict((tuple(b), a) for a, b in lattice.bonds(X_BOND))
    bonds_y = dict((tuple(b), a) for a, b in lattice.bonds(Y_BOND))

    for tag in lattice.sites():
        x, y = tag
        for s in (0, 1):
            # Spin sign, +1 for up and -1 for down.
            sigma = 2 * (0.5 - s)
            hole, flip = s + 2, (s + 1) % 2

            # Chemical potential
            model << CouplingTerm(-mu, (x, y, s), (x, y, s))
            model << CouplingTerm(mu, (x, y, hole), (x, y, hole))

            # Zeeman term
            zeeman = 2 * m[x, y] * (s - 0.5)
            model << CouplingTerm(zeeman, (x, y, s), (x, y, s))
            model << CouplingTerm(-zeeman, (x, y, hole), (x, y, hole))

            # Hopping, Rashba spin-orbit and p-wave pairing along x
            if (x, y) in bonds_x:
                xn, yn = bonds_x[x, y]
                p = delta_p[x, y] * sigma
                for amplitude, to, from_ in [
                        (-t, (xn, yn, s), (x, y, s)),
                        (t, (xn, yn, hole), (x, y, hole)),
                        (-alpha * sigma, (xn, yn, flip), (x, y, s)),
                        (alpha * sigma, (xn, yn, flip + 2), (x, y, hole)),
                        (p, (xn, yn, hole), (x, y, s)),
                        (-p, (xn, yn, s), (x, y, hole))]:
                    model << CouplingTerm(amplitude, to, from_) + HermConj

            # The same along y, with imaginary spin-orbit and p-wave terms
            if (x, y) in bonds_y:
                xn, yn = bonds_y[x, y]
                p = 1j * delta_p[x, y]
                for amplitude, to, from_ in [
                        (-t, (xn, yn, s), (x, y, s)),
                        (t, (xn, yn, hole), (x, y, hole)),
                        (-1j * alpha, (xn, yn, flip), (x, y, s)),
                        (-1j * alpha, (xn, yn, flip + 2), (x, y, hole)),
                        (p, (xn, yn, hole), (x, y, s)),
                        (p, (xn, yn, s), (x, y, hole))]:
                    model << CouplingTerm(amplitude, to, from_) + HermConj

            # s-wave pairing
            model << CouplingTerm(2 * delta_s[x, y] * (s - 0.5),
                                  (x, y, 3 - s), (x, y, s)) + HermConj
    return model


def make_normal_model(lattice, t, mu=0):
    """Build a model without pairing, spin-orbit interaction or Zeeman field.

    This is a plain tight-binding model, duplicated into the particle and
    the hole sectors.
    """
    return make_model(lattice, mu=mu, t=t, d_s=0, d_t=0, alpha=0, v_z=0,
                      radius=0, boundary_width=1)
