# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Storing results in HDF5 files"""

__all__ = ['clear', 'write_spin_polarized_ldos', 'read_spin_polarized_ldos']

import os

import numpy as np
import h5py

from .properties import SpinPolarizedLDOS


def clear(filename):
    """Remove ``filename`` if it exists."""
    try:
        os.remove(filename)
    except FileNotFoundError:
        pass


def write_spin_polarized_ldos(ldos, filename, name='SpinPolarizedLDOS',
                              attributes=None):
    """Store a `~chiralkpm.properties.SpinPolarizedLDOS` in an HDF5 group.

    The file is opened for appending, so that several results can be stored
    in the same file.  An existing group of the same name is replaced.

    Parameters
    ----------
    ldos : `~chiralkpm.properties.SpinPolarizedLDOS`
    filename : str or `pathlib.Path`
    name : str
        Name of the group.
    attributes : dict, optional
        Stored as attributes of the group, typically the run parameters.
        Complex values are stored as ``(real, imag)`` pairs.

    Notes
    -----
    The group contains the datasets ``coordinates`` of shape
    ``(sites, 2)``, ``energies``, ``spins``, one dataset ``density_<spin>``
    of shape ``(sites, energies)`` per spin channel, and ``spin_matrices``
    if these were computed.
    """
    with h5py.File(filename, 'a') as f:
        if name in f:
            del f[name]
        group = f.create_group(name)
        group.create_dataset('coordinates', data=np.array(
            [tuple(c) for c in ldos.coordinates], dtype=int).reshape(-1, 2))
        group.create_dataset('energies', data=ldos.energies)
        group.create_dataset('spins', data=np.array(ldos.spins, dtype=int))
        for spin in ldos.spins:
            group.create_dataset('density_{}'.format(spin),
                                 data=ldos.channel(spin))
        if ldos.spin_matrices is not None:
            group.create_dataset('spin_matrices', data=ldos.spin_matrices)
        for key, value in (attributes or {}).items():
            if isinstance(value, complex):
                value = np.array([value.real, value.imag])
            group.attrs[key] = value


def read_spin_polarized_ldos(filename, name='SpinPolarizedLDOS'):
    """Read a result stored by `write_spin_polarized_ldos`.

    Raises
    ------
    KeyError
        If the file has no group ``name``.
    """
    with h5py.File(filename, 'r') as f:
        group = f[name]
        spins = tuple(int(s) for s in group['spins'][()])
        densities = np.stack([group['density_{}'.format(s)][()]
                              for s in spins], axis=1)
        spin_matrices = (group['spin_matrices'][()]
                         if 'spin_matrices' in group else None)
        return SpinPolarizedLDOS(group['coordinates'][()],
                                 group['energies'][()], densities, spins,
                                 spin_matrices)
