# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import time
import numbers
from contextlib import contextmanager

import numpy as np

__all__ = ['OutOfBoundsError', 'InvalidModelError', 'ConfigurationError',
           'IndexOutOfRangeError', 'ScaleFactorTooSmallError']


class OutOfBoundsError(IndexError):
    """A coordinate lies outside of the lattice it is used with.

    Raised while a model is being constructed, for instance when a coupling
    refers to a site beyond the lattice extents or to a sector other than
    0, 1, 2 or 3.  The model is left unchanged.
    """
    pass


class InvalidModelError(ValueError):
    """The accumulated couplings do not form a Hermitian operator.

    Raised by `~chiralkpm.builder.Model.finalized` when a diagonal element
    has a non-negligible imaginary part, or when an off-diagonal element is
    not the complex conjugate of its transposed partner.  This almost always
    means that a coupling was declared without its Hermitian conjugate.
    """
    pass


class ConfigurationError(ValueError):
    """Invalid solver or run configuration.

    Raised before any computation starts, for example for an energy window
    that does not lie strictly inside ``(-scale_factor, scale_factor)`` or a
    non-positive expansion order or energy resolution.
    """
    pass


class IndexOutOfRangeError(IndexError):
    """A basis index outside of ``[0, N)`` was passed to a solver."""
    pass


class ScaleFactorTooSmallError(ValueError):
    """The spectrum of the Hamiltonian does not fit into the scale factor.

    The Chebyshev expansion requires all eigenvalues of ``H / a`` to lie in
    ``[-1, 1]``.  If they do not, the reconstructed densities are aliased
    and meaningless.
    """
    pass


def ensure_isinstance(obj, typ, msg=None):
    if isinstance(obj, typ):
        return
    if msg is None:
        msg = "Expecting an instance of {}.".format(typ.__name__)
    raise TypeError(msg)


def ensure_positive_int(value, name, exc=ConfigurationError):
    """Return ``value`` as an int, or raise if it is not a positive integer."""
    if (isinstance(value, bool) or not isinstance(value, numbers.Real)
            or value != int(value) or value <= 0):
        raise exc("'{}' must be a positive integer, not {!r}."
                  .format(name, value))
    return int(value)


def ensure_rng(rng=None):
    """Turn rng into a random number generator instance

    If rng is None, return the RandomState instance used by np.random.
    If rng is an integer, return a new RandomState instance seeded with rng.
    If rng is already a RandomState instance, return it.
    Otherwise raise ValueError.
    """
    if rng is None:
        return np.random.mtrand._rand
    if isinstance(rng, numbers.Integral):
        return np.random.RandomState(rng)
    if all(hasattr(rng, attr) for attr in ('random_sample', 'randn',
                                           'randint', 'choice')):
        return rng
    raise ValueError("Expecting a seed or an object that offers the "
                     "numpy.random.RandomState interface.")


@contextmanager
def timed(label, report=None):
    """Measure the wall-clock time spent inside the ``with`` block.

    ``report`` is called with a message once the block is left, also when
    it is left through an exception.  The timing has no other effect.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if report is not None:
            report('{}: {:.3f} s'.format(label, elapsed))
