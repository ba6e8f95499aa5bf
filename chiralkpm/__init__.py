# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

__all__ = []

from . import version
version.ensure_python()
__version__ = version.version

from ._common import (OutOfBoundsError, InvalidModelError, ConfigurationError,
                      IndexOutOfRangeError, ScaleFactorTooSmallError)
__all__.extend(['OutOfBoundsError', 'InvalidModelError', 'ConfigurationError',
                'IndexOutOfRangeError', 'ScaleFactorTooSmallError'])

# Pre-import most submodules.  (The io module needs h5py and is imported on
# demand.)
from . import lattice
from . import builder
from . import system
from . import kpm
from . import properties
from . import params
from . import physics
__all__.extend(['lattice', 'builder', 'system', 'kpm', 'properties',
                'params', 'physics'])

# Make selected functionality available directly in the root namespace.
from .lattice import Lattice, Sector, Boundary
__all__.extend(['Lattice', 'Sector', 'Boundary'])
from .builder import Model, CouplingTerm, HermConj
__all__.extend(['Model', 'CouplingTerm', 'HermConj'])
from .kpm import ChebyshevSolver, PropertyExtractor
__all__.extend(['ChebyshevSolver', 'PropertyExtractor'])


def test(verbose=True):
    from pytest import main
    import os.path

    return main([os.path.dirname(os.path.abspath(__file__)),
                     "-s"] + (['-v'] if verbose else []))

test.__test__ = False
