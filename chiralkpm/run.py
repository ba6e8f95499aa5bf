# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Computing the spin-polarized LDOS of an island from the command line"""

import os
import struct
import argparse
import logging

import numpy
import scipy

from . import params, io, kpm, lattice
from .physics import island
from .version import version
from ._common import (timed, ConfigurationError, InvalidModelError,
                      ScaleFactorTooSmallError)

__all__ = ['randomize', 'main']

logger = logging.getLogger('chiralkpm')

numpy_version = numpy.version.version
if not numpy.version.release:
    numpy_version += '-non-release'

scipy_version = scipy.version.version
if not scipy.version.release:
    scipy_version += '-non-release'


def randomize():
    """Return a seed for the random number generator.

    The seed is read from the RNG_SEED environment variable.  If it is
    undefined or has the value "random", it is drawn from the operating
    system.
    """
    seed = os.environ.get('RNG_SEED', 'random')
    if seed == 'random':
        return struct.unpack('I', os.urandom(4))[0]
    return int(seed)


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        prog='chiralkpm',
        description='Spin-polarized local density of states of a chiral '
                    'topological superconducting island.')
    parser.add_argument('parameters', nargs='?', default='Parameters',
                        help='parameter file (default: %(default)s)')
    parser.add_argument('-o', '--output',
                        help='HDF5 output file, overrides the parameter file')
    parser.add_argument('-w', '--workers', type=int, default=None,
                        help='number of threads among which the sites are '
                             'distributed')
    parser.add_argument('--no-scale-check', action='store_true',
                        help='do not verify that the spectrum fits inside '
                             'the scale factor')
    parser.add_argument('-v', '--verbose', action='count', default=0)
    return parser.parse_args(argv)


def main(argv=None):
    """Run the calculation; return the exit status."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(message)s', datefmt='%H:%M:%S')

    seed = randomize()
    logger.info('chiralkpm %s, scipy %s, numpy %s',
                version, scipy_version, numpy_version)
    logger.debug('random seed: %d', seed)

    try:
        with timed('total', logger.info):
            run(args, numpy.random.RandomState(seed))
    except (ConfigurationError, InvalidModelError,
            ScaleFactorTooSmallError) as e:
        logger.error('%s', e)
        return 1
    return 0


def run(args, rng=None):
    p = params.load_parameters(args.parameters)
    logger.debug('%r', p)
    filename = args.output or p.filename

    boundary = (lattice.Boundary.PERIODIC if p.periodic
                else lattice.Boundary.OPEN)
    lat = lattice.Lattice(p.size_x, p.size_y, boundary)
    logger.info('%s', lat)

    with timed('setup', logger.info):
        model = island.make_model(lat, mu=p.mu, t=p.t, d_s=p.d_s, d_t=p.d_t,
                                  alpha=p.alpha, v_z=p.v_z, radius=p.radius,
                                  boundary_width=p.boundary_width)
        ham = model.finalized()
        logger.debug('%r', ham)
        solver = kpm.ChebyshevSolver(ham, p.scale_factor,
                                     check_scale=not args.no_scale_check,
                                     rng=rng)
        extractor = kpm.PropertyExtractor(
            solver, p.num_coefficients,
            (p.lower_bound, p.upper_bound, p.energy_resolution),
            num_workers=args.workers)

    where = kpm.line_cut(lat) if p.cut_1d else None
    with timed('calculation', logger.info):
        ldos = extractor.calculate_spin_polarized_ldos(where)
    logger.debug('%r', ldos)

    with timed('output', logger.info):
        io.clear(filename)
        io.write_spin_polarized_ldos(ldos, filename, attributes=p.as_dict())
    logger.info('results written to %s', filename)
    return ldos
