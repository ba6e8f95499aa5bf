# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

"""Reading run parameters from a configuration file"""

__all__ = ['Parameters', 'load_parameters']

import configparser
from pathlib import Path

from ._common import ConfigurationError


# (section, option, type, default); a default of None marks a required option.
SCHEMA = [
    ('lattice', 'size_x', int, None),
    ('lattice', 'size_y', int, None),
    ('lattice', 'radius', float, None),
    ('lattice', 'boundary_width', float, None),
    ('lattice', 'periodic', bool, False),
    ('chebyshev', 'num_coefficients', int, None),
    ('chebyshev', 'energy_resolution', int, None),
    ('chebyshev', 'scale_factor', float, None),
    ('chebyshev', 'lower_bound', float, None),
    ('chebyshev', 'upper_bound', float, None),
    ('model', 'mu', complex, None),
    ('model', 't', complex, None),
    ('model', 'd_s', complex, None),
    ('model', 'd_t', complex, None),
    ('model', 'alpha', complex, None),
    ('model', 'v_z', complex, None),
    ('output', 'cut_1d', bool, None),
    ('output', 'filename', str, 'ChiralKPMResults.h5'),
]

# Alternative spellings of options, as (section, alias) -> option.
ALIASES = {
    ('output', 'cut1d'): 'cut_1d',
}


class Parameters:
    """Validated run parameters.

    Every option of the configuration file is available as an attribute of
    the same (lower case) name.
    """

    def __init__(self, **values):
        self.__dict__.update(values)
        self._validate()

    def __repr__(self):
        items = ', '.join('{}={!r}'.format(k, v)
                          for k, v in self.as_dict().items())
        return '{}({})'.format(self.__class__.__name__, items)

    def as_dict(self):
        return {option: getattr(self, option)
                for _, option, _, _ in SCHEMA}

    def _validate(self):
        for name in ('size_x', 'size_y', 'num_coefficients',
                     'energy_resolution'):
            if getattr(self, name) <= 0:
                raise ConfigurationError("'{}' must be positive, not {}."
                                         .format(name, getattr(self, name)))
        for name in ('scale_factor', 'boundary_width'):
            if not getattr(self, name) > 0:
                raise ConfigurationError("'{}' must be positive, not {}."
                                         .format(name, getattr(self, name)))
        a = self.scale_factor
        if not -a < self.lower_bound < self.upper_bound < a:
            raise ConfigurationError(
                'The energy window [{0}, {1}] must be ordered and lie '
                'strictly inside (-{2}, {2}).'.format(self.lower_bound,
                                                      self.upper_bound, a))


def _convert(parser, section, option, typ):
    if typ is bool:
        return parser.getboolean(section, option)
    if typ is int:
        return parser.getint(section, option)
    if typ is float:
        return parser.getfloat(section, option)
    if typ is complex:
        # Python literals such as '-4', '0.5j' or '(1+2j)'.
        return complex(parser.get(section, option).replace(' ', ''))
    return parser.get(section, option)


def load_parameters(source):
    """Read and validate run parameters.

    Parameters
    ----------
    source : str, `pathlib.Path` or file-like object
        An INI-style file with the sections ``[lattice]``, ``[chebyshev]``,
        ``[model]`` and ``[output]``.  Option names are case-insensitive and
        ``cut1D`` is accepted for ``cut_1d``.

    Returns
    -------
    parameters : `Parameters`

    Raises
    ------
    ConfigurationError
        If the file is missing, an option is missing or malformed, or a value
        is out of range.
    """
    parser = configparser.ConfigParser()
    try:
        if hasattr(source, 'read'):
            parser.read_file(source)
        else:
            path = Path(source)
            with path.open() as f:
                parser.read_file(f)
    except OSError as e:
        raise ConfigurationError('Cannot read parameters: {}'.format(e)) from e
    except configparser.Error as e:
        raise ConfigurationError('Malformed parameter file: {}'
                                 .format(e)) from e

    for (section, alias), option in ALIASES.items():
        if (parser.has_option(section, alias)
                and not parser.has_option(section, option)):
            parser.set(section, option, parser.get(section, alias, raw=True))
            parser.remove_option(section, alias)

    values = {}
    for section, option, typ, default in SCHEMA:
        if not parser.has_option(section, option):
            if default is None:
                raise ConfigurationError('Missing option {!r} in section [{}].'
                                         .format(option, section))
            values[option] = default
            continue
        try:
            values[option] = _convert(parser, section, option, typ)
        except ValueError as e:
            raise ConfigurationError('Invalid value for {!r} in section [{}]: '
                                     '{}'.format(option, section, e)) from e

    known = {(section, option) for section, option, _, _ in SCHEMA}
    unknown = [(s, o) for s in parser.sections() for o in parser.options(s)
               if (s, o) not in known]
    if unknown:
        raise ConfigurationError('Unknown options: {}'.format(
            ', '.join('[{}] {}'.format(s, o) for s, o in unknown)))

    return Parameters(**values)
