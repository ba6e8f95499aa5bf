# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import io

import pytest
from pytest import raises

from chiralkpm import params
from chiralkpm._common import ConfigurationError


PARAMETERS = """\
[lattice]
size_x = 20
Size_Y = 10
radius = 5.5
boundary_width = 1

[chebyshev]
num_coefficients = 1000
energy_resolution = 500
scale_factor = 12
lower_bound = -1
upper_bound = 1.5

[model]
mu = -4
t = 1
d_s = 0.5
d_t = 0.1j
alpha = (0.3 + 0.1j)
v_z = 2

[output]
cut_1d = yes
"""


def replace(option, value):
    """Return the parameters with ``option`` set to ``value`` or removed."""
    section = next(s for s, o, _, _ in params.SCHEMA if o == option)
    lines = [line for line in PARAMETERS.splitlines()
             if line.split('=')[0].strip().lower() != option]
    if value is not None:
        lines.insert(lines.index('[{}]'.format(section)) + 1,
                     '{} = {}'.format(option, value))
    return io.StringIO('\n'.join(lines) + '\n')


def test_load_parameters(tmp_path):
    path = tmp_path / 'Parameters'
    path.write_text(PARAMETERS)
    for source in [path, str(path), io.StringIO(PARAMETERS)]:
        p = params.load_parameters(source)
        assert (p.size_x, p.size_y) == (20, 10)
        assert isinstance(p.size_x, int)
        assert p.radius == 5.5 and p.boundary_width == 1.
        assert p.periodic is False
        assert p.num_coefficients == 1000
        assert p.energy_resolution == 500
        assert (p.scale_factor, p.lower_bound, p.upper_bound) == (12, -1, 1.5)
        assert p.mu == -4 and isinstance(p.mu, complex)
        assert p.d_t == 0.1j
        assert p.alpha == 0.3 + 0.1j
        assert p.cut_1d is True
        assert p.filename == 'ChiralKPMResults.h5'

    d = p.as_dict()
    assert d['size_y'] == 10
    assert len(d) == len(params.SCHEMA)
    assert 'Parameters(' in repr(p)


def test_optional_values():
    p = params.load_parameters(replace('periodic', 'true'))
    assert p.periodic is True
    p = params.load_parameters(replace('filename', 'out.h5'))
    assert p.filename == 'out.h5'


def test_option_aliases():
    text = PARAMETERS.replace('cut_1d = yes', 'cut1D = no')
    p = params.load_parameters(io.StringIO(text))
    assert p.cut_1d is False
    assert 'cut1d' not in p.as_dict()

    # Both spellings at once
    text = PARAMETERS.replace('cut_1d = yes', 'cut_1d = yes\ncut1D = no')
    with raises(ConfigurationError):
        params.load_parameters(io.StringIO(text))


@pytest.mark.parametrize('option, value', [
    ('size_x', None),
    ('cut_1d', None),
    ('size_x', '0'),
    ('size_y', '2.5'),
    ('num_coefficients', '-10'),
    ('energy_resolution', 'many'),
    ('boundary_width', '0'),
    ('scale_factor', '0'),
    ('lower_bound', '-12'),
    ('upper_bound', '12'),
    ('upper_bound', '-1'),
    ('mu', '1 + + 2j'),
    ('cut_1d', 'perhaps'),
])
def test_invalid_parameters(option, value):
    with raises(ConfigurationError):
        params.load_parameters(replace(option, value))


def test_invalid_files(tmp_path):
    with raises(ConfigurationError):
        params.load_parameters(tmp_path / 'missing')
    with raises(ConfigurationError):
        params.load_parameters(io.StringIO('size_x = 3\n'))
    with raises(ConfigurationError):
        params.load_parameters(io.StringIO(PARAMETERS + 'unknown = 1\n'))
