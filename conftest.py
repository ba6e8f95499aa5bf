# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.
"""Pytest plugin to ignore tests that have uninstalled dependencies.

This ignores modules on test collection, which is required when the tests
themselves import the dependency.
"""

import importlib


# map from test module to sequence of dependency module names
subpackage_dependencies = {
    'chiralkpm/tests/test_io': ['h5py'],
    'chiralkpm/tests/test_run': ['h5py'],
}


# map from test module to sequence of dependency modules that are not
# installed
dependencies_not_installed = {}
for package, dependencies in subpackage_dependencies.items():
    not_installed = []
    for dep in dependencies:
        try:
            importlib.import_module(dep)
        except ImportError:
            not_installed.append(dep)
    if len(not_installed) != 0:
        dependencies_not_installed[package] = not_installed


def pytest_ignore_collect(collection_path, config):
    for subpackage, not_installed in dependencies_not_installed.items():
        if subpackage in collection_path.as_posix():
            print('ignoring {} because the following dependencies are not '
                  'installed: {}'.format(subpackage, ', '.join(not_installed)))
            return True
