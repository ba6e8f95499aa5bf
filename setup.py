#!/usr/bin/env python3

# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import sys

import os
import importlib.util
import subprocess
from pathlib import Path

from setuptools import setup, find_packages
from setuptools.command.build_py import build_py as build_py_orig
from setuptools.command.sdist import sdist as sdist_orig


STATIC_VERSION_PATH = 'chiralkpm/_chiralkpm_version.py'

distr_root = Path(__file__).resolve().parent


def check_versions():
    global version, version_is_from_git

    # Let chiralkpm itself determine its own version.  We cannot simply
    # import chiralkpm, as its dependencies might not be installed yet.
    spec = importlib.util.spec_from_file_location('version',
                                                  'chiralkpm/version.py')
    version_module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(version_module)

    version_module.ensure_python()
    version = version_module.version
    version_is_from_git = version_module.version_is_from_git


def banner(title=''):
    starred = title.center(79, '*')
    return '\n' + starred if title else starred


class build_py(build_py_orig):
    def run(self):
        super().run()
        write_version(Path(self.build_lib) / STATIC_VERSION_PATH)


def git_lsfiles():
    if not version_is_from_git:
        return

    try:
        p = subprocess.Popen(['git', 'ls-files'], cwd=distr_root,
                             stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError:
        return

    if p.wait() != 0:
        return
    return p.communicate()[0].decode().split('\n')[:-1]


class sdist(sdist_orig):
    def run(self):
        """Create MANIFEST.in from git if possible, otherwise check that
        MANIFEST.in is present.
        """
        manifest_in_file = 'MANIFEST.in'
        manifest = distr_root / manifest_in_file
        names = git_lsfiles()
        if names is None:
            if not (manifest.is_file() and os.access(manifest, os.R_OK)):
                sys.exit(f"Error: {manifest_in_file} "
                         "file is missing and Git is not available"
                         " to regenerate it.")
        else:
            with open(manifest, 'w') as f:
                for name in names:
                    if name.rpartition('/')[2] == '.gitignore':
                        continue
                    f.write('include {}\n'.format(name))

        super().run()

        if names is None:
            msg = ("Git was not available to generate the list of files to be "
                   "included in the\nsource distribution. The old {} was used.")
            msg = msg.format(manifest_in_file)
            print(banner(' Caution '), msg, banner(), sep='\n', file=sys.stderr)

    def make_release_tree(self, base_dir, files):
        super().make_release_tree(base_dir, files)
        write_version(Path(base_dir) / STATIC_VERSION_PATH)


def write_version(path):
    # This could be a hard link, so try to delete it first.
    path.unlink(missing_ok=True)
    path.write_text(
        f"# This file has been created by setup.py.\n{version = }\n"
    )


def long_description():
    source = Path('README.rst')
    if not source.is_file():
        return ''
    return source.read_text()


def main():
    check_versions()

    classifiers = """\
        Development Status :: 4 - Beta
        Intended Audience :: Science/Research
        Programming Language :: Python :: 3 :: Only
        Topic :: Scientific/Engineering :: Physics
        Operating System :: OS Independent"""

    setup(name='chiralkpm',
          version=version,
          author='chiralkpm authors',
          description=("Spin-polarized local density of states of chiral "
                       "topological superconductors with the kernel "
                       "polynomial method"),
          long_description=long_description(),
          license="BSD",
          packages=find_packages('.', include=['chiralkpm', 'chiralkpm.*']),
          cmdclass={'build_py': build_py,
                    'sdist': sdist},
          install_requires=['numpy >= 1.18.0', 'scipy >= 1.6.0',
                            'tinyarray >= 1.2.2', 'h5py >= 2.10'],
          extras_require={
              'test': ['pytest >= 7.0'],
          },
          entry_points={
              'console_scripts': ['chiralkpm = chiralkpm.run:main'],
          },
          python_requires='>=3.8',
          classifiers=[c.strip() for c in classifiers.split('\n')])

if __name__ == '__main__':
    main()
