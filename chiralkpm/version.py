# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import sys
import subprocess
import os

# No public API
__all__ = []

package_root = os.path.dirname(os.path.realpath(__file__))
distr_root = os.path.dirname(package_root)


def ensure_python(required_version=(3, 8)):
    v = sys.version_info
    if v[:3] < required_version:
        error = "This version of chiralkpm requires Python {} or above.".format(
            ".".join(str(p) for p in required_version))
        print(error, file=sys.stderr)
        sys.exit(1)


def _git(*args):
    """Run git in the distribution root; return its output or None."""
    try:
        p = subprocess.Popen(['git'] + list(args), cwd=distr_root,
                             stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError:
        return None
    out, _ = p.communicate()
    if p.returncode != 0:
        return None
    return out.decode().rstrip('\n')


def get_version_from_git():
    toplevel = _git('rev-parse', '--show-toplevel')
    if toplevel is None or not os.path.samefile(toplevel, distr_root):
        # Not a checkout of chiralkpm itself, maybe a repository that
        # contains it.
        return None

    # git describe --first-parent does not take into account tags from
    # branches that were merged-in.
    for opts in [['--first-parent'], []]:
        description = _git('describe', '--long', *opts)
        if description is not None:
            break
    else:
        return None

    release, dev, git = description.strip('v').rsplit('-', 2)
    version = [release]
    labels = []
    if dev != "0":
        version.append(".dev{}".format(dev))
        labels.append(git)
    if _git('diff', '--quiet') is None:
        labels.append('dirty')
    if labels:
        version.append('+')
        version.append(".".join(labels))

    return "".join(version)


def init(version_file='_chiralkpm_version.py'):
    global version, version_is_from_git
    version_info = {}
    with open(os.path.join(package_root, version_file), 'rb') as f:
        exec(f.read(), {}, version_info)
    version = version_info['version']
    version_is_from_git = (version == "__use_git__")
    if version_is_from_git:
        version = get_version_from_git() or "0+unknown"

init()
