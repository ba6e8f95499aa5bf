# Copyright 2011-2026 chiralkpm authors.
#
# This file is part of chiralkpm.  It is subject to the license terms in the
# file LICENSE.rst found in the top-level directory of this distribution.  A
# list of chiralkpm authors can be found in the file AUTHORS.rst at the
# top-level directory of this distribution.

import sys

from .run import main

sys.exit(main())
