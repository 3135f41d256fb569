# SPDX-FileCopyrightText: 2024 University of Rochester
#
# SPDX-License-Identifier: MIT

import sys

from .server import main

if __name__ == '__main__':
    sys.exit(main())
