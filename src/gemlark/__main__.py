# =============================================================================
# gemlark Entry Point for `python -m gemlark`
# =============================================================================
# This module allows gemlark to be run as a Python module:
#
#   python -m gemlark
#
# This is equivalent to running the 'gemlark' command after installation.
# =============================================================================

import sys

from gemlark.app import main

if __name__ == "__main__":
    sys.exit(main())
