"""Allow ``python -m pocket_bank``"""

import sys

from .app import main

sys.exit(main())
