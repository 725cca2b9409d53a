from __future__ import annotations

import sys

from ceiling_toolbox.cli.main import main

sys.exit(main())
