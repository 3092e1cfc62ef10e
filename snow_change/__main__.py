import sys

from snow_change.cli import main

sys.exit(main())
