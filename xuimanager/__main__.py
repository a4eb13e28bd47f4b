import sys

from xuimanager.cli import main

sys.exit(main())
