import sys

from terminalvelocity.cli import main

sys.exit(main())
