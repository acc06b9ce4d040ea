import sys

from buildrules.cli import main


sys.exit(main())
