import sys

from webproject.cli import main

sys.exit(main())
