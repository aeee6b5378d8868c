import sys

from zeek.cli import main

sys.exit(main())
