import sys

from spinwheel.cli import main

sys.exit(main())
