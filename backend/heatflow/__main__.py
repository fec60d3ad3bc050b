import sys

from heatflow.cli import main

sys.exit(main())
