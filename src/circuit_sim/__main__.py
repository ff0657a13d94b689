import sys

from circuit_sim.cli import main

sys.exit(main())
