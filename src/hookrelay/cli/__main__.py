"""
Allow running relayctl as a module: python -m hookrelay.cli
"""

import sys
from .relayctl import main

if __name__ == "__main__":
    sys.exit(main())
