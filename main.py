#!/usr/bin/env python3
"""Launch SpecSyn from the project root.

Usage:
    python main.py render out.wav --state "..."
    python main.py state "spectrumCurve=...&f0Multiplier=2"
"""

import sys

if __name__ == "__main__":
    from specsyn.main import main
    sys.exit(main())
