#!/usr/bin/env python3
"""
FY token arbitrage CLI.

Usage:
    python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper
    python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper --once
"""

import sys

from fy_arbitrage.runner import main

if __name__ == "__main__":
    sys.exit(main())
