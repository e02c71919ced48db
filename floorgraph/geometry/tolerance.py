from __future__ import annotations

# Segments shorter than this (squared length) are treated as a single point.
EPS_POS = 1e-12

# Two ring vertices closer than this count as duplicates.
EPS_WELD = 1e-6

# Rings with less absolute area than this are degenerate.
EPS_AREA = 1e-12
