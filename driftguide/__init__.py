"""
driftguide: Drift-compensating guide controller for telescope mounts.

Features:
- Linear regression guider: proportional correction plus a predictive
  drift term fitted over a sliding window of de-controlled measurements
- Identity guider baseline for comparison
- Per-axis persistent settings (JSON profile)
- Deterministic closed-loop simulation against a drifting mount axis
- JSON run artifacts and optional matplotlib plots
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
