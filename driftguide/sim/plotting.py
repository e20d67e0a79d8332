"""
Plotting utilities for simulated guiding runs.

Requires matplotlib: pip install driftguide[plot]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .interfaces import RunResult

LOGGER = logging.getLogger(__name__)


def check_matplotlib_available() -> bool:
    """Check if matplotlib is available."""
    try:
        import matplotlib  # noqa: F401
        return True
    except ImportError:
        return False


def plot_run(
    result: "RunResult",
    output_path: Path | str | None = None,
    show: bool = False,
    title: str | None = None,
) -> Path | None:
    """
    Generate a two-panel plot of a guiding run.

    Panels:
    1. Measured error, noise-free residual and uncorrected drift
    2. Corrections issued, with cycles where the drift prediction was
       active shaded and star-loss cycles marked

    Args:
        result: RunResult from GuidingKernel.run().
        output_path: Path to save the figure (PNG, PDF, etc.).
                     If None and show=False, saves to 'guiding_plot.png'.
        show: If True, display the plot interactively.
        title: Optional title for the figure.

    Returns:
        Path the figure was saved to, or None if only shown.

    Raises:
        RuntimeError: If matplotlib is not installed.
        ValueError: If the result holds no samples.
    """
    if not check_matplotlib_available():
        raise RuntimeError(
            "matplotlib not installed. Install with: pip install driftguide[plot]"
        )

    import matplotlib.pyplot as plt

    if not result.samples:
        raise ValueError("No samples in result")

    times = [s.time_s for s in result.samples]
    raw = [s.raw_error if s.raw_error is not None else float("nan") for s in result.samples]
    residuals = [s.residual for s in result.samples]
    drift = [s.drift for s in result.samples]
    controls = [s.control for s in result.samples]
    active = [1 if s.prediction_active else 0 for s in result.samples]
    lost_times = [s.time_s for s in result.samples if s.star_lost]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 6), sharex=True)

    # Panel 1: errors
    ax1.plot(times, raw, color="tab:blue", linewidth=1.0, label="Measured error")
    ax1.plot(times, residuals, color="tab:green", linewidth=1.5, label="Residual")
    ax1_twin = ax1.twinx()
    ax1_twin.plot(times, drift, color="tab:gray", linestyle="--", linewidth=1.0,
                  label="Uncorrected drift")
    ax1_twin.set_ylabel("Drift (arcsec)", color="tab:gray")
    ax1.set_ylabel("Error (arcsec)")
    ax1.grid(True, alpha=0.3)

    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax1_twin.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2, loc="upper left")

    # Panel 2: corrections
    ax2.plot(times, controls, color="tab:red", linewidth=1.5, label="Correction")
    if any(active):
        ax2.fill_between(times, 0, 1, where=[a == 1 for a in active],
                         transform=ax2.get_xaxis_transform(), color="tab:orange",
                         alpha=0.15, step="post", label="Prediction active")
    for t in lost_times:
        ax2.axvline(t, color="black", linestyle=":", linewidth=1.0)
    ax2.set_ylabel("Correction (arcsec)")
    ax2.set_xlabel("Time (s)")
    ax2.grid(True, alpha=0.3)
    ax2.legend(loc="upper left")

    if title:
        fig.suptitle(title, fontsize=14, fontweight="bold")
    else:
        m = result.metrics
        fig.suptitle(f"Guiding simulation: {m.scenario_name} ({m.algorithm}, {m.total_cycles} cycles)",
                     fontsize=14, fontweight="bold")

    plt.tight_layout()

    saved: Path | None = None
    if output_path:
        saved = Path(output_path)
    elif not show:
        saved = Path("guiding_plot.png")

    if saved is not None:
        plt.savefig(saved, dpi=150, bbox_inches="tight")
        LOGGER.info("plot saved to %s", saved)

    if show:
        plt.show()

    plt.close(fig)
    return saved
