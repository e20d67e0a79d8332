"""
Artifact writing for simulated guiding runs.

Artifact files produced:
- metrics.json: Run metadata, error statistics and guider settings
- timeseries.json: Per-cycle samples

Example artifact directory structure:
```
artifacts/runs/20240115_120000_example/
├── metrics.json       # Run metadata
└── timeseries.json    # Per-cycle history
```
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from .interfaces import CycleSample, RunMetrics


def write_run_artifacts(
    *,
    out_path: Path,
    metrics: RunMetrics,
    samples: list[CycleSample] | None = None,
    settings: str = "",
) -> None:
    """
    Write all run artifacts to disk.

    Args:
        out_path: Output directory path. Will be created if it doesn't
                  exist, including parent directories.
        metrics: Run-level metrics. Always written.
        samples: Optional per-cycle samples.
                 When provided and non-empty, writes timeseries.json.
        settings: Guider settings summary, stored in metrics.json.
    """
    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)

    _write_metrics_json(out_path, metrics, settings)

    if samples is not None and len(samples) > 0:
        _write_timeseries_json(out_path, samples)


def _write_metrics_json(
    out_path: Path,
    metrics: RunMetrics,
    settings: str,
) -> None:
    """
    Write metrics.json artifact.

    Schema:
    {
        "run": {
            "total_cycles": int,
            "scenario_name": str,
            "algorithm": str,
            "start_time": str (ISO 8601),
            "finish_time": str (ISO 8601),
            "rms_raw_error": float,
            "rms_residual": float,
            "drift_rate_estimate": float | null
        },
        "settings": [str, ...]
    }
    """
    payload = {
        "run": asdict(metrics),
        "settings": settings.splitlines(),
    }

    metrics_path = out_path / "metrics.json"
    metrics_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def _write_timeseries_json(
    out_path: Path,
    samples: list[CycleSample],
) -> None:
    timeseries_payload = {
        "samples": [asdict(s) for s in samples],
    }
    timeseries_path = out_path / "timeseries.json"
    timeseries_path.write_text(
        json.dumps(timeseries_payload, indent=2) + "\n",
        encoding="utf-8",
    )
