from __future__ import annotations

import json
from pathlib import Path
from tempfile import TemporaryDirectory

from driftguide.config import DriftParams, SimConfig
from driftguide.control import LinearRegressionGuider, ManualClock
from driftguide.sim.kernel import GuidingKernel
from driftguide.sim.metrics import write_run_artifacts
from driftguide.sim.plant import MountAxisPlant
from driftguide.sim.schedules import constant_exposure


def test_smoke_kernel_and_artifacts() -> None:
    cfg = SimConfig.from_args(
        name="smoke",
        cycles=10,
        seed=42,
        out_dir=None
    )

    clock = ManualClock()
    kernel = GuidingKernel(
        cfg,
        plant=MountAxisPlant(DriftParams(), seed=cfg.seed),
        guider=LinearRegressionGuider(clock=clock),
        schedule=constant_exposure(2.0),
        clock=clock,
    )
    result = kernel.run()

    assert result.metrics.total_cycles == 10
    assert len(result.samples) == 10
    assert [s.cycle for s in result.samples] == list(range(10))
    assert result.samples[-1].time_s == 20.0

    # 10 samples never exceed the default threshold of 25
    assert result.metrics.drift_rate_estimate is None
    assert not any(s.prediction_active for s in result.samples)

    with TemporaryDirectory() as td:
        out_dir = Path(td).joinpath("run")
        write_run_artifacts(
            out_path=out_dir,
            metrics=result.metrics,
            samples=result.samples,
            settings=result.settings,
        )

        p = out_dir.joinpath("metrics.json")
        assert p.exists()

        data = json.loads(p.read_text(encoding="utf-8"))
        assert "run" in data
        assert "settings" in data

        run = data["run"]
        assert set(run.keys()) >= {
            "total_cycles",
            "scenario_name",
            "algorithm",
            "start_time",
            "finish_time",
            "rms_raw_error",
            "rms_residual",
        }
        assert run["total_cycles"] == 10
        assert run["scenario_name"] == "smoke"

        samples = json.loads(out_dir.joinpath("timeseries.json").read_text(encoding="utf-8"))["samples"]
        assert len(samples) == 10
        assert set(samples[0].keys()) == {
            "cycle",
            "time_s",
            "exposure_s",
            "drift",
            "residual",
            "raw_error",
            "control",
            "prediction_active",
            "star_lost",
        }


def test_smoke_sim_config_validation() -> None:
    import pytest

    with pytest.raises(ValueError):
        SimConfig.from_args(name="", cycles=1, seed=0, out_dir=None)
    with pytest.raises(ValueError):
        SimConfig.from_args(name="x", cycles=-1, seed=0, out_dir=None)
    with pytest.raises(ValueError):
        DriftParams(noise_sigma=-1.0)

    cfg = SimConfig.from_args(name="a b/c", cycles=0, seed=0, out_dir=None)
    assert cfg.out_dir.name.endswith("a_b_c")
