"""
Command-line interface for driftguide.

Runs a simulated guiding session on one mount axis and writes the run
artifacts to disk.

Usage:
    # Linear regression guider against a 0.01 arcsec/s drift
    driftguide --name lr --cycles 300 --drift-rate 0.01 --noise 0.1

    # Baseline for comparison
    driftguide --name id --cycles 300 --drift-rate 0.01 --algorithm identity

    # Persist guider settings per axis
    driftguide --profile profile.json --axis dec --gain 0.7 --min-samples 30

Entry points:
    - driftguide: Direct CLI command (from pyproject.toml)
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import DriftParams, GuideConfig, SimConfig
from .control import GuideAlgorithmKind, IdentityGuider, LinearRegressionGuider, ManualClock
from .profile import GuideAxis, Profile, ProfileError, apply_settings, load_guider
from .sim.kernel import GuidingKernel
from .sim.metrics import write_run_artifacts
from .sim.plant import MountAxisPlant
from .sim.schedules import constant_exposure, jittered_exposure

LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser for the CLI.

    Returns:
        Configured ArgumentParser with all supported options.
    """
    defaults = GuideConfig()
    p = argparse.ArgumentParser(
        prog="driftguide",
        description="driftguide: drift-compensating guide controller simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  driftguide --name smoke --cycles 50
      Run a short simulation with default settings

  driftguide --name noisy --cycles 300 --noise 0.2 --jitter 0.1 --plot
      Noisy measurements, irregular exposures, save a plot

  driftguide --show-params
      List the tunable guider parameters
""",
    )

    # ─────────────────────────────────────────────────────────────────
    # Run parameters
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--name", type=str, default="default",
                   help="Run name for artifact directory (default: %(default)s)")
    p.add_argument("--cycles", type=int, default=200,
                   help="Guiding cycles to simulate (>= 0) (default: %(default)s)")
    p.add_argument("--seed", type=int, default=0,
                   help="Random seed for noise and jitter (default: %(default)s)")
    p.add_argument("--out-dir", type=str, default=None,
                   help="Output directory (default: artifacts/runs/<timestamp>_<name>)")
    p.add_argument("--exposure", type=float, default=defaults.exposure_s,
                   help="Guide exposure in seconds (default: %(default)s)")
    p.add_argument("--jitter", type=float, default=0.0,
                   help="Maximum exposure jitter in seconds (default: %(default)s)")
    p.add_argument("--star-lost", type=int, action="append", default=[], metavar="CYCLE",
                   help="Cycle without a measurement (repeatable)")

    # ─────────────────────────────────────────────────────────────────
    # Drift model
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--offset", type=float, default=0.0,
                   help="Initial error in arcsec (default: %(default)s)")
    p.add_argument("--drift-rate", type=float, default=0.01,
                   help="Drift in arcsec/s (default: %(default)s)")
    p.add_argument("--noise", type=float, default=0.0,
                   help="Measurement noise sigma in arcsec (default: %(default)s)")
    p.add_argument("--periodic-amplitude", type=float, default=0.0,
                   help="Periodic error amplitude in arcsec (default: %(default)s)")
    p.add_argument("--periodic-period", type=float, default=480.0,
                   help="Periodic error period in seconds (default: %(default)s)")

    # ─────────────────────────────────────────────────────────────────
    # Guider
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--algorithm", choices=[k.value for k in GuideAlgorithmKind],
                   default=GuideAlgorithmKind.LINEAR_REGRESSION.value,
                   help="Guide algorithm (default: %(default)s)")
    p.add_argument("--gain", type=float, default=None,
                   help=f"Control gain in [0, 1] (default: profile or {defaults.gain})")
    p.add_argument("--min-samples", type=int, default=None,
                   help="Samples before drift prediction, 0 disables "
                        f"(default: profile or {defaults.min_samples_for_inference})")
    p.add_argument("--profile", type=str, default=None,
                   help="JSON profile holding per-axis guider settings")
    p.add_argument("--axis", choices=[a.value for a in GuideAxis], default=GuideAxis.RA.value,
                   help="Mount axis the settings belong to (default: %(default)s)")
    p.add_argument("--show-params", action="store_true",
                   help="List tunable guider parameters and exit")

    # ─────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--plot", action="store_true",
                   help="Save a plot to <out-dir>/plot.png (requires matplotlib)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Enable debug logging")

    return p


def _print_parameter_specs() -> None:
    for spec in LinearRegressionGuider.parameter_specs():
        upper = "inf" if spec.maximum is None else f"{spec.maximum:g}"
        print(f"{spec.label} [{spec.name}]: {spec.minimum:g}..{upper}, default {spec.default:g}")
        print(f"    {spec.description}")


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 if a guider setting was rejected,
        2 for invalid run configuration
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.show_params:
        _print_parameter_specs()
        return 0

    # ─────────────────────────────────────────────────────────────────
    # Run configuration
    # ─────────────────────────────────────────────────────────────────
    try:
        config = SimConfig.from_args(
            name=args.name,
            cycles=args.cycles,
            seed=args.seed,
            out_dir=args.out_dir,
        )
        drift = DriftParams(
            offset=args.offset,
            drift_rate=args.drift_rate,
            noise_sigma=args.noise,
            periodic_amplitude=args.periodic_amplitude,
            periodic_period_s=args.periodic_period,
        )
        if args.jitter > 0:
            schedule = jittered_exposure(args.exposure, args.jitter, seed=args.seed)
        else:
            schedule = constant_exposure(args.exposure)
        profile = Profile(args.profile)
    except (ValueError, ProfileError) as e:
        print(f"driftguide: {e}", file=sys.stderr)
        return 2

    # ─────────────────────────────────────────────────────────────────
    # Guider
    # ─────────────────────────────────────────────────────────────────
    clock = ManualClock()
    accepted = True
    if args.algorithm == GuideAlgorithmKind.IDENTITY.value:
        guider = IdentityGuider()
    else:
        axis = GuideAxis(args.axis)
        guider = load_guider(profile, axis, clock=clock)
        if args.gain is not None or args.min_samples is not None:
            accepted = apply_settings(
                profile,
                axis,
                guider,
                gain=args.gain,
                min_samples_for_inference=args.min_samples,
            )
            if not accepted:
                print("driftguide: guider setting rejected, default in effect", file=sys.stderr)

    kernel = GuidingKernel(
        config,
        plant=MountAxisPlant(drift, seed=config.seed),
        guider=guider,
        schedule=schedule,
        clock=clock,
        star_lost_cycles=args.star_lost,
    )
    result = kernel.run()

    # ─────────────────────────────────────────────────────────────────
    # Artifacts
    # ─────────────────────────────────────────────────────────────────
    write_run_artifacts(
        out_path=config.out_dir,
        metrics=result.metrics,
        samples=result.samples,
        settings=result.settings,
    )
    metrics_file = config.out_dir / "metrics.json"

    if args.plot:
        from .sim.plotting import plot_run

        try:
            plot_run(result, output_path=config.out_dir / "plot.png")
        except RuntimeError as e:
            LOGGER.warning("%s", e)

    m = result.metrics
    print(f"{m.scenario_name}: ", end="")
    print(f"algorithm={m.algorithm} ", end="")
    print(f"cycles={m.total_cycles} ", end="")
    print(f"rms_raw={m.rms_raw_error:.4f} ", end="")
    print(f"rms_residual={m.rms_residual:.4f}", end="")
    if m.drift_rate_estimate is not None:
        print(f" drift={m.drift_rate_estimate:.5f}/s", end="")
    print(f" -> {metrics_file}")

    return 0 if accepted else 1


# Allow module execution: python -m driftguide.cli
if __name__ == "__main__":
    sys.exit(main())
