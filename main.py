"""
main.py — Master Entry Point
=============================
Runs the smoke simulation and writes / shows the result.

Usage:
    python main.py                          # Write Frame00000.png, ... (default)
    python main.py --mode headless          # Print stats, no output files
    python main.py --mode benchmark         # Time the pressure solve and advection
    python main.py --mode live              # Live matplotlib window
    python main.py --mode live --gif out.gif

Log verbosity: --log-level DEBUG, or the LOG_LEVEL environment variable.
"""

import argparse
import logging
import os
import time

import numpy as np

from fluid2d import RELAX_GAUSS_SEIDEL, RELAX_JACOBI, FluidSolver
from fluid2d.render import frame_path, save_frame

LOG_FMT_STRING = "{asctime} - {levelname:5.5s} - [{module}] {message}"

# (x, y, w, h, density, u, v): a thin smoke source low in the box, blowing in +y
INFLOW = (0.45, 0.2, 0.15, 0.03, 1.0, 0.0, 3.0)

SUBSTEPS_PER_FRAME = 4


def configure_logging(level: str | None = None):
    level = level or os.environ.get("LOG_LEVEL", "INFO")
    logging.basicConfig(level=level.upper(), format=LOG_FMT_STRING, style="{")


def make_solver(args) -> FluidSolver:
    return FluidSolver(
        args.width, args.height, args.density,
        relaxation=args.relaxation,
        max_iterations=args.max_iterations,
        tolerance=args.tolerance,
    )


def advance_frame(solver: FluidSolver, dt: float, substeps: int = SUBSTEPS_PER_FRAME) -> float:
    """Inject + step `substeps` times. Returns simulated seconds advanced."""
    for _ in range(substeps):
        solver.add_inflow(*INFLOW)
        solver.step(dt)
    return substeps * dt


def run_frames(solver: FluidSolver, dt: float = 0.005, duration: float = 8.0,
               out_dir: str = ".") -> list:
    """Simulate until `duration` seconds, writing one PNG per frame."""
    print(f"Writing frames to {out_dir}/ | {solver.width}x{solver.height} | "
          f"dt={dt} | until t={duration}s")

    paths = []
    t = 0.0
    while t < duration:
        t += advance_frame(solver, dt)
        paths.append(save_frame(frame_path(out_dir, len(paths)), solver))

    print(f"Done. {len(paths)} frames written.")
    return paths


def run_headless(solver: FluidSolver, dt: float = 0.005, frames: int = 100):
    """Run simulation without output files — prints stats every few frames."""
    print(f"\nHeadless simulation | {solver.width}x{solver.height} | {frames} frames")
    print(f"{'─'*60}")

    for f in range(frames):
        advance_frame(solver, dt)
        last = solver.perf_log[-1]

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {last['total_ms']:6.1f}ms/step | "
                  f"iterations={last['iterations']:3d} | "
                  f"residual={last['residual']:.2e} | "
                  f"density={solver.d.src.sum():.1f}")

    steps = solver.perf_log
    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean([m['total_ms'] for m in steps]):.1f}ms/step")
    print(f"  Converged: {sum(m['converged'] for m in steps)}/{len(steps)} steps")


def run_benchmark(solver: FluidSolver, dt: float = 0.005, frames: int = 50):
    """
    Per-stage timing. Shows where a step spends its time.
    """
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {solver.width}x{solver.height} | {solver.relaxation} | {frames} frames")
    print(f"{'='*60}")

    # Warm up
    for _ in range(5):
        advance_frame(solver, dt)
    solver.perf_log.clear()

    t0 = time.perf_counter()
    for _ in range(frames):
        advance_frame(solver, dt)
    wall = time.perf_counter() - t0

    keys = ["pressure_ms", "advect_ms", "total_ms", "iterations"]

    print(f"\n{'Stage':<20} {'Mean':>9} {'Min':>9} {'Max':>9}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in solver.perf_log]
        print(f"  {k:<18} {np.mean(vals):>9.1f} {np.min(vals):>9.1f} {np.max(vals):>9.1f}")

    print(f"\n{'─'*50}")
    print(f"  Steps/sec: {len(solver.perf_log) / wall:.1f}")


def run_live(solver: FluidSolver, dt: float = 0.005, gif: str | None = None, frames: int = 100):
    """Live interactive visualization (or render to GIF)."""
    from visualizer import FluidVisualizer

    viz = FluidVisualizer(solver, timestep=dt, substeps=SUBSTEPS_PER_FRAME, inflow=INFLOW)
    if gif:
        viz.save_gif(gif, frames=frames)
    else:
        print("Close the window to exit.\n")
        viz.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="2D Smoke Simulation")
    parser.add_argument(
        "--mode", choices=["frames", "headless", "benchmark", "live"],
        default="frames",
        help="Run mode (default: frames)"
    )
    parser.add_argument("--width",    type=int,   default=128,   help="Grid cells along X (default: 128)")
    parser.add_argument("--height",   type=int,   default=128,   help="Grid cells along Y (default: 128)")
    parser.add_argument("--density",  type=float, default=0.1,   help="Fluid density (default: 0.1)")
    parser.add_argument("--dt",       type=float, default=0.005, help="Timestep in seconds (default: 0.005)")
    parser.add_argument("--duration", type=float, default=8.0,   help="Simulated seconds in frames mode")
    parser.add_argument("--frames",   type=int,   default=100,   help="Number of frames (headless/benchmark/gif)")
    parser.add_argument("--out",      default=".",               help="Output directory for PNG frames")
    parser.add_argument("--gif",      default=None,              help="Live mode: render to this GIF instead")
    parser.add_argument(
        "--relaxation", choices=[RELAX_JACOBI, RELAX_GAUSS_SEIDEL],
        default=RELAX_JACOBI,
        help="Pressure relaxation (default: JACOBI)"
    )
    parser.add_argument("--max-iterations", type=int,   default=600,  help="Pressure sweep budget")
    parser.add_argument("--tolerance",      type=float, default=1e-5, help="Pressure convergence threshold")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    solver = make_solver(args)

    if args.mode == "frames":
        run_frames(solver, dt=args.dt, duration=args.duration, out_dir=args.out)
    elif args.mode == "headless":
        run_headless(solver, dt=args.dt, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(solver, dt=args.dt, frames=args.frames)
    elif args.mode == "live":
        run_live(solver, dt=args.dt, gif=args.gif, frames=args.frames)


if __name__ == "__main__":
    main()
