"""
main.py — Master Entry Point
=============================
Top-level script that runs the 2D smoke simulation.

Usage:
    python main.py                    # Headless run, prints stats (default)
    python main.py --mode live        # Live visualization with sliders
    python main.py --mode benchmark   # Per-stage timing breakdown
"""

import argparse
import numpy as np


def run_live(args):
    """Live interactive visualization."""
    from fluid2d import FluidSimulation
    from fluid2d.visualizer import FluidVisualizer

    print(f"Starting live simulation ({args.width}x{args.height})...")
    print("Left-drag moves an emitter, right-click pushes the fluid.")
    print("Close the window to exit.\n")

    sim = FluidSimulation(args.timestep, args.diffusion, args.viscosity,
                          width=args.width, height=args.height, seed=args.seed)
    sim.emitters[0].rotation_speed = 0.3
    sim.emitters[1].rotation_speed = -0.3
    viz = FluidVisualizer(sim)
    viz.run(fps=30)


def run_headless(args):
    """Run simulation without display — prints stats every 10 frames."""
    from fluid2d import FluidSimulation

    print(f"\nHeadless simulation | {args.width}x{args.height} | {args.frames} frames")
    print(f"{'─'*60}")

    sim = FluidSimulation(args.timestep, args.diffusion, args.viscosity,
                          width=args.width, height=args.height, seed=args.seed)
    sim.emitters[0].rotation_speed = 0.3
    sim.emitters[1].rotation_speed = -0.3
    total_times = []

    for f in range(args.frames):
        sim.step()
        metrics = sim.perf_log[-1]
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(args):
    """
    Detailed performance breakdown.
    Shows how long each physics stage takes.
    """
    from fluid2d import FluidSimulation

    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {args.width}x{args.height} | {args.frames} frames")
    print(f"{'='*60}")

    sim = FluidSimulation(args.timestep, args.diffusion, args.viscosity,
                          width=args.width, height=args.height, seed=args.seed)

    # Warm up
    for _ in range(5):
        sim.step()

    logs = []
    for _ in range(args.frames):
        sim.step()
        logs.append(sim.perf_log[-1])

    keys = ["inject_ms", "diffuse_vel_ms", "project1_ms",
            "advect_vel_ms", "project2_ms", "advect_den_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Colored Smoke Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",     type=int,   default=100,  help="Grid cells along X (default: 100)")
    parser.add_argument("--height",    type=int,   default=75,   help="Grid cells along Y (default: 75)")
    parser.add_argument("--frames",    type=int,   default=100,  help="Number of frames")
    parser.add_argument("--timestep",  type=float, default=0.5,  help="Timestep (default: 0.5)")
    parser.add_argument("--diffusion", type=float, default=0.0,  help="Diffusion rate (default: 0)")
    parser.add_argument("--viscosity", type=float, default=0.0,  help="Viscosity (default: 0)")
    parser.add_argument("--seed",      type=int,   default=None, help="Seed for injection jitter")

    args = parser.parse_args()

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
