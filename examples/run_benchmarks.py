#!/usr/bin/env python3
"""
PWR Dynamics Benchmark Runner

This script runs the canonical transient catalogue of the pwr_dynamics
package and prints a pass/fail summary.

Usage:
    python run_benchmarks.py [--benchmark NAME] [--dt DT] [--output FILE]

Example:
    python run_benchmarks.py --benchmark scram --output scram.json
"""

import argparse
import logging
import sys
import os

# Add parent directory to path for importing pwr_dynamics
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pwr_dynamics.params import create_params
from pwr_dynamics.state import SimulationConfig
from pwr_dynamics.benchmarks import (
    BENCHMARKS,
    DEFAULT_DT,
    format_all_benchmarks_json,
    print_benchmark_summary,
)


def run_benchmarks(names, dt, method, xenon_acceleration):
    """
    Run the selected benchmarks.

    Args:
        names: Benchmark names to run
        dt: Outer timestep [s]
        method: Integration method ("rk4" or "euler")
        xenon_acceleration: Xenon chain acceleration factor

    Returns:
        List of BenchmarkResult
    """
    params = create_params(XENON_ACCELERATION=xenon_acceleration)
    config = SimulationConfig(method=method)
    return [BENCHMARKS[name](params, dt, config) for name in names]


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="PWR Dynamics Benchmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Run every benchmark
  %(prog)s --benchmark scram --benchmark pump_trip
  %(prog)s --method euler --dt 0.01     # Forward Euler integration
  %(prog)s --output results.json --records
        """
    )

    parser.add_argument(
        "--benchmark",
        action="append",
        choices=sorted(BENCHMARKS),
        help="Benchmark to run (repeatable, default: all)"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=DEFAULT_DT,
        help=f"Outer timestep in s (default: {DEFAULT_DT})"
    )
    parser.add_argument(
        "--method",
        choices=["rk4", "euler"],
        default="rk4",
        help="Integration method (default: rk4)"
    )
    parser.add_argument(
        "--xenon-acceleration",
        type=float,
        default=200.0,
        help="Xenon/iodine rate multiplier (default: 200)"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output JSON file path"
    )
    parser.add_argument(
        "--records",
        action="store_true",
        help="Include full time series in the JSON output"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    names = args.benchmark or list(BENCHMARKS)

    try:
        results = run_benchmarks(names, args.dt, args.method, args.xenon_acceleration)
    except Exception as e:
        print(f"\nError during simulation: {e}")
        raise

    print_benchmark_summary(results)

    if args.output:
        with open(args.output, 'w') as f:
            f.write(format_all_benchmarks_json(results, include_records=args.records))
        print(f"\nResults exported to: {args.output}")

    sys.exit(0 if all(r.passed for r in results) else 1)


if __name__ == "__main__":
    main()
