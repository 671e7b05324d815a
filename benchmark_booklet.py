"""
Booklet Benchmark for the Turing Machine solver

Times the deduction phase and the first best-move search on the booklet
challenges. Challenge 2 and everything past 5 are skipped by default since
their first search takes much longer.
"""

import argparse
import time

import numpy as np
import torch

from core.game import Game
from core.gametree import State, search
from experiments.booklet import BOOKLET_CHALLENGES
from utils.device import get_device_name


def benchmark_challenge(numbers: list[int], n_iterations: int = 3):
    """Benchmark one challenge; returns (build seconds, search seconds, SearchResult)."""
    build_times = []
    search_times = []
    result = None
    for _ in range(n_iterations):
        start = time.time()
        game = Game.from_verifier_numbers(numbers)
        build_times.append(time.time() - start)

        state = State(game)
        if state.is_solved():
            return float(np.mean(build_times)), 0.0, None

        start = time.time()
        result = search(state)
        search_times.append(time.time() - start)

    return float(np.mean(build_times)), float(np.mean(search_times)), result


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--all", action="store_true", help="Run every booklet challenge")
    parser.add_argument("--iterations", type=int, default=3)
    args = parser.parse_args()

    print("=" * 60)
    print("BOOKLET BENCHMARK - Turing Machine solver")
    print("=" * 60)
    print()

    print(f"Device: {get_device_name()}")
    print(f"PyTorch version: {torch.__version__}")
    print()

    print(f"{'#':>3} | {'Verifiers':<22} | {'Build (ms)':>10} | {'Search (ms)':>11} | {'Score':>7} | {'Nodes':>8}")
    print("-" * 80)

    total = 0.0
    for index, numbers in enumerate(BOOKLET_CHALLENGES):
        number = index + 1
        if not args.all and (number == 2 or number > 5):
            continue
        build_time, search_time, result = benchmark_challenge(numbers, args.iterations)
        total += build_time + search_time

        if result is None:
            print(f"{number:3d} | {str(numbers):<22} | {build_time * 1000:10.2f} | {'solved':>11} |")
            continue
        score = f"{result.score.codes_guessed},{result.score.verifiers_checked}"
        print(
            f"{number:3d} | {str(numbers):<22} | {build_time * 1000:10.2f} | "
            f"{search_time * 1000:11.2f} | {score:>7} | {result.nodes:8d}"
        )

    print()
    print(f"Total: {total:.2f} s")
    print()


if __name__ == "__main__":
    main()
