#!/usr/bin/env python3
"""
Micro-benchmark for Book Viewer hot paths.

Tests:
1. Snapshot decoding throughput (JSON bytes -> Snapshot)
2. View building speed (Snapshot -> OrderBookView)
3. Ladder formatting speed (OrderBookView -> rows)
4. Random order generation throughput

Usage:
    python -m book_viewer.benchmark
"""

from __future__ import annotations

import random
import time
from statistics import mean, stdev

from .datafeed.decoder import decode_snapshot
from .datafeed.multiplexer import json_dumps, json_loads
from .engine.view import build_view
from .loadgen.orders import OrderGenerator
from .ui.book_view import ladder_rows


def generate_mock_payload(base_price: float = 100.0, levels: int = 50) -> dict:
    """Generate a mock snapshot body in the service's wire format."""
    tick_size = 0.01

    bids = []
    asks = []

    for i in range(levels):
        bid_price = base_price - (i + 1) * tick_size
        ask_price = base_price + (i + 1) * tick_size

        bids.append({'price': f"{bid_price:.2f}", 'quantity': str(random.randint(1, 1000))})
        asks.append({'price': f"{ask_price:.2f}", 'quantity': str(random.randint(1, 1000))})

    return {
        'last': f"{base_price:.2f}",
        'best_bid': bids[0]['price'] if bids else None,
        'best_ask': asks[0]['price'] if asks else None,
        'bids': bids,
        'asks': asks,
    }


def benchmark_decode(iterations: int = 2000) -> None:
    """Benchmark bytes -> Snapshot."""
    print("\n=== Snapshot Decode Benchmark ===")

    raw = json_dumps(generate_mock_payload(levels=200))

    # Warm up
    for _ in range(50):
        decode_snapshot(json_loads(raw))

    start = time.perf_counter()
    for _ in range(iterations):
        decode_snapshot(json_loads(raw))
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Snapshots decoded: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} snapshots/sec")
    print(f"  Per snapshot: {elapsed/iterations*1_000_000:.1f}µs")


def benchmark_build_view(iterations: int = 10000) -> None:
    """Benchmark Snapshot -> OrderBookView."""
    print("\n=== View Building Benchmark ===")

    snapshot = decode_snapshot(generate_mock_payload(levels=200))

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        build_view(snapshot)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1_000_000
    std_time = stdev(times) * 1_000_000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.2f}µs")
    print(f"  Std dev: {std_time:.2f}µs")


def benchmark_ladder_rows(iterations: int = 1000) -> None:
    """Benchmark view -> formatted rows (what the UI renders every frame)."""
    print("\n=== Ladder Formatting Benchmark ===")

    views = [
        build_view(decode_snapshot(generate_mock_payload(base_price=100.0 + i * 0.05)))
        for i in range(20)
    ]

    times = []
    for i in range(iterations):
        start = time.perf_counter()
        ladder_rows(views[i % len(views)])
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Max FPS possible: {1000/avg_time:,.0f}")


def benchmark_order_generation(iterations: int = 100000) -> None:
    """Benchmark random order construction."""
    print("\n=== Order Generation Benchmark ===")

    gen = OrderGenerator(seed=42)

    start = time.perf_counter()
    for _ in range(iterations):
        gen.next_order()
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Orders generated: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} orders/sec")
    print(f"  Per order: {elapsed/iterations*1_000_000:.2f}µs")


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("Book Viewer Performance Benchmark")
    print("=" * 60)

    benchmark_decode()
    benchmark_build_view()
    benchmark_ladder_rows()
    benchmark_order_generation()

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
