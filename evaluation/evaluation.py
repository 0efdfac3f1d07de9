#!/usr/bin/env python3
"""
Evaluation runner for the ruffman Huffman codec.

This evaluation script:
- Round-trips a set of sample inputs (built-in samples plus any --file given)
- Records compressed size, ratio, timings and losslessness per sample
- Generates a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--file PATH ...] [--workers N] [--output PATH]
"""
import os
import sys
import json
import time
import uuid
import random
import platform
import subprocess
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_config import CodecConfig  # noqa: E402
from huffman_core import HuffmanError  # noqa: E402
from huffman_service import HuffmanService, read_all  # noqa: E402


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    for key, cmd in (
        ("git_commit", ["git", "rev-parse", "HEAD"]),
        ("git_branch", ["git", "rev-parse", "--abbrev-ref", "HEAD"]),
    ):
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, cwd=str(PROJECT_ROOT), timeout=5)
        except (OSError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            value = result.stdout.strip()
            git_info[key] = value[:8] if key == "git_commit" else value
    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "cpu_count": os.cpu_count(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def builtin_samples(seed=0):
    rng = random.Random(seed)
    return {
        "hello": b"Hello, world!",
        "empty": b"",
        "single_symbol": b"A" * 4096,
        "all_bytes": bytes(range(256)),
        "english": b"the quick brown fox jumps over the lazy dog. " * 200,
        "random_10kb": bytes(rng.getrandbits(8) for _ in range(10 * 1024)),
    }


def evaluate_sample(name, data, service):
    """
    Compress and extract one sample.

    Returns a dict with sizes, ratio, timings and outcome. A codec failure is
    recorded in the result instead of aborting the whole run.
    """
    t0 = time.perf_counter()
    try:
        compressed = service.compress(data)
        t1 = time.perf_counter()
        restored = service.decompress(compressed)
        t2 = time.perf_counter()
    except HuffmanError as e:
        return {"name": name, "original_size": len(data), "outcome": "error", "error": str(e)}

    lossless = restored == data
    return {
        "name": name,
        "original_size": len(data),
        "compressed_size": len(compressed),
        "compression_ratio": round(len(compressed) / len(data), 6) if data else None,
        "compression_time": round(t1 - t0, 6),
        "extraction_time": round(t2 - t1, 6),
        "lossless": lossless,
        "outcome": "passed" if lossless else "failed",
    }


def run_evaluation(samples, service):
    """Evaluate every sample and summarize the outcomes."""
    print(f"\n{'=' * 60}")
    print("RUFFMAN CODEC EVALUATION")
    print(f"{'=' * 60}")

    results = []
    for name, data in samples.items():
        result = evaluate_sample(name, data, service)
        status_icon = {"passed": "✅", "failed": "❌", "error": "💥"}.get(result["outcome"], "❓")
        ratio = result.get("compression_ratio")
        ratio_text = f"ratio {ratio:.4f}" if ratio is not None else "ratio n/a"
        print(f"  {status_icon} {name}: {result['original_size']} bytes, {ratio_text}")
        results.append(result)

    summary = {
        "total": len(results),
        "passed": sum(1 for r in results if r["outcome"] == "passed"),
        "failed": sum(1 for r in results if r["outcome"] == "failed"),
        "errors": sum(1 for r in results if r["outcome"] == "error"),
    }
    print(f"\nResults: {summary['passed']} passed, {summary['failed']} failed, {summary['errors']} errors "
          f"(total: {summary['total']})")
    return {"success": summary["passed"] == summary["total"], "samples": results, "summary": summary}


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run ruffman codec evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument("--file", action="append", default=[], help="Extra file to evaluate (repeatable)")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes for counting and packing")
    parser.add_argument("--decoder", choices=("tree", "table"), default=None)
    parser.add_argument("--no-builtin", action="store_true", help="Skip the built-in samples")

    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    config = CodecConfig.from_env(workers=args.workers, decoder=args.decoder)
    samples = {} if args.no_builtin else builtin_samples()
    for path in args.file:
        samples[Path(path).name] = read_all(path)

    results = run_evaluation(samples, HuffmanService(config))
    success = results["success"]

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "config": {"workers": config.workers, "chunk_size": config.chunk_size, "decoder": config.decoder},
        "environment": get_environment_info(),
        "results": results,
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
