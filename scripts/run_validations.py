#!/usr/bin/env python3
"""
Run all dataset validations and print a clear report.

Usage (from project root):
  python scripts/run_validations.py                       # live refresh (sheet + base data)
  python scripts/run_validations.py --input data/data.json
  python scripts/run_validations.py --json report.json

Validations: min rows, unique ids, options A-D, clean tags, years, answer letters.
"""
import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from quiz_pipeline.cache import default_cache
from quiz_pipeline.errors import QuizDataError
from quiz_pipeline.source import load_base_dataset
from quiz_pipeline.validations import run_all_validations


def main():
    parser = argparse.ArgumentParser(description="Run validations on the quiz dataset")
    parser.add_argument("--input", type=str, default="", help="Validate this JSON dataset instead of refreshing")
    parser.add_argument("--json", type=str, default="", help="Write full report to this JSON file")
    parser.add_argument("--min-rows", type=int, default=1, help="Min questions required (default 1)")
    args = parser.parse_args()

    run_at = datetime.now(timezone.utc).isoformat()
    print("=" * 60)
    print("DATASET VALIDATIONS")
    print("=" * 60)
    print(f"Run at: {run_at}")

    try:
        if args.input:
            questions = load_base_dataset(args.input)
            source = args.input
        else:
            cache = default_cache()
            questions = cache.get_questions(force_refresh=True)
            source = cache.stats()["source"]
    except QuizDataError as e:
        print(f"  ERROR: {e}")
        return 1
    print(f"Source: {source} ({len(questions)} questions)\n")

    results = run_all_validations(questions, min_rows=args.min_rows)
    passed = sum(1 for r in results if r.get("passed"))
    for r in results:
        status = "PASS" if r.get("passed") else "FAIL"
        symbol = "✓" if r.get("passed") else "✗"
        print(f"  {symbol} [{status}] {r['name']}: {r['message']}")
        if r.get("details") and not r.get("passed"):
            for k, v in r["details"].items():
                print(f"      {k}: {v}")
    print(f"\n  Validations: {passed}/{len(results)} passed")
    print("=" * 60)

    if args.json:
        out_path = Path(args.json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        report = {
            "run_at": run_at,
            "source": source,
            "questions": len(questions),
            "passed": passed,
            "total": len(results),
            "results": results,
        }
        with open(out_path, "w") as f:
            json.dump(report, f, indent=2, default=str)
        print(f"Report written to {out_path}")

    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
