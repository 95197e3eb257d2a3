#!/usr/bin/env python3
"""
Refresh CLI: load base → fetch sheet → normalize → merge, once.

Usage:
    quiz-refresh
    quiz-refresh --url https://.../pub?output=csv --base data/data.json
    quiz-refresh --output data/snapshot.json   # write the merged dataset
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .cache import QuestionCache
from .config import FETCH_TIMEOUT, SHEET_CSV_URL, STAGE_NAMES, get_base_data_path
from .errors import QuizDataError
from .query import list_years
from .source import fetch_sheet_csv, load_base_dataset, save_dataset


def run_pipeline(
    url: str = SHEET_CSV_URL,
    base_path: Optional[str] = None,
    output: Optional[str] = None,
    timeout: Optional[float] = FETCH_TIMEOUT,
    log_callback: Optional[Callable[[str], None]] = None,
) -> Dict[str, Any]:
    """
    Run one forced refresh and report what happened.

    If log_callback is provided, it will be called with each log line.

    Returns:
        Pipeline run summary
    """
    def log(msg: str = "") -> None:
        print(msg, flush=True)
        if log_callback:
            log_callback(msg)

    base_file = Path(base_path) if base_path else get_base_data_path()
    run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    result = {
        "run_id": run_id,
        "started_at": datetime.now(timezone.utc).isoformat(),
        "url": url,
        "base_path": str(base_file),
        "stages": {},
        "ok": False
    }

    log(f"\n{'='*60}")
    log(f"Quiz Refresh Run: {run_id}")
    log(f"{'='*60}")
    log(f"\nStages: {' → '.join(STAGE_NAMES)}")

    cache = QuestionCache(
        fetch_feed=lambda: fetch_sheet_csv(url, timeout=timeout),
        load_base=lambda: load_base_dataset(base_file),
    )
    try:
        questions = cache.get_questions(force_refresh=True)
    except QuizDataError as e:
        result["error"] = str(e)
        log(f"  ERROR: {result['error']}")
        return result

    stats = cache.stats()
    result["source"] = stats["source"]
    result["count"] = len(questions)
    result["years"] = [y["year"] for y in list_years(questions)]
    result["stages"] = stats["last_refresh"]

    if stats["source"] == "remote":
        normalize = stats["last_refresh"]["normalize"]
        merge = stats["last_refresh"]["merge"]
        log(f"  Sheet rows: {normalize['rows_in']} ({normalize['rows_dropped_no_id']} without id)")
        log(f"  Base: {merge['base_count']}, updated: {merge['updated']}, added: {merge['added']}")
    else:
        log(f"  Sheet unavailable ({stats['last_error']}); using base data")
    log(f"  Total: {len(questions)} questions, years: {', '.join(result['years']) or '-'}")

    if output:
        result["snapshot"] = save_dataset(questions, output)
        log(f"  Snapshot: {result['snapshot']['path']}")

    result["finished_at"] = datetime.now(timezone.utc).isoformat()
    result["ok"] = True
    log(f"\n{'='*60}\n")
    return result


def main():
    parser = argparse.ArgumentParser(
        description="Refresh the quiz dataset: load base → fetch sheet → normalize → merge"
    )
    parser.add_argument(
        "--url",
        default=SHEET_CSV_URL,
        help="Published sheet CSV URL (default: QUIZ_SHEET_CSV_URL or built-in)"
    )
    parser.add_argument(
        "--base", "-b",
        default=None,
        help=f"Base data JSON (default: {get_base_data_path()})"
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the merged dataset to this JSON file"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=FETCH_TIMEOUT,
        help="Sheet request timeout in seconds (default: none)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    result = run_pipeline(
        url=args.url,
        base_path=args.base,
        output=args.output,
        timeout=args.timeout,
    )
    if args.json:
        print(json.dumps(result, indent=2, default=str))

    if not result.get("ok"):
        sys.exit(1)


if __name__ == "__main__":
    main()
