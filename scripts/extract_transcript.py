"""
CLI tool to turn an inspection transcript into a frame report.

Usage:
    python scripts/extract_transcript.py <transcript.txt> [--llm] [--frame-count 10]
    echo "Frame 1 is empty. Frame 2 has eggs." | python scripts/extract_transcript.py -

By default only the offline regex extractor runs. Pass --llm to use the
hosted model (falls back to the regex extractor on failure).
"""

import argparse
import asyncio
import json
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv(".env.local")

from src.logging_config import setup_logging, get_logger
from src.services import heuristic_extractor
from src.services.inspection_extraction import extract_inspection
from src.services.inspection_report import build_report

setup_logging()
logger = get_logger(__name__)


async def run(path: str, use_llm: bool, frame_count: int | None) -> None:
    """Extract, normalize and print a single transcript."""
    if path == "-":
        transcript = sys.stdin.read()
    else:
        with open(path, encoding="utf-8") as fh:
            transcript = fh.read()

    if use_llm:
        result = await extract_inspection(transcript, frame_count=frame_count)
    else:
        result = heuristic_extractor.extract(transcript)

    report = build_report(result.model_dump(exclude_none=True))

    print(f"{'Frame':>5}  {'Honey':>6}  {'Brood':>6}  {'Pollen':>6}  {'Empty':>6}  Eggs  Larvae")
    for row in report.rows:
        print(
            f"{row.frame_number:>5}  {row.honey_pct:>5.0f}%  {row.brood_pct:>5.0f}%  "
            f"{row.pollen_pct:>5.0f}%  {row.empty_pct:>5.0f}%  "
            f"{'yes' if row.eggs else '-':>4}  {'yes' if row.larvae else '-':>6}"
        )
    if not report.rows:
        print("No frame rows could be built from the transcript.")

    print()
    print(json.dumps(report.to_dict()["totals"], indent=2))
    for question in report.questions:
        print(f"? {question}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract a frame report from a transcript")
    parser.add_argument("path", help="Transcript file, or - for stdin")
    parser.add_argument("--llm", action="store_true", help="Use the hosted LLM extractor")
    parser.add_argument("--frame-count", type=int, default=None, help="Frames in the hive")

    args = parser.parse_args()

    asyncio.run(run(args.path, use_llm=args.llm, frame_count=args.frame_count))


if __name__ == "__main__":
    main()
