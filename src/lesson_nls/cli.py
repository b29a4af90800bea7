"""Command-line entry point.

Usage:
    lesson-nls <plan_json> [<original_docx>] [-o <out_dir>] [--ai] [--copy]

Arguments:
    plan_json      LessonPlanData as produced by the analysis step
    original_docx  Lesson plan to modify in place (optional; without it a
                   plain-text reference document is written)
    -o <out_dir>   Directory for the output file (default: current directory)
    --ai           Also insert the AI competency block and suggestions
    --copy         Copy the plain-text rendering to the clipboard too
"""

import asyncio
import json
import os
import sys

from pydantic import ValidationError

from .export import DownloadArtifact, ExportDriver, ExportState
from .models import LessonPlanData
from .utils import get_logger, setup_logging

logger = get_logger(__name__)

USAGE = (
    "Usage: lesson-nls <plan_json> [<original_docx>] [-o <out_dir>] [--ai] [--copy]"
)


def directory_sink(out_dir: str):
    """Download sink that writes artifacts into ``out_dir``."""

    def write(artifact: DownloadArtifact) -> None:
        os.makedirs(out_dir, exist_ok=True)
        path = os.path.join(out_dir, artifact.filename)
        with open(path, "wb") as f:
            f.write(artifact.data)
        logger.info("Wrote %s (%d bytes)", path, len(artifact.data))

    return write


def load_plan(path: str) -> LessonPlanData:
    with open(path, encoding="utf-8") as f:
        return LessonPlanData.model_validate(json.load(f))


async def run(plan_path, docx_path, out_dir, include_ai, copy) -> int:
    data = load_plan(plan_path)

    original_bytes = None
    if docx_path:
        with open(docx_path, "rb") as f:
            original_bytes = f.read()

    driver = ExportDriver(download=directory_sink(out_dir))
    result = await driver.export(
        data,
        include_ai,
        original_bytes=original_bytes,
        original_name=os.path.basename(docx_path) if docx_path else None,
    )

    print(f"Output: {os.path.join(out_dir, result.artifact.filename)}")
    if result.state is ExportState.SUCCEEDED:
        print(f"Goals anchor found: {'yes' if result.goals_anchor_found else 'no (appended at end)'}")
        print(f"Activities annotated: {len(result.activities_inserted)}")
        for name in result.activities_skipped:
            print(f"  skipped (heading not found): {name}")
    else:
        print(f"Plain-text fallback: {result.fallback_reason}", file=sys.stderr)

    if copy:
        copied = await driver.copy_to_clipboard(data, include_ai)
        print("Copied to clipboard" if copied else "Clipboard unavailable", file=sys.stderr)

    return 0 if result.state is ExportState.SUCCEEDED else 2


def main() -> int:
    """CLI entry point.

    Returns:
        Exit code: 0 on success, 2 if only the plain-text fallback was
        produced, 1 on usage or input errors.
    """
    args = sys.argv[1:]

    include_ai = "--ai" in args
    if include_ai:
        args.remove("--ai")
    copy = "--copy" in args
    if copy:
        args.remove("--copy")

    out_dir = "."
    if "-o" in args:
        idx = args.index("-o")
        if idx + 1 >= len(args):
            print(USAGE, file=sys.stderr)
            return 1
        out_dir = args[idx + 1]
        del args[idx:idx + 2]

    if len(args) not in (1, 2):
        print(USAGE, file=sys.stderr)
        return 1

    plan_path = args[0]
    docx_path = args[1] if len(args) == 2 else None

    if not os.path.isfile(plan_path):
        print(f"Error: Plan JSON not found: {plan_path}", file=sys.stderr)
        return 1
    if docx_path and not os.path.isfile(docx_path):
        print(f"Error: Original DOCX not found: {docx_path}", file=sys.stderr)
        return 1

    setup_logging()
    try:
        return asyncio.run(run(plan_path, docx_path, out_dir, include_ai, copy))
    except UnicodeDecodeError as e:
        print(f"Error: {plan_path} is not UTF-8 text: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: {plan_path} is not valid JSON: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: {plan_path} is not a valid lesson plan:\n{e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
