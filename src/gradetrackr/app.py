import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gradetrackr.config.settings import settings
from gradetrackr.services.outline_service import AI_MODELS, OutlineService, OutlineServiceError
from gradetrackr.services.semester_store import SemesterStore
from gradetrackr.state.app_state import Gradebook, SemesterSummary

logger = logging.getLogger(__name__)


def _fmt(value: Optional[float], suffix: str = "%") -> str:
    return "-" if value is None else f"{value:.2f}{suffix}"


def render_summary(summary: SemesterSummary) -> str:
    lines = [
        f"{summary.name}  GPA: {_fmt(summary.gpa, '')}  Average: {_fmt(summary.average)}",
    ]
    for course in summary.courses:
        warn = "" if course.weights_valid else f"  (weights sum to {course.weights_sum:g}%)"
        lines.append(
            f"  {course.name}: current {_fmt(course.current_total)}, "
            f"needed on final {_fmt(course.required_final)}{warn}"
        )
        for name, points in course.contributions:
            lines.append(f"    {name}: {_fmt(points, '')}")
    if not summary.courses:
        lines.append("  No courses yet.")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gradetrackr", description="Track course grades and GPA.")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("summary", help="show totals for the active semester (default)")
    sub.add_parser("location", help="show where data is stored")
    imp = sub.add_parser("import", help="import course outlines from a text file")
    imp.add_argument("path", type=Path)
    imp.add_argument("--api-key", default=None)
    imp.add_argument("--model", choices=[m["id"] for m in AI_MODELS], default=None)
    return parser


async def run(argv: List[str]) -> int:
    args = _build_parser().parse_args(argv)
    store = SemesterStore.from_settings()
    try:
        state = await store.initialize_store()
        logger.debug("Loaded %d semester(s)", len(state.semesters))
        gradebook = Gradebook(store)

        if args.command == "location":
            print(await store.get_data_location())
        elif args.command == "import":
            api_key = args.api_key or store.get_api_key() or settings.groq_api_key
            try:
                service = OutlineService.from_settings(api_key, args.model)
                text = args.path.read_text(encoding="utf-8")
                parsed = await asyncio.to_thread(service.parse_outline, text)
            except (OutlineServiceError, OSError) as exc:
                print(f"Import failed: {exc}", file=sys.stderr)
                return 1
            store.set_api_key(service.api_key)
            imported = gradebook.import_courses(parsed)
            print(f"Imported {len(imported)} course(s).")
        else:
            summary = gradebook.summary()
            if summary is not None:
                print(render_summary(summary))

        return 0
    finally:
        await store.flush()
        store.close()


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(sys.argv[1:])))


if __name__ == "__main__":
    main()
