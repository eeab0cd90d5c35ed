from __future__ import annotations

import argparse
import json
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from dispatch_core.config.settings import load_settings
from dispatch_core.logging.logger import report_logger
from dispatch_reports import ReportGenerationError, ReportKind, available_themes, generate_report


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a field-service PDF report from JSON records")
    parser.add_argument("source", help="JSON file with one service record or a list of records")
    parser.add_argument("--kind", default=ReportKind.SINGLE_SERVICE_DETAILED, choices=list(ReportKind.ALL))
    parser.add_argument("--out", default="", help="Output directory (default: DISPATCH_REPORT_OUTPUT_DIR or cwd)")
    parser.add_argument("--theme", default="", help="Theme name: " + ", ".join(available_themes()))
    parser.add_argument("--team", default="", help="Optional JSON file with team members")
    parser.add_argument("--template", default=None, help="Optional PDF template to underlay on content pages")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Echo report log records to stdout")
    args = parser.parse_args(argv)

    settings = load_settings()
    logger = report_logger(settings, console=args.verbose and not args.json)
    source = _load_json(args.source)
    team = _load_json(args.team) if args.team else None

    def _progress(step: int, total: int, message: str) -> None:
        print(f"[REPORT] {step}/{total} {message}")

    try:
        result = generate_report(
            source,
            args.kind,
            output_dir=args.out or None,
            team=team,
            theme=args.theme or None,
            template_pdf_path=args.template,
            settings=settings,
            progress_cb=None if args.json else _progress,
            logger=logger,
        )
    except ReportGenerationError as exc:
        print(f"[REPORT] failed ({exc.code}): {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        print(f"[REPORT] saved: {result['output_pdf_path']} ({result['pages']} pages)")
        for warning in result.get("warnings", []):
            print(f"[REPORT] warning: {warning}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
