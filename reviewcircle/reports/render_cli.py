from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from reviewcircle.reports.html_builder import build_html_from_template
from reviewcircle.reports.logo import get_logo_data_url
from reviewcircle.reports.milestone_data import coerce_report_data
from reviewcircle.reports.pdf_renderer import render_html_to_pdf_sync
from reviewcircle.reports.validation import validate_milestone_submission

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_RENDER_FAILED = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a milestone review report from a JSON payload.")
    parser.add_argument("payload", help="Path to a JSON file with the milestone report fields.")
    parser.add_argument("-o", "--output", required=True, help="Destination file (.pdf, or .html with --html).")
    parser.add_argument("--html", action="store_true", help="Write the HTML document instead of a PDF.")
    parser.add_argument("--template", default=None, help="Report template path (default: configured template).")
    parser.add_argument("--base-dir", default=None, help="Directory searched for the report logo.")
    parser.add_argument("--strict", action="store_true", help="Refuse to render payloads that fail validation.")
    parser.add_argument("--no-escape", action="store_true", help="Interpolate free text without HTML escaping.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    payload = json.loads(Path(args.payload).read_text(encoding="utf-8"))
    report = coerce_report_data(payload)

    errors = validate_milestone_submission(report)
    for error in errors:
        logger.warning("Validation: %s", error)
    if errors and args.strict:
        return EXIT_INVALID

    html_options = {
        "template_path": args.template,
        "logo_url": get_logo_data_url(args.base_dir) if args.base_dir else None,
        "escape": False if args.no_escape else None,
    }
    output = Path(args.output)
    try:
        if args.html:
            output.write_text(build_html_from_template(report, **html_options), encoding="utf-8")
        else:
            output.write_bytes(render_html_to_pdf_sync(report, **html_options))
    except Exception as exc:
        logger.error("Rendering failed: %s", exc)
        return EXIT_RENDER_FAILED

    logger.info("Wrote %s", output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
