"""Tour bundle command line tools.

Subcommands:
 - ``validate FILE``: check an export/import bundle, exit 1 on the first violation
 - ``merge EXISTING IMPORT --mode MODE [-o OUT]``: merge two bundles
 - ``render-markdown [TEXT|-]``: render popover markdown to HTML
 - ``theme [--preset P] [--overrides JSON] [--css]``: print resolved CSS variables
 - ``steps FILE --tour NAME``: list the compiled steps of one tour
 - ``seen list|clear --store FILE``: inspect or clear persisted seen-state

Example:
  python -m cli.tours merge current.json incoming.json --mode replaceMatching -o merged.json
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List

from config import settings
from onboarding.design.theme_resolver import ThemeConfig, build_theme_css, resolve_theme
from onboarding.errors import OnboardingError, ValidationError
from onboarding.platform.selectors import DEFAULT_CODE_PATH, available_platforms
from onboarding.services.logging_service import configure_logging
from onboarding.services.storage import JsonFileStore
from onboarding.tour.markdown import render
from onboarding.tour.models import Tour
from onboarding.tour.seen_store import SeenStateStore
from onboarding.tour.step_builder import build_steps
from onboarding.tour.tour_io import (
    MergeMode,
    build_export_document,
    export_to_file,
    merge_tours,
    parse_import_text,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Onboarding tour bundle tools")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Console log level")
    p.add_argument("--quiet", action="store_true", help="Suppress log output")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate", help="Validate an import file")
    v.add_argument("file")

    m = sub.add_parser("merge", help="Merge an import file into an existing bundle")
    m.add_argument("existing")
    m.add_argument("incoming")
    m.add_argument(
        "--mode",
        default=MergeMode.REPLACE_MATCHING.value,
        help="replaceAll | replaceMatching | addToExisting",
    )
    m.add_argument("-o", "--output", help="Write merged bundle here instead of stdout")

    r = sub.add_parser("render-markdown", help="Render markdown to popover HTML")
    r.add_argument("text", nargs="?", default="-", help="Markdown text, or '-' for stdin")
    r.add_argument("--sanitize", action="store_true", help="Strip scripts and event handlers")

    t = sub.add_parser("theme", help="Print resolved theme variables")
    t.add_argument("--preset", default=None)
    t.add_argument("--overrides", default=None, help="JSON object of theme overrides")
    t.add_argument("--css", action="store_true", help="Emit a scoped CSS block")

    s = sub.add_parser("steps", help="List the compiled steps of a tour")
    s.add_argument("file")
    s.add_argument("--tour", required=True, help="Tour name")
    s.add_argument("--platform", default=settings.BASELINE_PLATFORM, choices=available_platforms())
    s.add_argument("--code-path", default=DEFAULT_CODE_PATH)

    seen = sub.add_parser("seen", help="Inspect or clear seen-state records")
    seen.add_argument("action", choices=["list", "clear"])
    seen.add_argument(
        "--store",
        default=os.path.join(settings.DATA_DIR, settings.SEEN_STATE_FILENAME),
        help="Seen-state JSON file",
    )
    return p.parse_args(argv)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def _loose_tours(path: str) -> List[Tour]:
    # Existing bundles come from our own exports and may predate id backfill
    data = json.loads(_read_text(path))
    tours = data.get("tours") if isinstance(data, dict) else None
    return [Tour.from_dict(t) for t in tours or [] if isinstance(t, dict)]


def _cmd_validate(args: argparse.Namespace) -> int:
    bundle = parse_import_text(_read_text(args.file))
    print(f"OK: {len(bundle.tours)} tour(s)")
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    existing = _loose_tours(args.existing)
    bundle = parse_import_text(_read_text(args.incoming))
    merged = merge_tours(existing, bundle.tours, args.mode)
    if args.output:
        export_to_file(args.output, merged, bundle.theme, bundle.widget)
        print(f"Wrote {len(merged)} tour(s) to {args.output}")
    else:
        print(json.dumps(build_export_document(merged, bundle.theme, bundle.widget), indent=2))
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    text = sys.stdin.read() if args.text == "-" else args.text
    print(render(text, sanitize=args.sanitize))
    return 0


def _cmd_theme(args: argparse.Namespace) -> int:
    theme: Dict[str, Any] = {}
    if args.overrides:
        raw = json.loads(args.overrides)
        if not isinstance(raw, dict):
            raise ValidationError("--overrides must be a JSON object")
        theme.update(raw)
    if args.preset:
        theme["preset"] = args.preset
    css_vars = resolve_theme(ThemeConfig.from_dict(theme))
    if args.css:
        print(build_theme_css(css_vars))
    else:
        print(json.dumps(css_vars, indent=2))
    return 0


def _cmd_steps(args: argparse.Namespace) -> int:
    bundle = parse_import_text(_read_text(args.file))
    tour = next((t for t in bundle.tours if t.tour_name == args.tour), None)
    if tour is None:
        print(f"Tour not found: {args.tour}", file=sys.stderr)
        return 1
    rows = []
    for i, step in enumerate(build_steps(tour, args.platform, args.code_path)):
        row: Dict[str, Any] = {"index": i, "title": step.popover.title}
        if step.dialog is not None:
            row["dialog"] = step.dialog.css_class
            if step.dialog.style():
                row["style"] = step.dialog.style()
        else:
            row["selector"] = step.selector
        rows.append(row)
    print(json.dumps(rows, indent=2))
    return 0


def _cmd_seen(args: argparse.Namespace) -> int:
    store = SeenStateStore(JsonFileStore(args.store))
    if args.action == "clear":
        print(f"Cleared {store.clear_all()} record(s)")
        return 0
    for rec in store.records():
        print(f"{rec.key}\t{rec.timestamp or '-'}")
    return 0


_COMMANDS = {
    "validate": _cmd_validate,
    "merge": _cmd_merge,
    "render-markdown": _cmd_render,
    "theme": _cmd_theme,
    "steps": _cmd_steps,
    "seen": _cmd_seen,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(str(args.log_level).upper(), mute=args.quiet)
    try:
        return _COMMANDS[args.command](args)
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    except json.JSONDecodeError as e:
        print(f"Invalid JSON: {e}", file=sys.stderr)
        return 1
    except OnboardingError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
