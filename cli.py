"""
CLI entry point for issue_insights. Wires the pipeline: load -> normalize -> chart -> report
"""

import argparse
import json
import logging
import os
import webbrowser
from datetime import datetime, timezone

from dashboard import build_dashboard_from_raw
from normalize.project_keys import load_project_keys
from report.renderer import render
from textmine.completion import configure_completion

logger = logging.getLogger(__name__)

# wrapper keys under which exported record lists are commonly nested
RECORD_LIST_KEYS = ('items', 'data', 'nodes', 'issues', 'pullRequests')


def _load_json_file(path: str, description: str):
    """Attempt to load a JSON file and return the parsed object or None on failure.
    Errors are printed by the caller; this helper just returns None on failure.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print(f"Failed to read {description} {path}: {e}")
        return None


def _extract_records(payload):
    """Return the record list from a JSON payload: a bare list, or a list under a known wrapper key."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in RECORD_LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    return None


def _load_records(path: str, description: str, parser):
    payload = _load_json_file(path, description)
    records = _extract_records(payload) if payload is not None else None
    if records is None:
        parser.error(f"Invalid {description} {path}; expected a JSON array of records.")
    return records


def _split_list(value: str):
    return [v.strip() for v in (value or '').split(',') if v.strip()]


def _resolve_api_key(args):
    """CLI flag takes precedence over the OPENAI_API_KEY environment variable; empty means offline."""
    return args.openai_key if args.openai_key else os.getenv('OPENAI_API_KEY', '')


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def write_output(fmt: str, rendered: str, args):
    """Write output to file or stdout and optionally open HTML in browser."""
    if fmt in ("html", "md", "csv", "json"):
        out_path = args.out_file.strip() or f"issue_insights_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.{fmt}"
        out_dir = os.path.dirname(out_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        # newline='' is safe for CSV on Windows and harmless for other formats
        with open(out_path, "w", encoding="utf-8", newline='') as f:
            f.write(rendered)
        print(f"Wrote report to {out_path}")
        if args.open and fmt == "html":
            try:
                _open_file_in_browser(out_path)
            except webbrowser.Error:
                print("Failed to open browser automatically; file saved at", out_path)
    else:
        print(rendered)


def run_pipeline(args, parser):
    """Execute load -> normalize -> chart -> render and return (fmt, rendered)."""
    raw_tasks = _load_records(args.tasks, 'tasks file', parser)
    raw_prs = _load_records(args.prs, 'pull requests file', parser) if args.prs else []
    project_keys = load_project_keys(args.project_keys or None)

    dashboard = build_dashboard_from_raw(
        raw_tasks,
        raw_prs,
        source=args.source,
        project_keys=project_keys,
        selected_labels=_split_list(args.labels),
        field_name=args.field or None,
        selected_values=_split_list(args.values),
        api_key=_resolve_api_key(args),
        rca_label=args.rca_label or None,
        timeline_field=args.timeline_field or None,
        developers=args.developers,
    )
    fmt = (args.output or "text").lower()
    rendered = render(dashboard, fmt=fmt, scope=args.scope or None)
    return fmt, rendered


def build_parser():
    parser = argparse.ArgumentParser(description="GitHub issue and pull request analytics")
    parser.add_argument("--tasks", type=str, required=True, help="Path to JSON file of REST issues or flattened GraphQL project items")
    parser.add_argument("--prs", type=str, default="", help="Path to JSON file of GraphQL pull request nodes (optional)")
    parser.add_argument("--source", choices=("auto", "rest", "graphql"), default="auto", help="Shape of the task records (default: detect per record)")
    parser.add_argument("--project-keys", type=str, default="", help="YAML file mapping SPRINT/SIZE/ESTIMATE_DAYS/ACTUAL_DAYS to field names (default: ./config/project_keys.yaml, else the packaged defaults)")
    parser.add_argument("--labels", type=str, default="", help="Comma-separated labels to chart in the label distribution")
    parser.add_argument("--field", type=str, default="", help="Field to chart in the field distribution")
    parser.add_argument("--values", type=str, default="", help="Comma-separated values of --field to chart")
    parser.add_argument("--rca-label", type=str, default="bug", help="Only mine RCA text from issues with this label (empty for all issues)")
    parser.add_argument("--timeline-field", type=str, default="", help="Numeric field scheduled in the timeline plan (default: the estimate field)")
    parser.add_argument("--developers", type=int, default=1, help="Number of developers the timeline plan is spread over")
    parser.add_argument("--openai-key", type=str, default="", help="Text-completion API key for merging RCA sentences (or set OPENAI_API_KEY env var)")
    # completion endpoint knobs: ISSUE_INSIGHTS_COMPLETION_URL, ISSUE_INSIGHTS_COMPLETION_MODEL and
    # ISSUE_INSIGHTS_COMPLETION_TIMEOUT may also be used to set defaults.
    parser.add_argument("--completion-url", type=str, default=None, help="Chat-completions endpoint URL (overrides ISSUE_INSIGHTS_COMPLETION_URL env)")
    parser.add_argument("--completion-model", type=str, default=None, help="Model name (overrides ISSUE_INSIGHTS_COMPLETION_MODEL env)")
    parser.add_argument("--completion-timeout", type=float, default=None, help="Request timeout in seconds (overrides ISSUE_INSIGHTS_COMPLETION_TIMEOUT env)")
    parser.add_argument("--output", type=str, help="Output format (text, json, md, csv, html)", default="text")
    parser.add_argument("--out-file", type=str, default="", help="Output file path (for HTML/CSV/MD/JSON). If omitted a default name will be used")
    parser.add_argument("--scope", type=str, default="", help="Free-text scope shown in the HTML report header")
    parser.add_argument("--open", action="store_true", help="Open the generated HTML report in the default browser")
    parser.add_argument("--log-level", type=str, default=os.getenv("ISSUE_INSIGHTS_LOG_LEVEL", "WARNING"), help="Logging level (default: WARNING or ISSUE_INSIGHTS_LOG_LEVEL env)")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # CLI flags take precedence over environment variables
    configure_completion(url=args.completion_url, model=args.completion_model, timeout=args.completion_timeout)

    fmt, rendered = run_pipeline(args, parser)
    write_output(fmt, rendered, args)


if __name__ == "__main__":
    main()
