"""
DISA Command Line Interface (CLI)
=================================

Batch run (load, clean, summarize, write outputs, exit):

    python -m disa.cli --data "path/to/disasters.xlsx" --out summary.csv --charts charts/

Interactive run (same pipeline, explored one command at a time):

    python -m disa.cli --data "path/to/disasters.xlsx" --interactive

The CLI DOES NOT modify your dataset file. It only loads it once and works
on in-memory copies.
"""

from __future__ import annotations
import argparse, logging, shlex, sys
from typing import List, Optional

import pandas as pd

from .config import PipelineConfig, ALL_NULL_POLICIES, DEFAULT_MAX_ROWS, STRATEGIES, parse_types
from .engine import Analysis
from .errors import DisaError
from .loader import load_dataset
from .models import GROUPINGS

HELP = """
Commands:
  help
  show [n]                          first n rows of the analysis columns
  values continent|type             distinct values
  missing                           missing values per impact column (current types)
  types <Type1,Type2,...> | all     set the disaster-type filter
  types reset                       back to the starting types
  undo
  redo

  summary [continent-type|type]
  export csv|json "<path>" [continent-type|type]
  chart "<dir>" [continent-type|type]
  report "<path.docx>" [continent-type|type]
  quit

Example:
  types Earthquake,Flood,Storm
  summary type
  chart "charts" continent-type
"""


def _make_citation(analysis: Analysis):
    from .report import DatasetCitation
    import os
    p = analysis.dataset_path
    return DatasetCitation(file_name=os.path.basename(p) if p else None)


def _by(parts: List[str], i: int) -> str:
    by = parts[i].lower() if len(parts) > i else "continent-type"
    if by not in GROUPINGS:
        raise ValueError(f"grouping must be one of: {', '.join(GROUPINGS)}")
    return by


def _print_table(df: pd.DataFrame) -> None:
    with pd.option_context("display.max_rows", 200, "display.width", 160):
        print(df.to_string(index=False))


def write_outputs(analysis: Analysis, by: str, *, out: Optional[str] = None,
                  charts: Optional[str] = None, report: Optional[str] = None) -> None:
    """Write the CSV / charts / DOCX requested for one grouping."""
    from .report import ReportConfig, generate_docx_report, render_summary_charts

    if out:
        analysis.export_csv(out, by)
        print(f"Summary written to {out}")
    chart_paths: List[str] = []
    if charts:
        chart_paths = render_summary_charts(analysis.summary(by), charts)
        print(f"Charts written to {charts} ({len(chart_paths)} files)")
    if report:
        res = analysis.result(by)
        cfg = ReportConfig(citation=_make_citation(analysis), command_log=analysis.command_log)
        generate_docx_report(res.summary, report, config=cfg, missing=res.missing, chart_paths=chart_paths)
        print(f"Report written to {report}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="disa", description="Disaster Impact Summary Analyzer")
    ap.add_argument("--data", required=True, help="Path to the disasters table (.csv or .xlsx)")
    ap.add_argument("--types", default=None,
                    help="Comma-separated disaster types to keep, or 'all' (default: natural hazards)")
    ap.add_argument("--by", choices=list(GROUPINGS), default="continent-type")
    ap.add_argument("--strategy", choices=STRATEGIES, default="per-continent")
    ap.add_argument("--on-all-null", dest="on_all_null", choices=ALL_NULL_POLICIES, default="propagate",
                    help="Groups with no observed value: keep NaN (propagate) or fail (raise)")
    ap.add_argument("--max-rows", dest="max_rows", type=int, default=DEFAULT_MAX_ROWS)
    ap.add_argument("--out", default=None, help="Write the summary table to this CSV")
    ap.add_argument("--charts", default=None, help="Write bar charts (PNG) into this directory")
    ap.add_argument("--report", default=None, help="Write a DOCX report to this path")
    ap.add_argument("--interactive", action="store_true", help="Start the command loop")
    ap.add_argument("--verbose", action="store_true", help="Log pipeline progress")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the DISA CLI.

    1) Load dataset
    2) Run the pipeline (batch) or start the command loop (--interactive)
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig(
            disaster_types=parse_types(args.types),
            strategy=args.strategy,
            on_all_null=args.on_all_null,
            max_rows=args.max_rows,
        ).validate()
        print("Loading dataset...")
        data = load_dataset(args.data, max_rows=config.max_rows)
        analysis = Analysis(data=data, config=config, dataset_path=args.data)
        print(f"Loaded {len(data)} events.")

        if not args.interactive:
            _print_table(analysis.summary(args.by))
            write_outputs(analysis, args.by, out=args.out, charts=args.charts, report=args.report)
            return 0
    except (DisaError, ValueError, OSError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Type 'help' for commands.")
    while True:
        try:
            line = input("disa> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        cmd0 = stripped.split()[0].lower()
        if cmd0 not in ("help", "show", "values", "missing", "summary"):
            analysis.command_log.append(stripped)
        try:
            handle(analysis, stripped)
        except Exception as e:
            print(f"Error: {e}")
    return 0


def handle(analysis: Analysis, line: str) -> None:
    """Handle one CLI command line."""
    if line.lower().strip() == "types reset":
        analysis.reset_types()
        types = analysis.config.disaster_types
        print(f"Disaster types: {'all' if types is None else ', '.join(types)}")
        return

    # allow type names with spaces without quoting: types Extreme temperature,Flood
    if line.lower().startswith("types "):
        types = parse_types(line[len("types "):])
        analysis.set_types(types)
        label = "all" if types is None else ", ".join(types)
        print(f"Disaster types: {label}")
        return

    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "show":
        n = int(parts[1]) if len(parts) >= 2 else 10
        _print_table(analysis.show(n))
        return

    if cmd == "values":
        if len(parts) < 2:
            raise ValueError("values field must be: continent | type")
        for v in analysis.values(parts[1]):
            print(v)
        return

    if cmd == "missing":
        _print_table(analysis.missing())
        return

    if cmd == "undo":
        print("Undone." if analysis.undo() else "Nothing to undo.")
        return

    if cmd == "redo":
        print("Redone." if analysis.redo() else "Nothing to redo.")
        return

    if cmd == "summary":
        _print_table(analysis.summary(_by(parts, 1)))
        return

    if cmd == "export":
        # export <csv|json> "<path>" [by]
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path, by = parts[1].lower(), parts[2], _by(parts, 3)
        if fmt == "csv":
            analysis.export_csv(out_path, by)
        elif fmt == "json":
            analysis.export_json(out_path, by)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "chart":
        if len(parts) < 2:
            print('Usage: chart "<dir>" [continent-type|type]')
            return
        write_outputs(analysis, _by(parts, 2), charts=parts[1])
        return

    if cmd == "report":
        if len(parts) < 2:
            print('Usage: report "<path.docx>" [continent-type|type]')
            return
        write_outputs(analysis, _by(parts, 2), report=parts[1])
        return

    print("Unknown command. Type 'help'.")


if __name__ == "__main__":
    sys.exit(main())
