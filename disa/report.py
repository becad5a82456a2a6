from __future__ import annotations

"""
DISA charts and report
----------------------
This module turns a finished summary table into pictures and a DOCX file.

Design goals:
- Depend only on the summary table contract: group key columns plus
  mean_Damage, mean_Casualty, count.
- Keep DISA usable even if report dependencies are missing (lazy imports).
- A NaN mean (group with no observed value) is drawn as a gap, never as 0.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import os

import pandas as pd

from .errors import SchemaError
from .models import CONTINENT, DISASTER_TYPE, COUNT, MEAN_CASUALTY, MEAN_DAMAGE, SUMMARY_VALUE_COLUMNS

logger = logging.getLogger(__name__)


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Emergency Events Database (EM-DAT)"
    institutional_author: str = "UCLouvain / CRED"
    location: str = "Brussels, Belgium"
    website: str = "https://www.emdat.be"
    file_name: Optional[str] = None


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "DISA Analytical Report"
    subtitle: str = "Disaster Impact Summary Analyzer"
    dataset_name: str = "EM-DAT disaster events"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many summary rows to put in the DOCX table
    max_rows_table: int = 40

    # Optional: list of CLI commands used to create the summary
    command_log: Optional[List[str]] = None


# (column, chart title, y label, file stem)
CHARTS: Tuple[Tuple[str, str, str, str], ...] = (
    (MEAN_DAMAGE, "Mean Total Damages", "Mean damages ('000 US$)", "mean_damage"),
    (MEAN_CASUALTY, "Mean Total Casualty (affected + deaths)", "Mean casualty", "mean_casualty"),
    (COUNT, "Number of events", "Count", "count"),
)


def key_columns(summary: pd.DataFrame) -> List[str]:
    """Group key columns of a summary table (everything but the value columns)."""
    missing = [c for c in SUMMARY_VALUE_COLUMNS if c not in summary.columns]
    if missing:
        raise SchemaError(missing, summary.columns)
    keys = [c for c in summary.columns if c not in SUMMARY_VALUE_COLUMNS]
    if not keys:
        raise SchemaError([DISASTER_TYPE], summary.columns, reason="summary table has no group key column")
    return keys


def _fmt(v: object) -> str:
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return "n/a"
    if isinstance(v, float):
        return f"{v:,.1f}"
    return str(v)


# -----------------------------
# Charts
# -----------------------------

def render_summary_charts(summary: pd.DataFrame, out_dir: str) -> List[str]:
    """Write one PNG bar chart per summary value column. Returns the file paths.

    With a (continent, type) key the bars are grouped by continent with one
    series per disaster type; with a single key column it is a plain bar chart.
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install with: python -m pip install matplotlib"
        ) from e

    keys = key_columns(summary)
    if summary.empty:
        raise ValueError("No summary rows to chart (result set is empty).")

    os.makedirs(out_dir, exist_ok=True)
    paths: List[str] = []

    for col, title, ylabel, stem in CHARTS:
        values = pd.to_numeric(summary[col], errors="coerce")
        fig, ax = plt.subplots(figsize=(10, 5))
        if keys == [CONTINENT, DISASTER_TYPE]:
            table = summary.assign(**{col: values}).pivot(index=CONTINENT, columns=DISASTER_TYPE, values=col)
            table.plot(kind="bar", ax=ax, width=0.8)
            ax.legend(title="Disaster type", fontsize="small", ncol=2)
            ax.set_xlabel("Continent")
        else:
            labels = summary[keys].astype(str).agg(" / ".join, axis=1)
            ax.bar(labels, values)
            ax.set_xlabel(" / ".join(keys))
        ax.set_title(title)
        ax.set_ylabel(ylabel)
        ax.tick_params(axis="x", labelrotation=45)
        for label in ax.get_xticklabels():
            label.set_horizontalalignment("right")

        path = os.path.join(out_dir, f"{stem}_by_{'_'.join(k.lower() for k in keys)}.png")
        fig.tight_layout()
        fig.savefig(path, dpi=150)
        plt.close(fig)
        logger.info("Wrote chart %s", path)
        paths.append(path)
    return paths


# -----------------------------
# DOCX report
# -----------------------------

def generate_docx_report(
    summary: pd.DataFrame,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    missing: Optional[pd.DataFrame] = None,
    chart_paths: Optional[Sequence[str]] = None,
    scope_label: str = "Current Result Set",
) -> str:
    """
    Generate a DOCX report for a summary table.

    `missing` is the profile from pipeline.missing_profile() (before
    imputation); `chart_paths` are PNGs from render_summary_charts().
    """
    config = config or ReportConfig()

    # Lazy import: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    keys = key_columns(summary)
    if summary.empty:
        raise ValueError("No summary rows to report on (result set is empty).")

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(frame: pd.DataFrame) -> None:
        t = doc.add_table(rows=1, cols=len(frame.columns))
        for i, c in enumerate(frame.columns):
            t.rows[0].cells[i].text = str(c)
        for row in frame.itertuples(index=False):
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = _fmt(v)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Scope", scope_label)
    _kv("Grouped by", ", ".join(keys))
    _kv("Groups", str(len(summary)))
    _kv("Records summarized", str(int(pd.to_numeric(summary[COUNT]).sum())))

    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    doc.add_paragraph(
        f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}."
    )

    if config.command_log:
        doc.add_heading("Command log (reproducibility)", level=1)
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    if missing is not None and not missing.empty:
        doc.add_heading("Data completeness (before imputation)", level=1)
        doc.add_paragraph(
            "Missing values were filled with the median of the record's own "
            "continent / disaster type group. Groups without any observed value "
            "keep their gaps and show n/a below."
        )
        _table(missing)

    doc.add_heading("Summary table", level=1)
    shown = summary.head(config.max_rows_table)
    _table(shown)
    if len(summary) > len(shown):
        doc.add_paragraph(f"... ({len(summary)} groups total, showing {len(shown)})")

    if chart_paths:
        doc.add_heading("Visualizations", level=1)
        for path in chart_paths:
            doc.add_picture(path, width=Inches(6.5))
            doc.add_paragraph(os.path.basename(path))

    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as disa_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"DISA version: {disa_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    logger.info("Wrote report %s", out_path)
    return out_path
