"""
DISA package
============

This package contains the Disaster Impact Summary Analyzer (DISA).

- The CLI entry point is in `disa/cli.py`.
- The cleaning / aggregation pipeline is in `disa/pipeline.py`.
- Dataset loading is in `disa/loader.py`.
- Charts and the DOCX report are in `disa/report.py`.
"""

__version__ = '0.1.0'
