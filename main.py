#!/usr/bin/env python3
"""
Spectral Report - entry point

Offline spectrum analysis of one WAV file, exported as CSV tables.

Usage:
    python main.py [audio_file] [output_dir]

Example:
    python main.py recording.wav output

Set SPECTRAL_REPORT_LOG=DEBUG for detailed progress output.
"""

import logging
import os
import sys
from pathlib import Path

DEFAULT_AUDIO_FILE = "project.wav"
DEFAULT_OUTPUT_DIR = "output"


def main() -> int:
    """Run analysis and export, return the process exit status."""
    # Check Python version
    if sys.version_info < (3, 10):
        print("Error: Python 3.10 or higher is required.")
        print(f"Current version: {sys.version}")
        return 1

    logging.basicConfig(
        level=os.environ.get("SPECTRAL_REPORT_LOG", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from spectral_report.core import (
        AnalysisError,
        export_result,
        load_waveform,
        run_analysis,
    )
    from spectral_report.utils import format_export_report, format_summary

    audio_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(DEFAULT_AUDIO_FILE)
    output_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else Path(DEFAULT_OUTPUT_DIR)

    print(f"Analysing {audio_file}")

    try:
        waveform = load_waveform(audio_file)
        result = run_analysis(waveform)
    except AnalysisError as e:
        print(f"Error: {e}")
        return 1

    for line in format_summary(result.summary):
        print(f"  {line}")

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Error: cannot create output directory {output_dir}: {e}")
        return 1

    report = export_result(result, output_dir)

    print(f"\nExported to {output_dir}:")
    for line in format_export_report(report):
        print(line)

    if not report.ok:
        print(f"\nFinished with {len(report.errors)} error(s).")
        return 1

    print("\nAll tables exported.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
