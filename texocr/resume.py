"""
Resume Tracker
Works out where a run should pick up from the page fragments already on disk.
"""

import re
from pathlib import Path


PAGE_UNIT_PATTERN = re.compile(r"^page(\d+)\.tex$")


def page_unit_name(page_index: int) -> str:
    """File name of the fragment for a one-indexed page."""
    return f"page{page_index}.tex"


def find_page_units(output_dir: Path) -> dict[int, Path]:
    """Map page index to fragment path for every recorded page."""
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        return {}

    units = {}
    for path in output_dir.iterdir():
        match = PAGE_UNIT_PATTERN.match(path.name)
        if match and path.is_file():
            units[int(match.group(1))] = path
    return units


def determine_start_page(output_dir: Path) -> int:
    """
    Next page to process: one past the highest recorded page, or 1.

    Pages are never backfilled, so a gap below the highest fragment stays a gap.
    """
    units = find_page_units(output_dir)
    if not units:
        return 1
    return max(units) + 1
