import sys
from typing import List

# --- Settings/Logging ---
from gvg_tracker.logging.setup import setup_logging

setup_logging()

from loguru import logger

# --- End Settings/Logging ---

from gvg_tracker.calculation.aggregator import query
from gvg_tracker.models.stats import QueryResult
from gvg_tracker.utils.demo_data import seed_demo_records
from gvg_tracker.utils.misc_utils import format_percent

from rich import print
from rich.panel import Panel

DEFAULT_DEFENSE = ["Orkah", "Jave", "Karin"]


def render_result(result: QueryResult) -> None:
    """Prints one panel per attacking composition."""
    print(
        Panel(
            f"{result.match_count} match(es) recorded against {result.query_key}",
            title="Defender search",
        )
    )
    for row in result.rows:
        lines = [
            f"Win rate: {format_percent(row.win_rate)}  Matches: {row.total}",
        ]
        if row.top_attacker_combo:
            lines.append(
                f"Top attacker skills: {row.top_attacker_combo.key} (x{row.top_attacker_combo.count})"
            )
        if row.top_defender_combo:
            lines.append(
                f"Top defender skills: {row.top_defender_combo.key} (x{row.top_defender_combo.count})"
            )
        if row.tags:
            lines.append(f"Tags: {', '.join(row.tags)}")
        if row.notes:
            lines.append(f"Notes: {' • '.join(row.notes)}")
        print(Panel("\n".join(lines), title=" / ".join(row.attackers)))


def main(argv: List[str]) -> int:
    """Runs a defender search over the demo data set."""
    defense = argv[:3] if argv else DEFAULT_DEFENSE
    logger.info(f"Searching demo records for defending team {defense}")

    records = seed_demo_records()
    result = query(records, defense)
    if result is None:
        logger.warning("Enter three defending characters to search.")
        return 2

    if not result.rows:
        logger.info(f"No matches recorded against {result.query_key}.")
        return 0

    render_result(result)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
