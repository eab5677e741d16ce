#!/usr/bin/env python3
"""
Mangrove Watch - Generate Interactive Report Map
Reads community reports from the record store and writes an interactive map.
"""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
from mangrove_watch.core.config import get_settings
from mangrove_watch.core.logging import setup_logging
from mangrove_watch.database import ReportRepository, init_db
from mangrove_watch.visualization import (
    LeafletBackend,
    MapboxBackend,
    MapReport,
    SeverityPalette,
    render_reports_map,
)

# Load environment variables
load_dotenv()


def main():
    settings = get_settings()
    setup_logging(settings, level="WARNING")
    palette = SeverityPalette.from_settings(settings)

    print("=" * 60)
    print("Mangrove Watch - Generating Report Map")
    print("=" * 60)

    db = init_db(settings.database_url)
    records = ReportRepository(db).list_recent()
    db.close()

    print(f"\nTotal reports found: {len(records)}")

    if not records:
        print("No reports stored yet. Submit one through the API first.")
        return

    by_severity = {}
    for record in records:
        by_severity[record["severity"]] = by_severity.get(record["severity"], 0) + 1

    print("\nReports by severity:")
    for severity, count in sorted(by_severity.items()):
        print(f"  - {severity:<10} {count}")

    if settings.mapbox_access_token:
        backend = MapboxBackend(
            access_token=settings.mapbox_access_token,
            style=settings.mapbox_style,
            palette=palette,
        )
        print("\nRenderer: Mapbox")
    else:
        backend = LeafletBackend(palette=palette)
        print("\nRenderer: OpenStreetMap (set MAPBOX_ACCESS_TOKEN for Mapbox)")

    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "mangrove_reports_map.html")
    render_reports_map(
        [MapReport.from_record(r) for r in records],
        output_path=output_path,
        backend=backend,
        center=settings.default_center,
        zoom=settings.default_zoom,
    )

    print(f"\nMap saved to: {output_path}")
    print("\nOpen the file in your browser to view the interactive map!")
    print("=" * 60)


if __name__ == "__main__":
    main()
