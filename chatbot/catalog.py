"""
Clinic Catalog.

Loads the pipe-delimited clinic list and keeps it as an immutable snapshot:

  name|source|specialty|street|city|county|region|postal code|phone|lon|lat

Bad records are reported and skipped so one broken line never takes the
whole catalog down. A refresh builds a complete new snapshot before swapping
it in, so readers always see one consistent list.
"""

import math
import threading
from pathlib import Path

from chatbot.errors import CatalogUnavailable, MalformedCatalogRecord
from chatbot.ranker import Facility
import config


FIELD_DELIMITER = "|"
FIELDS_PER_RECORD = 11


def parse_record(line: str, line_number: int | None = None) -> Facility:
    """Parse a single catalog line into a Facility."""
    fields = [field.strip() for field in line.split(FIELD_DELIMITER)]
    if len(fields) != FIELDS_PER_RECORD:
        raise MalformedCatalogRecord(
            f"expected {FIELDS_PER_RECORD} fields, found {len(fields)}",
            line_number,
        )

    name, source, specialty, street, city, county, region, postal_code, phone = fields[:9]
    if not name:
        raise MalformedCatalogRecord("missing clinic name", line_number)

    try:
        longitude = float(fields[9])
        latitude = float(fields[10])
    except ValueError:
        raise MalformedCatalogRecord(
            f"non-numeric coordinates ({fields[9]!r}, {fields[10]!r})",
            line_number,
        ) from None
    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        raise MalformedCatalogRecord("non-finite coordinates", line_number)

    return Facility(
        name=name,
        source=source,
        specialty=specialty,
        street=street,
        city=city,
        county=county,
        region=region,
        postal_code=postal_code,
        phone=phone,
        longitude=longitude,
        latitude=latitude,
    )


def parse_catalog(text: str) -> tuple[Facility, ...]:
    """
    Parse a whole catalog text block.

    Blank lines are ignored; malformed records are logged and skipped.
    """
    facilities = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            facilities.append(parse_record(line, line_number))
        except MalformedCatalogRecord as e:
            print(f"[Catalog] ⚠️ Skipping malformed record: {e}")
    return tuple(facilities)


def load_catalog_file(path: str | Path) -> tuple[Facility, ...]:
    """Read and parse a catalog file. Raises CatalogUnavailable on failure."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            text = fh.read()
    except OSError as e:
        raise CatalogUnavailable(f"Could not read clinic catalog {path}: {e}") from e

    facilities = parse_catalog(text)
    if not facilities:
        raise CatalogUnavailable(f"Clinic catalog {path} has no valid records")

    print(f"[Catalog] ✅ Loaded {len(facilities)} clinics from {path}")
    return facilities


class ClinicCatalog:
    """Holds the current catalog snapshot and swaps it on refresh."""

    def __init__(self, path: str | Path | None = None, facilities=None):
        self.path = Path(path or config.CLINIC_CATALOG_PATH)
        self._refresh_lock = threading.Lock()
        if facilities is not None:
            self._snapshot = tuple(facilities)
        else:
            self._snapshot = load_catalog_file(self.path)

    def snapshot(self) -> tuple[Facility, ...]:
        """Return the current immutable list of facilities."""
        return self._snapshot

    def refresh(self) -> tuple[Facility, ...]:
        """
        Reload the catalog from its file.

        On failure the previous snapshot stays installed and the error
        propagates.
        """
        with self._refresh_lock:
            new_snapshot = load_catalog_file(self.path)
            self._snapshot = new_snapshot
        return new_snapshot

    def __len__(self) -> int:
        return len(self._snapshot)
