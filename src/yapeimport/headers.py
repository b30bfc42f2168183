"""Header validation and column mapping for the Yape importer.

Confirms that the fixed header row carries every expected label and
resolves each label to its column position, once per file.

Error codes owned by this module:
    ERR_020 (INVALID_HEADERS): raised by map_headers
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from yapeimport.errors import InvalidHeadersError
from yapeimport.models import ColumnMapping
from yapeimport.utils import EXPECTED_HEADERS, normalize_header

logger = logging.getLogger(__name__)


def map_headers(
    header_cells: Sequence[Any],
    expected: Sequence[str] = EXPECTED_HEADERS,
    filename: str | None = None,
) -> ColumnMapping:
    """Validate the header row and map each expected label to its column.

    Order within the row does not matter for acceptance, and blank or
    extra cells are tolerated. When a label appears twice the left-most
    column wins.

    Args:
        header_cells: Raw cells of the header row.
        expected: Labels that must all be present.
        filename: Upload file name, attached to the error.

    Returns:
        ColumnMapping with label -> 0-based column index.

    Raises:
        InvalidHeadersError: ERR_020 if any expected label is missing.
    """
    positions: dict[str, int] = {}
    actual: list[str] = []
    for idx, cell in enumerate(header_cells):
        label = normalize_header(cell)
        if not label:
            continue
        actual.append(label)
        positions.setdefault(label, idx)

    missing = [label for label in expected if label not in positions]
    if missing:
        logger.error("Header row is missing: %s", ", ".join(missing))
        raise InvalidHeadersError(expected, actual, filename)

    field_map = {label: positions[label] for label in expected}
    logger.debug("Mapped header columns: %s", field_map)
    return ColumnMapping(field_map=field_map, actual_headers=actual)
