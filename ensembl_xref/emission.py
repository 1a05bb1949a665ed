# See the NOTICE file distributed with this work for additional information
# regarding copyright ownership.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

""" Turn the result of a mapping run into core database rows.

    Ids continue from the highest id already used in each core table. The
    rows are written to tab separated files, one per table, with NULL
    written as \\N so they can be loaded with LOAD DATA as well.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import logging
import re

from .selection import MappingState

INFO_TYPE = "COORDINATE_OVERLAP"
NULL = "\\N"

DUMP_FILES = {
    "xref": "xref_coord.txt",
    "object_xref": "object_xref_coord.txt",
    "unmapped_reason": "unmapped_reason_coord.txt",
    "unmapped_object": "unmapped_object_coord.txt",
}

COLUMNS = {
    "xref": (
        "xref_id",
        "external_db_id",
        "dbprimary_acc",
        "display_label",
        "version",
        "description",
        "info_type",
        "info_text",
    ),
    "object_xref": (
        "object_xref_id",
        "ensembl_id",
        "ensembl_object_type",
        "xref_id",
        "linkage_annotation",
        "analysis_id",
    ),
    "unmapped_reason": (
        "unmapped_reason_id",
        "summary_description",
        "full_description",
    ),
    "unmapped_object": (
        "unmapped_object_id",
        "type",
        "analysis_id",
        "external_db_id",
        "identifier",
        "unmapped_reason_id",
        "query_score",
        "target_score",
        "ensembl_id",
        "ensembl_object_type",
        "parent",
    ),
}

_VERSION_RE = re.compile(r"\.(\d+)$")


def accession_version(accession: str) -> int:
    """Version from the trailing '.N' of an accession, 0 when absent."""
    match = _VERSION_RE.search(accession)
    return int(match.group(1)) if match else 0


@dataclass
class MappingRecords:
    """Rows for each core table, as dictionaries keyed by column name."""

    xref: List[Dict[str, Any]] = field(default_factory=list)
    object_xref: List[Dict[str, Any]] = field(default_factory=list)
    unmapped_reason: List[Dict[str, Any]] = field(default_factory=list)
    unmapped_object: List[Dict[str, Any]] = field(default_factory=list)

    def table(self, name: str) -> List[Dict[str, Any]]:
        return getattr(self, name)


def build_records(
    state: MappingState,
    max_ids: Dict[str, int],
    analysis_id: Optional[int],
    existing_reason_id: Callable[[str], Optional[int]],
) -> MappingRecords:
    """Assign ids and build the rows of a mapping run.

    Args:
        state: Mapped and unmapped external transcripts.
        max_ids: Last used id of each table, keyed by table name.
        analysis_id: dbID of the coordinate mapping analysis.
        existing_reason_id: Lookup of an unmapped_reason_id by full description,
            returning None for a reason not stored yet.

    Returns:
        The rows for the xref, object_xref, unmapped_reason and
        unmapped_object tables.
    """
    records = MappingRecords()
    unmapped = [state.unmapped[key] for key in sorted(state.unmapped)]
    mapped = [state.mapped[key] for key in sorted(state.mapped)]

    xref_id = max_ids.get("xref", 0)
    xref_ids: Dict[int, int] = {}
    for mapping in unmapped + mapped:
        xref_id += 1
        xref_ids[mapping.coord_xref_id] = xref_id
        records.xref.append(
            {
                "xref_id": xref_id,
                "external_db_id": mapping.external_db_id,
                "dbprimary_acc": mapping.accession,
                "display_label": mapping.accession,
                "version": str(accession_version(mapping.accession)),
                "description": None,
                "info_type": INFO_TYPE,
                "info_text": "",
            }
        )

    object_xref_id = max_ids.get("object_xref", 0)
    for mapping in mapped:
        for link in mapping.mapped_to:
            object_xref_id += 1
            records.object_xref.append(
                {
                    "object_xref_id": object_xref_id,
                    "ensembl_id": link.ensembl_id,
                    "ensembl_object_type": link.ensembl_object_type,
                    "xref_id": xref_ids[mapping.coord_xref_id],
                    "linkage_annotation": None,
                    "analysis_id": analysis_id,
                }
            )

    summaries: Dict[str, str] = {}
    for mapping in unmapped:
        summaries.setdefault(mapping.reason_full, mapping.reason)
    reason_ids: Dict[str, int] = {}
    unmapped_reason_id = max_ids.get("unmapped_reason", 0)
    for full_description in sorted(summaries):
        reason_id = existing_reason_id(full_description)
        if reason_id is None:
            unmapped_reason_id += 1
            reason_id = unmapped_reason_id
        reason_ids[full_description] = reason_id
        records.unmapped_reason.append(
            {
                "unmapped_reason_id": reason_id,
                "summary_description": summaries[full_description],
                "full_description": full_description,
            }
        )

    unmapped_object_id = max_ids.get("unmapped_object", 0)
    for mapping in unmapped:
        unmapped_object_id += 1
        records.unmapped_object.append(
            {
                "unmapped_object_id": unmapped_object_id,
                "type": "xref",
                "analysis_id": analysis_id,
                "external_db_id": mapping.external_db_id,
                "identifier": mapping.accession,
                "unmapped_reason_id": reason_ids[mapping.reason_full],
                "query_score": (
                    None if mapping.score is None else float(f"{mapping.score:.3f}")
                ),
                "target_score": None,
                "ensembl_id": mapping.ensembl_id,
                "ensembl_object_type": (
                    "Transcript" if mapping.ensembl_id is not None else None
                ),
                "parent": None,
            }
        )
    return records


def _format_value(column: str, value: Any) -> str:
    if value is None:
        return NULL
    if column == "query_score":
        return f"{value:.3f}"
    return str(value)


def write_records(records: MappingRecords, output_dir: Path) -> Dict[str, Path]:
    """Write one tab separated file per table.

    Args:
        records: Rows to write.
        output_dir: Existing, writable directory.

    Returns:
        The path written for each table.

    Raises:
        OSError: when a file cannot be written.
    """
    logger = logging.getLogger("coordinate_mapper")
    paths = {}
    for table, filename in DUMP_FILES.items():
        path = Path(output_dir) / filename
        logger.info("Dumping for '%s' to '%s'", table, path)
        try:
            with open(path, "w", encoding="utf-8") as dumpfile:
                for row in records.table(table):
                    values = [_format_value(column, row[column]) for column in COLUMNS[table]]
                    dumpfile.write("\t".join(values) + "\n")
        except OSError as err:
            raise OSError(f"Can not write '{path}' for table '{table}': {err}") from err
        logger.info("Dumping for '%s' done (%d rows)", table, len(records.table(table)))
        paths[table] = path
    return paths
