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

""" Access to the coordinate_xref table of an xref database.

    The table holds external transcript models, one row per transcript, with
    the exon boundaries stored as comma separated lists.
"""

from typing import Any, Dict, Iterable, List
import logging
import sqlalchemy as db
from sqlalchemy.engine import Connection, Engine  # Needed for typing

from .models import CoordinateXref
from .schema import coordinate_xref

COORDINATE_COLUMNS = (
    "SELECT coord_xref_id, source_id, accession, chromosome, strand,"
    + " txStart, txEnd, cdsStart, cdsEnd, exonStarts, exonEnds"
    + " FROM coordinate_xref"
)


class XrefDatabase:
    """Xref database holding the external transcripts to map."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.logger = logging.getLogger("coordinate_mapper")

    def fetch_species_xrefs(self, species_id: int) -> List[Dict[str, Any]]:
        """Retrieve the id and accession of every external transcript of a species."""
        with self.engine.connect() as connection:
            rows = connection.execute(
                db.text(
                    "SELECT coord_xref_id, source_id, accession"
                    + " FROM coordinate_xref"
                    + " WHERE species_id = :species_id"
                    + " ORDER BY coord_xref_id"
                ),
                {"species_id": species_id},
            ).mappings()
            return [dict(row) for row in rows]

    def fetch_overlapping(  # pylint: disable=too-many-arguments
        self,
        connection: Connection,
        species_id: int,
        chromosome: str,
        strand: int,
        start: int,
        end: int,
    ) -> List[CoordinateXref]:
        """Retrieve the external transcripts overlapping a region.

        A transcript overlaps when its start or end lies within the region or
        when it contains the whole region.

        Args:
            connection: Open connection to the xref database.
            species_id: Species of the external transcripts.
            chromosome: Chromosome name, without any 'chr' prefix.
            strand: 1 or -1.
            start: First position of the region.
            end: Last position of the region.

        Returns:
            The transcripts ordered by accession.

        Raises:
            ValueError: when a row has malformed exon lists.
        """
        rows = connection.execute(
            db.text(
                COORDINATE_COLUMNS
                + " WHERE species_id = :species_id"
                + " AND chromosome = :chromosome AND strand = :strand"
                + " AND ((txStart BETWEEN :start AND :end)"
                + " OR (txEnd BETWEEN :start AND :end)"
                + " OR (txStart <= :start AND txEnd >= :end))"
                + " ORDER BY accession, coord_xref_id"
            ),
            {
                "species_id": species_id,
                "chromosome": chromosome,
                "strand": strand,
                "start": start,
                "end": end,
            },
        ).mappings()
        return [CoordinateXref.from_row(row) for row in rows]

    def add_coordinate_xrefs(
        self, rows: Iterable[Dict[str, Any]], batch_size: int = 500
    ) -> int:
        """Store external transcripts in the coordinate_xref table.

        Args:
            rows: Dictionaries keyed by coordinate_xref column names.
            batch_size: The number of rows of data for each insert.

        Returns:
            The number of rows stored.
        """
        count = 0
        values = []
        with self.engine.begin() as connection:
            for row in rows:
                values.append(row)
                count += 1
                if len(values) == batch_size:
                    connection.execute(coordinate_xref.insert(), values)
                    self.logger.debug("Stored %d coordinate xrefs", count)
                    values = []
            if values:
                connection.execute(coordinate_xref.insert(), values)
        return count
