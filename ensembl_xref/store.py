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

""" Storage of coordinate xrefs in an Ensembl core database.

    The upload replaces every xref, object_xref, unmapped_object and unused
    unmapped_reason row of an external database in a single transaction.
"""

from typing import Dict, List, Optional, Set
import logging
import sqlalchemy as db
from sqlalchemy.engine import Connection, Engine  # Needed for typing
from sqlalchemy.exc import SQLAlchemyError

from .emission import MappingRecords
from .schema import ID_COLUMNS, TABLES, UPLOAD_TABLES, analysis, unmapped_reason


class XrefStore:
    """Xref related tables of a core database."""

    def __init__(self, engine: Engine, batch_size: int = 500) -> None:
        self.engine = engine
        self.batch_size = batch_size
        self.logger = logging.getLogger("coordinate_mapper")

    def max_id(self, table_name: str) -> int:
        """Last used id of an xref table, 0 when the table is empty."""
        table = TABLES[table_name]
        column = table.columns[ID_COLUMNS[table_name]]
        with self.engine.connect() as connection:
            value = connection.execute(db.select(db.func.max(column))).scalar()
        return value or 0

    def max_ids(self) -> Dict[str, int]:
        max_ids = {name: self.max_id(name) for name in ID_COLUMNS}
        for name, value in max_ids.items():
            self.logger.info("Last used %-19s is %d", ID_COLUMNS[name], value)
        return max_ids

    def unmapped_reason_id(self, full_description: str) -> Optional[int]:
        """dbID of the unmapped reason with this full description, if stored."""
        with self.engine.connect() as connection:
            return connection.execute(
                db.select(unmapped_reason.c.unmapped_reason_id).where(
                    unmapped_reason.c.full_description == full_description
                )
            ).scalar()

    def fetch_or_store_analysis(  # pylint: disable=too-many-arguments
        self,
        logic_name: str,
        parameters: str,
        program: str,
        program_file: str,
        update: bool = False,
    ) -> int:
        """Fetch the analysis with this logic name, storing it when missing.

        Args:
            logic_name: Logic name of the analysis.
            parameters: Parameter string of the analysis.
            program: Program name stored with a new analysis.
            program_file: Program file stored with a new analysis.
            update: Replace the stored parameters when they differ.

        Returns:
            The analysis dbID.
        """
        with self.engine.begin() as connection:
            row = connection.execute(
                db.select(analysis.c.analysis_id, analysis.c.parameters).where(
                    analysis.c.logic_name == logic_name
                )
            ).first()
            if row is None:
                result = connection.execute(
                    analysis.insert().values(
                        created=db.func.now(),
                        logic_name=logic_name,
                        program=program,
                        program_file=program_file,
                        parameters=parameters,
                    )
                )
                analysis_id = result.inserted_primary_key[0]
                self.logger.info("Stored analysis '%s' (%d)", logic_name, analysis_id)
                return analysis_id
            if row.parameters != parameters and update:
                connection.execute(
                    analysis.update()
                    .where(analysis.c.analysis_id == row.analysis_id)
                    .values(parameters=parameters)
                )
                self.logger.info(
                    "Updated parameters of analysis '%s' to '%s'", logic_name, parameters
                )
            return row.analysis_id

    def _delete_previous(self, connection: Connection, external_db_id: int) -> None:
        params = {"external_db_id": external_db_id}
        removed = connection.execute(
            db.text(
                "DELETE FROM object_xref WHERE xref_id IN"
                + " (SELECT xref_id FROM xref WHERE external_db_id = :external_db_id)"
            ),
            params,
        ).rowcount
        self.logger.info("Removed %d rows from table 'object_xref'", removed)

        # reasons are shared between external databases
        stale_reasons = [
            row[0]
            for row in connection.execute(
                db.text(
                    "SELECT DISTINCT unmapped_reason_id FROM unmapped_object"
                    + " WHERE external_db_id = :external_db_id"
                    + " AND unmapped_reason_id NOT IN"
                    + " (SELECT unmapped_reason_id FROM unmapped_object"
                    + " WHERE external_db_id IS NULL OR external_db_id <> :external_db_id)"
                ),
                params,
            )
        ]
        removed = connection.execute(
            db.text("DELETE FROM unmapped_object WHERE external_db_id = :external_db_id"),
            params,
        ).rowcount
        self.logger.info("Removed %d rows from table 'unmapped_object'", removed)

        if stale_reasons:
            removed = connection.execute(
                unmapped_reason.delete().where(
                    unmapped_reason.c.unmapped_reason_id.in_(stale_reasons)
                )
            ).rowcount
            self.logger.info("Removed %d rows from table 'unmapped_reason'", removed)

        removed = connection.execute(
            db.text("DELETE FROM xref WHERE external_db_id = :external_db_id"), params
        ).rowcount
        self.logger.info("Removed %d rows from table 'xref'", removed)

    def _stored_reason_ids(self, connection: Connection, reason_ids: List[int]) -> Set[int]:
        if not reason_ids:
            return set()
        rows = connection.execute(
            db.select(unmapped_reason.c.unmapped_reason_id).where(
                unmapped_reason.c.unmapped_reason_id.in_(reason_ids)
            )
        )
        return {row[0] for row in rows}

    def _insert(self, connection: Connection, table_name: str, rows: List[Dict]) -> None:
        insert = TABLES[table_name].insert()
        for offset in range(0, len(rows), self.batch_size):
            connection.execute(insert, rows[offset : offset + self.batch_size])
        self.logger.info("Uploading for '%s' done (%d rows)", table_name, len(rows))

    def upload(self, records: MappingRecords, external_db_id: int) -> None:
        """Replace the stored coordinate xrefs of an external database.

        Previous rows are deleted children first, new rows are inserted parents
        first, all in one transaction.

        Args:
            records: Rows built for the xref tables.
            external_db_id: External database the rows belong to.

        Raises:
            RuntimeError: when a delete or insert fails, after rolling back.
        """
        step = "delete"
        try:
            with self.engine.begin() as connection:
                self.logger.info(
                    "Removing old data (external_db_id = '%d')", external_db_id
                )
                self._delete_previous(connection, external_db_id)
                for table_name in UPLOAD_TABLES:
                    step = table_name
                    rows = records.table(table_name)
                    if table_name == "unmapped_reason":
                        stored = self._stored_reason_ids(
                            connection, [row["unmapped_reason_id"] for row in rows]
                        )
                        rows = [row for row in rows if row["unmapped_reason_id"] not in stored]
                    self._insert(connection, table_name, rows)
        except SQLAlchemyError as err:
            raise RuntimeError(
                f"Upload of coordinate xrefs for external_db_id {external_db_id}"
                + f" failed at '{step}': {err}"
            ) from err
