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

""" Shared fixtures: SQLite core and xref databases.

    The human core database holds one coding transcript, ENST00000217347, on
    chromosome 21 with three exons:
        1001-1100, 2001-2100, 3001-3100
    and a translation from 1050 to 3050.

    The xref database holds three RefSeq transcripts:
        NM_001008407  elsewhere on chromosome 21, no overlap
        NM_001008408  a single non-coding exon 1001-1100, scores 4/28
        NM_001008409  the same exon structure and CDS, scores 1.0
"""

import pytest
import sqlalchemy as db

from .schema import core_metadata, xref_metadata

TRANSCRIPT_ID = 217347
GENE_ID = 101
SPECIES_ID = 9606


@pytest.fixture
def core_url(tmp_path):
    return f"sqlite:///{tmp_path / 'core.db'}"


@pytest.fixture
def xref_url(tmp_path):
    return f"sqlite:///{tmp_path / 'xref.db'}"


@pytest.fixture
def core_engine(core_url):
    engine = db.create_engine(core_url)
    core_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def xref_engine(xref_url):
    engine = db.create_engine(xref_url)
    xref_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def human_core(core_engine):
    tables = core_metadata.tables
    with core_engine.begin() as connection:
        connection.execute(
            tables["meta"].insert(),
            [
                {"meta_key": "species.production_name", "meta_value": "homo_sapiens"},
                {"meta_key": "species.taxonomy_id", "meta_value": "9606"},
            ],
        )
        connection.execute(
            tables["coord_system"].insert(),
            [
                {
                    "coord_system_id": 1,
                    "name": "chromosome",
                    "version": "GRCh38",
                    "rank": 1,
                    "attrib": "default_version",
                },
                {
                    "coord_system_id": 2,
                    "name": "scaffold",
                    "version": "GRCh38",
                    "rank": 2,
                    "attrib": "default_version",
                },
            ],
        )
        connection.execute(
            tables["seq_region"].insert(),
            [
                {"seq_region_id": 1, "name": "21", "coord_system_id": 1, "length": 46709983},
                {"seq_region_id": 2, "name": "KI270872.1", "coord_system_id": 2, "length": 161218},
            ],
        )
        connection.execute(
            tables["gene"].insert(),
            [
                {
                    "gene_id": GENE_ID,
                    "biotype": "protein_coding",
                    "seq_region_id": 1,
                    "seq_region_start": 1001,
                    "seq_region_end": 3100,
                    "seq_region_strand": 1,
                    "is_current": 1,
                    "stable_id": "ENSG00000101638",
                },
                {
                    "gene_id": GENE_ID + 1,
                    "biotype": "protein_coding",
                    "seq_region_id": 1,
                    "seq_region_start": 50001,
                    "seq_region_end": 50100,
                    "seq_region_strand": 1,
                    "is_current": 0,
                    "stable_id": "ENSG00000101639",
                },
            ],
        )
        connection.execute(
            tables["transcript"].insert(),
            [
                {
                    "transcript_id": TRANSCRIPT_ID,
                    "gene_id": GENE_ID,
                    "seq_region_id": 1,
                    "seq_region_start": 1001,
                    "seq_region_end": 3100,
                    "seq_region_strand": 1,
                    "biotype": "protein_coding",
                    "is_current": 1,
                    "stable_id": "ENST00000217347",
                },
                {
                    "transcript_id": TRANSCRIPT_ID + 1,
                    "gene_id": GENE_ID + 1,
                    "seq_region_id": 1,
                    "seq_region_start": 50001,
                    "seq_region_end": 50100,
                    "seq_region_strand": 1,
                    "biotype": "protein_coding",
                    "is_current": 0,
                    "stable_id": "ENST00000217348",
                },
            ],
        )
        connection.execute(
            tables["exon"].insert(),
            [
                {"exon_id": 11, "seq_region_id": 1, "seq_region_start": 1001,
                 "seq_region_end": 1100, "seq_region_strand": 1},
                {"exon_id": 12, "seq_region_id": 1, "seq_region_start": 2001,
                 "seq_region_end": 2100, "seq_region_strand": 1},
                {"exon_id": 13, "seq_region_id": 1, "seq_region_start": 3001,
                 "seq_region_end": 3100, "seq_region_strand": 1},
                {"exon_id": 14, "seq_region_id": 1, "seq_region_start": 50001,
                 "seq_region_end": 50100, "seq_region_strand": 1},
            ],
        )
        connection.execute(
            tables["exon_transcript"].insert(),
            [
                {"exon_id": 11, "transcript_id": TRANSCRIPT_ID, "rank": 1},
                {"exon_id": 12, "transcript_id": TRANSCRIPT_ID, "rank": 2},
                {"exon_id": 13, "transcript_id": TRANSCRIPT_ID, "rank": 3},
                {"exon_id": 14, "transcript_id": TRANSCRIPT_ID + 1, "rank": 1},
            ],
        )
        connection.execute(
            tables["translation"].insert(),
            {
                "translation_id": 1,
                "transcript_id": TRANSCRIPT_ID,
                "seq_start": 50,
                "start_exon_id": 11,
                "seq_end": 50,
                "end_exon_id": 13,
                "stable_id": "ENSP00000217347",
            },
        )
    return core_engine


def coordinate_row(coord_xref_id, accession, tx_start, tx_end, exon_starts, exon_ends,
                   cds_start=None, cds_end=None):
    return {
        "coord_xref_id": coord_xref_id,
        "source_id": 1,
        "species_id": SPECIES_ID,
        "accession": accession,
        "chromosome": "21",
        "strand": 1,
        "txStart": tx_start,
        "txEnd": tx_end,
        "cdsStart": cds_start,
        "cdsEnd": cds_end,
        "exonStarts": exon_starts,
        "exonEnds": exon_ends,
    }


@pytest.fixture
def ucsc_xrefs(xref_engine):
    with xref_engine.begin() as connection:
        connection.execute(
            xref_metadata.tables["coordinate_xref"].insert(),
            [
                coordinate_row(1, "NM_001008407.1", 80001, 80100, "80001", "80100"),
                coordinate_row(2, "NM_001008408.2", 1001, 1100, "1001", "1100"),
                coordinate_row(
                    3, "NM_001008409.3", 1001, 3100,
                    "1001,2001,3001", "1100,2100,3100", 1050, 3050,
                ),
            ],
        )
    return xref_engine
