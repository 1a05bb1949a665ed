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

""" Tables of the Ensembl core and xref databases used by the coordinate mapper.

    Only the columns read or written here are declared. The definitions are
    enough to create test databases with metadata.create_all().
"""

import sqlalchemy as db

core_metadata = db.MetaData()
xref_metadata = db.MetaData()

meta = db.Table(
    "meta",
    core_metadata,
    db.Column("meta_id", db.Integer, primary_key=True),
    db.Column("species_id", db.Integer, default=1),
    db.Column("meta_key", db.String(40), nullable=False),
    db.Column("meta_value", db.String(255), nullable=False),
)

coord_system = db.Table(
    "coord_system",
    core_metadata,
    db.Column("coord_system_id", db.Integer, primary_key=True),
    db.Column("species_id", db.Integer, default=1),
    db.Column("name", db.String(40), nullable=False),
    db.Column("version", db.String(255)),
    db.Column("rank", db.Integer, nullable=False),
    db.Column("attrib", db.String(255)),
)

seq_region = db.Table(
    "seq_region",
    core_metadata,
    db.Column("seq_region_id", db.Integer, primary_key=True),
    db.Column("name", db.String(255), nullable=False),
    db.Column("coord_system_id", db.Integer, nullable=False),
    db.Column("length", db.Integer, nullable=False),
)

gene = db.Table(
    "gene",
    core_metadata,
    db.Column("gene_id", db.Integer, primary_key=True),
    db.Column("biotype", db.String(40)),
    db.Column("seq_region_id", db.Integer, nullable=False),
    db.Column("seq_region_start", db.Integer, nullable=False),
    db.Column("seq_region_end", db.Integer, nullable=False),
    db.Column("seq_region_strand", db.Integer, nullable=False),
    db.Column("is_current", db.Integer, default=1),
    db.Column("stable_id", db.String(128)),
)

transcript = db.Table(
    "transcript",
    core_metadata,
    db.Column("transcript_id", db.Integer, primary_key=True),
    db.Column("gene_id", db.Integer),
    db.Column("seq_region_id", db.Integer, nullable=False),
    db.Column("seq_region_start", db.Integer, nullable=False),
    db.Column("seq_region_end", db.Integer, nullable=False),
    db.Column("seq_region_strand", db.Integer, nullable=False),
    db.Column("biotype", db.String(40)),
    db.Column("is_current", db.Integer, default=1),
    db.Column("stable_id", db.String(128)),
)

exon = db.Table(
    "exon",
    core_metadata,
    db.Column("exon_id", db.Integer, primary_key=True),
    db.Column("seq_region_id", db.Integer, nullable=False),
    db.Column("seq_region_start", db.Integer, nullable=False),
    db.Column("seq_region_end", db.Integer, nullable=False),
    db.Column("seq_region_strand", db.Integer, nullable=False),
    db.Column("phase", db.Integer, default=-1),
    db.Column("end_phase", db.Integer, default=-1),
    db.Column("stable_id", db.String(128)),
)

exon_transcript = db.Table(
    "exon_transcript",
    core_metadata,
    db.Column("exon_id", db.Integer, primary_key=True),
    db.Column("transcript_id", db.Integer, primary_key=True),
    db.Column("rank", db.Integer, primary_key=True),
)

translation = db.Table(
    "translation",
    core_metadata,
    db.Column("translation_id", db.Integer, primary_key=True),
    db.Column("transcript_id", db.Integer, nullable=False),
    db.Column("seq_start", db.Integer, nullable=False),
    db.Column("start_exon_id", db.Integer, nullable=False),
    db.Column("seq_end", db.Integer, nullable=False),
    db.Column("end_exon_id", db.Integer, nullable=False),
    db.Column("stable_id", db.String(128)),
)

analysis = db.Table(
    "analysis",
    core_metadata,
    db.Column("analysis_id", db.Integer, primary_key=True),
    db.Column("created", db.DateTime),
    db.Column("logic_name", db.String(128), nullable=False, unique=True),
    db.Column("program", db.String(80)),
    db.Column("program_file", db.String(80)),
    db.Column("parameters", db.Text),
    db.Column("module", db.String(80)),
)

xref = db.Table(
    "xref",
    core_metadata,
    db.Column("xref_id", db.Integer, primary_key=True, autoincrement=False),
    db.Column("external_db_id", db.Integer, nullable=False),
    db.Column("dbprimary_acc", db.String(512), nullable=False),
    db.Column("display_label", db.String(512), nullable=False),
    db.Column("version", db.String(10), nullable=False, default="0"),
    db.Column("description", db.Text),
    db.Column("info_type", db.String(20), nullable=False, default="NONE"),
    db.Column("info_text", db.String(255), nullable=False, default=""),
)

object_xref = db.Table(
    "object_xref",
    core_metadata,
    db.Column("object_xref_id", db.Integer, primary_key=True, autoincrement=False),
    db.Column("ensembl_id", db.Integer, nullable=False),
    db.Column("ensembl_object_type", db.String(20), nullable=False),
    db.Column("xref_id", db.Integer, db.ForeignKey("xref.xref_id"), nullable=False),
    db.Column("linkage_annotation", db.String(255)),
    db.Column("analysis_id", db.Integer),
)

unmapped_reason = db.Table(
    "unmapped_reason",
    core_metadata,
    db.Column("unmapped_reason_id", db.Integer, primary_key=True, autoincrement=False),
    db.Column("summary_description", db.String(255)),
    db.Column("full_description", db.String(255)),
)

unmapped_object = db.Table(
    "unmapped_object",
    core_metadata,
    db.Column("unmapped_object_id", db.Integer, primary_key=True, autoincrement=False),
    db.Column("type", db.String(10), nullable=False),
    db.Column("analysis_id", db.Integer, nullable=False),
    db.Column("external_db_id", db.Integer),
    db.Column("identifier", db.String(255), nullable=False),
    db.Column(
        "unmapped_reason_id",
        db.Integer,
        db.ForeignKey("unmapped_reason.unmapped_reason_id"),
        nullable=False,
    ),
    db.Column("query_score", db.Float),
    db.Column("target_score", db.Float),
    db.Column("ensembl_id", db.Integer, default=0),
    db.Column("ensembl_object_type", db.String(20)),
    db.Column("parent", db.String(255)),
)

coordinate_xref = db.Table(
    "coordinate_xref",
    xref_metadata,
    db.Column("coord_xref_id", db.Integer, primary_key=True),
    db.Column("source_id", db.Integer, nullable=False),
    db.Column("species_id", db.Integer, nullable=False),
    db.Column("accession", db.String(255), nullable=False),
    db.Column("chromosome", db.String(255), nullable=False),
    db.Column("strand", db.Integer, nullable=False),
    db.Column("txStart", db.Integer, nullable=False),
    db.Column("txEnd", db.Integer, nullable=False),
    db.Column("cdsStart", db.Integer),
    db.Column("cdsEnd", db.Integer),
    db.Column("exonStarts", db.Text, nullable=False),
    db.Column("exonEnds", db.Text, nullable=False),
)

# dump/upload order of the mapped tables, parents before children
UPLOAD_TABLES = ("unmapped_reason", "xref", "object_xref", "unmapped_object")

ID_COLUMNS = {
    "xref": "xref_id",
    "object_xref": "object_xref_id",
    "unmapped_reason": "unmapped_reason_id",
    "unmapped_object": "unmapped_object_id",
}

TABLES = {
    "xref": xref,
    "object_xref": object_xref,
    "unmapped_reason": unmapped_reason,
    "unmapped_object": unmapped_object,
}
