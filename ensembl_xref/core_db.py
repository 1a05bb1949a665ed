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

""" Read access to the genes, transcripts and exons of an Ensembl core database."""

from typing import Dict, List, Optional, Tuple
import logging
import sqlalchemy as db
from sqlalchemy.engine import Engine  # Needed for typing

from .models import EnsemblGene, EnsemblTranscript, coding_exons


def get_engine(url: str) -> Engine:
    """Create SQLAlchemy engine.

    Args:
        url: URI to the database, 'mysql:' URIs are switched to 'mysql+pymysql:'.

    Returns:
        SQLAlchemy engine.
    """
    if url.startswith("mysql:"):
        url = url.replace("mysql:", "mysql+pymysql:", 1)
    return db.create_engine(url)


def coding_region(
    exons: Dict[int, Tuple[int, int]],
    strand: int,
    start_exon_id: int,
    seq_start: int,
    end_exon_id: int,
    seq_end: int,
) -> Tuple[int, int]:
    """Genomic bounds of a translation.

    Args:
        exons: (start, end) of the transcript exons keyed by exon dbID.
        strand: Strand of the transcript, 1 or -1.
        start_exon_id: Exon holding the start codon.
        seq_start: 1-based offset of the start codon in that exon, in
            transcript orientation.
        end_exon_id: Exon holding the stop codon.
        seq_end: 1-based offset of the last coding base in that exon.

    Returns:
        Lowest and highest genomic coding position.
    """
    if strand >= 0:
        return (
            exons[start_exon_id][0] + seq_start - 1,
            exons[end_exon_id][0] + seq_end - 1,
        )
    return (
        exons[end_exon_id][1] - seq_end + 1,
        exons[start_exon_id][1] - seq_start + 1,
    )


class CoreDatabase:
    """Ensembl core database holding the genes to map onto."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.logger = logging.getLogger("coordinate_mapper")

    def fetch_species(self) -> str:
        """Production name of the species, e.g. homo_sapiens.

        Raises:
            ValueError: when the meta table has no species.production_name.
        """
        with self.engine.connect() as connection:
            name = connection.execute(
                db.text(
                    "SELECT meta_value FROM meta"
                    + " WHERE meta_key = 'species.production_name'"
                )
            ).scalar()
        if name is None:
            raise ValueError("No species.production_name in the core database meta table")
        return name

    def fetch_chromosomes(self) -> List[Tuple[int, str]]:
        """Retrieve the seq_region dbIDs and names of the chromosomes."""
        with self.engine.connect() as connection:
            rows = connection.execute(
                db.text(
                    "SELECT sr.seq_region_id, sr.name"
                    + " FROM seq_region sr, coord_system cs"
                    + " WHERE sr.coord_system_id = cs.coord_system_id"
                    + " AND cs.name = 'chromosome'"
                    + " AND cs.attrib LIKE '%default_version%'"
                    + " ORDER BY sr.name"
                )
            )
            return [(row[0], row[1]) for row in rows]

    def fetch_genes(self, seq_region_id: int, chromosome: str) -> List[EnsemblGene]:
        """Retrieve the current genes of a chromosome with transcripts and exons.

        Args:
            seq_region_id: dbID of the chromosome.
            chromosome: Name of the chromosome.

        Returns:
            Genes ordered by start, transcripts carrying exons in rank order and
            the coding sub-range of each exon when translated.
        """
        with self.engine.connect() as connection:
            rows = connection.execute(
                db.text(
                    "SELECT g.gene_id, g.stable_id AS gene_stable_id,"
                    + " g.seq_region_start AS gene_start, g.seq_region_end AS gene_end,"
                    + " g.seq_region_strand AS gene_strand,"
                    + " t.transcript_id, t.stable_id AS transcript_stable_id,"
                    + " t.seq_region_start AS transcript_start,"
                    + " t.seq_region_end AS transcript_end,"
                    + " t.seq_region_strand AS transcript_strand,"
                    + " e.exon_id, e.seq_region_start AS exon_start,"
                    + " e.seq_region_end AS exon_end"
                    + " FROM gene g, transcript t, exon_transcript et, exon e"
                    + " WHERE g.seq_region_id = :seq_region_id"
                    + " AND g.is_current = 1"
                    + " AND t.gene_id = g.gene_id"
                    + " AND et.transcript_id = t.transcript_id"
                    + " AND e.exon_id = et.exon_id"
                    + " ORDER BY g.seq_region_start, g.gene_id, t.transcript_id, et.rank"
                ),
                {"seq_region_id": seq_region_id},
            ).mappings().all()
            translations = connection.execute(
                db.text(
                    "SELECT tl.transcript_id, tl.seq_start, tl.start_exon_id,"
                    + " tl.seq_end, tl.end_exon_id"
                    + " FROM translation tl, transcript t"
                    + " WHERE tl.transcript_id = t.transcript_id"
                    + " AND t.seq_region_id = :seq_region_id"
                ),
                {"seq_region_id": seq_region_id},
            ).mappings().all()

        translation_by_transcript = {row["transcript_id"]: row for row in translations}
        genes: Dict[int, EnsemblGene] = {}
        exons: Dict[int, Dict[int, Tuple[int, int]]] = {}
        transcripts: Dict[int, EnsemblTranscript] = {}
        for row in rows:
            gene_id = row["gene_id"]
            if gene_id not in genes:
                genes[gene_id] = EnsemblGene(
                    gene_id=gene_id,
                    stable_id=row["gene_stable_id"],
                    chromosome=chromosome,
                    start=row["gene_start"],
                    end=row["gene_end"],
                    strand=row["gene_strand"],
                )
            transcript_id = row["transcript_id"]
            if transcript_id not in transcripts:
                transcripts[transcript_id] = EnsemblTranscript(
                    transcript_id=transcript_id,
                    stable_id=row["transcript_stable_id"],
                    start=row["transcript_start"],
                    end=row["transcript_end"],
                    strand=row["transcript_strand"],
                    is_coding=transcript_id in translation_by_transcript,
                )
                genes[gene_id].transcripts.append(transcripts[transcript_id])
                exons[transcript_id] = {}
            exons[transcript_id][row["exon_id"]] = (row["exon_start"], row["exon_end"])

        for transcript_id, ensembl_transcript in transcripts.items():
            coding_start: Optional[int] = None
            coding_end: Optional[int] = None
            tl_row = translation_by_transcript.get(transcript_id)
            if tl_row is not None:
                coding_start, coding_end = coding_region(
                    exons[transcript_id],
                    ensembl_transcript.strand,
                    tl_row["start_exon_id"],
                    tl_row["seq_start"],
                    tl_row["end_exon_id"],
                    tl_row["seq_end"],
                )
            # dicts keep insertion order, which is the exon rank here
            ensembl_transcript.exons = coding_exons(
                list(exons[transcript_id].values()), coding_start, coding_end
            )

        self.logger.debug(
            "Fetched %d genes and %d transcripts on chromosome '%s'",
            len(genes),
            len(transcripts),
            chromosome,
        )
        return list(genes.values())
