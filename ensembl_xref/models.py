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

""" Transcript models compared by the coordinate mapper.

    Ensembl genes, transcripts and exons come from a core database, external
    transcripts from the coordinate_xref table of an xref database. All
    coordinates are chromosome-relative, 1-based and inclusive.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Exon:
    start: int
    end: int
    coding_start: Optional[int] = None
    coding_end: Optional[int] = None

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def is_coding(self) -> bool:
        return self.coding_start is not None and self.coding_end is not None

    @property
    def coding_length(self) -> int:
        if not self.is_coding:
            return 0
        return self.coding_end - self.coding_start + 1


@dataclass
class EnsemblTranscript:
    transcript_id: int
    stable_id: str
    start: int
    end: int
    strand: int
    exons: List[Exon] = field(default_factory=list)
    is_coding: bool = False


@dataclass
class EnsemblGene:
    gene_id: int
    stable_id: str
    chromosome: str
    start: int
    end: int
    strand: int
    transcripts: List[EnsemblTranscript] = field(default_factory=list)


def coding_exons(
    exons: List[Tuple[int, int]], coding_start: Optional[int], coding_end: Optional[int]
) -> List[Exon]:
    """Build exons with their coding sub-range.

    Args:
        exons: (start, end) pairs.
        coding_start: Lowest genomic coding position, None if non-coding.
        coding_end: Highest genomic coding position, None if non-coding.

    Returns:
        Exons where the coding sub-range is the intersection of the exon with
        [coding_start, coding_end], left unset when they do not overlap.
    """
    built = []
    for start, end in exons:
        if coding_start is None or coding_end is None:
            built.append(Exon(start, end))
            continue
        low = max(start, coding_start)
        high = min(end, coding_end)
        if low <= high:
            built.append(Exon(start, end, low, high))
        else:
            built.append(Exon(start, end))
    return built


def _split_positions(value: Any, column: str, coord_xref_id: int) -> List[int]:
    if value is None:
        return []
    try:
        return [int(pos) for pos in str(value).split(",") if pos.strip()]
    except ValueError as err:
        raise ValueError(
            f"Malformed {column} for coord_xref_id {coord_xref_id}: {value!r}"
        ) from err


@dataclass
class CoordinateXref:
    """An external transcript model stored in the coordinate_xref table."""

    coord_xref_id: int
    accession: str
    chromosome: str
    strand: int
    tx_start: int
    tx_end: int
    exon_starts: List[int]
    exon_ends: List[int]
    cds_start: Optional[int] = None
    cds_end: Optional[int] = None
    source_id: Optional[int] = None

    def __post_init__(self) -> None:
        if len(self.exon_starts) != len(self.exon_ends):
            raise ValueError(
                f"coord_xref_id {self.coord_xref_id} ({self.accession}) has "
                f"{len(self.exon_starts)} exon starts but {len(self.exon_ends)} exon ends"
            )
        for idx, (start, end) in enumerate(zip(self.exon_starts, self.exon_ends), 1):
            if start > end:
                raise ValueError(
                    f"coord_xref_id {self.coord_xref_id} ({self.accession}) has "
                    f"exon {idx} with start {start} > end {end}"
                )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CoordinateXref":
        """Build a model from a coordinate_xref row.

        Args:
            row: Mapping with the coordinate_xref column names.

        Returns:
            The external transcript.

        Raises:
            ValueError: when the exon lists are malformed or differ in length.
        """
        coord_xref_id = row["coord_xref_id"]
        return cls(
            coord_xref_id=coord_xref_id,
            accession=row["accession"],
            chromosome=row.get("chromosome"),
            strand=row.get("strand"),
            tx_start=row["txStart"],
            tx_end=row["txEnd"],
            cds_start=row["cdsStart"],
            cds_end=row["cdsEnd"],
            exon_starts=_split_positions(row["exonStarts"], "exonStarts", coord_xref_id),
            exon_ends=_split_positions(row["exonEnds"], "exonEnds", coord_xref_id),
            source_id=row.get("source_id"),
        )

    @property
    def is_coding(self) -> bool:
        return self.cds_start is not None and self.cds_end is not None

    @property
    def exon_count(self) -> int:
        return len(self.exon_starts)

    def exons(self) -> List[Tuple[int, int]]:
        return list(zip(self.exon_starts, self.exon_ends))
