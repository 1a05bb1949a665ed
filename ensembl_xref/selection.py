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

""" Winner selection and the mapped/unmapped bookkeeping of a mapping run.

    Every external transcript starts unmapped with the reason "No overlap".
    Scoring against an Ensembl transcript either confirms it as a mapped
    winner or refines its unmapped reason. A mapped external transcript never
    goes back to unmapped.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

TRANSCRIPT_SCORE_THRESHOLD = 0.75
TIE_PRECISION = 3

NO_OVERLAP = "No overlap"
NO_OVERLAP_FULL = "No coordinate overlap with any Ensembl transcript"
NOT_BEST_MATCH = "Was not best match"
NOT_BEST_MATCH_FULL = "Did not top best transcript match score (%.2f)"
BELOW_THRESHOLD = "Did not meet threshold"
BELOW_THRESHOLD_FULL = "Match score for transcript lower than threshold (%.2f)"


@dataclass
class ObjectLink:
    ensembl_id: int
    ensembl_object_type: str = "Transcript"


@dataclass
class XrefMapping:
    """Mapping status of one external transcript."""

    coord_xref_id: int
    accession: str
    external_db_id: int
    reason: Optional[str] = NO_OVERLAP
    reason_full: Optional[str] = NO_OVERLAP_FULL
    score: Optional[float] = None
    ensembl_id: Optional[int] = None
    mapped_to: List[ObjectLink] = field(default_factory=list)

    def record_score(self, score: float, ensembl_id: int) -> None:
        """Keep the best score seen so far and the transcript it came from."""
        if self.score is None or score > self.score:
            self.score = score
            self.ensembl_id = ensembl_id


def scores_tie(score: float, best_score: float, places: int = TIE_PRECISION) -> bool:
    """True when both scores are equal once rounded to the given decimals."""
    return round(score, places) == round(best_score, places)


class MappingState:
    """Mapped and unmapped external transcripts of one mapping run."""

    def __init__(self, external_db_id: int) -> None:
        self.external_db_id = external_db_id
        self.mapped: Dict[int, XrefMapping] = {}
        self.unmapped: Dict[int, XrefMapping] = {}
        # gene dbID -> (coord_xref_id, score) of the best confirmed candidate
        self.gene_candidates: Dict[int, Tuple[int, float]] = {}

    def add_xref(self, coord_xref_id: int, accession: str) -> None:
        """Start tracking an external transcript as unmapped with no overlap."""
        self.unmapped[coord_xref_id] = XrefMapping(
            coord_xref_id, accession, self.external_db_id
        )

    def confirm(
        self, coord_xref_id: int, ensembl_id: int, ensembl_object_type: str = "Transcript"
    ) -> None:
        """Record a winning match, moving the external transcript to mapped."""
        if coord_xref_id in self.unmapped:
            mapping = self.unmapped.pop(coord_xref_id)
            mapping.reason = None
            mapping.reason_full = None
            self.mapped[coord_xref_id] = mapping
        self.mapped[coord_xref_id].mapped_to.append(
            ObjectLink(ensembl_id, ensembl_object_type)
        )

    def mark_not_best(
        self, coord_xref_id: int, score: float, best_score: float, ensembl_id: int
    ) -> None:
        mapping = self.unmapped.get(coord_xref_id)
        if mapping is None:
            return
        mapping.reason = NOT_BEST_MATCH
        mapping.reason_full = NOT_BEST_MATCH_FULL % best_score
        mapping.record_score(score, ensembl_id)

    def mark_below_threshold(
        self, coord_xref_id: int, score: float, threshold: float, ensembl_id: int
    ) -> None:
        mapping = self.unmapped.get(coord_xref_id)
        # the more specific "was not best match" is kept
        if mapping is None or mapping.reason == NOT_BEST_MATCH:
            return
        mapping.reason = BELOW_THRESHOLD
        mapping.reason_full = BELOW_THRESHOLD_FULL % threshold
        mapping.record_score(score, ensembl_id)

    def propose_gene_candidate(self, gene_id: int, coord_xref_id: int, score: float) -> None:
        current = self.gene_candidates.get(gene_id)
        if current is None or current[1] < score:
            self.gene_candidates[gene_id] = (coord_xref_id, score)

    def check_consistency(self) -> None:
        """Ensure no external transcript is both mapped and unmapped.

        Raises:
            RuntimeError: when an id is present in both sets.
        """
        both = set(self.mapped).intersection(self.unmapped)
        if both:
            raise RuntimeError(
                f"coord_xref_ids both mapped and unmapped: {sorted(both)}"
            )


def select_winners(  # pylint: disable=too-many-arguments
    state: MappingState,
    transcript_result: Dict[int, float],
    ensembl_id: int,
    gene_id: Optional[int] = None,
    threshold: float = TRANSCRIPT_SCORE_THRESHOLD,
) -> List[int]:
    """Apply the threshold and tie rules to the scores of one Ensembl transcript.

    Args:
        state: Mapping state updated in place.
        transcript_result: Best score per coord_xref_id for this transcript.
        ensembl_id: dbID of the Ensembl transcript.
        gene_id: dbID of the gene owning the transcript, for the gene candidates.
        threshold: A score must be strictly greater to be a winner.

    Returns:
        The coord_xref_ids confirmed as winners for this transcript.
    """
    winners = []
    best_score = None
    ranked = sorted(transcript_result.items(), key=lambda item: (-item[1], item[0]))
    for coord_xref_id, score in ranked:
        if score > threshold:
            if best_score is None:
                best_score = score
            if scores_tie(score, best_score):
                state.confirm(coord_xref_id, ensembl_id)
                winners.append(coord_xref_id)
                if gene_id is not None:
                    state.propose_gene_candidate(gene_id, coord_xref_id, score)
            else:
                state.mark_not_best(coord_xref_id, score, best_score, ensembl_id)
        else:
            state.mark_below_threshold(coord_xref_id, score, threshold, ensembl_id)
    return winners
