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

""" Exon overlap score between an Ensembl transcript and an external one.

    The external exons are measured against the Ensembl exons and the other
    way round. Agreement of the Ensembl side is weighted ENSEMBL_WEIGHT times
    the external side, and agreement on coding exon structure is weighted
    CODING_WEIGHT times whole exon agreement.
"""

from .models import CoordinateXref, EnsemblTranscript
from .range_registry import RangeRegistry

CODING_WEIGHT = 2
ENSEMBL_WEIGHT = 3

EXON_BAND = "exon"
CODING_BAND = "coding"


def register_transcript(transcript: EnsemblTranscript) -> RangeRegistry:
    """Register the exons of an Ensembl transcript.

    Args:
        transcript: Ensembl transcript.

    Returns:
        A RangeRegistry with every exon under "exon" and, for coding
        transcripts, every coding sub-range under "coding".
    """
    registry = RangeRegistry()
    for exon in transcript.exons:
        registry.check_and_register(EXON_BAND, exon.start, exon.end)
        if transcript.is_coding and exon.is_coding:
            registry.check_and_register(CODING_BAND, exon.coding_start, exon.coding_end)
    return registry


def score_transcript_pair(  # pylint: disable=too-many-locals
    transcript: EnsemblTranscript,
    ensembl_registry: RangeRegistry,
    xref: CoordinateXref,
) -> float:
    """Score the exon structure of an external transcript against an Ensembl one.

    Args:
        transcript: Ensembl transcript.
        ensembl_registry: Registry built by register_transcript for transcript.
        xref: External transcript.

    Returns:
        The weighted match score, between 0 and 1.
    """
    xref_registry = RangeRegistry()

    exon_match = 0.0
    coding_match = 0.0
    coding_count = 0
    for start, end in xref.exons():
        overlap = ensembl_registry.overlap_size(EXON_BAND, start, end)
        exon_match += overlap / (end - start + 1)
        xref_registry.check_and_register(EXON_BAND, start, end)

        if not xref.is_coding:
            continue
        coding_start = max(start, xref.cds_start)
        coding_end = min(end, xref.cds_end)
        if coding_start <= coding_end:
            overlap = ensembl_registry.overlap_size(CODING_BAND, coding_start, coding_end)
            coding_match += overlap / (coding_end - coding_start + 1)
            xref_registry.check_and_register(CODING_BAND, coding_start, coding_end)
            coding_count += 1

    rexon_match = 0.0
    rcoding_match = 0.0
    rcoding_count = 0
    for exon in transcript.exons:
        overlap = xref_registry.overlap_size(EXON_BAND, exon.start, exon.end)
        rexon_match += overlap / exon.length
        if transcript.is_coding and exon.is_coding:
            overlap = xref_registry.overlap_size(
                CODING_BAND, exon.coding_start, exon.coding_end
            )
            rcoding_match += overlap / exon.coding_length
            rcoding_count += 1

    matched = (exon_match + ENSEMBL_WEIGHT * rexon_match) + CODING_WEIGHT * (
        coding_match + ENSEMBL_WEIGHT * rcoding_match
    )
    total = (xref.exon_count + ENSEMBL_WEIGHT * len(transcript.exons)) + CODING_WEIGHT * (
        coding_count + ENSEMBL_WEIGHT * rcoding_count
    )
    if total == 0:
        return 0.0
    return matched / total
