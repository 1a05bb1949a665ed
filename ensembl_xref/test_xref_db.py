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

"""Tests for the xref database adaptor and the CoordinateXref model."""

import pytest

from ensembl_xref.models import CoordinateXref
from ensembl_xref.ucsc_parser import convert_row
from ensembl_xref.xref_db import XrefDatabase


def test_fetch_species_xrefs(ucsc_xrefs):
    rows = XrefDatabase(ucsc_xrefs).fetch_species_xrefs(9606)
    assert [(row["coord_xref_id"], row["accession"]) for row in rows] == [
        (1, "NM_001008407.1"),
        (2, "NM_001008408.2"),
        (3, "NM_001008409.3"),
    ]
    assert XrefDatabase(ucsc_xrefs).fetch_species_xrefs(10090) == []


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (1001, 3100, [2, 3]),
        (2001, 2100, [3]),
        (1050, 1060, [2, 3]),
        (3100, 5000, [3]),
        (4000, 5000, []),
    ],
)
def test_fetch_overlapping(ucsc_xrefs, start, end, expected):
    xref = XrefDatabase(ucsc_xrefs)
    with ucsc_xrefs.connect() as connection:
        found = xref.fetch_overlapping(connection, 9606, "21", 1, start, end)
    assert [candidate.coord_xref_id for candidate in found] == expected


def test_fetch_overlapping_other_strand(ucsc_xrefs):
    xref = XrefDatabase(ucsc_xrefs)
    with ucsc_xrefs.connect() as connection:
        assert xref.fetch_overlapping(connection, 9606, "21", -1, 1001, 3100) == []


def test_fetch_overlapping_builds_models(ucsc_xrefs):
    xref = XrefDatabase(ucsc_xrefs)
    with ucsc_xrefs.connect() as connection:
        non_coding, coding = xref.fetch_overlapping(connection, 9606, "21", 1, 1001, 3100)
    assert not non_coding.is_coding
    assert coding.is_coding
    assert coding.exons() == [(1001, 1100), (2001, 2100), (3001, 3100)]
    assert (coding.cds_start, coding.cds_end) == (1050, 3050)
    assert coding.source_id == 1


def test_add_coordinate_xrefs(xref_engine):
    rows = [
        {
            "source_id": 1,
            "species_id": 9606,
            "accession": f"NM_{idx}",
            "chromosome": "21",
            "strand": 1,
            "txStart": idx * 100 + 1,
            "txEnd": idx * 100 + 50,
            "cdsStart": None,
            "cdsEnd": None,
            "exonStarts": str(idx * 100 + 1),
            "exonEnds": str(idx * 100 + 50),
        }
        for idx in range(7)
    ]
    xref = XrefDatabase(xref_engine)
    assert xref.add_coordinate_xrefs(iter(rows), batch_size=3) == 7
    assert len(xref.fetch_species_xrefs(9606)) == 7


def test_mismatched_exon_lists():
    with pytest.raises(ValueError, match="coord_xref_id 5"):
        CoordinateXref(5, "NM_5", "21", 1, 1, 100, [1, 50], [20])


def test_exon_start_after_end():
    message = r"coord_xref_id 8 \(NM_8\) has exon 2 with start 1051 > end 1050"
    with pytest.raises(ValueError, match=message):
        CoordinateXref(8, "NM_8", "21", 1, 1001, 1050, [1001, 1051], [1050, 1050])


def test_zero_length_ucsc_exon_is_rejected():
    # a 0-based empty exon 1050-1050 ends up with start = end + 1
    row = convert_row(
        {
            "name": "uc002yjf.1",
            "chromosome": "chr21",
            "strand": "+",
            "txStart": "1000",
            "txEnd": "1050",
            "cdsStart": "1000",
            "cdsEnd": "1000",
            "nbExons": "2",
            "exonStarts": "1000,1050,",
            "exonEnds": "1050,1050,",
            "uniprot": "",
            "accession": "NM_9",
        },
        1,
        9606,
    )
    row["coord_xref_id"] = 9
    with pytest.raises(ValueError, match="coord_xref_id 9"):
        CoordinateXref.from_row(row)


def test_malformed_exon_list():
    row = {
        "coord_xref_id": 6,
        "accession": "NM_6",
        "txStart": 1,
        "txEnd": 100,
        "cdsStart": None,
        "cdsEnd": None,
        "exonStarts": "1,x",
        "exonEnds": "20,100",
    }
    with pytest.raises(ValueError, match="exonStarts for coord_xref_id 6"):
        CoordinateXref.from_row(row)


def test_trailing_comma_in_exon_list():
    row = {
        "coord_xref_id": 7,
        "accession": "NM_7",
        "txStart": 1,
        "txEnd": 100,
        "cdsStart": None,
        "cdsEnd": None,
        "exonStarts": "1,50,",
        "exonEnds": "20,100,",
    }
    assert CoordinateXref.from_row(row).exons() == [(1, 20), (50, 100)]
