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

""" Interval coverage bookkeeping used when comparing exon structures.

    A RangeRegistry holds one set of merged, non-overlapping intervals per
    named band (for example "exon" and "coding"). Intervals are 1-based and
    inclusive, so [10, 20] covers 11 positions.
"""

from bisect import bisect_left, bisect_right
from typing import Dict, List, Tuple


class _Band:
    """Sorted, disjoint intervals kept as two parallel lists."""

    __slots__ = ("starts", "ends")

    def __init__(self) -> None:
        self.starts: List[int] = []
        self.ends: List[int] = []

    def overlap(self, start: int, end: int) -> int:
        covered = 0
        # ends are sorted as well because the intervals are disjoint
        idx = bisect_left(self.ends, start)
        while idx < len(self.starts) and self.starts[idx] <= end:
            covered += min(end, self.ends[idx]) - max(start, self.starts[idx]) + 1
            idx += 1
        return covered

    def merge(self, start: int, end: int) -> None:
        # adjacent intervals are merged too, hence the +/- 1
        low = bisect_left(self.ends, start - 1)
        high = bisect_right(self.starts, end + 1)
        if low < high:
            start = min(start, self.starts[low])
            end = max(end, self.ends[high - 1])
        self.starts[low:high] = [start]
        self.ends[low:high] = [end]


class RangeRegistry:
    """Registry of covered genomic positions, one coverage set per band."""

    def __init__(self) -> None:
        self._bands: Dict[str, _Band] = {}

    def _band(self, band: str) -> _Band:
        if band not in self._bands:
            self._bands[band] = _Band()
        return self._bands[band]

    def check_and_register(self, band: str, start: int, end: int) -> int:
        """Register [start, end] in a band.

        Args:
            band: Name of the band, created empty on first use.
            start: First position of the interval.
            end: Last position of the interval.

        Returns:
            The number of positions of [start, end] that were already covered
            before this call. An interval with start > end is zero-length:
            nothing is registered and 0 is returned.
        """
        if start > end:
            return 0
        registered = self._band(band)
        overlap = registered.overlap(start, end)
        registered.merge(start, end)
        return overlap

    def overlap_size(self, band: str, start: int, end: int) -> int:
        """Number of positions of [start, end] currently covered in a band."""
        if start > end or band not in self._bands:
            return 0
        return self._bands[band].overlap(start, end)

    def get_ranges(self, band: str) -> List[Tuple[int, int]]:
        """Merged intervals of a band, in ascending order."""
        if band not in self._bands:
            return []
        registered = self._bands[band]
        return list(zip(registered.starts, registered.ends))
