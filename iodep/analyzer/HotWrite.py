"""Page-level simulation of hot writes. 

A hot write is a write whose data was read by at least one read. For every hot write, 
each page it wrote gets the number of distinct reads that read the page, which is the 
number of reads the page experienced before it was overwritten. The per-page counts of 
all hot writes are collected into a HotWriteHistogram. 

Usage:
    accumulator = ReadCountAccumulator()
    simulator = HotWriteSimulator(trace_list, write_centric_map)
    simulator.run(accumulator)
    hot_write_hist = accumulator.get_histogram()
"""
from __future__ import annotations

from pathlib import Path 
from logging import getLogger
from collections import Counter 
from typing import List
from time import perf_counter_ns
from numpy import array, ndarray, zeros

from iodep.trace.TraceData import TraceData, PAGE_SIZE
from iodep.trace.DependencyMap import DependencyMap, InvariantViolationError, get_page_overlap


logger = getLogger(__name__)


class HotWriteHistogram:
    def __init__(self) -> None:
        """Tracks the number of (write, page) pairs that were read a given number of times. 

        Attributes:
            counter: Counter of read count values. 
        """
        self.counter = Counter()
    

    def update(
            self, 
            read_count: int, 
            occurrence: int = 1
    ) -> None:
        assert read_count >= 0 and occurrence >= 0, \
                "Read count and occurrence cannot be negative but found {} and {}.".format(read_count, occurrence)
        if occurrence > 0:
            self.counter[int(read_count)] += int(occurrence)
    

    def get_count_arr(self) -> ndarray:
        """Get the distinct read count values in ascending order."""
        return array(sorted(self.counter.keys()), dtype=int)
    

    def get_occurrence_arr(self) -> ndarray:
        """Get the occurrence of each value in 'get_count_arr()', in the same order."""
        return array([self.counter[read_count] for read_count in sorted(self.counter.keys())], dtype=int)
    

    def get_total_occurrence(self) -> int:
        return sum(self.counter.values())
    

    def get_dict(self) -> dict:
        return {
            "count": self.get_count_arr().tolist(),
            "occurrence": self.get_occurrence_arr().tolist()
        }
    

    def load_dict(self, hist_dict: dict) -> None:
        for read_count, occurrence in zip(hist_dict["count"], hist_dict["occurrence"]):
            self.update(read_count, occurrence)


    def write_to_file(
            self,
            file_path: Path 
    ) -> None:
        """Write the histogram to a file with the read counts in the first line and their occurrence in the second."""
        with Path(file_path).open("w+") as hist_handle:
            hist_handle.write("{}\n".format(",".join([str(val) for val in self.get_count_arr()])))
            hist_handle.write("{}\n".format(",".join([str(val) for val in self.get_occurrence_arr()])))
    

    def load_file(
            self,
            file_path: Path 
    ) -> None:
        """Load a histogram file generated by 'write_to_file' to this class."""
        with Path(file_path).open("r") as hist_handle:
            count_line = hist_handle.readline().rstrip()
            occurrence_line = hist_handle.readline().rstrip()
        
        if count_line:
            count_arr = [int(val) for val in count_line.split(",")]
            occurrence_arr = [int(val) for val in occurrence_line.split(",")]
            assert len(count_arr) == len(occurrence_arr), \
                    "Histogram file {} has {} counts but {} occurrences.".format(file_path, len(count_arr), len(occurrence_arr))
            self.load_dict({"count": count_arr, "occurrence": occurrence_arr})
    

    def __eq__(
            self, 
            other: HotWriteHistogram
    ) -> bool:
        return +self.counter == +other.counter


class ReadCountAccumulator:
    """Collects the read count of every (write, page) pair seen by a simulation. 

    Attributes:
        _read_count_list: Flat list of per-page read counts in the order they were added. 
    """
    def __init__(self) -> None:
        self._read_count_list = []
    

    def add(self, read_count_arr: ndarray) -> None:
        self._read_count_list.extend(int(read_count) for read_count in read_count_arr)
    

    def get_read_count_list(self) -> list:
        return list(self._read_count_list)
    

    def __len__(self) -> int:
        return len(self._read_count_list)
    

    def get_histogram(self) -> HotWriteHistogram:
        hot_write_hist = HotWriteHistogram()
        for read_count, occurrence in Counter(self._read_count_list).items():
            hot_write_hist.update(read_count, occurrence)
        return hot_write_hist


class PageCountBuffer:
    """Reusable array of per-page read counters. It grows to the largest page span 
    requested and the window handed out is zeroed on every request. 
    """
    def __init__(self, init_size: int = 1) -> None:
        self._buffer = zeros(max(init_size, 1), dtype=int)
    

    def get_size(self) -> int:
        return len(self._buffer)
    

    def get_window(self, page_count: int) -> ndarray:
        assert page_count >= 1, "A write spans at least one page but found {}.".format(page_count)
        if page_count > len(self._buffer):
            self._buffer = zeros(max(page_count, 2*len(self._buffer)), dtype=int)
        window = self._buffer[:page_count]
        window.fill(0)
        return window


class HotWriteSimulator:
    def __init__(
            self, 
            trace_list: List[TraceData],
            write_centric_map: DependencyMap,
            page_size: int = PAGE_SIZE,
            tolerate_empty_overlap: bool = False 
    ) -> None:
        """Simulates the pages of each hot write to count the reads of each page. 

        Args:
            trace_list: List of requests where the id of each request is its position. 
            write_centric_map: Map of write id to the ids of reads that read its data. 
            page_size: Number of logical blocks in a page. 
            tolerate_empty_overlap: If True, a dependent read that shares no page with its write 
                                        is skipped, else InvariantViolationError is raised. 
        
        Attributes:
            empty_overlap_count: Number of (write, read) pairs skipped in the last run because 
                                    they shared no page. 
        """
        self._trace_list = trace_list
        self._write_centric_map = write_centric_map
        self._page_size = page_size
        self._tolerate_empty_overlap = tolerate_empty_overlap
        self.empty_overlap_count = 0 
    

    def simulate_write(
            self, 
            write_id: int, 
            read_count_arr: ndarray
    ) -> ndarray:
        """Count the reads of each page of a write. 

        Args:
            write_id: Id of the write to simulate. 
            read_count_arr: Zeroed array with one counter per page of the write. 
        
        Returns:
            read_count_arr: The same array with the read count of each page of the write. 
        """
        write_req = self._trace_list[write_id]
        page_start = write_req.get_start_page(self._page_size)
        assert len(read_count_arr) == write_req.get_page_count(self._page_size), \
                "Write {} spans {} pages but found {} counters.".format(write_id, write_req.get_page_count(self._page_size), len(read_count_arr))

        for read_id in self._write_centric_map[write_id]:
            overlap = get_page_overlap(write_req, self._trace_list[read_id], self._page_size)
            if not overlap:
                if not self._tolerate_empty_overlap:
                    raise InvariantViolationError("Read {} does not overlap any page of write {}.".format(read_id, write_id))
                self.empty_overlap_count += 1 
                continue 

            # a read counts once per page even if it extends beyond the write 
            overlap_start, overlap_end = overlap
            read_count_arr[overlap_start - page_start:overlap_end - page_start + 1] += 1
        return read_count_arr
    

    def run(
            self, 
            accumulator: ReadCountAccumulator,
            buffer: PageCountBuffer = None 
    ) -> ReadCountAccumulator:
        """Simulate every write of the write-centric map in ascending order of id. 

        Args:
            accumulator: ReadCountAccumulator where the read count of each page is added. 
            buffer: PageCountBuffer to reuse for per-write counters. A new one is used if None. 
        
        Returns:
            accumulator: The accumulator passed in. 
        """
        start_time_ns = perf_counter_ns()
        if buffer is None:
            buffer = PageCountBuffer()
        
        self.empty_overlap_count = 0 
        write_count = 0 
        for write_id, _ in self._write_centric_map.items():
            page_count = self._trace_list[write_id].get_page_count(self._page_size)
            read_count_arr = buffer.get_window(page_count)
            accumulator.add(self.simulate_write(write_id, read_count_arr))
            write_count += 1
        
        if self.empty_overlap_count > 0:
            logger.warning("Skipped {} reads that did not overlap the pages of their write.".format(self.empty_overlap_count))
        logger.info("Simulated {} hot writes with {} pages in {} ms.".format(write_count, len(accumulator), (perf_counter_ns() - start_time_ns)//1000000))
        return accumulator


def analyze_hot_write(
        trace_list: List[TraceData],
        write_centric_map: DependencyMap,
        page_size: int = PAGE_SIZE,
        tolerate_empty_overlap: bool = False 
) -> HotWriteHistogram:
    """Get the histogram of read counts of the pages of all hot writes. 

    Args:
        trace_list: List of requests where the id of each request is its position. 
        write_centric_map: Map of write id to the ids of reads that read its data. 
        page_size: Number of logical blocks in a page. 
        tolerate_empty_overlap: Skip reads that share no page with their write instead of raising. 
    
    Returns:
        hot_write_hist: HotWriteHistogram with one occurrence per (hot write, page) pair. 
    """
    simulator = HotWriteSimulator(trace_list, write_centric_map, page_size=page_size, tolerate_empty_overlap=tolerate_empty_overlap)
    return simulator.run(ReadCountAccumulator()).get_histogram()
