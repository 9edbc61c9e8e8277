"""DependencyMap maps a request id to the set of ids of requests that depend on it. 

A read-centric map is keyed by reads and holds the writes whose data each read 
reads. A write-centric map is keyed by writes and holds the reads of the data each 
write wrote. The maps are built upstream; this class only loads, mirrors and 
validates them.

Usage:
    read_centric_map = DependencyMap()
    read_centric_map.load_file(read_centric_map_path)
    read_centric_map.validate(trace_list, True)
    write_centric_map = read_centric_map.get_mirror()
"""
from __future__ import annotations

from json import dump, load
from pathlib import Path 
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List

from iodep.trace.TraceData import TraceData, PAGE_SIZE


class InvariantViolationError(ValueError):
    """Raised when the trace or a dependency map breaks a precondition of the analysis."""
    pass 


class DependencyMap:
    def __init__(
            self, 
            dep_dict: Dict[int, Iterable[int]] = None
    ) -> None:
        """
        Args:
            dep_dict: Dictionary of request id to ids of its dependent requests. 
        """
        self._map = {}
        if dep_dict is not None:
            self.load_dict(dep_dict)
    

    def keys(self) -> list:
        return sorted(self._map.keys())
    

    def get(self, req_id: int) -> FrozenSet[int]:
        return self._map.get(req_id, frozenset())
    

    def __len__(self) -> int:
        return len(self._map)
    

    def __contains__(self, req_id: int) -> bool:
        return req_id in self._map
    

    def __getitem__(self, req_id: int) -> FrozenSet[int]:
        return self._map[req_id]
    

    def items(self):
        """Iterate (req_id, dependent id set) pairs in ascending order of request id."""
        for req_id in self.keys():
            yield req_id, self._map[req_id]


    def load_dict(self, dep_dict: dict) -> None:
        for req_id, dep_ids in dep_dict.items():
            self._map[int(req_id)] = frozenset(int(dep_id) for dep_id in dep_ids)
    

    def get_dict(self) -> dict:
        return {req_id: sorted(dep_ids) for req_id, dep_ids in self.items()}
    

    def load_file(self, map_file_path: Path) -> None:
        """Load a dependency map from a JSON file with format {"<id>": [<id>, ...]}."""
        with open(map_file_path, "r") as handle:
            dep_dict = load(handle)
        self.load_dict(dep_dict)
    

    def write_to_file(self, map_file_path: Path) -> None:
        with open(map_file_path, "w+") as handle:
            dump({str(req_id): dep_ids for req_id, dep_ids in self.get_dict().items()}, handle, indent=2)
    

    def get_mirror(self) -> DependencyMap:
        """Get the map keyed by the other side of each dependency.

        Returns:
            mirror_map: DependencyMap where every (key, dependent) pair of this map becomes (dependent, key). 
        """
        mirror_dict = defaultdict(set)
        for req_id, dep_ids in self.items():
            for dep_id in dep_ids:
                mirror_dict[dep_id].add(req_id)
        return DependencyMap(mirror_dict)
    

    def validate(
            self, 
            trace_list: List[TraceData],
            is_read: bool,
            page_size: int = PAGE_SIZE,
            check_overlap: bool = True
    ) -> None:
        """Check that this map is a well-formed centric map of the given trace. 

        Args:
            trace_list: List of requests where the id of each request is its position. 
            is_read: True if the keys of this map should be reads, False if they should be writes. 
            page_size: Number of logical blocks in a page. 
            check_overlap: If False, a dependent sharing no page with its key is allowed. 
        
        Raises:
            InvariantViolationError: Raised on the first key or dependent that breaks an invariant. 
        """
        trace_len = len(trace_list)
        key_type, dep_type = ("read", "write") if is_read else ("write", "read")
        for req_id, dep_ids in self.items():
            if req_id < 0 or req_id >= trace_len:
                raise InvariantViolationError("Key {} is out of range of trace with {} requests.".format(req_id, trace_len))
            
            req = trace_list[req_id]
            if req.id != req_id:
                raise InvariantViolationError("Request at position {} has id {}.".format(req_id, req.id))

            if req.is_read != is_read:
                raise InvariantViolationError("Key {} should be a {}.".format(req_id, key_type))
            
            if not dep_ids:
                raise InvariantViolationError("Key {} has an empty dependent set.".format(req_id))
            
            if req_id in dep_ids:
                raise InvariantViolationError("Key {} depends on itself.".format(req_id))

            for dep_id in dep_ids:
                if dep_id < 0 or dep_id >= trace_len:
                    raise InvariantViolationError("Dependent {} of key {} is out of range of trace with {} requests.".format(dep_id, req_id, trace_len))

                dep_req = trace_list[dep_id]
                if dep_req.is_read == is_read:
                    raise InvariantViolationError("Dependent {} of key {} should be a {}.".format(dep_id, req_id, dep_type))
                
                if check_overlap and not get_page_overlap(req, dep_req, page_size):
                    raise InvariantViolationError("Dependent {} does not overlap any page of key {}.".format(dep_id, req_id))


def get_page_overlap(
        req: TraceData, 
        other_req: TraceData, 
        page_size: int = PAGE_SIZE
) -> tuple:
    """Get the range of pages shared by two requests. 

    Args:
        req: Request whose page span is the reference. 
        other_req: Request overlapping 'req'. 
        page_size: Number of logical blocks in a page. 
    
    Returns:
        overlap: Tuple of first and last shared page, or an empty tuple if the spans do not intersect. 
    """
    overlap_start = max(req.get_start_page(page_size), other_req.get_start_page(page_size))
    overlap_end = min(req.get_end_page(page_size), other_req.get_end_page(page_size))
    return (overlap_start, overlap_end) if overlap_start <= overlap_end else ()
