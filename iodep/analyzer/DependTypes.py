"""Classify requests of a trace by the number of requests they depend on. 

Usage:
    read_breakdown = analyze_depend_types(trace_list, read_centric_map, True)
    write_breakdown = analyze_depend_types(trace_list, write_centric_map, False)
"""
from typing import List
from dataclasses import dataclass, asdict

from iodep.trace.TraceData import TraceData
from iodep.trace.DependencyMap import DependencyMap


@dataclass 
class DependBreakdown:
    indep: int = 0
    dep_short: int = 0
    dep_long: int = 0

    def track(self, dep_count: int) -> None:
        if dep_count > 1:
            self.dep_long += 1 
        elif dep_count == 1:
            self.dep_short += 1 
        else:
            self.indep += 1 
    
    def get_total(self) -> int:
        return self.indep + self.dep_short + self.dep_long
    
    def get_dict(self) -> dict:
        return asdict(self)


def analyze_depend_types(
        trace_list: List[TraceData],
        centric_map: DependencyMap,
        is_read: bool
) -> DependBreakdown:
    """Count independent, singly-dependent and multiply-dependent requests. 

    Args:
        trace_list: List of requests in the trace. 
        centric_map: Read-centric map if 'is_read' is True, else write-centric map. 
        is_read: Whether to classify reads or writes. 
    
    Returns:
        breakdown: DependBreakdown of the requests with the given direction. 

    Note:
        Independent requests access addresses never accessed by a request of the other kind. 
        A singly-dependent read reads data written by one write and a singly-dependent write 
        is read by one read. A multiply-dependent read reads from a range assembled from several 
        writes, it does not mean the range is a hotspot. The direction must be paired with the 
        matching map; this cannot be checked from the inputs. 
    """
    breakdown = DependBreakdown()
    for trace in trace_list:
        if trace.is_read == is_read:
            breakdown.track(len(centric_map.get(trace.id)))
    return breakdown
