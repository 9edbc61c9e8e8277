"""TraceData holds the read/write requests of a block storage trace.

Usage:
    trace_list = load_trace(trace_path)
    first_req = trace_list[0]
    first_req.get_page_count(PAGE_SIZE)
"""
from pathlib import Path 
from typing import List, Union
from dataclasses import dataclass, asdict
from logging import getLogger
from time import perf_counter_ns
from pandas import DataFrame, read_csv 


# number of logical blocks per page 
PAGE_SIZE = 4096

logger = getLogger(__name__)


@dataclass(frozen=True)
class ReaderConfig:
    lba_i: int = 0
    op_i: int = 1
    size_i: int = 2
    delimiter: str = ','
    read_str: str = 'r'
    write_str: str = 'w'
    lba_header_name: str = "lba"
    op_header_name: str = "op"
    size_header_name: str = "size"


    def get_read_flag(self, op_str):
        if op_str == self.read_str:
            return True 
        elif op_str == self.write_str:
            return False 
        else:
            raise ValueError("Unrecognized operation string {}, allowed {} and {}.".format(op_str, self.read_str, self.write_str))
    

    def get_trace_header(self):
        header_name_arr = [''] * 3
        header_name_arr[self.lba_i] = self.lba_header_name
        header_name_arr[self.op_i] = self.op_header_name
        header_name_arr[self.size_i] = self.size_header_name
        return header_name_arr


@dataclass(frozen=True)
class TraceData:
    id: int 
    is_read: bool 
    lba: int 
    lb_count: int 

    def get_start_page(self, page_size: int = PAGE_SIZE) -> int:
        return self.lba//page_size
    
    def get_end_page(self, page_size: int = PAGE_SIZE) -> int:
        # a request ending on a page boundary still counts the next page 
        return (self.lba + self.lb_count)//page_size

    def get_page_count(self, page_size: int = PAGE_SIZE) -> int:
        return self.get_end_page(page_size) - self.get_start_page(page_size) + 1
    
    def get_dict(self) -> dict:
        return asdict(self)


def get_trace_list(
        trace_df: DataFrame,
        config: ReaderConfig = ReaderConfig()
) -> List[TraceData]:
    """Get a list of TraceData from a DataFrame of a block trace. 

    Args:
        trace_df: DataFrame with LBA, operation and size columns named as in 'config'. 
        config: ReaderConfig with the column names and operation strings. 
    
    Returns:
        trace_list: List of TraceData where the id of each request is its row position. 
    
    Raises:
        ValueError: Raised if an operation string is neither a read nor a write. 
    """
    trace_list = []
    for req_id, (lba, op_str, size) in enumerate(zip(trace_df[config.lba_header_name],
                                                        trace_df[config.op_header_name],
                                                        trace_df[config.size_header_name])):
        if lba < 0 or size < 1:
            raise ValueError("Request {} should have LBA >= 0 and size >= 1 but found {} and {}.".format(req_id, lba, size))
        trace_list.append(TraceData(req_id, config.get_read_flag(op_str), int(lba), int(size)))
    return trace_list


def load_trace(
        trace_path: Union[str, Path],
        config: ReaderConfig = ReaderConfig()
) -> List[TraceData]:
    """Load a CSV block trace with no header.

    Args:
        trace_path: Path object/string to the trace to read. 
        config: ReaderConfig to read the trace. 
    
    Returns:
        trace_list: List of TraceData ordered as in the trace file. 
    """
    start_time_ns = perf_counter_ns()
    trace_df = read_csv(trace_path, names=config.get_trace_header(), sep=config.delimiter)
    trace_list = get_trace_list(trace_df, config)
    logger.info("Loaded {} requests from {} in {} ms.".format(len(trace_list), trace_path, (perf_counter_ns() - start_time_ns)//1000000))
    return trace_list
