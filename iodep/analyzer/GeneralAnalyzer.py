"""GeneralAnalyzer computes the dependency breakdown of reads and writes and the 
hot write histogram of a block storage trace. 

Usage:
    analyzer = GeneralAnalyzer(trace_list, read_centric_map, write_centric_map)
    result = analyzer.run()
    print(result.get_report_str())
    result.write_to_file(result_path)
"""
from json import dumps, load
from pathlib import Path
from logging import getLogger
from typing import List
from dataclasses import dataclass, field
from time import perf_counter_ns

from iodep.trace.TraceData import TraceData, PAGE_SIZE
from iodep.trace.DependencyMap import DependencyMap
from iodep.analyzer.DependTypes import DependBreakdown, analyze_depend_types
from iodep.analyzer.HotWrite import HotWriteHistogram, HotWriteSimulator, ReadCountAccumulator, PageCountBuffer


logger = getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerConfig:
    page_size: int = PAGE_SIZE
    validate_input: bool = True 
    tolerate_empty_overlap: bool = False 


@dataclass 
class AnalysisResult:
    read_breakdown: DependBreakdown = field(default_factory=DependBreakdown)
    write_breakdown: DependBreakdown = field(default_factory=DependBreakdown)
    hot_write_hist: HotWriteHistogram = field(default_factory=HotWriteHistogram)

    def get_dict(self) -> dict:
        return {
            "read": self.read_breakdown.get_dict(),
            "write": self.write_breakdown.get_dict(),
            "hot_write": self.hot_write_hist.get_dict()
        }
    

    def get_report_str(self) -> str:
        """Get the results as tab separated lines. """
        report_line_arr = []
        for label, breakdown in [("[Read BD]", self.read_breakdown), ("[Write BD]", self.write_breakdown)]:
            report_line_arr.append("{}\tIndependent\tDep_Short\tDep_Long".format(label))
            report_line_arr.append("{}\t{}\t{}".format(breakdown.indep, breakdown.dep_short, breakdown.dep_long))
        report_line_arr.append("[HotWrite]")
        report_line_arr.append("\t".join([str(val) for val in self.hot_write_hist.get_count_arr()]))
        report_line_arr.append("\t".join([str(val) for val in self.hot_write_hist.get_occurrence_arr()]))
        return "\n".join(report_line_arr)
    

    def write_to_file(self, output_path: Path) -> None:
        with Path(output_path).open("w+") as handle:
            handle.write(dumps(self.get_dict(), indent=2))
    

    def load_file(self, result_file_path: Path) -> None:
        with open(result_file_path, "r") as handle:
            result_dict = load(handle)
        self.read_breakdown = DependBreakdown(**result_dict["read"])
        self.write_breakdown = DependBreakdown(**result_dict["write"])
        self.hot_write_hist = HotWriteHistogram()
        self.hot_write_hist.load_dict(result_dict["hot_write"])


class GeneralAnalyzer:
    def __init__(
            self, 
            trace_list: List[TraceData],
            read_centric_map: DependencyMap,
            write_centric_map: DependencyMap,
            config: AnalyzerConfig = AnalyzerConfig()
    ) -> None:
        """Runs all analyses over a trace and its dependency maps. 

        Args:
            trace_list: List of requests where the id of each request is its position. 
            read_centric_map: Map of read id to the ids of writes it reads from. 
            write_centric_map: Map of write id to the ids of reads that read its data. 
            config: AnalyzerConfig of the analysis. 
        """
        self._trace_list = trace_list
        self._read_centric_map = read_centric_map
        self._write_centric_map = write_centric_map
        self._config = config 
    

    def validate(self) -> None:
        """Check the dependency maps against the trace. 

        Raises:
            InvariantViolationError: Raised if a map is not a valid centric map of the trace. 
        """
        self._read_centric_map.validate(self._trace_list, True, page_size=self._config.page_size, check_overlap=not self._config.tolerate_empty_overlap)
        self._write_centric_map.validate(self._trace_list, False, page_size=self._config.page_size, check_overlap=not self._config.tolerate_empty_overlap)
    

    def run(self) -> AnalysisResult:
        start_time_ns = perf_counter_ns()
        if self._config.validate_input:
            self.validate()

        result = AnalysisResult()
        result.read_breakdown = analyze_depend_types(self._trace_list, self._read_centric_map, True)
        result.write_breakdown = analyze_depend_types(self._trace_list, self._write_centric_map, False)
        logger.info("Read breakdown: {}, write breakdown: {}.".format(result.read_breakdown.get_dict(), result.write_breakdown.get_dict()))

        largest_page_count = max([self._trace_list[write_id].get_page_count(self._config.page_size) for write_id in self._write_centric_map.keys()], default=1)
        simulator = HotWriteSimulator(self._trace_list, 
                                        self._write_centric_map, 
                                        page_size=self._config.page_size, 
                                        tolerate_empty_overlap=self._config.tolerate_empty_overlap)
        accumulator = simulator.run(ReadCountAccumulator(), buffer=PageCountBuffer(largest_page_count))
        result.hot_write_hist = accumulator.get_histogram()

        logger.info("Analyzed {} requests in {} ms.".format(len(self._trace_list), (perf_counter_ns() - start_time_ns)//1000000))
        return result
