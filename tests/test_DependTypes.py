from unittest import main, TestCase

from iodep.trace.TraceData import TraceData
from iodep.trace.DependencyMap import DependencyMap
from iodep.analyzer.DependTypes import DependBreakdown, analyze_depend_types


def get_test_trace():
    return [
        TraceData(0, False, 0, 7),
        TraceData(1, True, 0, 3),
        TraceData(2, True, 4, 2),
        TraceData(3, False, 8, 3),
        TraceData(4, True, 2, 8),
        TraceData(5, True, 20, 1),
        TraceData(6, False, 40, 1)
    ]


class TestDependTypes(TestCase):
    def test_read_breakdown(self):
        trace_list = get_test_trace()
        read_centric_map = DependencyMap({1: [0], 2: [0], 4: [0, 3]})
        breakdown = analyze_depend_types(trace_list, read_centric_map, True)

        assert breakdown == DependBreakdown(1, 2, 1), "Read breakdown is not (1, 2, 1) but {}.".format(breakdown)
        read_count = len([trace for trace in trace_list if trace.is_read])
        assert breakdown.get_total() == read_count, "Breakdown total {} is not the read count {}.".format(breakdown.get_total(), read_count)
    

    def test_write_breakdown(self):
        trace_list = get_test_trace()
        write_centric_map = DependencyMap({0: [1, 2, 4], 3: [4]})
        breakdown = analyze_depend_types(trace_list, write_centric_map, False)

        assert breakdown.indep == 1, "Write 6 should be independent but found {}.".format(breakdown)
        assert breakdown.dep_short == 1, "Write 3 should be singly-dependent but found {}.".format(breakdown)
        assert breakdown.dep_long == 1, "Write 0 should be multiply-dependent but found {}.".format(breakdown)
        assert breakdown.get_dict() == {"indep": 1, "dep_short": 1, "dep_long": 1}
    

    def test_empty_map(self):
        trace_list = get_test_trace()
        read_breakdown = analyze_depend_types(trace_list, DependencyMap(), True)
        write_breakdown = analyze_depend_types(trace_list, DependencyMap(), False)
        assert read_breakdown == DependBreakdown(4, 0, 0), "All reads should be independent but found {}.".format(read_breakdown)
        assert write_breakdown == DependBreakdown(3, 0, 0), "All writes should be independent but found {}.".format(write_breakdown)
    

    def test_empty_dependent_set(self):
        trace_list = get_test_trace()
        breakdown = analyze_depend_types(trace_list, DependencyMap({1: []}), True)
        assert breakdown == DependBreakdown(4, 0, 0), "A key with no dependents should be independent but found {}.".format(breakdown)
    

    def test_keys_of_other_direction_ignored(self):
        trace_list = get_test_trace()
        # the map is keyed by writes so none of the reads are found in it 
        breakdown = analyze_depend_types(trace_list, DependencyMap({0: [1, 2, 4], 3: [4]}), True)
        assert breakdown == DependBreakdown(4, 0, 0), "Reads should not match write keys but found {}.".format(breakdown)


if __name__ == '__main__':
    main()
