from pathlib import Path 
from tempfile import TemporaryDirectory
from unittest import main, TestCase

from iodep.trace.TraceData import TraceData
from iodep.trace.DependencyMap import DependencyMap, InvariantViolationError, get_page_overlap


def get_test_trace():
    return [
        TraceData(0, False, 0, 7),
        TraceData(1, True, 0, 3),
        TraceData(2, True, 4, 2),
        TraceData(3, False, 8, 3),
        TraceData(4, True, 2, 8)
    ]


class TestDependencyMap(TestCase):
    def test_mirror(self):
        read_centric_map = DependencyMap({1: [0], 2: [0], 4: [0, 3]})
        write_centric_map = read_centric_map.get_mirror()
        assert write_centric_map.get_dict() == {0: [1, 2, 4], 3: [4]}, "Unexpected mirror {}.".format(write_centric_map.get_dict())
        assert write_centric_map.get_mirror().get_dict() == read_centric_map.get_dict()
        assert len(write_centric_map) == 2 and 0 in write_centric_map and 1 not in write_centric_map
    

    def test_file(self):
        dep_map = DependencyMap({4: [3, 0], 1: [0]})
        with TemporaryDirectory() as temp_dir:
            map_file_path = Path(temp_dir).joinpath("read_centric.json")
            dep_map.write_to_file(map_file_path)
            other_dep_map = DependencyMap()
            other_dep_map.load_file(map_file_path)
        
        assert other_dep_map.get_dict() == {1: [0], 4: [0, 3]}, "Unexpected map loaded {}.".format(other_dep_map.get_dict())
        assert other_dep_map.keys() == [1, 4]
        assert other_dep_map[4] == frozenset([0, 3])
    

    def test_page_overlap(self):
        trace_list = get_test_trace()
        assert get_page_overlap(trace_list[0], trace_list[4], 4) == (0, 1)
        assert get_page_overlap(trace_list[3], trace_list[4], 4) == (2, 2)
        assert get_page_overlap(trace_list[1], trace_list[2], 4) == ()
    

    def test_validate(self):
        trace_list = get_test_trace()
        read_centric_map = DependencyMap({1: [0], 2: [0], 4: [0, 3]})
        read_centric_map.validate(trace_list, True, page_size=4)
        read_centric_map.get_mirror().validate(trace_list, False, page_size=4)
    

    def test_validate_without_overlap_check(self):
        trace_list = get_test_trace()
        dep_map = DependencyMap({2: [3]})
        with self.assertRaises(InvariantViolationError):
            dep_map.validate(trace_list, True, page_size=4)
        dep_map.validate(trace_list, True, page_size=4, check_overlap=False)

        with self.assertRaises(InvariantViolationError):
            DependencyMap({2: []}).validate(trace_list, True, page_size=4, check_overlap=False)
    

    def test_validate_failure(self):
        trace_list = get_test_trace()
        invalid_dict_list = [
            {1: []},        # empty dependent set 
            {1: [1]},       # self reference 
            {0: [1]},       # key of the wrong direction 
            {1: [2]},       # dependent of the wrong direction 
            {9: [0]},       # key out of range 
            {1: [9]},       # dependent out of range 
            {2: [3]}        # no shared page 
        ]
        for invalid_dict in invalid_dict_list:
            with self.assertRaises(InvariantViolationError):
                DependencyMap(invalid_dict).validate(trace_list, True, page_size=4)


if __name__ == '__main__':
    main()
