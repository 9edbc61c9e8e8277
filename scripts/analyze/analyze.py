""" This script computes the read/write dependency breakdown and the hot write histogram of a 
    block storage trace. The trace has the format: lba, operation(r/w), size(logical blocks). The 
    dependency maps are JSON files generated from the trace beforehand. 
"""

import argparse 
import pathlib 

import logging
import logging.handlers as handlers

logger = logging.getLogger('iodep')
logger.setLevel(logging.INFO)

logHandler = handlers.RotatingFileHandler('/dev/shm/iodep.log', maxBytes=25*1e6)
logHandler.setLevel(logging.INFO)
formatter = logging.Formatter('%(asctime)s  %(name)s  %(levelname)s: %(message)s')
logHandler.setFormatter(formatter)
logger.addHandler(logHandler)

from iodep.trace.TraceData import PAGE_SIZE, load_trace
from iodep.trace.DependencyMap import DependencyMap
from iodep.analyzer.GeneralAnalyzer import AnalyzerConfig, GeneralAnalyzer


def main(trace_path, read_centric_map_path, write_centric_map_path, output_path, config):
    """ Analyze a trace with its dependency maps and print the results """
    logger.info("Processing:{}".format(trace_path))
    trace_list = load_trace(trace_path)

    read_centric_map = DependencyMap()
    read_centric_map.load_file(read_centric_map_path)

    if write_centric_map_path is None:
        write_centric_map = read_centric_map.get_mirror()
    else:
        write_centric_map = DependencyMap()
        write_centric_map.load_file(write_centric_map_path)

    result = GeneralAnalyzer(trace_list, read_centric_map, write_centric_map, config=config).run()
    print(result.get_report_str())

    if output_path is not None:
        result.write_to_file(output_path)
        logger.info("Done:{}, output:{}".format(trace_path, output_path))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
                description="Compute read/write dependency breakdown and hot write histogram of a block storage trace",
                formatter_class=argparse.RawDescriptionHelpFormatter,
                epilog="Notes:\n"
                        "* Example usage: python3 analyze.py /home/trace.csv /home/read_centric.json --output_path /home/result.json")
    
    parser.add_argument("trace_path",
        type=pathlib.Path,
        help="Path to block storage trace")

    parser.add_argument("read_centric_map_path",
        type=pathlib.Path,
        help="Path to JSON file mapping each read to the writes it reads from")

    parser.add_argument("--write_centric_map_path",
        type=pathlib.Path,
        help="Path to JSON file mapping each write to the reads of its data, mirrored from the read centric map if not set")

    parser.add_argument("--output_path",
        type=pathlib.Path,
        help="Path to JSON file where the results are stored")

    parser.add_argument("--page_size",
        default=PAGE_SIZE,
        type=int,
        help="Number of logical blocks in a page")

    parser.add_argument("--tolerate_empty_overlap",
        action="store_true",
        help="Skip dependent reads that share no page with their write instead of failing")

    parser.add_argument("--skip_validation",
        action="store_true",
        help="Do not validate the dependency maps against the trace before analysis")
    
    args = parser.parse_args()

    config = AnalyzerConfig(page_size=args.page_size, 
                                validate_input=not args.skip_validation, 
                                tolerate_empty_overlap=args.tolerate_empty_overlap)
    main(args.trace_path, args.read_centric_map_path, args.write_centric_map_path, args.output_path, config)
