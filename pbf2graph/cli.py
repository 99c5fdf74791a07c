"""
Command line interface.

Examples:
  pbf2graph -p monaco-latest.osm.pbf -o output/monaco
  pbf2graph -p monaco-latest.osm.pbf -o output/monaco --route 25177418 1868866906
  pbf2graph -p monaco-latest.osm.pbf -o output/monaco --geopackage output/monaco.gpkg
"""

import sys
import argparse

from .pipeline.pipeline import Pipeline, PipelineConfig
from .pipeline_config import Pbf2GraphError


def build_parser():
    parser = argparse.ArgumentParser(
        prog='pbf2graph',
        description="Extract the road network of an OSM PBF file as node and edge CSV tables",
    )
    parser.add_argument('-p', '--pbf-file', required=True,
                        help='Path to the input OSM PBF file')
    parser.add_argument('-o', '--output-dir', required=True,
                        help='Directory for nodes.csv and edges.csv (created if missing)')
    parser.add_argument('--route', nargs=2, type=int, metavar=('START', 'END'),
                        help='Print the shortest path between two node ids')
    parser.add_argument('--deadline', type=float,
                        help='Give up on the route after this many seconds')
    parser.add_argument('--bidirectional', action='store_true',
                        help='Add reverse edges for ways not tagged oneway')
    parser.add_argument('--geopackage',
                        help='Also export the graph to this GeoPackage file')
    parser.add_argument('--config',
                        help='Path to a JSON configuration file (command line options override it)')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    return parser


def config_from_args(args):
    """Build the pipeline configuration from parsed arguments."""
    overrides = {
        'pbf_file': args.pbf_file,
        'steps': [
            {'name': 'export_csv', 'params': {'output_directory': args.output_dir}},
        ],
    }
    if args.bidirectional:
        overrides['steps'].append({'name': 'load_graph', 'params': {'bidirectional': True}})
    if args.geopackage:
        overrides['steps'].append({'name': 'export_geopackage', 'enabled': True,
                                   'params': {'path': args.geopackage}})
    if args.route:
        start, end = args.route
        overrides['steps'].append({'name': 'shortest_path',
                                   'params': {'start': start, 'end': end, 'deadline': args.deadline}})
    if args.log_level:
        overrides['logger'] = {'level': args.log_level}

    return PipelineConfig(config_dict=overrides, config_file=args.config)


def main(argv=None):
    args = build_parser().parse_args(argv)

    pipeline = None
    try:
        pipeline = Pipeline(config_from_args(args))
        context = pipeline.run()
    except Pbf2GraphError as e:
        failed = pipeline.failed_step() if pipeline is not None else None
        diagnostic = failed.describe_failure() if failed is not None else str(e)
        print(f"error: {diagnostic}", file=sys.stderr)
        return 1

    if args.route:
        if context['path'] is None:
            print("no path")
        else:
            print(' '.join(str(node_id) for node_id in context['path']))

    return 0


if __name__ == '__main__':
    sys.exit(main())
