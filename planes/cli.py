import argparse
import logging
import os
import sys
import time

from planes.config import ConfigurationError, SimulationConfig, dump_settings, load_settings, parse_overrides
from planes.problem import Problem
from planes.simulation import Simulation

class readable_file(argparse.Action):
    """Defines a custom argparse Action to identify a readable file."""
    def __call__(self, parser, namespace, values, option_string=None):
        prospective_file = values
        if not os.path.isfile(prospective_file):
            raise argparse.ArgumentError(
                self, '{0} is not a valid file'.format(prospective_file)
            )
        if os.access(prospective_file, os.R_OK):
            setattr(namespace, self.dest, prospective_file)
        else:
            raise argparse.ArgumentError(
                self, '{0} is not a readable file'.format(prospective_file)
            )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='planes',
        description='Simulates a fleet of planes serving tasks allocated through max-sum'
    )
    parser.add_argument(
        'problem',
        nargs='?',
        help="JSON problem definition file."
    )
    parser.add_argument(
        '-d', '--dump-settings',
        action='store_true',
        help="dump the default settings to standard output. This can be used to prepare a settings file."
    )
    parser.add_argument(
        '-s', '--settings',
        action=readable_file,
        metavar='FILE',
        help="load settings from FILE."
    )
    parser.add_argument(
        '-o',
        dest='overrides',
        action='append',
        default=[],
        metavar='SETTING=VALUE',
        help="override SETTING with VALUE. May be given several times."
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help="disable all output except for results and errors."
    )
    parser.add_argument(
        '-t', '--dry-run',
        action='store_true',
        help="output only the resolved settings, but do not run the simulation."
    )
    parser.add_argument(
        '-r', '--results',
        metavar='DIR',
        help="directory where the simulation results are written."
    )
    parser.add_argument(
        '--plot',
        action='store_true',
        help="save a plot of the plane trajectories to the results directory."
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="log every allocation step."
    )
    return parser

def resolve_settings(args : argparse.Namespace) -> dict:
    """
    Merges the settings file, the command-line overrides and the quiet flag, in increasing order of precedence
    """
    settings = {}
    if args.settings is not None:
        settings.update(load_settings(args.settings))
    settings.update(parse_overrides(args.overrides))
    if args.quiet:
        settings['quiet'] = True
    return settings

def main(argv : list = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.dump_settings:
        sys.stdout.write(dump_settings())
        return 0

    level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s [%(levelname)s] %(message)s')
    logger = logging.getLogger('planes')

    try:
        config = SimulationConfig.from_dict(resolve_settings(args))
    except ConfigurationError as e:
        logger.error(f'invalid settings. {e}')
        return 2

    if args.dry_run:
        sys.stdout.write(dump_settings(config.to_dict()))
        return 0

    if args.problem is None:
        parser.print_help()
        return 1

    start_time = time.process_time()
    try:
        simulation = Simulation(Problem.from_json(args.problem), config, level=level, logger=logger)
    except ConfigurationError as e:
        logger.error(f'invalid settings. {e}')
        return 2
    except (OSError, TypeError, ValueError) as e:
        logger.error(f'unable to load problem `{args.problem}`. {e}')
        return 1

    simulation.run()

    if args.results is not None:
        results = simulation.print_results(args.results)
        if args.plot:
            from planes.plot2D import plot_trajectories
            plot_trajectories(results, os.path.join(args.results, 'trajectories.png'))

    logger.info(f'time taken to execute in seconds is {time.process_time() - start_time}')
    return 0 if not simulation.errors else 3

if __name__ == '__main__':
    sys.exit(main())
