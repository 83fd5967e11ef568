#! /usr/bin/env python3
import sys
import argparse

from matmul_bench import BenchmarkRunner, Configuration, CONFIGURATIONS
from experiment import ExpEngine, Matmul, CommandLine, Date, Platform, CPU, Temperature
from manip import generate_matrix, load_matrix, show_matrix, measure_all, ResultMismatch
from utils import logger, error, exponent_parser

def run_sweep(config, seed=None):
    logger.info('Benchmarking %s precision over exponents [%d, %d)' % (
        config.element_type, config.exponents.start, config.exponents.stop))
    return BenchmarkRunner(seed=seed).run_configuration(config)

def run_experiment(config, nb_runs, csv_file=None, compress=False, stat=False, seed=None):
    wrappers = [
            CommandLine(),
            Date(),
            Platform(),
            CPU(),
    ]
    if stat:
        wrappers.append(Temperature())
    app = Matmul(config, runner=BenchmarkRunner(seed=seed))
    return ExpEngine(application=app, wrappers=wrappers).run_all(
        nb_runs=nb_runs,
        csv_filename=csv_file,
        compress=compress,
    )

def build_parser():
    parser = argparse.ArgumentParser(
            description='Dense matrix multiplication benchmark')
    parser.add_argument('--precision', type=str, choices=list(CONFIGURATIONS),
            default='double', help='Element type of the matrices.')
    parser.add_argument('--exponents', type=exponent_parser,
            default=None, help='Range [lo, hi) of exponents, the sizes are 2**i (example: "10,14"). Defaults to the range of the chosen precision.')
    parser.add_argument('--seed', type=int,
            default=None, help='Seed of the random generator.')
    parser.add_argument('-n', '--nb_runs', type=int,
            default=1, help='Number of sweeps to perform.')
    parser.add_argument('--csv_file', type=str,
            default=None, help='Path of the CSV file for the results.')
    parser.add_argument('--compress', action='store_true',
            help='Also write a zip archive of the CSV file.')
    parser.add_argument('--stat', action='store_true',
            help='Include the CPU temperature in the results (requires a coretemp sensor).')
    return parser

def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.nb_runs < 1:
        error('the number of runs must be positive, got %d.' % args.nb_runs)
    if args.csv_file is None and args.compress:
        error('option --compress requires --csv_file.')
    if args.csv_file is None and args.stat:
        error('option --stat without --csv_file: the temperatures would be collected and then discarded.')
    if args.csv_file is not None and not args.csv_file.endswith('.csv'):
        error('the result file must have a .csv extension, got %s.' % args.csv_file)
    config = CONFIGURATIONS[args.precision]
    if args.exponents is not None:
        config = Configuration(config.element_type, args.exponents)
    if args.csv_file is None and args.nb_runs == 1:
        run_sweep(config, seed=args.seed)
    else:
        run_experiment(config, args.nb_runs, csv_file=args.csv_file,
                compress=args.compress, stat=args.stat, seed=args.seed)
    return 0

def main_double():
    run_sweep(CONFIGURATIONS['double'])
    return 0

def main_single():
    run_sweep(CONFIGURATIONS['single'])
    return 0

def build_manip_parser():
    parser = argparse.ArgumentParser(
            description='Generate, show and multiply matrices stored in files')
    subparsers = parser.add_subparsers(dest='command', required=True)
    generate = subparsers.add_parser('generate', help='Write a random matrix to a file.')
    generate.add_argument('width', type=int, help='Number of columns.')
    generate.add_argument('height', type=int, help='Number of rows.')
    generate.add_argument('file', type=str, help='Path of the matrix file.')
    generate.add_argument('--precision', type=str, choices=list(CONFIGURATIONS),
            default='single', help='Element type of the matrix.')
    generate.add_argument('--seed', type=int,
            default=None, help='Seed of the random generator.')
    show = subparsers.add_parser('show', help='Print a stored matrix.')
    show.add_argument('file', type=str, help='Path of the matrix file.')
    measure = subparsers.add_parser('measure', help='Time every multiplication method on two stored matrices.')
    measure.add_argument('input1', type=str, help='Path of the left matrix.')
    measure.add_argument('input2', type=str, help='Path of the right matrix.')
    return parser

def main_manip(argv=None):
    args = build_manip_parser().parse_args(argv)
    try:
        if args.command == 'generate':
            generate_matrix(args.width, args.height, args.file, args.precision, seed=args.seed)
            logger.info('Wrote a %dx%d matrix: %s' % (args.width, args.height, args.file))
        elif args.command == 'show':
            show_matrix(load_matrix(args.file))
        else:
            measure_all(load_matrix(args.input1), load_matrix(args.input2))
    except (OSError, ValueError, ResultMismatch) as e:
        error(str(e))
    return 0

if __name__ == '__main__':
    sys.exit(main())
