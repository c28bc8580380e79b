import argparse
import logging
import pathlib
import pickle
from contextlib import redirect_stdout

from modeldedup.config import Config
from modeldedup.log import configure_logging
from modeldedup.orchestrator import Orchestrator


def deduplicate_snapshot(snapshot, config):
    """
    Deduplicates a snapshot dict in place. Recognized entries: keys,
    descriptors, models, vertex_formats and stats.
    """
    snapshot.setdefault('descriptors', {})
    snapshot.setdefault('models', {})
    return Orchestrator(config).run(
        snapshot.get('keys', ()),
        snapshot['descriptors'],
        snapshot['models'],
        vertex_formats=snapshot.get('vertex_formats', ()),
        stats=snapshot.get('stats', ()),
    )


def realmain(args):
    config = Config.from_args(args)

    data = args.snapshot.read_bytes()
    snapshot = pickle.loads(data)
    summary = deduplicate_snapshot(snapshot, config)
    print('Deduplicated:', summary.successfuls, 'Trimmed:', summary.trims,
          'Failed:', summary.failures, 'Index hits:', summary.eliminated)

    out = pickle.dumps(snapshot)
    print('Snapshot size: {:d} -> {:d} bytes'.format(len(data), len(out)))
    if args.output is not None:
        args.output.write_bytes(out)


def main():
    parser = argparse.ArgumentParser(description='Deduplicate a pickled model snapshot.')
    parser.add_argument('snapshot', metavar='snapshot', type=pathlib.Path,
                        help='Pickled dict of keys, descriptors and models.')
    parser.add_argument('-o', '--output', type=pathlib.Path, default=None,
                        help='Where to write the deduplicated snapshot.')
    parser.add_argument('-R', '--recursion', type=int, default=Config.max_recursion,
                        help='Maximum recursion depth. Default: %(default)s.')
    parser.add_argument('--step-every', type=int, default=Config.step_every,
                        help='Models per progress step. Default: %(default)s.')
    parser.add_argument('--no-dedup', action='store_true',
                        help="Don't deduplicate at all (only dump or wipe).")
    parser.add_argument('--no-models', action='store_true',
                        help="Don't deduplicate baked models.")
    parser.add_argument('--no-descriptors', action='store_true',
                        help="Don't deduplicate model descriptors.")
    parser.add_argument('--wipe-cache', action='store_true',
                        help='Drop all non-builtin model descriptors.')
    parser.add_argument('--dump', type=pathlib.Path, default=None, metavar='DIR',
                        help='Write model key reports into DIR.')
    parser.add_argument('--no-progress', action='store_true',
                        help='Hide progress bars.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log per-type statistics and recovered failures.')
    parser.add_argument('--profile', type=str, default=None,
                        help='Benchmark with cProfile.')

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.profile is not None:
        import cProfile
        p = cProfile.Profile()
        p.runcall(realmain, args)
        with open(args.profile, 'w') as f:
            with redirect_stdout(f):
                p.print_stats()

    else:
        realmain(args)

if __name__ == '__main__':
    main()
