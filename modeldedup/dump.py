import logging
import pathlib
from collections import defaultdict

from modeldedup.keys import ResourceKey

logger = logging.getLogger(__name__)

NAMES_FILE = 'baked_model_names.txt'
NAMESPACE_FILE = 'baked_model_counts_per_namespace.txt'
BLOCK_FILE = 'baked_model_counts_per_block.txt'


def count_keys(keys):
    """Returns (sorted names, per-namespace counts, per namespace:path counts)."""
    names = []
    per_namespace = defaultdict(int)
    per_block = defaultdict(int)

    for key in keys:
        rk = ResourceKey.of(key)
        names.append(str(key))
        per_namespace[rk.namespace] += 1
        per_block[rk.namespace + ':' + rk.path] += 1

    names.sort()
    return names, dict(per_namespace), dict(per_block)


def _by_count(counts):
    return ['{:s}: {:d}'.format(k, counts[k]) for k in sorted(counts, key=counts.get, reverse=True)]


def dump_key_reports(keys, out_dir='.'):
    """
    Writes three reports about the baked-model keys into `out_dir`. Errors
    are logged; the reports are diagnostics only.
    """
    names, per_namespace, per_block = count_keys(keys)
    out_dir = pathlib.Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        for filename, lines in ((NAMES_FILE, names),
                                (NAMESPACE_FILE, _by_count(per_namespace)),
                                (BLOCK_FILE, _by_count(per_block))):
            with (out_dir / filename).open('w') as f:
                for line in lines:
                    print(line, file=f)
    except OSError:
        logger.exception('Could not write model key reports to %s', out_dir)
        return False
    return True
