import logging
import sys

DEFAULT_FORMAT = '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s'


def configure_logging(level=logging.INFO, format=None):
    """Configures the root logger once, leaving any existing configuration alone."""
    if logging.getLogger().handlers:
        return

    logging.basicConfig(
        level=level,
        format=format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
