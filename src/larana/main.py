"""Main function that calls the Driver class.

This is the first module called when launching a binary script under the
`bin` directory. It takes care of setting up the `Driver` object used to run
the analysis scripts and writers.
"""

from .driver import Driver
from .utils.logger import logger

__all__ = ["run"]


def run(cfg):
    """Run the analysis in a single process.

    Parameters
    ----------
    cfg : dict
        Full driver configuration
    """
    base = cfg.get("base", None) or {}
    logger.setLevel(base.get("verbosity", "info").upper())

    driver = Driver(cfg)
    driver.run()

    return driver
