"""Manages the operation of analysis scripts."""

from collections import OrderedDict
from copy import deepcopy

import numpy as np

from larana.utils.stopwatch import StopwatchManager

from .factories import ana_script_factory

__all__ = ["AnaManager"]


class AnaManager:
    """Manager class to initialize and execute analysis scripts.

    It loads all the analysis scripts and feeds them one entry at a time.
    Scripts run in decreasing order of priority. The products they return are
    added to the data dictionary, so downstream scripts (and the writer) can
    use them.
    """

    def __init__(self, cfg, log_dir=None, prefix=None):
        """Initialize the analysis manager.

        Parameters
        ----------
        cfg : dict
            Analysis script configurations
        log_dir : str, optional
            Output CSV file directory (shared with driver log)
        prefix : str, optional
            Input file prefix. If requested, it will be used to prefix
            all the output CSV files.
        """
        self.parse_config(log_dir, prefix, **cfg)

    def parse_config(self, log_dir, prefix, overwrite=None,
                     prefix_output=False, **modules):
        """Parse the analysis block configuration.

        Parameters
        ----------
        log_dir : str
            Output CSV file directory (shared with driver log)
        prefix : str
            Input file prefix. If requested, it will be used to prefix
            all the output CSV files.
        overwrite : bool, optional
            If `True`, overwrite the CSV tables if they already exist
        prefix_output : bool, default False
            If `True`, prefix the output CSV names with the input file name
        **modules : dict
            Analysis script configurations
        """
        # Fetch the priority of each module, -1 by default
        modules = deepcopy(modules)
        keys = np.array(list(modules.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, k in enumerate(keys):
            if "priority" in modules[k]:
                priorities[i] = modules[k].pop("priority")

        if not prefix_output:
            prefix = None

        # Stable sort to keep the configuration order at equal priority
        self.watch = StopwatchManager()
        self.modules = OrderedDict()
        for k in keys[np.argsort(-priorities, kind="stable")]:
            self.watch.initialize(k)
            self.modules[k] = ana_script_factory(
                k, modules[k], overwrite, log_dir, prefix
            )

    def __call__(self, data):
        """Pass one entry through the analysis scripts.

        Parameters
        ----------
        data : dict
            Dictionary of data products, updated in place
        """
        for key, module in self.modules.items():
            self.watch.start(key)
            result = module(data)
            self.watch.stop(key)

            if result is not None:
                data.update(result)
