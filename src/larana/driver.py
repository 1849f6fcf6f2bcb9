"""larana driver class.

Takes care of everything in one centralized place:
- Data loading
- Analysis script execution
- Writing output to file
- Logging the resources used by each stage
"""

import os
import subprocess as sc
import time
from datetime import datetime

import numpy as np
import psutil
import yaml

from .ana import AnaManager
from .banner import ascii_logo
from .io import reader_factory, writer_factory
from .io.write import CSVWriter
from .utils.logger import logger
from .utils.stopwatch import StopwatchManager
from .version import __version__

__all__ = ["Driver"]


class Driver:
    """Central larana driver.

    Processes global configuration and runs the appropriate modules:
      1. Load data
      2. Run analysis scripts
      3. Write to file

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          <Base driver configuration>
        io:
          <Input/output configuration>
        ana:
          <Analysis scripts>
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        self.watch = StopwatchManager()
        self.watch.initialize("iteration")

        base, io, ana = self.process_config(**cfg)

        self.initialize_base(**base)

        self.initialize_io(**io)

        self.ana = None
        if ana is not None:
            self.watch.initialize("ana")
            self.ana = AnaManager(ana, log_dir=self.log_dir,
                                  prefix=self.log_prefix)

    def process_config(self, io, base=None, ana=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        io : dict
            I/O configuration dictionary
        base : dict, optional
            Base driver configuration dictionary
        ana : dict, optional
            Analysis script configuration dictionary

        Returns
        -------
        dict
            Processed configuration
        """
        if base is None:
            base = {}

        verbosity = base.get("verbosity", "info")
        logger.setLevel(verbosity.upper())

        # If the seed is not set, randomize it and keep a record of it
        if "seed" not in base or base["seed"] < 0:
            base["seed"] = int(time.time())
        else:
            assert isinstance(base["seed"], int), (
                f"The driver seed must be an integer, got: {base['seed']}"
            )

        self.cfg = {"base": base, "io": io}
        if ana is not None:
            self.cfg["ana"] = ana

        logger.info("\n%s", ascii_logo)
        logger.info("Release version: %s\n", __version__)

        system_info = sc.getstatusoutput("uname -a")[1]
        logger.info("Configuration processed at: %s\n", system_info)

        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, io, ana

    def initialize_base(self, seed, log_dir="logs", prefix_log=False,
                        overwrite_log=False, parent_path=None, iterations=None,
                        log_step=1, verbosity="info"):
        """Initialize the base driver parameters.

        Parameters
        ----------
        seed : int
            Random number generator seed
        log_dir : str, default 'logs'
            Path to the directory where the logs will be written to
        prefix_log : bool, default False
            If `True`, use the input file name to prefix the log name
        overwrite_log : bool, default False
            If `True`, overwrite log even if it already exists
        parent_path : str, optional
            Path to the parent directory of the configuration file
        iterations : int, optional
            Number of entries to process (-1 means all entries)
        log_step : int, default 1
            Number of iterations before the logging is called (1: every step)
        verbosity : str, default 'info'
            Verbosity level to pass to the `logging` module. Pick one of
            'debug', 'info', 'warning', 'error', 'critical'.
        """
        np.random.seed(seed)

        self.seed = seed
        self.log_dir = log_dir
        self.prefix_log = prefix_log
        self.overwrite_log = overwrite_log
        self.parent_path = parent_path
        self.iterations = iterations
        self.log_step = log_step

    def initialize_io(self, reader, writer=None):
        """Initializes the input/output scripts.

        Parameters
        ----------
        reader : dict
            Reader configuration dictionary
        writer : dict, optional
            Writer configuration dictionary
        """
        self.watch.initialize("read")
        self.reader = reader_factory(reader)

        # Fetch an appropriate common prefix for all input files
        self.log_prefix = self.get_prefix(self.reader.file_paths)

        self.writer = None
        if writer is not None:
            self.watch.initialize("write")
            self.writer = writer_factory(writer, prefix=self.log_prefix)

        if self.iterations is not None and self.iterations < 0:
            self.iterations = len(self.reader)

    @staticmethod
    def get_prefix(file_paths):
        """Builds an appropriate output prefix based on the list of input files.

        Parameters
        ----------
        file_paths : List[str]
            List of input file paths

        Returns
        -------
        str
            Shared input summary string to be used to prefix outputs
        """
        # Fetch file base names (ignore where they live)
        file_names = [os.path.splitext(os.path.basename(f))[0] for f in file_paths]

        prefix = os.path.commonprefix(file_names)
        if len(file_names) == 1:
            return prefix

        # Otherwise, assemble the name from the first and last file names
        sep = "--"
        suffix = os.path.commonprefix([f[::-1] for f in file_names])[::-1]
        if prefix == suffix:
            suffix = ""

        parts = [prefix] if prefix else []
        first = file_names[0][len(prefix):len(file_names[0]) - len(suffix)]
        if first:
            parts.append(first)
        if len(file_names) > 2:
            parts.append(f"{len(file_names) - 2}")
        last = file_names[-1][len(prefix):len(file_names[-1]) - len(suffix)]
        if last:
            parts.append(last)
        if suffix:
            parts.append(suffix)

        log_prefix = sep.join(parts)

        # Truncate file names that are too long
        max_length = 150
        if len(log_prefix) > max_length:
            log_prefix = log_prefix[:max_length - 3] + "---"

        return log_prefix

    def initialize_log(self):
        """Initialize the output log for this driver process."""
        if self.log_dir and not os.path.exists(self.log_dir):
            os.makedirs(self.log_dir, exist_ok=True)

        log_name = "larana_log.csv"
        if self.prefix_log:
            log_name = f"{self.log_prefix}_{log_name}"

        log_path = os.path.join(self.log_dir, log_name)
        self.logger = CSVWriter(log_path, overwrite=self.overwrite_log)

    def __len__(self):
        """Returns the number of entries in the underlying reader object.

        Returns
        -------
        int
            Number of selected entries in the reader
        """
        return len(self.reader)

    def __iter__(self):
        """Resets the counter and returns itself.

        Returns
        -------
        object
            The Driver itself
        """
        self.counter = 0

        return self

    def __next__(self):
        """Processes the next entry in the iterator.

        Returns
        -------
        dict
            Data dictionary of the entry
        """
        if self.counter < len(self):
            data = self.process(self.counter)
            self.counter += 1

            return data

        raise StopIteration

    def run(self):
        """Loop over the requested number of iterations, process them."""
        if self.iterations is None:
            self.iterations = len(self.reader)

        assert self.iterations <= len(self.reader), (
            f"Cannot process {self.iterations} iterations, the reader only "
            f"has {len(self.reader)} entries."
        )

        self.initialize_log()

        for iteration in range(self.iterations):
            tstamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

            data = self.process(entry=iteration)

            self.log(data, tstamp, iteration)

    def process(self, entry=None, run=None, subrun=None, event=None):
        """Process one entry.

        Run a single step of the driver: load the entry, pass it through
        the analysis scripts and append it to the output file.

        Parameters
        ----------
        entry : int, optional
            Entry number to load
        run : int, optional
            Run number to load
        subrun : int, optional
            Subrun number to load
        event : int, optional
            Event number to load

        Returns
        -------
        dict
            Data dictionary of the entry
        """
        # 0. Make sure there is no watch running, start the iteration timer
        if any(watch.running for watch in self.watch.values()):
            self.watch.reset()

        self.watch.start("iteration")

        # 1. Load data
        data = self.load(entry, run, subrun, event)

        # 2. Run scripts, if requested
        if self.ana is not None:
            self.watch.start("ana")
            self.ana(data)
            self.watch.stop("ana")
            self.watch.update(self.ana.watch, "ana")

        # 3. Write output to file, if requested
        if self.writer is not None:
            self.watch.start("write")
            self.writer(data, self.cfg)
            self.watch.stop("write")

        self.watch.stop("iteration")

        return data

    def load(self, entry=None, run=None, subrun=None, event=None):
        """Loads one entry to process.

        Parameters
        ----------
        entry : int, optional
            Entry number
        run : int, optional
            Run number
        subrun : int, optional
            Subrun number
        event : int, optional
            Event number

        Returns
        -------
        data: dict
            Data dictionary containing the input
        """
        assert (entry is not None) or (
            run is not None and subrun is not None and event is not None
        ), (
            "Provide either the entry number or the run, subrun "
            "and event number to read."
        )

        self.watch.start("read")
        if entry is not None:
            data = self.reader.get(entry)
        else:
            data = self.reader.get_run_event(run, subrun, event)
        self.watch.stop("read")

        return data

    def apply_filter(self, n_entry=None, n_skip=None, entry_list=None,
                     skip_entry_list=None, run_event_list=None,
                     skip_run_event_list=None):
        """Restrict the list of entries.

        Parameters
        ----------
        n_entry : int, optional
            Maximum number of entries to load
        n_skip : int, optional
            Number of entries to skip at the beginning
        entry_list : list, optional
            List of integer entry IDs to add to the index
        skip_entry_list : list, optional
            List of integer entry IDs to skip from the index
        run_event_list: list((int, int, int)), optional
            List of (run, subrun, event) triplets to add to the index
        skip_run_event_list: list((int, int, int)), optional
            List of (run, subrun, event) triplets to skip from the index
        """
        self.reader.process_entry_list(
            n_entry, n_skip, entry_list, skip_entry_list,
            run_event_list, skip_run_event_list
        )

    def log(self, data, tstamp, iteration):
        """Log relevant information to CSV files and stdout.

        Parameters
        ----------
        data : dict
            Dictionary of data products to extract scalars from
        tstamp : str
            Time when this iteration was run
        iteration : int
            Iteration counter
        """
        log_dict = {"iter": iteration, "entry": data["index"]}

        # Fetch the memory usage (in GB)
        memory = psutil.virtual_memory()
        log_dict["cpu_mem"] = memory.used / 1.0e9
        log_dict["cpu_mem_perc"] = memory.percent

        # Fetch the times
        suff = "_time"
        for key, watch in self.watch.items():
            time_last, time_sum = watch.time, watch.time_sum
            log_dict[f"{key}{suff}"] = time_last.wall
            log_dict[f"{key}{suff}_cpu"] = time_last.cpu
            log_dict[f"{key}{suff}_sum"] = time_sum.wall
            log_dict[f"{key}{suff}_sum_cpu"] = time_sum.cpu

        # Fetch all the scalar outputs
        for key, value in data.items():
            if np.isscalar(value) and key not in log_dict:
                log_dict[key] = value

        self.logger.append(log_dict)

        if ((iteration + 1) % self.log_step) == 0:
            t_iter = self.watch.time("iteration").wall
            logger.info(
                "Iter. %d (entry %d) @ %s\n  | Time: %0.2f s | "
                "CPU memory: %0.2f GB (%0.2f %%) |\n",
                iteration, data["index"], tstamp, t_iter,
                log_dict["cpu_mem"], log_dict["cpu_mem_perc"]
            )
