#!/usr/bin/env python3
"""Command line entry point of the analysis driver."""

import argparse
import pathlib

from larana.utils.config import apply_overrides, load_config


def main(config, source, source_list, output, n, nskip, log_dir,
         config_overrides):
    """Main driver for the analysis.

    Performs these basic functions:
    - Update the configuration with the command-line arguments
    - Run the driver

    Parameters
    ----------
    config : str
        Path to the configuration file
    source : List[str]
        List of paths to the input files
    source_list : str
        Path to a text file containing a list of data file paths
    output : str
        Path to the output file
    n : int
        Number of entries to process
    nskip : int
        Number of entries to skip
    log_dir : str
        Path to the directory for storing the logs and output tables
    config_overrides : List[str]
        List of config overrides in the form "key.path=value"
    """
    cfg = load_config(config)

    if "base" not in cfg or cfg["base"] is None:
        cfg["base"] = {}

    # Propagate the configuration parent directory to enable relative paths
    cfg["base"]["parent_path"] = str(pathlib.Path(config).parent)

    if "io" not in cfg or "reader" not in cfg["io"]:
        raise KeyError(
            "Configuration file must contain an `io` block with a `reader`."
        )

    # Override the input command-line information into the configuration
    io_mapping = {
        "file_keys": source if source is not None else source_list,
        "n_entry": n,
        "n_skip": nskip,
    }
    for io_key, io_value in io_mapping.items():
        if io_value is not None:
            cfg["io"]["reader"][io_key] = io_value

    if output is not None:
        if "writer" not in cfg["io"]:
            raise KeyError(
                "--output flag provided: must specify a `writer` in the "
                "`io` block."
            )
        cfg["io"]["writer"]["file_name"] = output

    if log_dir is not None:
        cfg["base"]["log_dir"] = log_dir

    apply_overrides(cfg, config_overrides)

    # Import the driver only once the configuration is ready
    from larana.main import run

    run(cfg)


def cli():
    """Parses the command line arguments and runs the driver."""
    parser = argparse.ArgumentParser(
        description="larana - LArTPC event analysis scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  larana-run -c config.yaml                              Run the analysis
  larana-run -c config.yaml -s events_*.h5 -n 10         Process 10 entries
  larana-run -c config.yaml --set ana.pmt_response.seed=3   Override parameters
""",
    )

    parser.add_argument(
        "--version", "-v", action="version", version=f"larana {get_version()}"
    )

    parser.add_argument(
        "-c", "--config", required=True, help="Path to the configuration file"
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-s", "--source", nargs="+", type=str,
        help="List of paths to the input files"
    )
    group.add_argument(
        "-S", "--source-list",
        help="Path to a text file containing a list of data file paths"
    )

    parser.add_argument("-o", "--output", help="Path to the output file")

    parser.add_argument(
        "-n", "--iterations", type=int, help="Number of entries to process"
    )
    parser.add_argument("--nskip", type=int, help="Number of entries to skip")

    parser.add_argument(
        "--log-dir", help="Path to the directory for storing the logs"
    )

    parser.add_argument(
        "--set", action="append", dest="config_overrides", metavar="KEY=VALUE",
        help="Override any config parameter using dot notation "
             "(e.g., --set io.reader.n_entry=8). "
             "Can be used multiple times for multiple overrides."
    )

    args = parser.parse_args()

    main(
        config=args.config,
        source=args.source,
        source_list=args.source_list,
        output=args.output,
        n=args.iterations,
        nskip=args.nskip,
        log_dir=args.log_dir,
        config_overrides=args.config_overrides,
    )


def get_version():
    """Get the release version."""
    from larana.version import __version__

    return __version__


if __name__ == "__main__":
    cli()
