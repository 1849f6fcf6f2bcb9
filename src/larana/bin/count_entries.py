#!/usr/bin/env python3
"""Counts the number of entries in a set of HDF5 event files."""

import argparse
import glob

import h5py


def main(source):
    """Checks the number of entries in a file/list of files.

    Parameters
    ----------
    source : List[str]
        Paths or glob patterns to the input files

    Returns
    -------
    int
        Total number of entries
    """
    file_paths = sorted({p for s in source for p in glob.glob(s)})

    total_entries = 0
    print(f"\nCounting entries in {len(file_paths)} files:")
    for file_path in file_paths:
        with h5py.File(file_path, "r") as in_file:
            num_entries = len(in_file["events"])

        print(f"- Counted {num_entries} entries in {file_path}")
        total_entries += num_entries

    print(f"\nTotal number of entries: {total_entries}")

    return total_entries


def cli():
    """Parses the command line arguments and counts the entries."""
    parser = argparse.ArgumentParser(description="Count entries in dataset")
    parser.add_argument(
        "source", help="Path or list of paths to data files", type=str, nargs="+"
    )
    args = parser.parse_args()

    main(args.source)


if __name__ == "__main__":
    cli()
