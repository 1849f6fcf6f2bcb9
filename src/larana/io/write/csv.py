"""Module to write analysis tables (trees) to CSV files."""

import os

__all__ = ["CSVWriter"]


class CSVWriter:
    """Writes rows of scalar values to a CSV file.

    Each analysis table is stored in its own CSV file. The header is built
    from the keys of the first row; every later row must provide the same
    keys (missing ones may be tolerated, extra ones never are).

    Typical configuration should look like:

    .. code-block:: yaml

        io:
          ...
          writer:
            name: csv
            file_name: output.csv
    """

    name = "csv"

    def __init__(self, file_name="output.csv", overwrite=False, append=False,
                 accept_missing=False):
        """Check the output path and, when appending, load the header.

        Parameters
        ----------
        file_name : str, default 'output.csv'
            Path to the output CSV file
        overwrite : bool, default False
            If `True`, replace the output file if it already exists
        append : bool, default False
            If `True`, add rows to an existing CSV file
        accept_missing : bool, default False
            If `True`, missing keys are filled with -1
        """
        if not overwrite and not append and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        self.file_name = file_name
        self.append_file = append
        self.accept_missing = accept_missing
        self.result_keys = None
        if self.append_file:
            if not os.path.isfile(file_name):
                raise FileNotFoundError(
                    f"File not found at path: {file_name}. When using "
                    "`append=True` in CSVWriter, the file must exist at "
                    "the prescribed path before data is written to it."
                )

            with open(self.file_name, "r", encoding="utf-8") as out_file:
                self.result_keys = out_file.readline().strip().split(",")

    def create(self, row):
        """Writes the header of the CSV file and records its keys.

        Parameters
        ----------
        row : dict
            First row to be written to the file
        """
        self.result_keys = list(row.keys())
        with open(self.file_name, "w", encoding="utf-8") as out_file:
            out_file.write(",".join(self.result_keys) + "\n")

    def append(self, row):
        """Appends one row to the CSV file.

        Parameters
        ----------
        row : dict
            Dictionary of scalar values, one per column
        """
        if self.result_keys is None:
            self.create(row)

        elif list(row.keys()) != self.result_keys:
            missing = self.array_diff(self.result_keys, row.keys())
            excess = self.array_diff(row.keys(), self.result_keys)
            if excess:
                raise AssertionError(
                    "There are keys in this row which were not present when "
                    f"the CSV file was initialized. New keys: {sorted(excess)}"
                )

            if missing and not self.accept_missing:
                raise AssertionError(
                    "There are keys missing in this row which were present "
                    "when the CSV file was initialized. "
                    f"Missing keys: {sorted(missing)}"
                )

            row = {k: row.get(k, -1) for k in self.result_keys}

        with open(self.file_name, "a", encoding="utf-8") as out_file:
            out_file.write(",".join(str(row[k]) for k in self.result_keys) + "\n")

    @staticmethod
    def array_diff(array_x, array_y):
        """Returns the elements of the first array absent from the second.

        Parameters
        ----------
        array_x : List[str]
            First array of strings
        array_y : List[str]
            Second array of strings

        Returns
        -------
        Set[str]
            Keys that appear in `array_x` but not in `array_y`
        """
        return set(array_x).difference(set(array_y))
