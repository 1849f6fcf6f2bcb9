"""Functions that instantiate IO tools from configuration blocks."""

from larana.utils.factory import instantiate, module_dict

from . import read, write

READER_DICT = module_dict(read)

# Only writers which store complete data dictionaries can be used by the
# driver, CSV writers are owned by the analysis scripts.
WRITER_DICT = module_dict(write, pattern="HDF5")

__all__ = ["reader_factory", "writer_factory"]


def reader_factory(reader_cfg):
    """Instantiates a reader based on the type specified in the configuration
    under `io.reader.name`. The name must match the name of a class under
    `larana.io.read`.

    Parameters
    ----------
    reader_cfg : dict
        Reader configuration dictionary

    Returns
    -------
    object
        Reader object
    """
    return instantiate(READER_DICT, reader_cfg)


def writer_factory(writer_cfg, prefix=None):
    """Instantiates a writer based on the type specified in the configuration
    under `io.writer.name`. The name must match the name of a class under
    `larana.io.write`.

    Parameters
    ----------
    writer_cfg : dict
        Writer configuration dictionary
    prefix : str, optional
        Input file prefix to use as an output name

    Returns
    -------
    object
        Writer object

    Note
    ----
    Currently the choice is limited to `HDF5Writer` only.
    """
    return instantiate(WRITER_DICT, writer_cfg, prefix=prefix)
