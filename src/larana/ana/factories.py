"""Construct an analysis script module class from its name."""

from larana.utils.factory import instantiate, module_dict

from . import optical, pandora, truth

# Build a dictionary of available analysis scripts
ANA_DICT = {}
for module in [optical, pandora, truth]:
    ANA_DICT.update(**module_dict(module))

__all__ = ["ana_script_factory"]


def ana_script_factory(name, cfg, overwrite=None, log_dir=None, prefix=None):
    """Instantiates an analysis script from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the analysis script
    cfg : dict
        Analysis script configuration
    overwrite : bool, optional
        If `True`, overwrite the CSV tables if they already exist
    log_dir : str, optional
        Output CSV file directory (shared with driver log)
    prefix : str, optional
        Input file prefix. If requested, it will be used to prefix
        all the output CSV files.

    Returns
    -------
    object
         Initialized analysis script
    """
    # The block key is the script name, unless explicitly provided
    cfg = dict(cfg)
    cfg.setdefault("name", name)

    if overwrite is not None:
        return instantiate(
            ANA_DICT, cfg, overwrite=overwrite, log_dir=log_dir, prefix=prefix
        )

    return instantiate(ANA_DICT, cfg, log_dir=log_dir, prefix=prefix)
