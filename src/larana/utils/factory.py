"""Functions used to turn configuration blocks into class instances.

A configuration block is a dictionary with a `name` entry (the class to build)
and any number of keyword arguments:

.. code-block:: yaml

    reader:
      name: hdf5
      file_keys: /path/to/events_*.h5
      n_entry: 100
"""

from copy import deepcopy

from .logger import logger


def module_dict(module, pattern=None):
    """Builds a dictionary which maps class names (and aliases) onto classes.

    Only classes which are defined in (a submodule of) `module` are
    considered. A class registers under its python name, under its `name`
    class attribute and under each of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes
    pattern : str, optional
        If specified, only keep classes whose name contain this pattern

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    classes = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        # Skip private objects
        if cls_name.startswith("_"):
            continue

        # Skip objects which were only imported into the module
        cls = getattr(module, cls_name)
        if not isinstance(cls, type) or module.__name__ not in cls.__module__:
            continue

        if pattern is not None and pattern not in cls.__name__:
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            classes[alias] = cls

    return classes


def instantiate(classes, cfg, alt_name=None, **kwargs):
    """Instantiates a class from a configuration block.

    The block may either be a plain string (class name, no arguments) or a
    dictionary with the class name under `name` (or `alt_name`). Arguments
    are provided at the top level of the block or under `args`/`kwargs`.

    Parameters
    ----------
    classes : dict
        Dictionary which maps a class name onto a class
    cfg : Union[str, dict]
        Configuration block
    alt_name : str, optional
        Key under which the class name can be specified, beside `name`
    **kwargs : dict, optional
        Additional keyword arguments to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    # A string is a class name without parameters
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    # Fetch the class name
    config = deepcopy(cfg)
    name_key = "name"
    if alt_name is not None:
        assert (alt_name in config) ^ ("name" in config), (
            f"Should specify one of `name` or `{alt_name}`, not both."
        )
        if alt_name in config:
            name_key = alt_name

    assert name_key in config, (
        f"Could not find the name of the class under `{name_key}`."
    )
    class_name = config.pop(name_key)
    if class_name not in classes:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps "
            f"names to classes. Available names: {list(classes.keys())}"
        )

    # Combine the arguments provided at each level
    args = config.pop("args", [])
    block_kwargs = config.pop("kwargs", {})
    for key in config:
        assert key not in block_kwargs, (
            f"The keyword argument `{key}` is provided both at the top "
            "level and under `kwargs`. Ambiguous."
        )
    all_kwargs = {**block_kwargs, **config, **kwargs}

    cls = classes[class_name]
    try:
        return cls(*args, **all_kwargs)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments:\n"
            "  - args: %s\n  - kwargs: %s",
            cls.__name__, args, all_kwargs
        )
        raise err
