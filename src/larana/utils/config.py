"""Module in charge of loading larana configuration files.

On top of plain YAML, configuration files support:

- Including other files at the top level, merged before the local content:

  .. code-block:: yaml

      include: [base.yaml, pandora.yaml]

- Including a file as the value of a block: ``ana: !include ana.yaml``
- Overriding single nested parameters with dotted keys, applied last:

  .. code-block:: yaml

      ana.pmt_response.quantum_efficiency: 0.2
"""

import os
import re
from copy import deepcopy

import yaml

__all__ = ["load_config", "apply_overrides", "ConfigError", "ConfigCycleError"]

# Dotted keys identify single-parameter overrides
DOTTED_KEY = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)+$")


class ConfigError(Exception):
    """Raised when a configuration file cannot be assembled."""


class ConfigCycleError(ConfigError):
    """Raised when a configuration file ends up including itself."""

    def __init__(self, cycle_path):
        """Initialize with the chain of includes which closes the cycle.

        Parameters
        ----------
        cycle_path : List[str]
            List of file paths showing the include cycle
        """
        self.cycle_path = cycle_path
        cycle_str = " -> ".join(cycle_path)
        super().__init__(f"Circular include detected: {cycle_str}")


class ConfigLoader(yaml.SafeLoader):
    """YAML loader which resolves `!include` tags relative to the file."""

    def __init__(self, stream, include_stack=()):
        """Initialize the loader, record the directory of the loaded file.

        Parameters
        ----------
        stream : _io.TextIOWrapper
            Open configuration file
        include_stack : Tuple[str], optional
            Absolute paths of the files being loaded, outermost first
        """
        self._root = os.path.dirname(os.path.abspath(stream.name))
        self._include_stack = include_stack
        super().__init__(stream)

    def include(self, node):
        """Load the YAML file referred to by an `!include` tag.

        Parameters
        ----------
        node : yaml.ScalarNode
            Node holding the relative path to the file to include
        """
        path = os.path.join(self._root, self.construct_scalar(node))

        return load_config(path, self._include_stack)


ConfigLoader.add_constructor("!include", ConfigLoader.include)


def merge(base, update):
    """Recursively merges `update` into a copy of `base`.

    Parameters
    ----------
    base : dict
        Base configuration dictionary
    update : dict
        Configuration dictionary which takes precedence

    Returns
    -------
    dict
        Merged configuration dictionary
    """
    result = deepcopy(base)
    for key, value in update.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = value

    return result


def set_nested(cfg, path, value):
    """Sets a value deep inside a configuration dictionary.

    Parameters
    ----------
    cfg : dict
        Configuration dictionary, modified in place
    path : str
        Dot-separated path to the parameter (e.g. `io.reader.n_entry`)
    value : object
        Value to set
    """
    *parents, leaf = path.split(".")
    current = cfg
    for key in parents:
        # Empty YAML blocks load as None
        if current.get(key) is None:
            current[key] = {}
        current = current[key]
        if not isinstance(current, dict):
            raise ConfigError(f"Cannot set `{path}`: `{key}` is not a block.")

    current[leaf] = value


def parse_value(value):
    """Interprets a string override as a YAML scalar or collection.

    Parameters
    ----------
    value : object
        Raw value; strings are parsed with YAML, other types are returned as is

    Returns
    -------
    object
        Parsed value
    """
    if not isinstance(value, str):
        return value
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def apply_overrides(cfg, overrides):
    """Apply a list of `key.path=value` overrides to a configuration.

    Parameters
    ----------
    cfg : dict
        Configuration dictionary, modified in place
    overrides : List[str]
        List of overrides in the form `key.path=value`

    Returns
    -------
    dict
        Updated configuration dictionary
    """
    for override in overrides or []:
        if "=" not in override:
            raise ConfigError(
                f"Override `{override}` must be of the form `key.path=value`."
            )
        path, value = override.split("=", 1)
        set_nested(cfg, path.strip(), parse_value(value.strip()))

    return cfg


def load_config(cfg_path, include_stack=()):
    """Load a configuration file to a dictionary.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file
    include_stack : Tuple[str], optional
        Absolute paths of the files which (transitively) include this one

    Returns
    -------
    dict
        Configuration dictionary with includes and overrides resolved
    """
    if not os.path.isfile(cfg_path):
        raise FileNotFoundError(f"Configuration not found: {cfg_path}")

    # A file must not appear twice in its own chain of includes
    abs_path = os.path.abspath(cfg_path)
    if abs_path in include_stack:
        raise ConfigCycleError([*include_stack, abs_path])
    include_stack = (*include_stack, abs_path)

    with open(cfg_path, "r", encoding="utf-8") as cfg_file:
        loader = ConfigLoader(cfg_file, include_stack)
        try:
            raw = loader.get_single_data()
        finally:
            loader.dispose()

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"The configuration in {cfg_path} must be a mapping.")

    # Sort the top-level keys into includes, overrides and regular blocks
    includes = raw.pop("include", [])
    if isinstance(includes, str):
        includes = [includes]
    overrides = {k: raw.pop(k) for k in list(raw) if DOTTED_KEY.match(k)}

    # Included files first, in order, then the local blocks on top
    cfg = {}
    root = os.path.dirname(os.path.abspath(cfg_path))
    for path in includes:
        cfg = merge(cfg, load_config(os.path.join(root, path), include_stack))
    cfg = merge(cfg, raw)

    for path, value in overrides.items():
        set_nested(cfg, path, parse_value(value))

    return cfg
