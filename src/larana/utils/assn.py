"""Helpers to resolve association tables between data products.

An association table is an (N, 2) integer array of (source index, target
index) pairs. It ties objects of one collection (e.g. particles) to the
objects of another collection (e.g. tracks) built by some producer.
"""

import numpy as np

__all__ = ["product_key", "assn_key", "find_many", "find_many_index"]


def product_key(label, product):
    """Name of the data product `product` made by the producer `label`.

    Parameters
    ----------
    label : str
        Producer label (e.g. `pandora`)
    product : str
        Product name (e.g. `pfparticles`)

    Returns
    -------
    str
        Data product key
    """
    return f"{label}_{product}"


def assn_key(label, source, target):
    """Name of the association table between two products made by `label`.

    Parameters
    ----------
    label : str
        Label of the producer which made the association
    source : str
        Source product name (e.g. `pfparticles`)
    target : str
        Target product name (e.g. `tracks`)

    Returns
    -------
    str
        Association table key
    """
    return f"{label}_{source}_{target}_assn"


def find_many_index(assn, num_sources, num_targets=None):
    """Lists the target indexes associated with each source object.

    Parameters
    ----------
    assn : np.ndarray
        (N, 2) Association table of (source index, target index) pairs
    num_sources : int
        Number of objects in the source collection
    num_targets : int, optional
        Number of objects in the target collection, used to check bounds

    Returns
    -------
    List[np.ndarray]
        One array of target indexes per source object, in association order
    """
    assn = np.asarray(assn, dtype=np.int64).reshape(-1, 2)
    if num_sources == 0:
        assert not len(assn), "Cannot associate objects to an empty collection."
        return []

    if len(assn):
        assert assn[:, 0].min() >= 0 and assn[:, 0].max() < num_sources, (
            "The association table refers to source objects which are "
            f"not in the source collection of size {num_sources}."
        )
        assert num_targets is None or (
            assn[:, 1].min() >= 0 and assn[:, 1].max() < num_targets
        ), (
            "The association table refers to target objects which are "
            f"not in the target collection of size {num_targets}."
        )

    # Stable sort by source keeps the association order within each source
    perm = np.argsort(assn[:, 0], kind="stable")
    counts = np.bincount(assn[:, 0], minlength=num_sources)

    return np.split(assn[perm, 1], np.cumsum(counts)[:-1])


def find_many(assn, num_sources, targets):
    """Lists the target objects associated with each source object.

    Parameters
    ----------
    assn : np.ndarray
        (N, 2) Association table of (source index, target index) pairs
    num_sources : int
        Number of objects in the source collection
    targets : List[object]
        Target collection

    Returns
    -------
    List[List[object]]
        One list of associated target objects per source object
    """
    index = find_many_index(assn, num_sources, len(targets))

    return [[targets[i] for i in idx] for idx in index]
