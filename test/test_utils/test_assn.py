"""Test the association table helpers."""

import numpy as np
import pytest

from larana.utils.assn import assn_key, find_many, find_many_index, product_key


class TestAssociations:
    """Test the resolution of association tables."""

    def test_keys(self):
        """Test the naming of products and associations."""
        assert product_key("pandora", "pfparticles") == "pandora_pfparticles"
        assert (assn_key("pandoraTrack", "pfparticles", "tracks")
                == "pandoraTrack_pfparticles_tracks_assn")

    def test_find_many_index(self):
        """Test that targets are grouped by source, in association order."""
        assn = np.array([[2, 1], [0, 3], [2, 0], [0, 2]])
        index = find_many_index(assn, 4, 4)

        assert len(index) == 4
        np.testing.assert_equal(index[0], [3, 2])
        assert len(index[1]) == 0
        np.testing.assert_equal(index[2], [1, 0])
        assert len(index[3]) == 0

    def test_empty(self):
        """Test empty tables and empty collections."""
        index = find_many_index(np.empty((0, 2)), 2)
        assert [len(i) for i in index] == [0, 0]
        assert find_many_index(np.empty((0, 2)), 0) == []

    def test_out_of_bounds(self):
        """Test that tables must refer to existing objects."""
        with pytest.raises(AssertionError):
            find_many_index(np.array([[3, 0]]), 2)
        with pytest.raises(AssertionError):
            find_many_index(np.array([[0, 5]]), 2, 2)

    def test_find_many(self):
        """Test that the target objects themselves are returned."""
        targets = ["a", "b", "c"]
        assert find_many(np.array([[1, 2], [1, 0]]), 2, targets) == [[], ["c", "a"]]
