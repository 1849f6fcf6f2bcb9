"""Wall and CPU time bookkeeping for the processing stages."""

import time
from dataclasses import dataclass


@dataclass
class Time:
    """Wall and CPU time pair.

    Attributes
    ----------
    wall : float
        Wall time in seconds
    cpu : float
        CPU time in seconds
    """

    wall: float = 0.0
    cpu: float = 0.0

    def __add__(self, other):
        return Time(self.wall + other.wall, self.cpu + other.cpu)

    def __sub__(self, other):
        return Time(self.wall - other.wall, self.cpu - other.cpu)

    @classmethod
    def current(cls):
        """Returns the current wall and CPU times."""
        return cls(time.time(), time.process_time())


class Stopwatch:
    """Measures the time spent in one process, iteration after iteration."""

    def __init__(self):
        """Initialize an idle stopwatch."""
        self._start = None
        self._time = None
        self._total = Time()

    @property
    def running(self):
        """Whether the stopwatch is currently running."""
        return self._start is not None

    @property
    def time(self):
        """Time between the last start and the last stop."""
        if self._time is None:
            raise ValueError("Cannot get time of watch that has not been stopped.")

        return self._time

    @property
    def time_sum(self):
        """Sum of the times between every start/stop pair."""
        return self._total

    def start(self, now=None):
        """Starts the watch.

        Parameters
        ----------
        now : Time, optional
            Start time. If not specified, use the current time
        """
        if self.running:
            raise ValueError("Cannot restart a watch that has not been stopped.")

        self._start = now or Time.current()

    def stop(self, now=None):
        """Stops the watch and records the elapsed time.

        Parameters
        ----------
        now : Time, optional
            Stop time. If not specified, use the current time
        """
        if not self.running:
            raise ValueError("Cannot stop a watch that has not been started.")

        self._time = (now or Time.current()) - self._start
        self._total = self._total + self._time
        self._start = None


class StopwatchManager(dict):
    """Dictionary of named stopwatches."""

    def initialize(self, key):
        """Initialize one or more stopwatches, resetting existing ones.

        Parameters
        ----------
        key : Union[str, List[str]]
            Key or list of keys to initialize a stopwatch for
        """
        for k in [key] if isinstance(key, str) else key:
            self[k] = Stopwatch()

    def reset(self):
        """Reset all the stopwatches to their initial state."""
        for k in self:
            self[k] = Stopwatch()

    def start(self, key):
        """Starts the stopwatch registered under `key`."""
        if key not in self:
            raise KeyError(f"No stopwatch initialized under the name: {key}")

        self[key].start()

    def stop(self, key):
        """Stops the stopwatch registered under `key`."""
        if key not in self:
            raise KeyError(f"No stopwatch initialized under the name: {key}")

        self[key].stop()

    def time(self, key):
        """Returns the last time recorded by the stopwatch under `key`."""
        return self[key].time

    def update(self, other, prefix=None):
        """Adds the stopwatches of another manager to this one.

        Parameters
        ----------
        other : StopwatchManager
            Other set of stopwatches
        prefix : str, optional
            String to prefix the other stopwatch keys with
        """
        for key, value in other.items():
            self[key if prefix is None else f"{prefix}_{key}"] = value
