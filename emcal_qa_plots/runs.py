# runs.py
"""
emcal_qa_plots runs

Description: The run registry, an ordered table of runs with the color used
  to draw each run and its sub-event-buffer (SEB) count.
"""

from collections import namedtuple, OrderedDict

from matplotlib.colors import is_color_like

from .errors import BadConfig, DuplicateRun, UnknownRun

RunMeta = namedtuple('RunMeta', ['color', 'seb_count'])


def _unpack_entry(entry):
    """Accepts (run, color, seb_count) tuples or dicts with those keys."""
    if isinstance(entry, dict):
        try:
            return entry['run'], entry['color'], entry['seb_count']
        except KeyError as e:
            raise BadConfig(f"Run registry entry {entry} is missing key {e}") from e
    try:
        run, color, seb_count = entry
    except (TypeError, ValueError) as e:
        raise BadConfig(f"Run registry entry {entry!r} is not (run, color, seb_count)") from e
    return run, color, seb_count


class RunRegistry:
    """
    Ordered mapping RunId -> RunMeta. Iteration follows the order the runs
    were given in, which is also the overlay drawing order.
    """
    def __init__(self, entries):
        self._runs = OrderedDict()
        for entry in entries:
            run, color, seb_count = _unpack_entry(entry)
            run = str(run)
            if run in self._runs:
                raise DuplicateRun(run)
            # bool is an int subclass, reject it explicitly
            if isinstance(seb_count, bool) or not isinstance(seb_count, int) or seb_count <= 0:
                raise BadConfig(f"SEB count for run {run} must be a positive integer, got {seb_count!r}")
            if not is_color_like(color):
                raise BadConfig(f"Color {color!r} for run {run} is not a valid matplotlib color")
            self._runs[run] = RunMeta(color, seb_count)

        if not self._runs:
            raise BadConfig("Run registry is empty")

    def runs(self):
        return tuple(self._runs)

    def meta(self, run):
        try:
            return self._runs[str(run)]
        except KeyError:
            raise UnknownRun(run) from None

    def __len__(self):
        return len(self._runs)

    def __iter__(self):
        return iter(self._runs)

    def __contains__(self, run):
        return str(run) in self._runs
