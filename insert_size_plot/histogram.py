"""
Fixed-size insert size histogram.

The counts live in one preallocated numpy array indexed directly by insert
size, ``0..max_insert_size`` inclusive. Anything larger goes to a single
overflow counter, so memory stays proportional to the cap whatever the input
reports.
"""

import numbers

import numpy as np
import pandas as pd

DEFAULT_MAX_INSERT_SIZE = 500


class InsertSizeHistogram:

    def __init__(self, max_insert_size=DEFAULT_MAX_INSERT_SIZE):
        if isinstance(max_insert_size, bool) or not isinstance(max_insert_size, numbers.Integral):
            raise TypeError(f'max_insert_size must be an integer, got {max_insert_size!r}')
        if max_insert_size < 0:
            raise ValueError(f'max_insert_size must not be negative, got {max_insert_size}')
        self._max_insert_size = int(max_insert_size)
        self.counts = np.zeros(self._max_insert_size + 1, dtype=np.int64)
        self.overflow = 0
        # sum of the overflowed values, keeps the overall mean exact
        self.overflow_sum = 0

    @property
    def max_insert_size(self):
        return self._max_insert_size

    def record(self, sample):
        if sample < 0:
            raise ValueError(f'insert size must not be negative, got {sample}')
        if sample <= self._max_insert_size:
            self.counts[sample] += 1
        else:
            self.overflow += 1
            self.overflow_sum += sample

    @property
    def in_range_total(self):
        return int(self.counts.sum())

    @property
    def total(self):
        return self.in_range_total + self.overflow

    def merge(self, other):
        """Return a new histogram holding the element-wise sum of both."""
        if not isinstance(other, InsertSizeHistogram):
            return NotImplemented
        if other.max_insert_size != self._max_insert_size:
            raise ValueError(
                f'cannot merge histograms with different caps '
                f'({self._max_insert_size} and {other.max_insert_size})')
        merged = InsertSizeHistogram(self._max_insert_size)
        merged.counts = self.counts + other.counts
        merged.overflow = self.overflow + other.overflow
        merged.overflow_sum = self.overflow_sum + other.overflow_sum
        return merged

    __add__ = merge

    def to_frame(self):
        return pd.DataFrame({
            "insert_size": np.arange(self._max_insert_size + 1),
            "count": self.counts,
        })

    def __eq__(self, other):
        if not isinstance(other, InsertSizeHistogram):
            return NotImplemented
        return (self._max_insert_size == other.max_insert_size
                and self.overflow == other.overflow
                and self.overflow_sum == other.overflow_sum
                and np.array_equal(self.counts, other.counts))

    __hash__ = None

    def __repr__(self):
        return (f'InsertSizeHistogram(max_insert_size={self._max_insert_size}, '
                f'in_range={self.in_range_total}, overflow={self.overflow})')
