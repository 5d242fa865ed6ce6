from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np


class SampleRingBuffer:
    """
    Fixed-capacity circular store of raw int16 samples.

    Storage is preallocated once and never grows. `push` overwrites the oldest
    samples when full; `latest` reads the most recent samples back in
    chronological order. Instances are not thread-safe: the owning detector
    serializes access from the acquisition tick.
    """

    def __init__(self, capacity: int, dtype: Union[np.dtype, str] = np.int16) -> None:
        capacity = int(capacity)
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._data = np.zeros(capacity, dtype=dtype)
        self._write_pos = 0
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        """Number of valid samples, saturating at `capacity`."""
        return self._count

    @property
    def write_pos(self) -> int:
        """Index of the next slot to be written."""
        return self._write_pos

    @property
    def is_full(self) -> bool:
        return self._count == self._capacity

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def push(self, samples: Union[np.ndarray, Sequence[int]], count: Optional[int] = None) -> int:
        """
        Append samples in order, handling wrap-around.

        Only the first `count` entries of `samples` are used (all of them when
        `count` is None). Pushing more than `capacity` samples keeps the most
        recent `capacity` while the cursor still advances by the full count.
        Returns the number of samples consumed. Integer storage rejects
        non-integer or out-of-range samples with ValueError instead of
        truncating them.
        """
        arr = np.asarray(samples).reshape(-1)
        if arr.size and arr.dtype != self._data.dtype and self._data.dtype.kind in "iu":
            if arr.dtype.kind not in "iu":
                raise ValueError(f"samples must be integers, got {arr.dtype}")
            if not np.can_cast(arr.dtype, self._data.dtype):
                info = np.iinfo(self._data.dtype)
                if arr.min() < info.min or arr.max() > info.max:
                    raise ValueError(f"samples out of {self._data.dtype} range")
        n = arr.shape[0] if count is None else max(0, min(int(count), arr.shape[0]))
        if n == 0:
            return 0

        capacity = self._capacity
        data = arr[:n]
        start = self._write_pos
        if n > capacity:
            start = (start + n - capacity) % capacity
            data = data[n - capacity:]

        length = data.shape[0]
        end = start + length
        if end <= capacity:
            self._data[start:end] = data
        else:
            first = capacity - start
            self._data[start:] = data[:first]
            self._data[: end - capacity] = data[first:]

        self._write_pos = (self._write_pos + n) % capacity
        self._count = min(capacity, self._count + n)
        return n

    def latest(self, length: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Return the `length` most recent samples, oldest first.

        When `out` is given the samples are cast into its first `length`
        entries and that slice is returned; otherwise a new array is allocated.
        """
        length = int(length)
        if length <= 0:
            raise ValueError("length must be positive")
        if length > self._count:
            raise ValueError("length exceeds the number of buffered samples")

        if out is None:
            out = np.empty(length, dtype=self._data.dtype)
        elif out.shape[0] < length:
            raise ValueError("out is smaller than the requested length")
        dest = out[:length]

        start = (self._write_pos - length) % self._capacity
        end = start + length
        if end <= self._capacity:
            dest[:] = self._data[start:end]
        else:
            first = self._capacity - start
            dest[:first] = self._data[start:]
            dest[first:] = self._data[: end - self._capacity]
        return dest

    def clear(self) -> None:
        self._data.fill(0)
        self._write_pos = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count


__all__ = ["SampleRingBuffer"]
