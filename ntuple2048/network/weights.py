"""
Weight tables of the n-tuple network and their binary file format.

File layout, little-endian::

    uint32 table_count
    table_count times:
        uint64 element_count
        float32 values[element_count]
"""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import BinaryIO

from numpy import add, array, dtype, float32, frombuffer, ndarray, zeros

_logger = logging.getLogger(__name__)

# ##>: On-disk types.
COUNT_TYPE = dtype('<u4')
SIZE_TYPE = dtype('<u8')
VALUE_TYPE = dtype('<f4')


class WeightFileError(OSError):
    """A weight file could not be opened, or ended before all declared values were read."""


class WeightTable:
    """
    Dense float32 lookup table addressed by feature indices.

    Parameters
    ----------
    size : int
        Number of entries, zero-initialised.
    """

    def __init__(self, size: int):
        self.values: ndarray = zeros(int(size), dtype=float32)

    @classmethod
    def from_values(cls, values: ndarray) -> 'WeightTable':
        table = cls(0)
        table.values = values.astype(float32, copy=True)
        return table

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> float:
        return self.values[index]

    def __setitem__(self, index: int, value: float) -> None:
        self.values[index] = value

    def __repr__(self) -> str:
        return f'WeightTable(size={len(self.values)})'

    def add(self, indices: Sequence[int], delta: float) -> None:
        """Add ``delta`` at each index; an index listed twice receives it twice."""
        add.at(self.values, list(indices), float32(delta))

    def write(self, stream: BinaryIO) -> None:
        stream.write(array([len(self.values)], dtype=SIZE_TYPE).tobytes())
        stream.write(self.values.astype(VALUE_TYPE, copy=False).tobytes())

    @classmethod
    def read(cls, stream: BinaryIO) -> 'WeightTable':
        """
        Read one table from ``stream``.

        Raises
        ------
        WeightFileError
            If the stream ends inside the table.
        """
        size = int(frombuffer(_read_exact(stream, SIZE_TYPE.itemsize), dtype=SIZE_TYPE)[0])
        values = frombuffer(_read_exact(stream, size * VALUE_TYPE.itemsize), dtype=VALUE_TYPE)
        return cls.from_values(values)


def _read_exact(stream: BinaryIO, length: int) -> bytes:
    chunk = stream.read(length)
    if len(chunk) != length:
        raise WeightFileError(f'weight file truncated: wanted {length} bytes, got {len(chunk)}')
    return chunk


def parse_init_spec(info: str) -> list[int]:
    """
    Parse table sizes such as ``"65536,65536"``.

    Any run of non-digit characters separates two sizes, so ``"16^4 x 2"`` is read as ``[16, 4, 2]``.
    """
    return [int(size) for size in re.findall(r'\d+', info)]


def init_weights(sizes: Iterable[int]) -> list[WeightTable]:
    return [WeightTable(size) for size in sizes]


def load_weights(path: str) -> list[WeightTable]:
    """
    Read every table from a weight file.

    Raises
    ------
    WeightFileError
        If the file cannot be opened or is truncated.
    """
    try:
        stream = open(path, 'rb')
    except OSError as error:
        raise WeightFileError(f'cannot open weight file `{path}` for reading: {error}') from error

    with stream:
        count = int(frombuffer(_read_exact(stream, COUNT_TYPE.itemsize), dtype=COUNT_TYPE)[0])
        tables = [WeightTable.read(stream) for _ in range(count)]

    _logger.info('Loaded %d weight tables from %s', len(tables), path)
    return tables


def save_weights(path: str, tables: Sequence[WeightTable]) -> None:
    """
    Write every table to a weight file, replacing it.

    Raises
    ------
    WeightFileError
        If the file cannot be opened for writing.
    """
    try:
        stream = open(path, 'wb')
    except OSError as error:
        raise WeightFileError(f'cannot open weight file `{path}` for writing: {error}') from error

    with stream:
        stream.write(array([len(tables)], dtype=COUNT_TYPE).tobytes())
        for table in tables:
            table.write(stream)

    _logger.info('Saved %d weight tables to %s', len(tables), path)
