import math

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from backend.core_graph_managers.graphErrors import AttributeTypeError, DimensionMismatch


@dataclass(frozen=True)
class Category:
    """A categorical label, e.g. gender or relationship type."""
    label: str

    def __str__(self):
        return self.label


SEQUENCE_TYPES = (list, tuple, np.ndarray, pd.Series, pd.Index)


def normalize_value(value: Any):
    '''
    Coerce a value into the closed set of attribute value types:
    str, int, float, bool, Category, or None for "unset".
    '''
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, Category):
        return value
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.generic):
        return normalize_value(value.item())
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, (int, str)):
        return value
    raise AttributeTypeError(
        f"Unsupported attribute value {value!r} of type {type(value).__name__}."
    )


def is_value_sequence(values: Any) -> bool:
    return isinstance(values, SEQUENCE_TYPES)


class AttributeStore:
    '''
    Column-oriented attribute storage for one collection of graph elements
    (all nodes, or all edges).

    Each attribute key maps to a list holding one value per element, in the
    owning collection's canonical order. An element that never received a
    value for a key holds None.
    '''

    def __init__(self, size: int = 0):
        self._size = size
        self._columns: Dict[str, List[Any]] = {}

    def __len__(self):
        return self._size

    def keys(self) -> List[str]:
        return list(self._columns.keys())

    def has_attribute(self, key: str) -> bool:
        return key in self._columns

    def is_complete(self, key: str) -> bool:
        """True if every element holds a value for ``key``."""
        column = self._columns.get(key)
        if column is None or self._size == 0:
            return False
        return all(value is not None for value in column)

    '''
    Element lifecycle
    '''

    def prepare(self, attributes: Optional[dict]) -> dict:
        '''
        Normalise the attributes of a single element without storing them.

        A one-item sequence stands for its only value; any longer sequence
        fails with DimensionMismatch.
        '''
        prepared = {}
        for key, value in (attributes or {}).items():
            if is_value_sequence(value):
                value = list(value)
                if len(value) != 1:
                    raise DimensionMismatch(
                        f"Attribute '{key}' got {len(value)} values for 1 selected element."
                    )
                value = value[0]
            prepared[key] = normalize_value(value)
        return prepared

    def append(self, attributes: Optional[dict] = None):
        prepared = self.prepare(attributes)

        position = self._size
        self._size += 1
        for column in self._columns.values():
            column.append(None)
        for key, value in prepared.items():
            self.set(key, [position], value)
        return position

    def remove(self, positions: Sequence[int]):
        drop = set(positions)
        for key in list(self._columns.keys()):
            self._columns[key] = [v for i, v in enumerate(self._columns[key]) if i not in drop]
        self._size -= len(drop)
        self._purge_empty()

    def element(self, position: int) -> dict:
        """Attributes holding a value on a single element."""
        return {
            key: column[position]
            for key, column in self._columns.items()
            if column[position] is not None
        }

    '''
    Attribute access
    '''

    def set(self, key: str, positions: Sequence[int], values: Any):
        '''
        Assign a value to ``key`` on the elements at ``positions``.

        A sequence of values is assigned element-wise in selection order and
        must have exactly one value per selected element. Any other value is
        broadcast to every selected element.
        '''
        positions = list(positions)
        if is_value_sequence(values):
            values = list(values)
            if len(values) != len(positions):
                raise DimensionMismatch(
                    f"Attribute '{key}' got {len(values)} values for {len(positions)} selected elements."
                )
            normalized = [normalize_value(v) for v in values]
        else:
            normalized = [normalize_value(values)] * len(positions)

        column = self._columns.get(key)
        if column is None:
            if all(v is None for v in normalized):
                return
            column = [None] * self._size
            self._columns[key] = column

        for position, value in zip(positions, normalized):
            column[position] = value
        self._purge_empty()

    def get(self, key: str, positions: Optional[Sequence[int]] = None) -> List[Any]:
        column = self._columns.get(key)
        if positions is None:
            positions = range(self._size)
        if column is None:
            return [None for _ in positions]
        return [column[position] for position in positions]

    def delete(self, key: str, positions: Optional[Sequence[int]] = None):
        if key not in self._columns:
            return
        if positions is None:
            del self._columns[key]
            return
        column = self._columns[key]
        for position in positions:
            column[position] = None
        self._purge_empty()

    def copy(self) -> "AttributeStore":
        clone = AttributeStore(self._size)
        clone._columns = {key: list(column) for key, column in self._columns.items()}
        return clone

    def _purge_empty(self):
        # Keys with no remaining values are treated as never set
        for key in list(self._columns.keys()):
            if all(value is None for value in self._columns[key]):
                del self._columns[key]
