"""
Dataset source for ChiMerge.

Holds data tuples (attribute values..., class label) with the class label
last, and the list of class labels in first-seen order. The default file
layout is the IRIS one: header-less comma-separated rows, numeric
attribute columns, and the class name in the last column.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import ChiMergeConfig
from .exceptions import ConfigurationError
from .table import IntervalTable, first_seen_labels

logger = logging.getLogger(__name__)


class Dataset:
    """
    Data tuples plus class list, and the tables discretized from them.

    Parameters:
        data: Tuples (attribute values..., class label)
        class_list: Class labels in index order (default: first-seen order)
        column_names: Optional names of the attribute columns

    Attributes:
        data: List of tuples, class label last
        class_list: Distinct class labels in first-seen order
        column_names: Attribute column names
        tables: Discretized IntervalTable per attribute column
    """

    def __init__(
        self,
        data: Iterable[Sequence[Any]],
        class_list: Optional[Sequence[Hashable]] = None,
        column_names: Optional[Sequence[str]] = None
    ):
        self.data = [tuple(row) for row in data]

        widths = {len(row) for row in self.data}
        if len(widths) > 1:
            raise ConfigurationError(f"Rows have inconsistent widths: {sorted(widths)}")
        if widths and min(widths) < 2:
            raise ConfigurationError("Rows need at least one attribute and a class label")
        self.n_attributes = widths.pop() - 1 if widths else 0

        self.class_list = list(class_list) if class_list is not None else first_seen_labels(self.data)

        if column_names is None:
            column_names = [f"X{i}" for i in range(self.n_attributes)]
        if len(column_names) != self.n_attributes:
            raise ConfigurationError(
                f"Expected {self.n_attributes} column names, got {len(column_names)}"
            )
        self.column_names = list(column_names)

        self.tables: Dict[int, IntervalTable] = {}
        logger.info(
            "Loaded dataset with %d tuples, %d attribute(s), %d class(es)",
            len(self.data), self.n_attributes, len(self.class_list)
        )

    def __len__(self) -> int:
        return len(self.data)

    @property
    def attribute_columns(self) -> range:
        """Indices of the attribute columns."""
        return range(self.n_attributes)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        class_column: Optional[Hashable] = None
    ) -> 'Dataset':
        """
        Build a dataset from a DataFrame.

        Args:
            frame: One column per attribute plus a class column
            class_column: Name of the class column (default: last column)

        Returns:
            Dataset with attributes as floats
        """
        if class_column is None:
            class_column = frame.columns[-1]
        if class_column not in frame.columns:
            raise ConfigurationError(f"Class column {class_column!r} not in frame")

        attribute_columns = [col for col in frame.columns if col != class_column]
        try:
            attributes = frame[attribute_columns].apply(pd.to_numeric).astype(float)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Attribute columns must be numeric: {exc}") from exc

        labels = frame[class_column].tolist()
        rows = [
            tuple(values) + (label,)
            for values, label in zip(attributes.itertuples(index=False, name=None), labels)
        ]
        return cls(
            rows,
            class_list=list(pd.unique(frame[class_column])),
            column_names=[str(col) for col in attribute_columns]
        )

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        class_column: int = -1
    ) -> 'Dataset':
        """
        Parse a header-less comma-separated file.

        Blank lines are skipped. Attribute columns are read as floats and the
        class column as stripped strings.

        Args:
            path: File to read
            class_column: Position of the class column (default: last)

        Returns:
            Dataset
        """
        frame = pd.read_csv(path, header=None, skip_blank_lines=True, skipinitialspace=True)
        frame = frame.dropna(how="all").copy()

        n_columns = frame.shape[1]
        if not (-n_columns <= class_column < n_columns):
            raise ConfigurationError(
                f"Class column {class_column} out of range for {n_columns} column(s)"
            )
        class_column = class_column % n_columns
        frame[class_column] = frame[class_column].astype(str).str.strip()

        dataset = cls.from_frame(frame, class_column=class_column)
        logger.debug("Parsed %s", path)
        return dataset

    def resolve_column(self, column: Union[int, str]) -> int:
        """Attribute index for an index or column name."""
        if isinstance(column, str):
            if column not in self.column_names:
                raise ConfigurationError(f"Unknown attribute column {column!r}")
            return self.column_names.index(column)
        if isinstance(column, bool) or not isinstance(column, (int, np.integer)):
            raise ConfigurationError(f"Attribute column must be an index or name, got {column!r}")
        if column not in self.attribute_columns:
            raise ConfigurationError("Selected attribute index out of range")
        return int(column)

    def column_values(self, column: Union[int, str]) -> np.ndarray:
        """Values of one attribute column."""
        index = self.resolve_column(column)
        return np.array([row[index] for row in self.data], dtype=float)

    def discretize_by_chi(
        self,
        column: Union[int, str],
        config: Optional[ChiMergeConfig] = None,
        **overrides: Any
    ) -> IntervalTable:
        """
        Discretize one attribute column with ChiMerge.

        Args:
            column: Attribute index or name
            config: ChiMergeConfig (default parameters when omitted)
            **overrides: Individual config fields (max_interval, chi_threshold,
                         expected_freq_threshold, batch_merge)

        Returns:
            The merged IntervalTable, also stored in `tables`
        """
        index = self.resolve_column(column)
        table = IntervalTable(
            self.data, index,
            class_list=self.class_list,
            config=config,
            **overrides
        )
        table.chimerge()
        self.tables[index] = table
        return table

    def discretize_all(
        self,
        config: Optional[ChiMergeConfig] = None,
        **overrides: Any
    ) -> List[IntervalTable]:
        """Discretize every attribute column with the same parameters."""
        return [
            self.discretize_by_chi(column, config=config, **overrides)
            for column in self.attribute_columns
        ]
