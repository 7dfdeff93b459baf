# -*- coding: utf-8 -*-
"""
wid3py.dataset
==============

Immutable, integer-coded representation of a nominal training set.

Raw values (strings, integers, booleans) are mapped once to indices into each
attribute's ordered domain.  Everything downstream (gain computation, tree
construction) works on those indices only; the raw values are kept on the
:class:`Attribute` objects for prediction and rendering.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Sequence

import numpy as np

from .exceptions import CapabilityError, MissingValueError, UnseenCategoryError


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _isnan_scalar(v) -> bool:
    return (v is None) or (isinstance(v, (float, np.floating)) and np.isnan(v))


def _is_nominal(v) -> bool:
    # floats are treated as measurements, not categories
    return isinstance(v, (str, bool, np.bool_, numbers.Integral))


def _is_class_label(v) -> bool:
    if _is_nominal(v):
        return True
    return isinstance(v, (float, np.floating)) and float(v).is_integer()


def _domain(values) -> tuple:
    # numpy scalars become their Python equivalents so domains render as literals
    return tuple(v.item() if isinstance(v, np.generic) else v for v in values)


def _infer_domain(values: np.ndarray) -> tuple:
    if values.size == 0:
        return ()
    try:
        return _domain(np.unique(values).tolist())
    except TypeError:
        raise CapabilityError("attribute values of mixed, unorderable types; "
                              "declare the domain explicitly")


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Attribute:
    """A nominal attribute: a name, its column index and an ordered domain."""

    name: str
    index: int
    values: tuple

    @property
    def num_values(self) -> int:
        return len(self.values)

    def value(self, j: int):
        return self.values[j]

    def index_of(self, value) -> int:
        """Position of ``value`` in the domain.

        Raises
        ------
        UnseenCategoryError
            If ``value`` is not part of the domain.
        """
        try:
            return self._lookup[value]
        except (KeyError, TypeError):
            raise UnseenCategoryError(self.name, value) from None

    @property
    def _lookup(self) -> dict:
        lookup = self.__dict__.get("_lookup_cache")
        if lookup is None:
            lookup = {v: j for j, v in enumerate(self.values)}
            object.__setattr__(self, "_lookup_cache", lookup)
        return lookup


class Instance(NamedTuple):
    values: tuple
    class_value: int


class Dataset:
    """Read-only collection of coded instances.

    Parameters
    ----------
    X : ndarray of shape (n_instances, n_attributes)
        Value indices, ``X[i, a.index]`` indexing ``a.values``.
    y : ndarray of shape (n_instances,)
        Class value indices into ``class_attribute.values``.
    attributes : sequence of Attribute
        Non-class attributes, ``attributes[j].index == j``.
    class_attribute : Attribute
        The class attribute; its ``index`` is ``len(attributes)``.
    """

    def __init__(self, X, y, attributes: Sequence[Attribute], class_attribute: Attribute):
        X = np.array(X, dtype=np.intp).reshape(len(y), len(attributes))
        y = np.array(y, dtype=np.intp)
        attributes = tuple(attributes)
        for j, att in enumerate(attributes):
            if att.index != j:
                raise ValueError(f"attribute '{att.name}' has index {att.index}, expected {j}")
            col = X[:, j]
            if col.size and (col.min() < 0 or col.max() >= att.num_values):
                raise ValueError(f"codes of attribute '{att.name}' fall outside its domain")
        if y.size and (y.min() < 0 or y.max() >= class_attribute.num_values):
            raise ValueError("class codes fall outside the class domain")
        self._init(X, y, attributes, class_attribute)

    def _init(self, X, y, attributes, class_attribute):
        X.setflags(write=False)
        y.setflags(write=False)
        self._X = X
        self._y = y
        self._attributes = attributes
        self._class_attribute = class_attribute

    @classmethod
    def _from_codes(cls, X, y, attributes, class_attribute) -> "Dataset":
        # codes already validated by the parent dataset
        obj = cls.__new__(cls)
        obj._init(X, y, attributes, class_attribute)
        return obj

    # ------------------------------------------------------------------
    # Construction from raw values
    # ------------------------------------------------------------------
    @classmethod
    def from_arrays(cls, X, y, *, feature_names=None, categories="auto",
                    classes=None, class_name: str = "class") -> "Dataset":
        """
        Encode raw nominal data.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Nominal attribute values.  A pandas DataFrame contributes its
            column names when ``feature_names`` is not given.
        y : array-like of shape (n_samples,)
            Class labels.  Rows whose label is ``None`` or NaN are dropped.
        feature_names : list[str], optional
            Attribute names; defaults to ``f0 .. f{m-1}``.
        categories : "auto" or list of lists, default="auto"
            Attribute domains.  ``"auto"`` uses the sorted distinct training
            values; declared domains may hold values absent from the data.
        classes : list, optional
            Declared class domain; defaults to the sorted distinct labels.
        class_name : str, default="class"
            Name given to the class attribute.

        Raises
        ------
        CapabilityError
            For non-nominal values, missing attribute values or training
            values outside a declared domain.
        """
        if feature_names is None and hasattr(X, "columns"):
            feature_names = [str(c) for c in X.columns]
        X = np.asarray(X, dtype=object)
        y = np.asarray(y, dtype=object).ravel()
        if X.ndim == 1 and X.size == 0:
            n_features = len(feature_names) if feature_names is not None else 0
            X = X.reshape(0, n_features)
        if X.ndim != 2:
            raise ValueError("X must be a 2-D array of nominal values")
        if X.shape[0] != y.shape[0]:
            raise ValueError("X and y have inconsistent numbers of samples")
        n_features = X.shape[1]

        if feature_names is None:
            feature_names = [f"f{i}" for i in range(n_features)]
        feature_names = [str(n) for n in feature_names]
        if len(feature_names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")
        if len(set(feature_names)) != n_features:
            raise ValueError("feature_names must be unique")

        for j in range(n_features):
            for v in X[:, j]:
                if _isnan_scalar(v):
                    raise CapabilityError(
                        f"attribute '{feature_names[j]}' has missing values; "
                        "missing values are only allowed in the class")
                if not _is_nominal(v):
                    raise CapabilityError(
                        f"attribute '{feature_names[j]}' holds non-nominal value {v!r}")

        # instances with a missing class carry no information for training
        known = np.array([not _isnan_scalar(v) for v in y], dtype=bool)
        X, y = X[known], y[known]
        for v in y:
            if not _is_class_label(v):
                raise CapabilityError(f"class value {v!r} is not nominal; "
                                      "only nominal classes are supported")

        if isinstance(categories, str):
            if categories != "auto":
                raise ValueError("categories must be 'auto' or a list of value lists")
            domains = [_infer_domain(X[:, j]) for j in range(n_features)]
        else:
            if len(categories) != n_features:
                raise ValueError("categories must list one domain per attribute")
            domains = [_domain(c) for c in categories]
        class_domain = _infer_domain(y) if classes is None else _domain(classes)
        for name, domain in zip(feature_names + [class_name], domains + [class_domain]):
            if len(set(domain)) != len(domain):
                raise ValueError(f"domain of '{name}' lists a value more than once")

        attributes = tuple(Attribute(feature_names[j], j, domains[j])
                           for j in range(n_features))
        class_attribute = Attribute(str(class_name), n_features, class_domain)

        codes = np.empty(X.shape, dtype=np.intp)
        for att in attributes:
            codes[:, att.index] = [_code(att, v) for v in X[:, att.index]]
        y_codes = np.fromiter((_code(class_attribute, v) for v in y),
                              count=y.shape[0], dtype=np.intp)
        return cls._from_codes(codes, y_codes, attributes, class_attribute)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def X(self) -> np.ndarray:
        return self._X

    @property
    def y(self) -> np.ndarray:
        return self._y

    @property
    def attributes(self) -> tuple:
        return self._attributes

    @property
    def class_attribute(self) -> Attribute:
        return self._class_attribute

    @property
    def num_instances(self) -> int:
        return int(self._y.shape[0])

    @property
    def num_attributes(self) -> int:
        return len(self._attributes)

    @property
    def num_classes(self) -> int:
        return self._class_attribute.num_values

    def __len__(self) -> int:
        return self.num_instances

    def __iter__(self) -> Iterator[Instance]:
        for row, c in zip(self._X, self._y):
            yield Instance(tuple(int(v) for v in row), int(c))

    def __repr__(self) -> str:
        return (f"Dataset(n_instances={self.num_instances}, "
                f"attributes={[a.name for a in self._attributes]}, "
                f"class_attribute={self._class_attribute.name!r})")

    # ------------------------------------------------------------------
    # Counting / partitioning
    # ------------------------------------------------------------------
    def class_counts(self) -> np.ndarray:
        return np.bincount(self._y, minlength=self.num_classes).astype(float)

    def value_class_counts(self, attribute: Attribute) -> np.ndarray:
        """Contingency table of shape (attribute.num_values, num_classes)."""
        table = np.zeros((attribute.num_values, self.num_classes), dtype=float)
        np.add.at(table, (self._X[:, attribute.index], self._y), 1.0)
        return table

    def subset(self, index) -> "Dataset":
        index = np.asarray(index)
        if index.dtype != bool:
            index = index.astype(np.intp)
        return Dataset._from_codes(self._X[index], self._y[index],
                                   self._attributes, self._class_attribute)

    def split(self, attribute: Attribute) -> list:
        """Partition on ``attribute``: one dataset per domain value, in order."""
        col = self._X[:, attribute.index]
        return [self.subset(np.flatnonzero(col == j)) for j in range(attribute.num_values)]


def _code(attribute: Attribute, value) -> int:
    try:
        return attribute.index_of(value)
    except UnseenCategoryError:
        raise CapabilityError(
            f"value {value!r} of attribute '{attribute.name}' is outside its declared domain"
        ) from None


def check_instance(row, attributes: Sequence[Attribute]) -> tuple:
    """Validate a raw instance before classification.

    Raises
    ------
    MissingValueError
        If any attribute value is missing.
    """
    row = tuple(np.asarray(row, dtype=object).ravel().tolist())
    if len(row) != len(attributes):
        raise ValueError(f"instance has {len(row)} values, expected {len(attributes)}")
    for att, v in zip(attributes, row):
        if _isnan_scalar(v):
            raise MissingValueError(
                f"Weighted ID3: no missing values, please (attribute '{att.name}')")
    return row
