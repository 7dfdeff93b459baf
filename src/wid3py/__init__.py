# wid3py/__init__.py
"""
wid3py: attribute-weighted ID3 decision trees for nominal data (scikit-learn style).

Exports:
    - WeightedID3Classifier
    - Dataset, Attribute
    - OneRWeightEstimator, UniformWeightEstimator
    - the error classes of :mod:`wid3py.exceptions`
"""
from .dataset import Attribute, Dataset, Instance
from .exceptions import (
    CapabilityError,
    MissingValueError,
    UnseenCategoryError,
    WeightContractError,
    WeightedID3Error,
)
from .tree import Internal, Leaf, WeightedID3Classifier, build_tree
from .weights import OneRWeightEstimator, UniformWeightEstimator

__all__ = [
    "WeightedID3Classifier",
    "build_tree",
    "Leaf",
    "Internal",
    "Dataset",
    "Attribute",
    "Instance",
    "OneRWeightEstimator",
    "UniformWeightEstimator",
    "WeightedID3Error",
    "CapabilityError",
    "WeightContractError",
    "MissingValueError",
    "UnseenCategoryError",
]
__version__ = "0.1.0"
