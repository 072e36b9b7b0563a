"""
Model Abstraction Layer Interfaces

This module provides abstract base classes that define the standard interface
for classification models used by the pipeline. Concrete implementations
are provided in the Drivers/ directory.

Interfaces:
    - ClassifierModel: Standard interface for a loaded image classifier
"""

from .model_interface import ClassifierModel

__all__ = ['ClassifierModel']
