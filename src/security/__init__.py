# src/security/__init__.py

from .kms import KmsService
from .data_mask import DataMask, DataUnmasked

__all__ = [
    'KmsService',
    'DataMask',
    'DataUnmasked'
]
