# src/core/serializer.py

import logging
from dataclasses import is_dataclass
from typing import Any, Dict, Iterable, Optional

import simplejson

from src.security.data_mask import DataMask, DataUnmasked, is_masked_payload, masked_payload
from src.security.kms import KmsService
from src.utils.error_handling import MaskingError, RouteParsingError


class RouteSerializer:
    """JSON serializer with decimal precision and masked value support"""

    def __init__(self, kms: Optional[KmsService] = None) -> None:
        self.kms = kms
        self.logger = logging.getLogger(__name__)

    def _default(self, obj: Any) -> Any:
        if isinstance(obj, DataMask):
            return self._mask(obj)
        if isinstance(obj, DataUnmasked):
            return obj.value
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if is_dataclass(obj):
            return obj.__dict__
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    def _mask(self, value: DataMask) -> Dict[str, str]:
        if self.kms is None:
            raise MaskingError("No key service configured for masking")
        return masked_payload(value.masked(), self.kms.encrypt(str(value.value)))

    def dumps(self, obj: Any, **kwargs) -> str:
        """Encode JSON, writing Decimal values with all their digits"""
        return simplejson.dumps(obj, default=self._default, use_decimal=True, **kwargs)

    def loads(self, text: str) -> Any:
        """Decode JSON, reading floating point numbers as Decimal"""
        try:
            return simplejson.loads(text, use_decimal=True)
        except simplejson.JSONDecodeError as e:
            raise RouteParsingError(f"Invalid JSON: {e.msg}") from e

    def unmask(self, payload: Dict[str, Any]) -> DataUnmasked:
        """Recover the plain value of a masked payload"""
        if not is_masked_payload(payload):
            raise MaskingError("Payload is not a masked value")
        if self.kms is None:
            raise MaskingError("No key service configured for unmasking")
        return DataUnmasked(self.kms.decrypt(payload['enc']))

    @staticmethod
    def mask_fields(data: Dict[str, Any], mask: Iterable[str]) -> Dict[str, Any]:
        """Copy of ``data`` with the named top-level or nested fields wrapped in DataMask"""
        targets = set(mask)
        result = {}
        for key, value in data.items():
            if isinstance(value, dict):
                result[key] = RouteSerializer.mask_fields(value, targets)
            elif key in targets and value is not None:
                result[key] = DataMask(str(value))
            else:
                result[key] = value
        return result
