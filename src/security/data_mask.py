# src/security/data_mask.py

from dataclasses import dataclass
from typing import Any, Dict

MASK_CHAR = '*'


@dataclass(frozen=True)
class DataMask:
    """Value that is masked whenever it is serialized"""
    value: str
    visible: int = 4

    def masked(self) -> str:
        """Display form keeping only the trailing ``visible`` characters"""
        text = str(self.value)
        if self.visible <= 0 or len(text) <= self.visible:
            return MASK_CHAR * len(text)
        return MASK_CHAR * (len(text) - self.visible) + text[-self.visible:]


@dataclass(frozen=True)
class DataUnmasked:
    """Plain value recovered from a masked payload"""
    value: str


def is_masked_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and 'masked' in payload and 'enc' in payload


def masked_payload(masked: str, token: str) -> Dict[str, str]:
    return {'masked': masked, 'enc': token}
