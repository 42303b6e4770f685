# src/core/configured_route.py

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Dict, Optional

CHANNEL = "channel"
TRANSACTION = "transaction"


@dataclass
class ConfiguredRoute:
    """Route definition addressed by channel and transaction code"""
    channel: str
    transaction: str
    target: Optional[str] = None
    method: Optional[str] = None
    timeout: Optional[Decimal] = None
    headers: Dict[str, Any] = field(default_factory=dict)
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfiguredRoute':
        """Build a route from a mapping, ignoring unknown properties"""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values[CHANNEL] = _code_text(values[CHANNEL])
        values[TRANSACTION] = _code_text(values[TRANSACTION])
        if values.get('timeout') is not None:
            values['timeout'] = Decimal(str(values['timeout']))
        for name in ('headers', 'details'):
            if values.get(name) is None:
                values.pop(name, None)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == {}:
                continue
            result[f.name] = value
        return result


def _code_text(value: Any) -> str:
    """Text form of a scalar code, JSON spelling for booleans"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def route_key(route: ConfiguredRoute) -> str:
    """Cache key for a route, e.g. ``D2B-9540``"""
    return f"{route.channel}-{route.transaction}"
