# src/core/route_mapper.py

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Union

from src.utils.error_handling import MappingError
from .configured_route import CHANNEL, TRANSACTION, ConfiguredRoute

_SCALARS = (str, int, float, Decimal, bool)


class RouteMapper:
    """Maps decoded JSON objects into configured routes"""

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    def read_value(self, node: Union[str, Dict[str, Any]]) -> ConfiguredRoute:
        """
        Map a JSON object into a route

        Args:
            node: Decoded JSON object or its JSON text

        Returns:
            Configured route

        Raises:
            MappingError: content is not a JSON object describing a route
        """
        if isinstance(node, (str, bytes)):
            try:
                node = json.loads(node, parse_float=Decimal)
            except json.JSONDecodeError as e:
                raise MappingError(f"Invalid JSON: {e.msg}") from e

        if not isinstance(node, dict):
            raise MappingError(f"Expected an object, got {type(node).__name__}")

        for key in (CHANNEL, TRANSACTION):
            if key not in node:
                raise MappingError(f"Missing required property: {key}")
            if not isinstance(node[key], _SCALARS):
                raise MappingError(f"Property {key} must be a scalar value")

        try:
            return ConfiguredRoute.from_dict(node)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise MappingError(str(e)) from e
