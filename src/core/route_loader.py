# src/core/route_loader.py

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Tuple

from src.monitoring.route_metrics import RouteMetrics
from src.utils.error_handling import RouteFormatError, RouteParsingError, TechnicalError
from .configured_route import CHANNEL, TRANSACTION, ConfiguredRoute, route_key
from .route_cache import FunctionalCacheOps
from .route_mapper import RouteMapper

ERROR_READING_ROUTES_FROM_FILE = "Error reading routes from file, falling back to stringRoutes"
ROUTE_LOADED = "ROUTE LOADED - "
EXPECTED_AN_ARRAY = "Expected an array"
ERROR_PROCESSING_MAP_NODE = "Error processing Map Node content: %s"
ERROR_PROCESSING_READ_NODE = "Error processing Read Node content: %s"

_WHITESPACE = " \t\n\r"


class RoutesLoader:
    """Loads configured routes from a JSON file or an inline JSON string"""

    def __init__(self,
                 file_routes: Optional[str] = None,
                 string_routes: Optional[str] = None,
                 metrics: Optional[RouteMetrics] = None) -> None:
        """
        Args:
            file_routes: Path of the JSON routes file
            string_routes: Inline JSON array used when the file is unusable
            metrics: Optional metrics collector
        """
        self.file_routes = file_routes
        self.string_routes = string_routes
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)

    async def route_information_loaded(self,
                                       mapper: RouteMapper,
                                       cache_ops: FunctionalCacheOps) -> List[ConfiguredRoute]:
        """
        Load routes and store every one of them in the cache

        Returns:
            Routes saved in the cache, in load order
        """
        routes, source = self._load_routes(mapper)

        for route in routes:
            self.logger.info(f"{ROUTE_LOADED}{route.channel}-{route.transaction}")
            await cache_ops.save_in_cache(route_key(route), route)

        if self.metrics and routes:
            self.metrics.record_loaded(source, len(routes))
        return routes

    def _load_routes(self, mapper: RouteMapper) -> Tuple[List[ConfiguredRoute], str]:
        path = Path(self.file_routes) if self.file_routes else None
        if path is not None and path.is_file():
            try:
                json_content = path.read_text(encoding='utf-8')
                return self.process_json_nodes(json_content, mapper), 'file'
            except (TechnicalError, OSError, UnicodeDecodeError) as e:
                self.logger.info(ERROR_READING_ROUTES_FROM_FILE)
                self.logger.debug(f"Routes file {path} rejected: {e}")
                self._record_error('file')
        elif path is not None:
            self.logger.info(f"Routes file {path} not found, using inline routes")

        try:
            return self.process_json_nodes(self.string_routes or '', mapper), 'inline'
        except TechnicalError as e:
            self.logger.error(f"Failed to load inline routes: {e}")
            self._record_error('inline')
            return [], 'inline'

    def _record_error(self, error_type: str) -> None:
        if self.metrics:
            self.metrics.record_error(error_type)

    def process_json_nodes(self, json_content: str, mapper: RouteMapper) -> List[ConfiguredRoute]:
        """
        Stream through a JSON array and map every valid element into a route

        Args:
            json_content: JSON text whose top level must be an array
            mapper: Route mapper used for valid elements

        Returns:
            Mapped routes; invalid or unmappable elements are skipped

        Raises:
            RouteFormatError: content does not start with an array
            RouteParsingError: an element or separator is syntactically broken
        """
        valid_routes: List[ConfiguredRoute] = []
        decoder = json.JSONDecoder(parse_float=Decimal)
        text = json_content or ''

        index = self._skip_whitespace(text, 0)
        if index >= len(text) or text[index] != '[':
            raise RouteFormatError(EXPECTED_AN_ARRAY)
        index = self._skip_whitespace(text, index + 1)

        if index < len(text) and text[index] == ']':
            return valid_routes

        while True:
            node, index = self.read_node(decoder, text, index)
            if self.is_valid_node(node):
                route = self.map_node(node, mapper)
                if route is not None:
                    valid_routes.append(route)

            index = self._skip_whitespace(text, index)
            if index >= len(text):
                raise RouteParsingError("Unexpected end of content inside array")
            if text[index] == ']':
                return valid_routes
            if text[index] != ',':
                raise RouteParsingError(f"Expected ',' or ']' at position {index}")
            index = self._skip_whitespace(text, index + 1)

    def read_node(self, decoder: json.JSONDecoder, text: str, index: int) -> Tuple[Any, int]:
        """Decode the array element starting at ``index``"""
        try:
            return decoder.raw_decode(text, index)
        except json.JSONDecodeError as e:
            self.logger.info(ERROR_PROCESSING_READ_NODE, e.msg)
            raise RouteParsingError(f"{e.msg} at position {e.pos}") from e

    @staticmethod
    def is_valid_node(node: Any) -> bool:
        return isinstance(node, dict) and CHANNEL in node and TRANSACTION in node

    def map_node(self, node: Any, mapper: RouteMapper) -> Optional[ConfiguredRoute]:
        if node is None:
            return None
        try:
            return mapper.read_value(node)
        except TechnicalError as e:
            self.logger.info(ERROR_PROCESSING_MAP_NODE, str(e))
            return None

    @staticmethod
    def _skip_whitespace(text: str, index: int) -> int:
        while index < len(text) and text[index] in _WHITESPACE:
            index += 1
        return index
