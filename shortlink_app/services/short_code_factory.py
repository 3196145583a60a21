"""
Builds the short code generator selected in settings.

Each generator type maps to a builder reading its size from settings;
built generators are kept per type and reused.
"""

from enum import Enum
from typing import Callable, Dict

from shortlink_app.config import settings
from shortlink_app.services.short_code_strategies import (
    AlphanumericShortCodeStrategy,
    HexShortCodeStrategy,
    ShortCodeStrategy,
)


class ShortCodeStrategyType(Enum):
    """Generators selectable through settings.short_code_strategy"""
    HEX = "hex"
    ALPHANUMERIC = "alphanumeric"


_BUILDERS: Dict[ShortCodeStrategyType, Callable[[], ShortCodeStrategy]] = {
    ShortCodeStrategyType.HEX: lambda: HexShortCodeStrategy(num_bytes=settings.short_code_bytes),
    ShortCodeStrategyType.ALPHANUMERIC: lambda: AlphanumericShortCodeStrategy(
        length=settings.short_code_length
    ),
}


class ShortCodeFactory:
    """Returns one shared generator per strategy type"""

    _instances: Dict[ShortCodeStrategyType, ShortCodeStrategy] = {}

    @classmethod
    def create_strategy(cls, strategy_type: ShortCodeStrategyType = None) -> ShortCodeStrategy:
        """
        Args:
            strategy_type: Generator to build; settings.short_code_strategy when omitted

        Raises:
            ValueError: settings name a strategy that does not exist
        """
        if strategy_type is None:
            strategy_type = ShortCodeStrategyType(settings.short_code_strategy)

        instance = cls._instances.get(strategy_type)
        if instance is None:
            try:
                builder = _BUILDERS[strategy_type]
            except KeyError:
                raise ValueError(f"Unknown strategy type: {strategy_type}") from None
            instance = cls._instances[strategy_type] = builder()
        return instance
