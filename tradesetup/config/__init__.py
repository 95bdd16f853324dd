"""Configuration for the trade setup engine."""

from .settings import TradeSetupConfig, trade_setup_config

__all__ = ["TradeSetupConfig", "trade_setup_config"]
