"""
Logging channel definitions for the order gateway.
"""

from enum import Enum
from typing import Dict


class LogChannel(str, Enum):
    """Logging channels for different components."""

    APPLICATION = "application"  # General application logs
    TRADING = "trading"          # Order gateway and vendor calls
    API = "api"                  # API requests/responses


# Component name -> channel; unknown components log to APPLICATION
COMPONENT_CHANNELS: Dict[str, LogChannel] = {
    "api": LogChannel.API,
    "middleware": LogChannel.API,
    "order_gateway": LogChannel.TRADING,
    "vendor": LogChannel.TRADING,
}


def get_channel_for_component(component: str) -> LogChannel:
    """Resolve the logging channel for a component name."""
    return COMPONENT_CHANNELS.get(component, LogChannel.APPLICATION)
