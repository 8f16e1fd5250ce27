"""
Operation providers.

Each module in PROVIDER_MODULES declares its operations with @operation;
registry.build_catalog() picks them up in this order.
"""

from . import browser, navigation, interaction, information, media, wait

PROVIDER_MODULES = (
    browser,
    navigation,
    interaction,
    information,
    media,
    wait,
)

__all__ = ["PROVIDER_MODULES"]
