"""
Device classification for visitor records.

Best-effort three-way classifier (desktop / mobile / tablet) based on
user agent substrings with a screen-width override for touch-sized
screens. Approximate by nature; any client-declared valid value wins.

Key behaviors:
- Declared device type is trusted when it is a known value
- Tablet patterns take priority over mobile patterns
- Without a user agent, screen width decides, then desktop
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

DeviceType = Literal["desktop", "mobile", "tablet"]

DEVICE_TYPES: tuple[DeviceType, ...] = ("desktop", "mobile", "tablet")
DEFAULT_DEVICE: DeviceType = "desktop"


# --- Configuration ---


@dataclass(frozen=True)
class DeviceConfig:
    """Device classification configuration."""

    tablet_pattern: str = r"ipad|android(?!.*mobile)|tablet|kindle|silk|playbook"
    mobile_pattern: str = r"android|webos|iphone|ipod|blackberry|iemobile|opera mini|mobile"

    # Screen-width overrides (CSS pixels) for undetected touch devices
    mobile_max_width: int = 768
    tablet_max_width: int = 1024


DEFAULT_CONFIG = DeviceConfig()


def normalize_device_type(value: str | None) -> DeviceType:
    """Map any stored or declared value onto the enum (unknown -> desktop)."""
    if value:
        lowered = value.strip().lower()
        for device in DEVICE_TYPES:
            if lowered == device:
                return device
    return DEFAULT_DEVICE


def classify_device(
    user_agent: str | None,
    screen_width: int | None = None,
    declared: str | None = None,
    config: DeviceConfig = DEFAULT_CONFIG,
) -> DeviceType:
    """
    Classify a visitor's device.

    Args:
        user_agent: Raw user agent string (may be empty)
        screen_width: Reported screen width in CSS pixels (0/None if unknown)
        declared: Device type reported by the client, if any
        config: Classification patterns and width thresholds

    Returns:
        One of "desktop", "mobile", "tablet".
    """
    if declared and declared.strip().lower() in DEVICE_TYPES:
        return normalize_device_type(declared)

    ua = (user_agent or "").lower()

    if ua:
        if re.search(config.tablet_pattern, ua):
            return "tablet"
        if re.search(config.mobile_pattern, ua):
            return "mobile"
        return DEFAULT_DEVICE

    if screen_width and screen_width > 0:
        if screen_width < config.mobile_max_width:
            return "mobile"
        if screen_width < config.tablet_max_width:
            return "tablet"

    return DEFAULT_DEVICE
