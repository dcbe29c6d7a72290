"""Runtime platforms the admin client can run on.

The backend is reachable under different hosts depending on where the client
runs: "localhost" means the dev machine in a desktop browser, but the device
itself on a phone, and the Android emulator reaches the host via 10.0.2.2.
"""

from __future__ import annotations

import sys
from enum import Enum


class Platform(str, Enum):
    """Supported runtimes."""

    WEB = "web"
    ANDROID = "android"
    IOS = "ios"

    @classmethod
    def detect(cls) -> "Platform":
        """Best guess from the interpreter's platform tag."""

        if sys.platform == "android":
            return cls.ANDROID
        if sys.platform == "ios":
            return cls.IOS
        return cls.WEB

    @property
    def is_mobile(self) -> bool:
        return self is not Platform.WEB
