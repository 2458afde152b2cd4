"""Telematics vendor integration: login handshake.

Constants below identify this client to the vendor and must match what the
mobile app sends. All of them can be overridden from the environment.
"""
import os
from typing import Final

BASE_URL: Final[str] = os.getenv("TELEMATICS_BASE_URL", "https://api.telematics-cloud.com")
KEY_PATH: Final[str] = os.getenv("TELEMATICS_KEY_PATH", "/v1/auth/encrypt-key")
LOGIN_PATH: Final[str] = os.getenv("TELEMATICS_LOGIN_PATH", "/v1/auth/login")

APP_ID: Final[str] = os.getenv("TELEMATICS_APP_ID", "1517834710")
LOCALE: Final[str] = os.getenv("TELEMATICS_LOCALE", "en_US")
SDK_VERSION: Final[str] = os.getenv("TELEMATICS_SDK_VERSION", "4.6.2")
USER_AGENT: Final[str] = os.getenv(
    "TELEMATICS_USER_AGENT", "TelematicsApp/4.6.2 (Android 13; Build/4620153)"
)

# Seconds; applies to connect, read and write.
TIMEOUT_SECONDS: Final[float] = float(os.getenv("TELEMATICS_TIMEOUT_SECONDS", "10"))

DEVICE_ID_PREFIX: Final[str] = "ACCT"
USER_ID_TYPE: Final[str] = "email"
