"""Client fingerprint (IP + parsed user agent) bound into refresh-token hashes."""

import re

from fastapi import Request
from pydantic import BaseModel, Field


class DeviceInfo(BaseModel):
    """Device details parsed from a User-Agent header."""

    device_type: str = "desktop"
    os: str = "Unknown"
    browser: str = "Unknown"
    display_name: str = "Unknown device"


class HeaderInfo(BaseModel):
    """Client IP and user agent of the request that created or refreshed a session."""

    ip: str = ""
    user_agent: str = ""
    device: DeviceInfo = Field(default_factory=DeviceInfo)

    def to_record(self) -> dict:
        """Shape persisted in auth_data.header_info."""
        return {
            "ip": self.ip,
            "userAgent": self.user_agent,
            "device": self.device.model_dump(),
        }


class DeviceDetector:
    """Extracts device type, OS and browser from a User-Agent header."""

    _OS_PATTERNS = [
        (r"iPhone|iPad|iPod", "iOS"),
        (r"Android", "Android"),
        (r"Windows NT", "Windows"),
        (r"Mac OS X", "macOS"),
        (r"CrOS", "Chrome OS"),
        (r"Linux", "Linux"),
    ]

    # Order matters: Edge and Opera also advertise Chrome, Chrome advertises Safari.
    _BROWSER_PATTERNS = [
        (r"Edg/", "Edge"),
        (r"OPR/|Opera", "Opera"),
        (r"Chrome/", "Chrome"),
        (r"Firefox/", "Firefox"),
        (r"Safari/", "Safari"),
        (r"okhttp|Dalvik|CFNetwork", "Native app"),
    ]

    _TABLET_PATTERNS = [r"iPad", r"Android(?!.*Mobile)", r"Tablet"]
    _MOBILE_PATTERNS = [r"Mobile", r"iPhone", r"iPod", r"Dalvik", r"okhttp"]

    def detect(self, user_agent: str) -> DeviceInfo:
        if not user_agent:
            return DeviceInfo()
        os_name = self._first_match(self._OS_PATTERNS, user_agent)
        browser = self._first_match(self._BROWSER_PATTERNS, user_agent)
        return DeviceInfo(
            device_type=self._device_type(user_agent),
            os=os_name,
            browser=browser,
            display_name=f"{browser} on {os_name}",
        )

    @staticmethod
    def _first_match(patterns: list[tuple[str, str]], user_agent: str) -> str:
        for pattern, name in patterns:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return name
        return "Unknown"

    def _device_type(self, user_agent: str) -> str:
        for pattern in self._TABLET_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return "tablet"
        for pattern in self._MOBILE_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return "mobile"
        return "desktop"


_detector = DeviceDetector()


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else ""


def build_header_info(ip: str, user_agent: str) -> HeaderInfo:
    return HeaderInfo(ip=ip, user_agent=user_agent, device=_detector.detect(user_agent))


def get_header_info(request: Request) -> HeaderInfo:
    """FastAPI dependency: fingerprint of the current request."""
    return build_header_info(client_ip(request), request.headers.get("user-agent", ""))
