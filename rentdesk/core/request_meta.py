# rentdesk/core/request_meta.py

from dataclasses import dataclass
from typing import Mapping

UNKNOWN = "unknown"


def client_ip(headers: Mapping[str, str]) -> str:
    """First hop of X-Forwarded-For, else X-Real-IP, else 'unknown'."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (headers.get("x-real-ip") or "").strip()
    return real_ip or UNKNOWN


@dataclass(frozen=True)
class RequestMeta:
    ip: str = UNKNOWN
    user_agent: str = UNKNOWN

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestMeta":
        return cls(
            ip=client_ip(headers),
            user_agent=(headers.get("user-agent") or "").strip() or UNKNOWN,
        )
