"""
Client IP resolution for FastAPI requests.

The address is forwarded to the captcha provider as ``remoteip``; it is
never used as a throttling key.
"""

from __future__ import annotations

from fastapi import Request

# Proxy headers, most trusted first
_FORWARDING_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(request: Request) -> str:
    """Extract the client IP from a FastAPI ``Request``.

    Checks proxy headers before falling back to the direct connection
    address. ``X-Forwarded-For`` contributes its first (client-most) entry.

    Returns:
        The resolved client IP string, or ``""`` if none can be found.
    """
    for header in _FORWARDING_HEADERS:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip: str = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return request.client.host if request.client else ""
