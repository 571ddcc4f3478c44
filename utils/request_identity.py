"""
Caller identification
Client IP, user agent, creator hash and the public base URL of a request
"""
# Standard library imports
import hashlib
from typing import Optional

# Third-party imports
from fastapi import Request

# Local imports
from config import settings
from models import CallerInfo


def generate_creator_hash(ip: str, user_agent: str) -> str:
    """
    Stable 16 hex char hash of (ip, user agent)

    Used for attribution and as the device rate-limit key, never for access control.
    """
    combined = f"{ip}:{user_agent}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()[:16]


def get_device_identifier(ip: str, user_agent: str) -> str:
    return generate_creator_hash(ip, user_agent)


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, CF-Connecting-IP, the peer address"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"


def resolve_base_url(request: Optional[Request]) -> str:
    """
    Public origin for links

    Prefers the Origin header, then the forwarded/plain Host, so links are
    right behind proxies. Falls back to APP_URL.
    """
    if request is not None:
        origin = request.headers.get("origin")
        if origin and origin != "null":
            return origin.rstrip("/")

        host = request.headers.get("x-forwarded-host") or request.headers.get("host")
        if host:
            host = host.split(",")[0].strip()
            proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "https"
            proto = proto.split(",")[0].strip()
            return f"{proto}://{host}"

    return settings.APP_URL.rstrip("/")


async def get_caller_info(request: Request) -> CallerInfo:
    """FastAPI dependency describing the caller"""
    return CallerInfo(
        ip=get_client_ip(request),
        user_agent=get_user_agent(request),
        base_url=resolve_base_url(request),
    )
