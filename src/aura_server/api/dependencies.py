from functools import lru_cache

from fastapi import Request

from ..service import AuraService, build_service


@lru_cache
def get_service() -> AuraService:
    return build_service()


def get_client_key(request: Request) -> str:
    """
    Rate-limit key for the caller: first ``x-forwarded-for`` hop, then
    ``x-real-ip``, then the socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"
