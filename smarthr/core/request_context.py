from typing import Optional, Dict
from fastapi import Request

HDR_REQUEST_ID = "X-Request-Id"
HDR_FORWARDED_FOR = "X-Forwarded-For"

def get_request_context(request: Request) -> Dict[str, Optional[str]]:
    """
    Extracts client IP, user-agent, endpoint and request_id from the FastAPI Request.
    - The first X-Forwarded-For hop wins over the socket peer address.
    """
    forwarded = request.headers.get(HDR_FORWARDED_FOR)
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    if user_agent:
        user_agent = user_agent[:500]
    return {
        "ip_address": ip_address,
        "user_agent": user_agent,
        "endpoint": f"{request.method} {request.url.path}",
        "request_id": request.headers.get(HDR_REQUEST_ID),
    }
