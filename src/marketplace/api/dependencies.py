"""Request-scoped dependencies: who is calling, and request middleware.

Identity arrives in trusted headers set by the gateway in front of this
service. Nothing here authenticates.
"""

from fastapi import Header, Request

from marketplace.domain import marketplace
from marketplace.errors import AccessDenied
from marketplace.order.access import Actor, Role
from marketplace.utils.logging import add_context, clear_context


async def current_actor(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=Role.USER.value),
) -> Actor:
    if not x_user_id:
        raise AccessDenied("X-User-Id header is required")

    role = x_user_role.lower()
    if role not in {r.value for r in Role}:
        raise AccessDenied(f"Unknown role: {x_user_role}")

    actor = Actor(user_id=x_user_id, role=role)
    add_context(user_id=actor.user_id, role=actor.role)
    return actor


async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and bind log context for each request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        with marketplace.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()
