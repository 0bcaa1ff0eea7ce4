"""
FastAPI Dependencies
====================
Claim checks for FastAPI routes.

The principal is expected on ``request.state.principal``, set by the
authentication middleware in front of the service.

Usage:
    resolver = ClaimResolver(store, verifier)

    @app.delete("/admin/users/{user_id}")
    async def delete_user(
        user_id: str,
        principal: Principal = Depends(require_claim(resolver, "/admin/users", "DELETE")),
    ):
        ...
"""

from typing import Callable, Optional

from fastapi import HTTPException, Request

from eportal_core.claims import AuthorizationDecision, ClaimResolver, DenyReason, Principal

STEP_UP_HEADER = "X-Step-Up-Code"

_DENY_MESSAGES = {
    DenyReason.MAPPING_NOT_FOUND: "You do not have access to this resource.",
    DenyReason.CLAIM_MISMATCH: "You do not have access to this resource.",
    DenyReason.STEP_UP_REQUIRED: "A verification code is required for this action.",
    DenyReason.STEP_UP_UNAVAILABLE: "Set up an authenticator app to perform this action.",
    DenyReason.STEP_UP_FAILED: "The verification code was not accepted.",
}


def get_principal(request: Request) -> Principal:
    """
    Dependency returning the authenticated principal.
    Raises 401 if the authentication layer did not attach one.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthorized", "code": "AUTH_REQUIRED"},
        )
    return principal


def denial_to_http(decision: AuthorizationDecision) -> HTTPException:
    """Map a DENY decision to the error envelope returned to clients."""
    throttled = decision.retry_after is not None
    detail = {
        "error": "Forbidden" if not throttled else "Too Many Requests",
        "message": _DENY_MESSAGES[decision.reason],
        "code": decision.reason.value.upper(),
    }
    if throttled:
        return HTTPException(
            status_code=429,
            detail=detail,
            headers={"Retry-After": str(decision.retry_after)},
        )
    return HTTPException(status_code=403, detail=detail)


def require_claim(
    resolver: ClaimResolver,
    endpoint: str,
    operation: Optional[str] = None,
) -> Callable[[Request], Principal]:
    """
    Build a dependency that authorizes the request against a claim mapping.

    Args:
        resolver: Resolver to consult
        endpoint: Endpoint key of the claim mapping
        operation: Operation key; defaults to the request's HTTP method

    Returns:
        Dependency returning the permitted Principal
    """
    def dependency(request: Request) -> Principal:
        principal = get_principal(request)
        decision = resolver.authorize(
            principal,
            endpoint,
            operation or request.method,
            step_up_code=request.headers.get(STEP_UP_HEADER),
        )
        if not decision.permitted:
            raise denial_to_http(decision)
        return principal

    return dependency
