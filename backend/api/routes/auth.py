"""
Authentication API routes.
"""

import logging

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_token_service
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import LoginRequest, TokenResponse
from core.security.tokens import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    body: LoginRequest,
    token_service: TokenService = Depends(get_token_service),
):
    """
    Issue an access token for identity claims verified upstream.

    No credential check happens here; the client signs in with the identity
    provider first and submits the resulting claims.
    """
    claims = body.model_dump(exclude={"email"}, exclude_none=True)
    token = token_service.create_access_token(body.email, **claims)
    logger.info("Issued access token for %s", body.email)
    return TokenResponse(u_token=token, expires_in=token_service.expires_in)
