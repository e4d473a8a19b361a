"""Firebase ID token verification for protected API endpoints."""

import logging

import firebase_admin
from fastapi import HTTPException, Request
from firebase_admin import auth as firebase_auth

from sinapse_regulation.models import Actor

logger = logging.getLogger(__name__)

# Initialize Firebase Admin SDK (uses Application Default Credentials in Cloud Run)
if not firebase_admin._apps:
    firebase_admin.initialize_app()


def actor_from_claims(decoded: dict) -> Actor:
    """Build the acting user from a decoded token.

    Roles and approval status travel as custom claims set when an admin
    approves the account.
    """
    roles = decoded.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Actor(
        uid=decoded["uid"],
        email=decoded.get("email", ""),
        roles=tuple(roles),
        approval_status=decoded.get("approval_status", "pending"),
    )


async def get_current_actor(request: Request) -> Actor:
    """FastAPI dependency that validates a Firebase ID token from the Authorization header."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    token = auth_header.removeprefix("Bearer ")
    try:
        decoded = firebase_auth.verify_id_token(token)
    except Exception:
        logger.debug("Firebase token verification failed", exc_info=True)
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    actor = actor_from_claims(decoded)
    if not actor.is_approved:
        raise HTTPException(status_code=403, detail="Account pending approval")
    return actor
