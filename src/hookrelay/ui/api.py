"""
Relay API endpoints.

JSON routes for direct submissions, relay page registration and
submissions made on relay pages. Throttling, validation and delivery all
happen in the relay service; these handlers only extract the request data.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Request

from hookrelay.core.errors import RelayError, Unexpected
from hookrelay.relay.service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["relay"])


def get_service(request: Request) -> RelayService:
    return request.app.state.relay


def client_key(request: Request) -> str:
    """
    Identify the requesting client for throttling.

    Uses the first X-Forwarded-For address when the server is configured to
    trust proxy headers, otherwise the socket peer address.
    """
    if request.app.state.config.server.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def page_base_url(request: Request) -> str:
    """Base URL for relay page links: Origin header, configured URL, or request URL."""
    origin = request.headers.get("origin")
    if origin:
        return origin.rstrip("/")
    configured = request.app.state.config.server.public_base_url
    if configured:
        return configured.rstrip("/")
    return str(request.base_url).rstrip("/")


async def read_body(request: Request) -> Any:
    """
    Decode the JSON body.

    An undecodable body becomes None and is rejected later by payload
    validation, after the throttle check.
    """
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("/webhook")
async def submit_webhook(request: Request) -> Dict[str, Any]:
    """
    Relay a submission to the operator webhook.

    Body: {sourceUrl, message}
    """
    service = get_service(request)
    data = await read_body(request)
    try:
        ack = await service.submit_direct(data, client_key(request))
    except RelayError:
        raise
    except Exception as e:
        logger.error(f"Webhook relay error: {e}", exc_info=True)
        raise Unexpected() from e
    return ack.model_dump()


@router.post("/dualhook")
async def register_dualhook(request: Request) -> Dict[str, Any]:
    """
    Register a relay page.

    Body: {directoryName, webhook}

    Returns:
        {success, message, url}
    """
    service = get_service(request)
    data = await read_body(request)
    try:
        result = await service.register_directory(
            data, client_key(request), page_base_url(request)
        )
    except RelayError:
        raise
    except Exception as e:
        logger.error(f"Directory registration error: {e}", exc_info=True)
        raise Unexpected() from e
    return result.model_dump()


@router.post("/{directory}/webhook")
async def submit_directory_webhook(directory: str, request: Request) -> Dict[str, Any]:
    """
    Relay a submission made on a relay page.

    Body: {sourceUrl, message}
    """
    service = get_service(request)
    data = await read_body(request)
    try:
        ack = await service.submit_via_directory(directory, data, client_key(request))
    except RelayError:
        raise
    except Exception as e:
        logger.error(f"Directory relay error for '{directory}': {e}", exc_info=True)
        raise Unexpected() from e
    return ack.model_dump()
