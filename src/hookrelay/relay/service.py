"""
Relay service - validates submissions and forwards them to webhooks.

Owns the directory registry, the submission throttle and the webhook client.
One instance is built at startup and shared by all request handlers.
"""

import asyncio
import logging
from typing import Any, FrozenSet, List, Optional

import httpx
from pydantic import ValidationError

from hookrelay.core.config import AppConfig
from hookrelay.core.errors import DeliveryFailed, InvalidInput
from hookrelay.directory.resolver import RESERVED_SEGMENTS
from hookrelay.directory.store import DirectoryRegistry
from hookrelay.throttle.limiter import SubmissionThrottle

from .client import WebhookClient, WebhookDeliveryError
from .formatters import (
    build_confirmation_notification,
    build_direct_notification,
    build_directory_operator_notification,
    build_directory_owner_notification,
)
from .models import (
    WEBHOOK_URL_ERROR,
    Ack,
    DirectoryRequest,
    Notification,
    RegistrationResult,
    SubmissionPayload,
    field_errors,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Directory name and webhook URL are required"
RESERVED_NAME_MESSAGE = "This directory name is reserved. Please choose a different name."
FORWARD_FAILED_MESSAGE = "Failed to forward message"
CONFIRMATION_FAILED_MESSAGE = "Failed to send confirmation message"
OPERATOR_NOT_CONFIGURED = "Operator webhook is not configured"


class RelayService:
    """
    Relays form submissions to the operator webhook and to registered pages.

    Every operation runs the throttle check first; a rejected client never
    reaches validation or delivery.
    """

    def __init__(
        self,
        registry: DirectoryRegistry,
        throttle: SubmissionThrottle,
        client: WebhookClient,
        operator_endpoint: Optional[str] = None,
        reserved: FrozenSet[str] = RESERVED_SEGMENTS,
    ):
        """
        Initialize relay service.

        Args:
            registry: Directory registry
            throttle: Submission throttle
            client: Webhook client used for all deliveries
            operator_endpoint: Operator webhook URL (None disables operator delivery)
            reserved: Path segments that cannot be registered as directories
        """
        self.registry = registry
        self.throttle = throttle
        self.client = client
        self.operator_endpoint = operator_endpoint
        self.reserved = reserved

        if not operator_endpoint:
            logger.warning(
                "No operator webhook configured; submissions will fail to deliver"
            )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "RelayService":
        """
        Build a service with fresh state from configuration.

        Args:
            config: Application configuration
            transport: Optional httpx transport for the webhook client

        Returns:
            Configured RelayService
        """
        throttle = SubmissionThrottle(
            cooldown=config.throttle.cooldown_seconds,
            retention=config.throttle.retention_seconds,
            sweep_interval=config.throttle.sweep_interval_seconds,
        )
        client = WebhookClient(
            timeout=config.relay.timeout,
            user_agent=config.relay.user_agent,
            transport=transport,
        )
        return cls(
            registry=DirectoryRegistry(),
            throttle=throttle,
            client=client,
            operator_endpoint=config.relay.operator_webhook_url,
        )

    async def submit_direct(self, data: Any, client_key: str) -> Ack:
        """
        Relay a submission from the main page to the operator webhook.

        Args:
            data: Raw request body
            client_key: Requesting client identifier

        Returns:
            Acknowledgment

        Raises:
            RateLimited: Client is inside its cooldown
            InvalidInput: Payload failed validation
            DeliveryFailed: The webhook POST failed
        """
        self.throttle.try_accept(client_key)
        payload = self._parse_submission(data)
        operator = self._require_operator()

        await self._deliver([build_direct_notification(payload, operator)])
        logger.info("Relayed direct submission")
        return Ack()

    async def submit_via_directory(
        self, directory_name: str, data: Any, client_key: str
    ) -> Ack:
        """
        Relay a submission made on a relay page.

        The page owner's webhook receives it if the directory is registered;
        the operator webhook always receives a copy. An unregistered
        directory is not an error.

        Args:
            directory_name: Directory from the request path
            data: Raw request body
            client_key: Requesting client identifier

        Returns:
            Acknowledgment
        """
        self.throttle.try_accept(client_key)
        payload = self._parse_submission(data)
        operator = self._require_operator()

        notifications = []
        owner_endpoint = self.registry.lookup(directory_name)
        if owner_endpoint:
            notifications.append(
                build_directory_owner_notification(payload, owner_endpoint)
            )
        else:
            logger.info(f"Submission for unregistered directory '{directory_name}'")
        notifications.append(
            build_directory_operator_notification(payload, directory_name, operator)
        )

        await self._deliver(notifications)
        logger.info(
            f"Relayed submission via '{directory_name}' "
            f"to {len(notifications)} webhook(s)"
        )
        return Ack()

    async def register_directory(
        self, data: Any, client_key: str, base_url: str
    ) -> RegistrationResult:
        """
        Register a relay page and confirm it to the registrant's webhook.

        If the confirmation cannot be delivered the directory stays
        registered and DeliveryFailed is raised.

        Args:
            data: Raw request body ({directoryName, webhook})
            client_key: Requesting client identifier
            base_url: Scheme and host used to build the page URL

        Returns:
            Registration result carrying the page URL

        Raises:
            RateLimited: Client is inside its cooldown
            InvalidInput: Missing fields, bad webhook URL or reserved name
            AlreadyExists: Name is taken (no webhook is contacted)
            DeliveryFailed: Confirmation could not be delivered
        """
        self.throttle.try_accept(client_key)
        request = self._parse_directory_request(data)
        name = request.directory_name

        if name in self.reserved:
            raise InvalidInput(RESERVED_NAME_MESSAGE)

        self.registry.register(name, request.webhook)

        page_url = f"{base_url.rstrip('/')}/{name}"
        try:
            await self._deliver(
                [build_confirmation_notification(request.webhook, page_url)],
                message=CONFIRMATION_FAILED_MESSAGE,
            )
        except DeliveryFailed:
            logger.warning(
                f"Directory '{name}' registered but its confirmation failed"
            )
            raise

        return RegistrationResult(url=page_url, name=name)

    def _require_operator(self) -> str:
        if not self.operator_endpoint:
            raise DeliveryFailed(OPERATOR_NOT_CONFIGURED, FORWARD_FAILED_MESSAGE)
        return self.operator_endpoint

    async def _deliver(
        self,
        notifications: List[Notification],
        message: str = FORWARD_FAILED_MESSAGE,
    ) -> None:
        """Send all notifications concurrently; fail if any of them failed."""
        results = await asyncio.gather(
            *(self.client.send(n) for n in notifications),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, WebhookDeliveryError):
                raise failure
        if failures:
            raise DeliveryFailed(str(failures[0]), message)

    @staticmethod
    def _parse_submission(data: Any) -> SubmissionPayload:
        try:
            return SubmissionPayload.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(errors=field_errors(e)) from e

    @staticmethod
    def _parse_directory_request(data: Any) -> DirectoryRequest:
        try:
            return DirectoryRequest.model_validate(data)
        except ValidationError as e:
            errors = field_errors(e)
            if any(err["type"] in ("missing", "model_type") for err in errors):
                raise InvalidInput(REQUIRED_FIELDS_MESSAGE) from e
            if any(err["field"] == "webhook" for err in errors):
                raise InvalidInput(WEBHOOK_URL_ERROR) from e
            raise InvalidInput(errors[0]["message"], errors=errors) from e
