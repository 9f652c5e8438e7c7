"""MQTT transport layer for publishing meter readings."""

import asyncio
import json
import logging
import ssl
from typing import Any, Dict

from aiomqtt import Client, MqttError

logger = logging.getLogger(__name__)


class MQTTTransport:
    """
    Async MQTT client wrapper for publishing JSON payloads.

    Uses context manager pattern for automatic connection/disconnection.
    Connecting is retried a few times before giving up, so a broker that is
    still starting does not stop the bridge.
    """

    def __init__(
        self,
        host: str,
        port: int,
        client_id: str,
        username: str | None = None,
        password: str | None = None,
        tls: bool = False,
        qos: int = 1,
        retain: bool = True,
        connect_attempts: int = 5,
        retry_delay: float = 2.0,
    ):
        """
        Initialize MQTT transport.

        Args:
            host: MQTT broker hostname
            port: MQTT broker port
            client_id: MQTT client identifier
            username: Optional authentication username
            password: Optional authentication password
            tls: Enable TLS encryption
            qos: Quality of Service level (0, 1, or 2)
            retain: Retain messages on broker
            connect_attempts: Connection attempts before raising
            retry_delay: Seconds between connection attempts
        """
        self.host = host
        self.port = port
        self.client_id = client_id
        self.username = username
        self.password = password
        self.tls = tls
        self.qos = qos
        self.retain = retain
        self.connect_attempts = max(1, connect_attempts)
        self.retry_delay = retry_delay
        self._client: Client | None = None

    def _create_client(self) -> Client:
        return Client(
            hostname=self.host,
            port=self.port,
            identifier=self.client_id,
            username=self.username,
            password=self.password,
            tls_context=ssl.create_default_context() if self.tls else None,
        )

    async def __aenter__(self):
        """Enter context manager - establish MQTT connection."""
        for attempt in range(1, self.connect_attempts + 1):
            client = self._create_client()
            try:
                await client.__aenter__()
            except MqttError as e:
                logger.warning(
                    "MQTT connection to %s:%s failed (attempt %d/%d): %s",
                    self.host,
                    self.port,
                    attempt,
                    self.connect_attempts,
                    e,
                )
                if attempt == self.connect_attempts:
                    raise
                await asyncio.sleep(self.retry_delay)
                continue
            self._client = client
            logger.info("Connected to MQTT broker at %s:%s as %s", self.host, self.port, self.client_id)
            break
        return self

    async def __aexit__(self, exc_type, exc, tb):
        """Exit context manager - close MQTT connection."""
        if self._client:
            try:
                await self._client.__aexit__(exc_type, exc, tb)
            except MqttError as e:
                # Log error but don't raise to avoid masking original exception
                logger.error("Error closing MQTT connection: %s", e)
            finally:
                self._client = None

    async def publish_json(self, topic: str, payload: Dict[str, Any]) -> None:
        """
        Publish a JSON payload to the specified topic.

        Args:
            topic: MQTT topic to publish to
            payload: Dictionary to serialize as JSON

        Raises:
            RuntimeError: If MQTT client is not connected
            aiomqtt.MqttError: If the broker connection fails
        """
        if not self._client:
            raise RuntimeError("MQTT client not connected")

        json_payload = json.dumps(payload, ensure_ascii=False)

        await self._client.publish(
            topic=topic,
            payload=json_payload.encode("utf-8"),
            qos=self.qos,
            retain=self.retain,
        )
        logger.debug("Published to %s: %s", topic, json_payload)
