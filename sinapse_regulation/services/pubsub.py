import asyncio
import json
import logging

from google.cloud.pubsub_v1 import PublisherClient
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from sinapse_regulation.config import Settings

logger = logging.getLogger(__name__)


class RegulationPubSub:
    def __init__(self, settings: Settings) -> None:
        self._publisher = PublisherClient()
        self._events_topic = settings.pubsub_regulation_events_topic

    async def _publish(self, topic: str, data: dict, timeout: int) -> None:
        loop = asyncio.get_running_loop()
        future = self._publisher.publish(
            topic,
            json.dumps(data).encode("utf-8"),
            event_type=data.get("event_type", ""),
        )
        await loop.run_in_executor(None, future.result, timeout)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(Exception),
        reraise=True,
        before_sleep=lambda rs: logger.warning(
            "Retrying Pub/Sub regulation event publish (attempt %d): %s",
            rs.attempt_number,
            rs.outcome.exception(),
        ),
    )
    async def publish_regulation_event(self, data: dict) -> None:
        await self._publish(self._events_topic, data, timeout=10)
