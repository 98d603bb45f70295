import json
import logging
from typing import Any, Dict, Optional

from aiokafka import AIOKafkaProducer
from aiokafka.admin import AIOKafkaAdminClient, NewTopic

from api_store.core.config import settings

logger = logging.getLogger(__name__)

CATALOG_TOPIC = "catalog_events"

KAFKA_TOPICS = [CATALOG_TOPIC]

producer: Optional[AIOKafkaProducer] = None


async def create_topics() -> None:
    """Creates the catalog topics that do not exist yet."""
    admin_client = AIOKafkaAdminClient(bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS)
    try:
        await admin_client.start()
        existing_topics = await admin_client.list_topics()
        missing = [
            NewTopic(name=topic, num_partitions=1, replication_factor=1)
            for topic in KAFKA_TOPICS
            if topic not in existing_topics
        ]
        if missing:
            logger.info(f"Creating Kafka topics: {[t.name for t in missing]}")
            await admin_client.create_topics(missing)
    except Exception as e:
        logger.error(f"Failed to create Kafka topics: {e}")
    finally:
        await admin_client.close()


async def get_kafka_producer() -> AIOKafkaProducer:
    """Returns the shared producer, starting it on first use."""
    global producer
    if producer is None:
        producer = AIOKafkaProducer(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
        )
        await producer.start()
    return producer


async def close_kafka_producer() -> None:
    global producer
    if producer is not None:
        await producer.stop()
        producer = None


async def send_event(topic: str, event_type: str, data: Dict[str, Any]) -> None:
    """
    Publishes a catalog event. Called after the transaction has committed;
    delivery failures are logged and never reach the caller.
    """
    if settings.TESTING:
        logger.debug(f"Skipping {event_type} event in testing mode")
        return
    try:
        kafka_producer = await get_kafka_producer()
        await kafka_producer.send_and_wait(topic, {"event_type": event_type, "data": data})
        logger.info(f"Sent event to topic {topic}: {event_type}")
    except Exception as e:
        logger.error(f"Failed to send Kafka event {event_type}: {e}")
