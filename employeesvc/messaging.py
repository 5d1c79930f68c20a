"""Publishing employee events to message topics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .models import EmployeeRequest
from .utils import get_env


class Producer(Protocol):
    """Anything that can publish a value to a topic."""

    def produce(self, topic: str, value: bytes) -> None: ...


class KafkaProducerService:
    """Sends employee upserts and deletions as JSON messages."""

    def __init__(
        self,
        producer: Producer,
        upsert_topic: str | None = None,
        delete_topic: str | None = None,
    ):
        self.producer = producer
        self.upsert_topic = (
            upsert_topic
            if upsert_topic is not None
            else get_env("KAFKA_PRODUCER_EMPLOYEE_UPSERT_TOPIC", "employee-upsert.v1")
        )
        self.delete_topic = (
            delete_topic
            if delete_topic is not None
            else get_env("KAFKA_PRODUCER_EMPLOYEE_DELETE_TOPIC", "employee-deletion.v1")
        )

    def _send(self, topic: str, employee: EmployeeRequest) -> None:
        self.producer.produce(topic, employee.to_json().encode("utf-8"))

    def send_upsert(self, employee: EmployeeRequest) -> None:
        self._send(self.upsert_topic, employee)

    def send_delete(self, employee: EmployeeRequest) -> None:
        self._send(self.delete_topic, employee)


@dataclass
class KafkaProducerServiceStub:
    """Stand-in that records what it would send instead of publishing it."""

    sent: list[tuple[str, EmployeeRequest]] = field(default_factory=list)

    def send_upsert(self, employee: EmployeeRequest) -> None:
        self.sent.append(("upsert", employee))
        print("Upsert send")

    def send_delete(self, employee: EmployeeRequest) -> None:
        self.sent.append(("delete", employee))
        print("Delete send")