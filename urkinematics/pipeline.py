"""Producer/consumer pipeline moving parsed packages between threads."""

from __future__ import annotations

import logging
import os
import queue
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType
from typing import Optional

from urkinematics.bin_parser import BinParser

logger = logging.getLogger(__name__)

QUEUE_SIZE = 32
CONSUMER_POLL_INTERVAL = 0.008
_REALTIME_FILE = Path("/sys/kernel/realtime")


class Package(ABC):
    """A package received from the robot."""

    @abstractmethod
    def parse_with(self, parser: BinParser) -> bool:
        """Fill the package from its serialized form; return whether that succeeded."""

    @abstractmethod
    def __str__(self) -> str:
        """A human readable representation of the package."""


class Parser(ABC):
    """Turns a byte buffer into package objects."""

    @abstractmethod
    def parse(self, parser: BinParser) -> list[Package]:
        """Return the packages contained in ``parser``'s bytes.

        Raises UrException when the bytes cannot be interpreted.
        """


class Consumer(ABC):
    """Receives the packages a pipeline produces."""

    def setup_consumer(self) -> None:
        """Prepare the consumer before the pipeline runs."""

    def teardown_consumer(self) -> None:
        """Fully tear the consumer down; by default the same as stopping it."""
        self.stop_consumer()

    def stop_consumer(self) -> None:
        """Stop the consumer."""

    def on_timeout(self) -> None:
        """Called when no package arrived within the polling interval."""

    @abstractmethod
    def consume(self, product: Package) -> bool:
        """Handle one package; returning False stops the pipeline."""


class MultiConsumer(Consumer):
    """Hands every package to several consumers."""

    def __init__(self, consumers: Iterable[Consumer]) -> None:
        self.consumers: list[Consumer] = list(consumers)

    def setup_consumer(self) -> None:
        for consumer in self.consumers:
            consumer.setup_consumer()

    def teardown_consumer(self) -> None:
        for consumer in self.consumers:
            consumer.teardown_consumer()

    def stop_consumer(self) -> None:
        for consumer in self.consumers:
            consumer.stop_consumer()

    def on_timeout(self) -> None:
        for consumer in self.consumers:
            consumer.on_timeout()

    def consume(self, product: Package) -> bool:
        """Pass ``product`` to every consumer; True only if all of them succeeded."""
        results = [consumer.consume(product) for consumer in self.consumers]
        return all(results)


class ShellConsumer(Consumer):
    """Logs a readable representation of each package."""

    def consume(self, product: Package) -> bool:
        logger.info("%s", product)
        return True


class Producer(ABC):
    """Source of packages for a pipeline.

    ``ready`` tells whether the producer was set up, ``running`` whether it
    is currently started.
    """

    ready: bool = False
    running: bool = False

    def setup_producer(self) -> None:
        """Prepare the producer before the pipeline runs."""
        self.ready = True

    def teardown_producer(self) -> None:
        """Fully tear the producer down; by default the same as stopping it."""
        self.stop_producer()

    def stop_producer(self) -> None:
        """Stop the producer."""
        self.running = False

    def start_producer(self) -> None:
        """Called when the pipeline starts running."""
        self.running = True

    @abstractmethod
    def try_get(self) -> Optional[list[Package]]:
        """Return the next packages, or None if production failed for good."""


class Notifier:
    """Receives notice when a pipeline starts and stops.

    ``active`` holds the names of pipelines that started and have not stopped.
    """

    active: frozenset[str] = frozenset()

    def started(self, name: str) -> None:
        """The pipeline called ``name`` started."""
        self.active = self.active | {name}

    def stopped(self, name: str) -> None:
        """The pipeline called ``name`` (or one of its threads) stopped."""
        self.active = self.active - {name}


def _try_realtime_priority() -> None:
    try:
        has_realtime = _REALTIME_FILE.read_text().strip() == "1"
    except OSError:
        has_realtime = False
    if not has_realtime:
        logger.warning(
            "No realtime capabilities found. Consider using a realtime system for better performance"
        )
        return
    try:
        priority = os.sched_get_priority_max(os.SCHED_FIFO)
        os.sched_setscheduler(threading.get_native_id(), os.SCHED_FIFO, os.sched_param(priority))
    except (OSError, AttributeError) as error:
        logger.error("Unsuccessful in setting producer thread realtime priority: %s", error)
        return
    logger.info("Producer thread: SCHED_FIFO OK, priority %d", priority)


class Pipeline:
    """Runs a producer, and optionally a consumer, in background threads.

    Produced packages go into a bounded queue. A registered consumer drains
    it; without one, callers take packages with :meth:`get_latest_product`.
    """

    def __init__(
        self,
        producer: Producer,
        consumer: Optional[Consumer] = None,
        name: str = "Pipeline",
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.producer = producer
        self.consumer = consumer
        self.name = name
        self.notifier = notifier if notifier is not None else Notifier()
        self._queue: queue.Queue[Package] = queue.Queue(maxsize=QUEUE_SIZE)
        self._running = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def init(self) -> None:
        """Set up the producer and the consumer."""
        self.producer.setup_producer()
        if self.consumer is not None:
            self.consumer.setup_consumer()

    def run(self) -> None:
        """Start the producer thread and, if there is a consumer, the consumer thread."""
        if self._running.is_set():
            return
        self._running.set()
        self.producer.start_producer()
        self._threads = [
            threading.Thread(target=self._run_producer, name=f"{self.name}-producer", daemon=True)
        ]
        if self.consumer is not None:
            self._threads.append(
                threading.Thread(target=self._run_consumer, name=f"{self.name}-consumer", daemon=True)
            )
        for thread in self._threads:
            thread.start()
        self.notifier.started(self.name)

    def stop(self) -> None:
        """Stop the pipeline and wait for its threads."""
        if not self._running.is_set():
            self._join()
            return
        logger.debug("Stopping pipeline! <%s>", self.name)
        self._running.clear()
        self.producer.stop_producer()
        self._join()
        self.notifier.stopped(self.name)

    def _join(self) -> None:
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current and thread.is_alive():
                thread.join()

    def get_latest_product(self, timeout: float) -> Optional[Package]:
        """Take the next queued package, waiting up to ``timeout`` seconds; None if none came."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def __enter__(self) -> "Pipeline":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.stop()

    def _run_producer(self) -> None:
        logger.debug("Starting up producer")
        _try_realtime_priority()
        while self._running.is_set():
            products = self.producer.try_get()
            if products is None:
                self.producer.teardown_producer()
                self._running.clear()
                break
            for product in products:
                try:
                    self._queue.put_nowait(product)
                except queue.Full:
                    logger.error("Pipeline producer overflowed! <%s>", self.name)
        logger.debug("Pipeline producer ended! <%s>", self.name)
        self.notifier.stopped(self.name)

    def _run_consumer(self) -> None:
        consumer = self.consumer
        assert consumer is not None
        while self._running.is_set():
            try:
                product = self._queue.get(timeout=CONSUMER_POLL_INTERVAL)
            except queue.Empty:
                consumer.on_timeout()
                continue
            if not consumer.consume(product):
                consumer.teardown_consumer()
                self._running.clear()
                break
        consumer.stop_consumer()
        logger.debug("Pipeline consumer ended! <%s>", self.name)
        self.notifier.stopped(self.name)