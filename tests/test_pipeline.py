import logging
import threading
import time

import pytest

from urkinematics.bin_parser import BinParser, ValueKind, serialize
from urkinematics.pipeline import (
    Consumer,
    MultiConsumer,
    Notifier,
    Package,
    Parser,
    Pipeline,
    Producer,
    ShellConsumer,
)


class IntPackage(Package):
    def __init__(self, value=0):
        self.value = value

    def parse_with(self, parser):
        self.value = parser.parse(ValueKind.INT32)
        return True

    def __str__(self):
        return f"IntPackage({self.value})"


class IntParser(Parser):
    def parse(self, parser):
        packages = []
        while not parser.empty():
            package = IntPackage()
            package.parse_with(parser)
            packages.append(package)
        return packages


class BatchProducer(Producer):
    def __init__(self, batches, end_with_failure=True):
        self.batches = list(batches)
        self.end_with_failure = end_with_failure
        self.calls = []

    def setup_producer(self):
        self.calls.append("setup")

    def start_producer(self):
        self.calls.append("start")

    def stop_producer(self):
        self.calls.append("stop")

    def teardown_producer(self):
        self.calls.append("teardown")
        super().teardown_producer()

    def try_get(self):
        if self.batches:
            return self.batches.pop(0)
        if self.end_with_failure:
            return None
        time.sleep(0.005)
        return []


class RecordingConsumer(Consumer):
    def __init__(self, result=True):
        self.result = result
        self.consumed = []
        self.calls = []

    def setup_consumer(self):
        self.calls.append("setup")

    def stop_consumer(self):
        self.calls.append("stop")

    def teardown_consumer(self):
        self.calls.append("teardown")
        super().teardown_consumer()

    def on_timeout(self):
        self.calls.append("timeout")

    def consume(self, product):
        self.consumed.append(product)
        return self.result


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []
        self.lock = threading.Lock()

    def started(self, name):
        with self.lock:
            self.events.append(("started", name))

    def stopped(self, name):
        with self.lock:
            self.events.append(("stopped", name))


def wait_until(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.002)
    return condition()


def test_package_is_abstract():
    with pytest.raises(TypeError):
        Package()


def test_parser_produces_packages_from_bytes():
    data = serialize(ValueKind.INT32, 7) + serialize(ValueKind.INT32, -3)
    packages = IntParser().parse(BinParser(data))
    assert [p.value for p in packages] == [7, -3]


def test_consumer_teardown_defaults_to_stop():
    class StopOnly(Consumer):
        def __init__(self):
            self.stopped = 0

        def stop_consumer(self):
            self.stopped += 1

        def consume(self, product):
            return True

    consumer = StopOnly()
    Consumer.teardown_consumer(consumer)
    assert consumer.stopped == 1


def test_producer_teardown_defaults_to_stop():
    producer = BatchProducer([])
    Producer.teardown_producer(producer)
    assert producer.calls == ["stop"]


def test_multi_consumer_requires_all_to_succeed():
    good, bad = RecordingConsumer(True), RecordingConsumer(False)
    multi = MultiConsumer([good, bad])
    package = IntPackage(1)
    assert multi.consume(package) is False
    assert good.consumed == [package]
    assert bad.consumed == [package]
    assert MultiConsumer([RecordingConsumer(), RecordingConsumer()]).consume(package) is True


def test_multi_consumer_delegates_lifecycle():
    first, second = RecordingConsumer(), RecordingConsumer()
    multi = MultiConsumer([first, second])
    multi.setup_consumer()
    multi.on_timeout()
    multi.teardown_consumer()
    multi.stop_consumer()
    expected = ["setup", "timeout", "teardown", "stop", "stop"]
    assert first.calls == expected
    assert second.calls == expected


def test_shell_consumer_logs_package(caplog):
    with caplog.at_level(logging.INFO, logger="urkinematics.pipeline"):
        assert ShellConsumer().consume(IntPackage(42)) is True
    assert "IntPackage(42)" in caplog.text


def test_init_sets_up_producer_and_consumer():
    producer, consumer = BatchProducer([]), RecordingConsumer()
    Pipeline(producer, consumer, "p", Notifier()).init()
    assert producer.calls == ["setup"]
    assert consumer.calls == ["setup"]


def test_pipeline_without_consumer_queues_products_in_order():
    packages = [IntPackage(i) for i in range(5)]
    producer = BatchProducer([packages[:2], packages[2:]], end_with_failure=False)
    notifier = RecordingNotifier()
    with Pipeline(producer, None, "queue", notifier) as pipeline:
        pipeline.run()
        received = [pipeline.get_latest_product(1.0) for _ in packages]
    assert received == packages
    assert notifier.events[0] == ("started", "queue")
    assert ("stopped", "queue") in notifier.events
    assert "start" in producer.calls


def test_get_latest_product_times_out():
    producer = BatchProducer([], end_with_failure=False)
    with Pipeline(producer, None, "empty", Notifier()) as pipeline:
        pipeline.run()
        assert pipeline.get_latest_product(0.02) is None


def test_producer_failure_tears_down_and_stops():
    producer = BatchProducer([[IntPackage(1)]])
    notifier = RecordingNotifier()
    pipeline = Pipeline(producer, None, "fail", notifier)
    pipeline.run()
    assert wait_until(lambda: not pipeline.running)
    pipeline.stop()
    assert "teardown" in producer.calls
    assert pipeline.get_latest_product(0.5).value == 1
    assert notifier.events.count(("stopped", "fail")) == 1


def test_consumer_receives_all_products():
    packages = [IntPackage(i) for i in range(4)]
    producer = BatchProducer([packages], end_with_failure=False)
    consumer = RecordingConsumer()
    with Pipeline(producer, consumer, "consume", Notifier()) as pipeline:
        pipeline.run()
        assert wait_until(lambda: len(consumer.consumed) == 4)
    assert consumer.consumed == packages
    assert consumer.calls[-1] == "stop"


def test_consumer_timeout_is_reported():
    producer = BatchProducer([], end_with_failure=False)
    consumer = RecordingConsumer()
    with Pipeline(producer, consumer, "idle", Notifier()) as pipeline:
        pipeline.run()
        assert wait_until(lambda: "timeout" in consumer.calls)
        assert pipeline.running is True
    assert consumer.calls.count("timeout") >= 1
    assert consumer.calls[-1] == "stop"
    assert consumer.consumed == []


def test_consumer_failure_stops_pipeline():
    producer = BatchProducer([[IntPackage(1), IntPackage(2)]], end_with_failure=False)
    consumer = RecordingConsumer(result=False)
    pipeline = Pipeline(producer, consumer, "reject", Notifier())
    pipeline.run()
    assert wait_until(lambda: not pipeline.running)
    pipeline.stop()
    assert [p.value for p in consumer.consumed] == [1]
    assert "teardown" in consumer.calls


def test_run_twice_starts_once():
    producer = BatchProducer([], end_with_failure=False)
    notifier = RecordingNotifier()
    with Pipeline(producer, None, "twice", notifier) as pipeline:
        pipeline.run()
        pipeline.run()
        assert notifier.events.count(("started", "twice")) == 1
        assert producer.calls.count("start") == 1


def test_queue_overflow_drops_extra_products(caplog):
    packages = [IntPackage(i) for i in range(40)]
    producer = BatchProducer([packages], end_with_failure=False)
    with caplog.at_level(logging.ERROR, logger="urkinematics.pipeline"):
        with Pipeline(producer, None, "full", Notifier()) as pipeline:
            pipeline.run()
            assert wait_until(lambda: "overflowed" in caplog.text)
            received = []
            while (product := pipeline.get_latest_product(0.05)) is not None:
                received.append(product)
    assert received == packages[:32]
    assert "<full>" in caplog.text


def test_stop_without_run_does_not_notify():
    notifier = RecordingNotifier()
    producer = BatchProducer([])
    Pipeline(producer, None, "idle", notifier).stop()
    assert notifier.events == []
    assert producer.calls == []