"""
Unit tests for the free-usage gate.
"""
import json
import threading

from contract_scanner.services.usage_gate import UsageGate


class TestUsageGate:

    def test_one_free_analysis_by_default(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"))

        assert gate.can_analyze() is True
        assert gate.remaining_free_usage() == 1

        gate.record_usage()

        assert gate.can_analyze() is False
        assert gate.remaining_free_usage() == 0

    def test_subscription_bypasses_limit(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"))
        gate.record_usage()

        gate.set_subscribed(True)

        assert gate.can_analyze() is True

    def test_subscribed_usage_not_counted(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=2)
        gate.set_subscribed(True)
        gate.record_usage()
        gate.set_subscribed(False)

        assert gate.free_usage_count == 0
        assert gate.remaining_free_usage() == 2

    def test_counter_persists(self, tmp_path):
        path = str(tmp_path / "usage.json")
        gate = UsageGate(path, max_free_usage=3)
        gate.record_usage()
        gate.record_usage()

        reloaded = UsageGate(path, max_free_usage=3)

        assert reloaded.free_usage_count == 2
        assert reloaded.remaining_free_usage() == 1
        with open(path, encoding='utf-8') as f:
            assert json.load(f) == {'free_usage_count': 2, 'subscribed': False}

    def test_remaining_never_negative(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=1)
        gate.record_usage()
        gate.record_usage()

        assert gate.remaining_free_usage() == 0

    def test_bad_file_ignored(self, tmp_path):
        path = tmp_path / "usage.json"
        path.write_text("[]", encoding='utf-8')

        gate = UsageGate(str(path))

        assert gate.free_usage_count == 0
        assert gate.can_analyze() is True


class TestReservation:
    """Check-and-hold of free analyses under concurrent requests."""

    def test_held_analysis_blocks_second_request(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=1)

        assert gate.reserve() is True
        assert gate.reserve() is False
        assert gate.can_analyze() is False
        assert gate.remaining_free_usage() == 0
        assert gate.free_usage_count == 0

    def test_commit_records_usage(self, tmp_path):
        path = str(tmp_path / "usage.json")
        gate = UsageGate(path, max_free_usage=2)

        gate.reserve()
        gate.commit()

        assert gate.free_usage_count == 1
        assert gate.remaining_free_usage() == 1
        assert UsageGate(path, max_free_usage=2).free_usage_count == 1

    def test_release_returns_the_analysis(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=1)

        gate.reserve()
        gate.release()

        assert gate.free_usage_count == 0
        assert gate.can_analyze() is True
        assert gate.reserve() is True

    def test_subscriber_reservation_not_counted(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=1)
        gate.set_subscribed(True)

        assert all(gate.reserve() for _ in range(5))
        gate.commit()

        assert gate.free_usage_count == 0

    def test_only_one_thread_gets_last_analysis(self, tmp_path):
        gate = UsageGate(str(tmp_path / "usage.json"), max_free_usage=1)
        barrier = threading.Barrier(16)
        results = []

        def worker():
            barrier.wait()
            results.append(gate.reserve())

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
