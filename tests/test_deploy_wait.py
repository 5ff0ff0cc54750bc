import time
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from lib.kintone_applib.deploy import (
    DeployStatus,
    DeployWaitCancelled,
    WaitOutcome,
    extract_status,
    wait_for_deploy,
)


class ScriptedClient:
    """get_deploy_status の応答を順番に返すクライアント"""

    def __init__(self, statuses):
        self.statuses = list(statuses)
        self.calls = []
        self.started_at = []

    def get_deploy_status(self, apps):
        self.started_at.append(time.monotonic())
        self.calls.append(list(apps))
        index = min(len(self.calls), len(self.statuses)) - 1
        status = self.statuses[index]
        if isinstance(status, Exception):
            raise status
        if isinstance(status, dict):
            return status
        return {"apps": [{"app": str(apps[0]), "status": status}]}


def make_sleep():
    return Mock(return_value=None)


@pytest.mark.parametrize("status", ["SUCCESS", "FAIL", "CANCEL"])
def test_terminal_status_on_first_attempt_returns_without_sleep(status):
    client = ScriptedClient([status])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 51, max_attempts=5, interval_ms=10, sleep=sleep)

    assert outcome.status is DeployStatus(status)
    assert outcome.success is (status == "SUCCESS")
    assert client.calls == [[51]]
    sleep.assert_not_called()


def test_success_after_processing_sleeps_between_attempts():
    client = ScriptedClient(["PROCESSING", "PROCESSING", "SUCCESS"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 7, max_attempts=10, interval_ms=250, sleep=sleep)

    assert outcome == WaitOutcome(DeployStatus.SUCCESS)
    assert len(client.calls) == 3
    assert sleep.call_count == 2
    sleep.assert_called_with(0.25)


def test_fail_after_processing():
    client = ScriptedClient(["PROCESSING", "FAIL"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 7, max_attempts=10, interval_ms=100, sleep=sleep)

    assert outcome.to_dict() == {"success": False, "status": "FAIL"}
    assert sleep.call_count == 1


def test_timeout_after_max_attempts():
    client = ScriptedClient(["PROCESSING"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 3, max_attempts=4, interval_ms=100, sleep=sleep)

    assert outcome.status is DeployStatus.TIMEOUT
    assert outcome.success is False
    assert len(client.calls) == 4
    # 最後の確認の後は待たない
    assert sleep.call_count == 3


def test_single_attempt_processing_times_out_without_sleep():
    client = ScriptedClient(["PROCESSING"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 3, max_attempts=1, interval_ms=100, sleep=sleep)

    assert outcome.status is DeployStatus.TIMEOUT
    assert len(client.calls) == 1
    sleep.assert_not_called()


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_non_positive_attempts_never_query(max_attempts):
    client = ScriptedClient(["SUCCESS"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 3, max_attempts=max_attempts, sleep=sleep)

    assert outcome.status is DeployStatus.TIMEOUT
    assert client.calls == []
    sleep.assert_not_called()


@pytest.mark.parametrize("response", [
    {"apps": [{"app": "3", "status": "QUEUED"}]},
    {"apps": [{"app": "3", "status": "TIMEOUT"}]},
    {"apps": [{"app": "3"}]},
    {"apps": []},
    {},
])
def test_unrecognized_status_keeps_polling(response):
    client = ScriptedClient([response, "SUCCESS"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 3, max_attempts=5, interval_ms=10, sleep=sleep)

    assert outcome.success is True
    assert len(client.calls) == 2
    assert sleep.call_count == 1


def test_client_error_propagates():
    client = ScriptedClient(["PROCESSING", ConnectionError("network down")])
    sleep = make_sleep()

    with pytest.raises(ConnectionError):
        wait_for_deploy(client, 3, max_attempts=5, interval_ms=10, sleep=sleep)

    assert len(client.calls) == 2


def test_uses_default_limits():
    client = ScriptedClient(["PROCESSING"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 3, sleep=sleep)

    assert outcome.status is DeployStatus.TIMEOUT
    assert len(client.calls) == 30
    assert sleep.call_count == 29
    sleep.assert_called_with(1.0)


def test_seed_scenario_success_on_third_attempt():
    client = ScriptedClient(["PROCESSING", "PROCESSING", "SUCCESS"])
    sleep = make_sleep()

    outcome = wait_for_deploy(client, "51", max_attempts=3, interval_ms=10, sleep=sleep)

    assert outcome.to_dict() == {"success": True, "status": "SUCCESS"}
    assert client.calls == [["51"], ["51"], ["51"]]
    assert [c.args for c in sleep.call_args_list] == [(0.01,), (0.01,)]


def test_real_sleep_spaces_queries_by_interval():
    client = ScriptedClient(["PROCESSING", "PROCESSING", "SUCCESS"])

    outcome = wait_for_deploy(client, 3, max_attempts=3, interval_ms=10)

    assert outcome.success is True
    gaps = [later - earlier for earlier, later in zip(client.started_at, client.started_at[1:])]
    assert len(gaps) == 2
    assert all(gap >= 0.01 for gap in gaps)


def test_concurrent_waits_do_not_interfere():
    clients = {
        1: ScriptedClient(["PROCESSING", "SUCCESS"]),
        2: ScriptedClient(["PROCESSING", "PROCESSING", "FAIL"]),
        3: ScriptedClient(["PROCESSING"]),
    }

    def run(app_id):
        return wait_for_deploy(clients[app_id], app_id, max_attempts=4, interval_ms=1, sleep=lambda s: None)

    with ThreadPoolExecutor(max_workers=3) as executor:
        outcomes = dict(zip(clients, executor.map(run, clients)))

    assert outcomes[1].status is DeployStatus.SUCCESS
    assert outcomes[2].status is DeployStatus.FAIL
    assert outcomes[3].status is DeployStatus.TIMEOUT
    assert len(clients[1].calls) == 2
    assert len(clients[2].calls) == 3
    assert len(clients[3].calls) == 4
    for app_id, client in clients.items():
        assert all(call == [app_id] for call in client.calls)


def test_cancel_event_stops_waiting():
    client = ScriptedClient(["PROCESSING"])
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(DeployWaitCancelled) as exc_info:
        wait_for_deploy(client, 9, max_attempts=5, interval_ms=1000, cancel_event=cancel_event)

    assert exc_info.value.app_id == 9
    assert exc_info.value.attempts == 1
    assert len(client.calls) == 1


def test_unset_cancel_event_waits_interval():
    client = ScriptedClient(["PROCESSING", "SUCCESS"])
    cancel_event = Mock()
    cancel_event.wait.return_value = False
    sleep = make_sleep()

    outcome = wait_for_deploy(client, 9, max_attempts=5, interval_ms=500, sleep=sleep, cancel_event=cancel_event)

    assert outcome.success is True
    cancel_event.wait.assert_called_once_with(0.5)
    sleep.assert_not_called()


def test_wait_outcome_success_follows_status():
    for status in DeployStatus:
        outcome = WaitOutcome(status)
        assert outcome.success is (status is DeployStatus.SUCCESS)
        assert outcome.to_dict()["status"] == status.value

    assert WaitOutcome("FAIL") == WaitOutcome(DeployStatus.FAIL)
    assert WaitOutcome(DeployStatus.FAIL) != WaitOutcome(DeployStatus.CANCEL)
    with pytest.raises(ValueError):
        WaitOutcome("QUEUED")


def test_status_helpers():
    assert DeployStatus.from_remote("SUCCESS") is DeployStatus.SUCCESS
    assert DeployStatus.from_remote("TIMEOUT") is None
    assert DeployStatus.from_remote(None) is None
    assert DeployStatus.PROCESSING.is_terminal is False
    assert DeployStatus.CANCEL.is_terminal is True
    assert DeployStatus.TIMEOUT.is_terminal is False
    assert extract_status(None) is None
    assert extract_status({"apps": [{"status": "FAIL"}]}) == "FAIL"
