import json
from pathlib import Path
from threading import Event

from ovs_evpn.model import Advertisement
from ovs_evpn_agent import DriverRegistry
from ovs_evpn_agent.drivers import AdvertisementDriver
from evpn_flow_agent.watchers.file import FileAdvertisementWatcher


class RecordingAdapter(AdvertisementDriver):
    def __init__(self):
        self.events = []

    def on_advertisement(self, advertisement):
        self.events.append(("upsert", advertisement))

    def on_withdraw(self, advertisement):
        self.events.append(("withdraw", advertisement))


ROUTE = {"mac": "aa:bb:cc:dd:ee:ff", "ip": "10.0.0.5", "vni": 42, "nexthop": "10.1.1.1"}


def build_watcher(tmp_path: Path):
    recorder = RecordingAdapter()
    registry = DriverRegistry()
    registry.register("recorder", recorder)
    watcher = FileAdvertisementWatcher(
        registry=registry,
        path=tmp_path / "routes.json",
        interval=0.1,
        stop_event=Event(),
    )
    return watcher, recorder


def test_file_watcher_publishes_updates(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)
    watcher.path.write_text(json.dumps({"routes": [ROUTE]}))

    watcher.poll()
    expected = Advertisement(mac="aa:bb:cc:dd:ee:ff", ip="10.0.0.5", vnis=(42,), nexthop="10.1.1.1")
    assert recorder.events == [("upsert", expected)]

    # Unchanged routes are not republished.
    recorder.events.clear()
    watcher.poll()
    assert recorder.events == []

    moved = dict(ROUTE, nexthop="10.1.1.3")
    watcher.path.write_text(json.dumps({"routes": [moved]}))
    watcher.poll()
    assert [e[1].nexthop for e in recorder.events] == ["10.1.1.3"]


def test_file_watcher_publishes_withdrawals(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)
    watcher.path.write_text(json.dumps([ROUTE]))
    watcher.poll()

    recorder.events.clear()
    watcher.path.write_text(json.dumps([]))
    watcher.poll()

    assert [kind for kind, _ in recorder.events] == ["withdraw"]
    assert recorder.events[0][1].ip == "10.0.0.5"


def test_file_watcher_accepts_gobgp_field_names(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)
    watcher.path.write_text(
        json.dumps(
            [
                {
                    "mac_addr": "aa:bb:cc:dd:ee:ff",
                    "ip_addr": "10.0.0.5",
                    "labels": [42, 7],
                    "nexthop": "10.1.1.1",
                }
            ]
        )
    )

    watcher.poll()

    assert recorder.events[0][1].vnis == (42, 7)


def test_file_watcher_skips_bad_entries(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)
    watcher.path.write_text(json.dumps({"routes": [{"ip": "10.0.0.9"}, "junk", ROUTE]}))

    watcher.poll()

    assert len(recorder.events) == 1


def test_file_watcher_ignores_missing_and_invalid_files(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)

    watcher.poll()
    watcher.path.write_text("{not json")
    watcher.poll()
    watcher.path.write_text(json.dumps({"other": []}))
    watcher.poll()

    assert recorder.events == []


def test_mac_notation_change_is_not_a_withdrawal(tmp_path: Path):
    watcher, recorder = build_watcher(tmp_path)
    watcher.path.write_text(json.dumps([ROUTE]))
    watcher.poll()
    recorder.events.clear()

    watcher.path.write_text(json.dumps([dict(ROUTE, mac="AA-BB-CC-DD-EE-FF")]))
    watcher.poll()

    assert [kind for kind, _ in recorder.events] == ["upsert"]
