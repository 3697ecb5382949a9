from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from ctui_core.events import (  # noqa: E402
    AddNotification,
    ExecRequested,
    Key,
    OperationFinished,
    Resize,
    StatsLoaded,
    StatsTick,
)
from ctui_core.logs import LogsOverlay  # noqa: E402
from ctui_core.models import CONTAINERS, ContainerStats  # noqa: E402
from ctui_core.panels.containers import ContainersPanel, format_inspection, format_stats  # noqa: E402
from ctui_core.tests.fakes import MB, FakeEngine, container, drive, make_context, run_commands  # noqa: E402


class ContainersPanelTests(unittest.TestCase):
    def setUp(self):
        self.engine = FakeEngine(
            containers=[
                container("c1", "api", "running"),
                container("c2", "db", "exited"),
                container("c3", "worker", "running"),
            ]
        )
        self.context = make_context(self.engine)
        self.panel = ContainersPanel(self.context)
        drive(self.panel, Resize(100, 30))
        for event in run_commands(self.panel.init()):
            drive(self.panel, event)

    def item(self, identity):
        return next(item for item in self.panel.view.items() if item.identity == identity)

    def test_stop_updates_state_in_place(self):
        drive(self.panel, Key("S"))
        self.assertEqual(self.engine.calls_to("set_state"), [("set_state", ("c1",), "stop")])
        self.assertEqual(self.item("c1").container.state, "exited")
        self.assertFalse(self.item("c1").working)

    def test_pending_operation_marks_items_working(self):
        commands = self.panel.update(Key("p"))
        self.assertTrue(self.item("c1").working)
        # a second action on a busy item is ignored
        self.assertEqual(self.panel.handle_key("P"), [])
        for event in run_commands(commands):
            drive(self.panel, event)
        self.assertEqual(self.item("c1").container.state, "paused")

    def test_action_applies_to_selection(self):
        drive(self.panel, Key("space"))
        drive(self.panel, Key("down"))
        drive(self.panel, Key("down"))
        drive(self.panel, Key("space"))
        drive(self.panel, Key("s"))
        self.assertEqual(self.engine.calls_to("set_state"), [("set_state", ("c1", "c3"), "start")])

    def test_failed_action_notifies_and_keeps_state(self):
        self.engine.failures["set_state"] = "conflict"
        delivered = drive(self.panel, Key("S"))
        self.assertEqual(self.item("c1").container.state, "running")
        self.assertFalse(self.item("c1").working)
        self.assertTrue(any(isinstance(e, AddNotification) and e.level == "error" for e in delivered))

    def test_remove_selected_asks_with_count(self):
        drive(self.panel, Key("ctrl+a"))
        drive(self.panel, Key("r"))
        dialog = self.panel.view.foreground
        self.assertEqual(dialog.message, "Are you sure you want to delete the 3 selected containers?")

        drive(self.panel, Key("tab"))
        delivered = drive(self.panel, Key("enter"))

        self.assertEqual(self.engine.calls_to("set_state"), [("set_state", ("c1", "c2", "c3"), "remove")])
        self.assertEqual(self.panel.view.items(), [])
        self.assertEqual(self.panel.view.selected_ids(), [])
        finished = [e for e in delivered if isinstance(e, OperationFinished)]
        self.assertEqual(finished[0].kind, CONTAINERS)

    def test_remove_does_not_inspect_removed_container(self):
        drive(self.panel, Key("r"))
        before = len(self.engine.calls_to("inspect_container"))
        drive(self.panel, Key("tab"))
        drive(self.panel, Key("enter"))

        later = self.engine.calls_to("inspect_container")[before:]
        self.assertNotIn(("inspect_container", "c1"), later)
        self.assertIn(("inspect_container", "c2"), later)
        rendered = "\n".join(self.panel.view.view().plain)
        self.assertNotIn("Failed to load details", rendered)
        self.assertIn("db (c2)", rendered)

    def test_remove_single_names_container(self):
        drive(self.panel, Key("r"))
        self.assertEqual(self.panel.view.foreground.message, "Are you sure you want to delete api?")

    def test_logs_open_overlay_and_stream(self):
        self.engine.log_chunks = [b"line one\nline", b" two\n"]
        drive(self.panel, Key("L"))
        overlay = self.panel.view.foreground
        self.assertIsInstance(overlay, LogsOverlay)
        self.assertEqual(list(overlay.lines), ["line one", "line two"])
        self.assertTrue(overlay.ended)

        drive(self.panel, Key("q"))
        self.assertIsNone(self.panel.view.foreground)
        self.assertTrue(overlay.cancelled.is_set())

    def start_logs(self):
        """Open the logs overlay and return its not yet run stream command."""
        (open_overlay,) = run_commands(self.panel.update(Key("L")))
        return self.panel.update(open_overlay)

    def test_logs_closed_while_stream_opens(self):
        open_commands = self.start_logs()
        stream_logs = self.engine.stream_logs

        def slow_stream_logs(container_id):
            stream = stream_logs(container_id)
            drive(self.panel, Key("esc"))
            return stream

        self.engine.stream_logs = slow_stream_logs
        self.assertEqual(run_commands(open_commands), [])
        self.assertIsNone(self.panel.view.foreground)
        self.assertEqual([stream.closed for stream in self.engine.streams], [True])

    def test_logs_closed_before_opened_event_arrives(self):
        opened = run_commands(self.start_logs())
        drive(self.panel, Key("esc"))
        self.assertIsNone(self.panel.view.foreground)

        for event in opened:
            drive(self.panel, event)
        self.assertEqual([stream.closed for stream in self.engine.streams], [True])
        self.assertEqual(len(self.engine.streams), 1)

    def test_logs_need_running_container(self):
        drive(self.panel, Key("down"))
        delivered = drive(self.panel, Key("L"))
        self.assertIsNone(self.panel.view.foreground)
        self.assertTrue(any(isinstance(e, AddNotification) for e in delivered))
        self.assertEqual(self.engine.calls_to("stream_logs"), [])

    def test_exec_requests_shell(self):
        delivered = drive(self.panel, Key("x"))
        self.assertIn(ExecRequested(("docker", "exec", "-it", "c1", "/bin/sh")), delivered)

    def test_detail_shows_inspection(self):
        rendered = "\n".join(self.panel.view.view().plain)
        self.assertIn("api (c1)", rendered)
        self.assertIn("Image: alpine:3", rendered)

    def tick(self):
        commands = self.panel.update(StatsTick(CONTAINERS))
        self.assertEqual([c.__name__ for c in commands].count("tick"), 1)
        for event in run_commands(commands):
            drive(self.panel, event)

    def test_stats_tick_samples_running_cursor(self):
        self.engine.stats["c1"] = ContainerStats(12.5, 50 * MB, 1024 * MB)
        self.tick()
        self.engine.stats["c1"] = ContainerStats(40.0, 60 * MB, 1024 * MB)
        self.tick()

        self.assertEqual(self.engine.calls_to("container_stats"), [("container_stats", "c1")] * 2)
        self.assertEqual(list(self.panel.cpu_history), [12.5, 40.0])
        rendered = "\n".join(self.panel.view.view().plain)
        self.assertIn("CPU: 40.00% | Mem: 60MB / 1024MB", rendered)

    def test_stats_skip_stopped_container_and_open_dialog(self):
        drive(self.panel, Key("down"))
        self.tick()
        drive(self.panel, Key("up"))
        drive(self.panel, Key("r"))
        self.assertTrue(self.panel.view.is_overlay_visible())
        self.tick()
        self.assertEqual(self.engine.calls_to("container_stats"), [])

    def test_history_resets_when_cursor_moves(self):
        self.tick()
        self.assertEqual(len(self.panel.cpu_history), 1)
        drive(self.panel, Key("down"))
        drive(self.panel, Key("down"))
        self.assertEqual(len(self.panel.cpu_history), 0)
        self.tick()
        self.assertEqual(self.engine.calls_to("container_stats")[-1], ("container_stats", "c3"))

    def test_stats_for_previous_container_are_dropped(self):
        drive(self.panel, StatsLoaded(CONTAINERS, "c3", ContainerStats(99.0)))
        self.assertEqual(list(self.panel.cpu_history), [])

    def test_stats_redraw_keeps_detail_scroll(self):
        drive(self.panel, Resize(100, 8))
        self.tick()
        detail = self.panel.view.detail
        detail.scroll(3)
        offset = detail.offset
        self.assertGreater(offset, 0)
        self.tick()
        self.assertEqual(detail.offset, offset)
        self.assertEqual(len(self.panel.cpu_history), 2)

    def test_stats_failure_keeps_detail(self):
        self.engine.failures["container_stats"] = "gone"
        self.tick()
        self.assertEqual(list(self.panel.cpu_history), [])
        self.assertIn("api (c1)", "\n".join(self.panel.view.view().plain))


class FormatInspectionTests(unittest.TestCase):
    def test_sections(self):
        attrs = {
            "Id": "0123456789abcdef",
            "Name": "/web",
            "Config": {"Image": "nginx", "Cmd": ["nginx"], "Env": ["PORT=80"], "WorkingDir": "/srv"},
            "State": {"Status": "running", "Running": True},
            "Mounts": [{"Source": "/data", "Destination": "/srv/data", "Type": "bind"}],
            "NetworkSettings": {"Ports": {"80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}]}},
        }
        text = format_inspection(attrs, make_context().theme).plain
        self.assertTrue(text.startswith("web (0123456789ab)"))
        self.assertIn("PORT=80", text)
        self.assertIn("/data -> /srv/data (bind)", text)
        self.assertIn("80/tcp -> ['0.0.0.0:8080']", text)

    def test_stats_only_for_running(self):
        stats = ContainerStats(3.14159, 128 * MB, 2048 * MB)
        attrs = {"Id": "abc", "Name": "/web", "State": {"Status": "running", "Running": True}}
        text = format_inspection(attrs, make_context().theme, stats, [1.0, 3.0]).plain
        self.assertIn("CPU: 3.14% | Mem: 128MB / 2048MB", text)
        self.assertIn("CPU Usage (%) ", text)

        attrs["State"] = {"Status": "exited", "Running": False}
        self.assertNotIn("CPU:", format_inspection(attrs, make_context().theme, stats, [1.0]).plain)

    def test_format_stats_without_history(self):
        self.assertEqual(format_stats(ContainerStats(0.5, MB, 4 * MB), []), "CPU: 0.50% | Mem: 1MB / 4MB")


if __name__ == "__main__":
    unittest.main()
