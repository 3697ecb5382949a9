from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from ctui_core.app import build_panels  # noqa: E402
from ctui_core.events import AddNotification, ItemsLoaded, Key, Quit, RefreshTick, Resize, StatsTick  # noqa: E402
from ctui_core.models import CONTAINERS, IMAGES, Image  # noqa: E402
from ctui_core.router import RESERVED_ROWS, TabRouter  # noqa: E402
from ctui_core.tests.fakes import FakeEngine, container, drive, make_context, run_commands  # noqa: E402


class TabRouterTests(unittest.TestCase):
    def setUp(self):
        self.engine = FakeEngine(
            containers=[container("c1", "api")],
            images=[Image("sha256:1", ["redis:7"], 1024)],
        )
        self.context = make_context(self.engine)
        self.router = TabRouter(self.context, build_panels(self.context))
        drive(self.router, Resize(120, 40))
        for event in run_commands(self.router.init()):
            drive(self.router, event)

    def test_resize_reaches_every_panel(self):
        for panel in self.router.panels.values():
            self.assertEqual((panel.view.width, panel.view.height), (120, 40 - RESERVED_ROWS))

    def test_init_loads_every_kind(self):
        self.assertEqual(len(self.router.panels[IMAGES].view.items()), 1)
        self.assertEqual(len(self.router.panels[CONTAINERS].view.items()), 1)

    def test_number_keys_switch_tabs(self):
        self.assertEqual(self.router.active.kind, CONTAINERS)
        drive(self.router, Key("2"))
        self.assertEqual(self.router.active.kind, IMAGES)
        drive(self.router, Key("["))
        self.assertEqual(self.router.active.kind, CONTAINERS)
        drive(self.router, Key("["))
        self.assertEqual(self.router.active.kind, "services")

    def test_stats_tick_reaches_containers_panel(self):
        drive(self.router, Key("2"))
        drive(self.router, StatsTick(CONTAINERS))
        self.assertEqual(self.engine.calls_to("container_stats"), [("container_stats", "c1")])
        self.assertEqual(len(self.router.panels[CONTAINERS].cpu_history), 1)

    def test_keys_only_reach_active_panel(self):
        drive(self.router, Key("/"))
        self.assertTrue(self.router.panels[CONTAINERS].view.is_filtering())
        self.assertFalse(self.router.panels[IMAGES].view.is_filtering())

    def test_filtering_blocks_tab_switch_and_quit(self):
        drive(self.router, Key("/"))
        self.assertNotIn(Quit(), drive(self.router, Key("q")))
        drive(self.router, Key("2"))
        self.assertEqual(self.router.active.kind, CONTAINERS)
        self.assertEqual(self.router.panels[CONTAINERS].view.list.filter_text, "q2")

    def test_quit_keys(self):
        self.assertIn(Quit(), drive(self.router, Key("q")))
        drive(self.router, Key("/"))
        self.assertIn(Quit(), drive(self.router, Key("ctrl+c")))

    def test_loaded_items_route_by_kind(self):
        drive(self.router, ItemsLoaded(IMAGES, ()))
        self.assertEqual(self.router.panels[IMAGES].view.items(), [])
        self.assertEqual(len(self.router.panels[CONTAINERS].view.items()), 1)

    def test_refresh_tick_reloads_active_panel(self):
        before = len(self.engine.calls_to("list_images"))
        drive(self.router, Key("2"))
        drive(self.router, RefreshTick())
        self.assertEqual(len(self.engine.calls_to("list_images")), before + 2)

    def test_notifications_survive_tab_switch(self):
        drive(self.router, AddNotification("hello"))
        drive(self.router, Key("3"))
        self.assertEqual([n.message for n in self.router.notifications.active()], ["hello"])
        self.assertIn("hello", "\n".join(self.router.view().plain))

    def test_view_fills_window(self):
        canvas = self.router.view()
        self.assertEqual((canvas.width, canvas.height), (120, 40))
        self.assertIn("1 Containers", canvas.plain[0])
        self.assertIn("q quit", canvas.plain[-1])

    def test_help_toggle(self):
        drive(self.router, Key("?"))
        self.assertTrue(self.router.show_full_help)
        self.assertIn("toggle selection of all", "\n".join(self.router.view().plain))
        drive(self.router, Key("?"))
        self.assertFalse(self.router.show_full_help)


if __name__ == "__main__":
    unittest.main()
