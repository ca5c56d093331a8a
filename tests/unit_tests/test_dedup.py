"""
Dedup / Noise Filter 单元测试
"""

from __future__ import annotations

from logbridge.context import BridgeContext
from logbridge.dedup import DedupFilter, NoiseFilter
from logbridge.types import LogLevel


class TestDedupWindow:
    """滑动窗口去重测试"""

    def test_duplicate_inside_window_is_dropped(self, clock) -> None:
        dedup = DedupFilter(BridgeContext(), clock=clock)
        assert dedup.should_forward(LogLevel.WARN, "retrying connection") is True
        clock.advance(200)
        assert dedup.should_forward(LogLevel.WARN, "retrying connection") is False

    def test_duplicate_after_window_is_forwarded(self, clock) -> None:
        dedup = DedupFilter(BridgeContext(), clock=clock)
        assert dedup.should_forward("warn", "retrying connection") is True
        clock.advance(2000)
        assert dedup.should_forward("warn", "retrying connection") is True

    def test_dropped_duplicate_does_not_refresh_timestamp(self, clock) -> None:
        dedup = DedupFilter(BridgeContext(), clock=clock)
        dedup.should_forward("info", "tick")
        clock.advance(1000)
        assert dedup.should_forward("info", "tick") is False
        clock.advance(600)
        assert dedup.should_forward("info", "tick") is True

    def test_window_boundary_is_inclusive(self, clock) -> None:
        dedup = DedupFilter(BridgeContext(), clock=clock)
        dedup.should_forward("info", "tick")
        clock.advance(1500)
        assert dedup.should_forward("info", "tick") is False

    def test_level_is_part_of_key(self, clock) -> None:
        dedup = DedupFilter(BridgeContext(), clock=clock)
        assert dedup.should_forward("warn", "disk low") is True
        assert dedup.should_forward("error", "disk low") is True

    def test_stale_entries_are_swept(self, clock) -> None:
        context = BridgeContext()
        dedup = DedupFilter(context, clock=clock)
        dedup.should_forward("info", "first")
        clock.advance(1600)
        dedup.should_forward("info", "second")
        assert list(context.dedup_cache) == ["info:second"]

    def test_cache_lives_on_context(self, clock) -> None:
        context = BridgeContext()
        DedupFilter(context, clock=clock).should_forward("debug", "shared")
        assert DedupFilter(context, clock=clock).should_forward("debug", "shared") is False


class TestNoiseFilter:
    def test_default_reload_notice_is_noise(self) -> None:
        noise = NoiseFilter()
        assert noise.is_noise("[vite] Failed to reload /src/App.tsx. This could be due to syntax errors. See errors above.")

    def test_reload_notice_fragments_in_either_order(self) -> None:
        noise = NoiseFilter()
        assert noise.is_noise("See errors above: [vite] failed to reload /src/App.tsx")
        assert noise.is_noise("[vite] failed to reload\n\nsee errors above")

    def test_regular_message_is_not_noise(self) -> None:
        assert NoiseFilter().is_noise("[vite] failed to reload /src/App.tsx") is False

    def test_custom_patterns(self) -> None:
        noise = NoiseFilter([r"^heartbeat\b"])
        assert noise.is_noise("HEARTBEAT ok")
        assert not noise.is_noise("[vite] failed to reload, see errors above")
