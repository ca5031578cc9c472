"""Tests for SessionLifecycle attach/restore/navigation behavior."""

import asyncio

import pytest

from crosscast.domain.stream import TWITCH_HOST, YOUTUBE_HOST, SessionLifecycle
from crosscast.schemas import Candidate, LifecycleState
from crosscast.utils.app_errors import InvalidTransitionError, SearchError
from tests.fixtures.stream_fixtures import FakePage, GatedStore, no_sleep, yield_sleep

COOL_EMBED = "https://www.youtube.com/embed/bbbbbbbbbbb?autoplay=1&rel=0&enablejsapi=1"


class TestOnReady:
    """Tests for SessionLifecycle.on_ready."""

    async def test_activates_and_renders_history(self, lifecycle, view):
        assert await lifecycle.on_ready() is True

        assert lifecycle.state == LifecycleState.ACTIVE
        assert lifecycle.context.channel_key == "coolstreamer"
        assert view.history_renders == [[]]
        assert view.mounted == []

    async def test_gives_up_when_container_missing(
        self, view, memory_store, search_provider, scheduler
    ):
        """Test polling give-up leaves the lifecycle detached without raising."""
        page = FakePage(container_after=1000)
        lifecycle = SessionLifecycle(
            TWITCH_HOST, page, view, memory_store, search_provider, None, scheduler,
            sleep=yield_sleep,
        )

        assert await lifecycle.on_ready() is False

        assert lifecycle.state == LifecycleState.DETACHED
        assert page.checks == 15

    async def test_ignored_when_already_active(self, lifecycle):
        await lifecycle.on_ready()

        assert await lifecycle.on_ready() is False
        assert lifecycle.state == LifecycleState.ACTIVE

    async def test_resumes_persisted_session_without_search(
        self, lifecycle, view, memory_store, search_provider
    ):
        await memory_store.set(
            "session_active_coolstreamer",
            {"channel_key": "coolstreamer", "active_stream_id": "bbbbbbbbbbb"},
        )

        await lifecycle.on_ready()

        assert view.mounted == [COOL_EMBED]
        assert lifecycle.active_stream_id == "bbbbbbbbbbb"
        assert search_provider.queries == []
        assert lifecycle.sync.auto_sync_running is True

    async def test_missing_channel_name_waits_for_input(
        self, view, memory_store, search_provider, scheduler
    ):
        lifecycle = SessionLifecycle(
            TWITCH_HOST, FakePage(channel_name=None), view, memory_store, search_provider,
            None, scheduler,
        )

        assert await lifecycle.on_ready() is True
        assert await lifecycle.search() is None
        assert "Could not detect the channel name" in view.statuses[-1]


class TestUserActions:
    """Tests for substitutions chosen by the user."""

    async def test_search_attaches_matching_stream(self, lifecycle, view, memory_store):
        await lifecycle.on_ready()

        candidate = await lifecycle.search()

        assert candidate.stream_id == "bbbbbbbbbbb"
        assert view.mounted == [COOL_EMBED]
        data = memory_store.snapshot()
        assert data["session_active_coolstreamer"]["active_stream_id"] == "bbbbbbbbbbb"
        assert data["session_last_coolstreamer"] == "bbbbbbbbbbb"
        assert [e.stream_id for e in view.last_history] == ["bbbbbbbbbbb"]
        assert view.last_history[0].channel_name == "Cool Streamer"
        assert lifecycle.sync.auto_sync_running is True

    async def test_search_approximate_reports_guess(self, lifecycle, view, search_provider):
        search_provider.results = [
            Candidate(stream_id="ccccccccccc", title="Live", channel_name="Totally Different")
        ]
        await lifecycle.on_ready()

        candidate = await lifecycle.search()

        assert candidate.approximate is True
        assert lifecycle.active_stream_id == "ccccccccccc"
        assert view.statuses[-1] == "No exact match, showing best guess: Totally Different"

    async def test_search_error_becomes_status(self, lifecycle, view, search_provider):
        search_provider.error = SearchError("Search failed: offline")
        await lifecycle.on_ready()

        assert await lifecycle.search() is None

        assert view.statuses[-1] == "Search failed: offline"
        assert view.mounted == []

    async def test_no_results_becomes_status(self, lifecycle, view, search_provider):
        search_provider.results = []
        await lifecycle.on_ready()

        assert await lifecycle.search() is None

        assert view.statuses[-1] == "No live streams found for 'CoolStreamer'"

    async def test_submit_url_uses_metadata_for_history(self, lifecycle, view):
        await lifecycle.on_ready()

        stream_id = await lifecycle.submit_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=5")

        assert stream_id == "dQw4w9WgXcQ"
        assert view.last_history[0].title == "Pasted stream"
        assert view.last_history[0].channel_name == "Paster"

    async def test_submit_invalid_url(self, lifecycle, view):
        await lifecycle.on_ready()

        assert await lifecycle.submit_url("not a url!") is None

        assert view.statuses[-1] == "Not a valid youtube URL"
        assert view.mounted == []

    async def test_select_history_replaces_player(self, lifecycle, view):
        await lifecycle.on_ready()
        await lifecycle.search()
        await lifecycle.submit_url("dQw4w9WgXcQ")

        await lifecycle.select_history("bbbbbbbbbbb")

        assert lifecycle.active_stream_id == "bbbbbbbbbbb"
        assert view.unmount_count == 2
        assert [e.stream_id for e in view.last_history][0] == "bbbbbbbbbbb"

    async def test_actions_require_active(self, lifecycle):
        with pytest.raises(InvalidTransitionError):
            await lifecycle.search()
        with pytest.raises(InvalidTransitionError):
            await lifecycle.restore()

    async def test_auto_sync_drives_mounted_player(self, lifecycle, view, scheduler):
        await lifecycle.on_ready()
        await lifecycle.search()

        scheduler.advance(60)

        assert view.player.names == ["seekTo"]

    async def test_works_when_store_unavailable(self, lifecycle, view, memory_store):
        memory_store.close()
        await lifecycle.on_ready()

        await lifecycle.search()

        assert lifecycle.active_stream_id == "bbbbbbbbbbb"
        assert lifecycle.sessions.available is False


class TestNavigationAndRestore:
    """Tests for non-destructive navigation versus explicit restore."""

    async def test_navigation_preserves_persisted_session(
        self, lifecycle, page, view, memory_store
    ):
        """Test leaving and returning to a channel resumes its stream."""
        await lifecycle.on_ready()
        await lifecycle.search()

        lifecycle.on_navigated()

        assert lifecycle.state == LifecycleState.DETACHED
        assert lifecycle.active_stream_id is None
        assert lifecycle.sync.auto_sync_running is False
        assert view.unmount_count == 1
        assert "session_active_coolstreamer" in memory_store.snapshot()

        page.channel_name = "Another Channel"
        await lifecycle.on_ready()
        assert lifecycle.active_stream_id is None

        lifecycle.on_navigated()
        page.channel_name = "CoolStreamer"
        await lifecycle.on_ready()

        assert lifecycle.active_stream_id == "bbbbbbbbbbb"
        assert view.mounted == [COOL_EMBED, COOL_EMBED]

    async def test_restore_clears_session_permanently(self, lifecycle, view, memory_store):
        """Test a restored channel is not resumed after navigating back."""
        await lifecycle.on_ready()
        await lifecycle.search()

        await lifecycle.restore()

        assert lifecycle.state == LifecycleState.DETACHED
        assert view.unmount_count == 1
        assert "session_active_coolstreamer" not in memory_store.snapshot()
        assert await lifecycle.suggestion() == "bbbbbbbbbbb"

        lifecycle.on_navigated()
        await lifecycle.on_ready()

        assert lifecycle.active_stream_id is None
        assert len(view.mounted) == 1

    async def test_stale_search_result_dropped(
        self, lifecycle, view, search_provider, memory_store
    ):
        """Test a search that completes after navigation does not attach."""
        await lifecycle.on_ready()
        search_provider.gate = asyncio.Event()

        task = asyncio.create_task(lifecycle.search())
        await asyncio.sleep(0)
        lifecycle.on_navigated()
        search_provider.gate.set()

        assert await task is None
        assert view.mounted == []
        assert "session_active_coolstreamer" not in memory_store.snapshot()

    async def test_stale_url_submission_dropped(
        self, lifecycle, view, metadata_provider, memory_store
    ):
        """Test a metadata lookup that completes after navigation does not attach."""
        await lifecycle.on_ready()
        metadata_provider.gate = asyncio.Event()

        task = asyncio.create_task(lifecycle.submit_url("dQw4w9WgXcQ"))
        await asyncio.sleep(0)
        assert metadata_provider.requests == ["dQw4w9WgXcQ"]
        lifecycle.on_navigated()
        metadata_provider.gate.set()

        assert await task is None
        assert view.mounted == []
        snapshot = memory_store.snapshot()
        assert "session_active_coolstreamer" not in snapshot
        assert "session_last_coolstreamer" not in snapshot
        assert "history" not in snapshot

    async def test_stale_session_lookup_dropped(self, page, view, search_provider, scheduler):
        """Test a persisted session read that completes after navigation is not resumed."""
        store = GatedStore(
            {
                "session_active_coolstreamer": {
                    "channel_key": "coolstreamer",
                    "active_stream_id": "bbbbbbbbbbb",
                }
            }
        )
        store.gates["session_active_coolstreamer"] = asyncio.Event()
        lifecycle = SessionLifecycle(
            TWITCH_HOST, page, view, store, search_provider, None, scheduler, sleep=no_sleep
        )

        task = asyncio.create_task(lifecycle.on_ready())
        await asyncio.sleep(0)
        assert store.waiting == {"session_active_coolstreamer"}
        lifecycle.on_navigated()
        store.gates["session_active_coolstreamer"].set()

        assert await task is False
        assert view.mounted == []
        assert lifecycle.active_stream_id is None
        assert lifecycle.state == LifecycleState.DETACHED
        snapshot = store.snapshot()
        assert snapshot["session_active_coolstreamer"]["active_stream_id"] == "bbbbbbbbbbb"
        assert "history" not in snapshot

    async def test_navigation_cancels_readiness_polling(
        self, view, memory_store, search_provider, scheduler
    ):
        page = FakePage(container_after=3)
        lifecycle = SessionLifecycle(
            TWITCH_HOST, page, view, memory_store, search_provider, None, scheduler,
            sleep=yield_sleep,
        )

        task = asyncio.create_task(lifecycle.on_ready())
        await asyncio.sleep(0)
        lifecycle.on_navigated()

        assert await task is False
        assert lifecycle.state == LifecycleState.DETACHED
        assert page.checks == 1

        assert await lifecycle.on_ready() is True


class TestSuggestion:
    """Tests for SessionLifecycle.suggestion."""

    async def test_nothing_to_offer_without_hint(self, lifecycle):
        await lifecycle.on_ready()

        assert await lifecycle.suggestion() is None

    async def test_channel_named_remote_guesses_host_channel(
        self, page, view, memory_store, search_provider, scheduler
    ):
        """Test a Twitch remote offers the normalized host channel name as a channel."""
        page.channel_name = "Cool Streamer!"
        lifecycle = SessionLifecycle(
            YOUTUBE_HOST, page, view, memory_store, search_provider, None, scheduler,
            sleep=no_sleep,
        )
        await lifecycle.on_ready()

        assert await lifecycle.suggestion() == "coolstreamer"

    async def test_last_stream_wins_over_channel_guess(
        self, page, view, memory_store, search_provider, scheduler
    ):
        await memory_store.set("session_last_coolstreamer", "other_channel")
        lifecycle = SessionLifecycle(
            YOUTUBE_HOST, page, view, memory_store, search_provider, None, scheduler,
            sleep=no_sleep,
        )
        await lifecycle.on_ready()

        assert await lifecycle.suggestion() == "other_channel"

    async def test_no_suggestion_while_active(self, lifecycle):
        await lifecycle.on_ready()
        await lifecycle.search()

        assert await lifecycle.suggestion() is None


class TestPreferences:
    """Tests for preference toggles."""

    async def test_preferences_loaded_from_store(self, lifecycle, memory_store):
        await memory_store.set("pref_autosync", False)

        await lifecycle.on_ready()
        await lifecycle.search()

        assert lifecycle.preferences.auto_sync_enabled is False
        assert lifecycle.sync.auto_sync_running is False

    async def test_toggle_auto_sync(self, lifecycle, memory_store):
        await lifecycle.on_ready()
        await lifecycle.search()

        await lifecycle.set_auto_sync(False)
        assert lifecycle.sync.auto_sync_running is False
        assert memory_store.snapshot()["pref_autosync"] is False

        await lifecycle.set_auto_sync(True)
        assert lifecycle.sync.auto_sync_running is True

    async def test_force_quality_applies_to_next_mount(self, lifecycle, view, memory_store):
        await lifecycle.on_ready()
        await lifecycle.set_force_quality(True)

        await lifecycle.select_candidate(Candidate(stream_id="bbbbbbbbbbb"))

        assert view.mounted == [COOL_EMBED + "&vq=highres"]
        assert memory_store.snapshot()["pref_force_quality"] is True

    async def test_pin_and_clear_render_history(self, lifecycle, view):
        await lifecycle.on_ready()
        await lifecycle.search()

        entry = await lifecycle.toggle_pin("bbbbbbbbbbb")
        assert entry.pinned is True
        assert view.last_history[0].pinned is True

        await lifecycle.clear_history()
        assert view.last_history == []
