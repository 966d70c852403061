"""
Unit tests for sequenced view refresh
"""
import asyncio

import pytest

from resolve.realtime import ViewRefresher


class ControlledFetch:
    """Fetch whose responses are released by the test, in any order"""

    def __init__(self):
        self.pending = []
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


class TestViewRefresher:
    @pytest.mark.asyncio
    async def test_publishes_fetched_view(self):
        published = []

        async def fetch():
            return "view-1"

        async def on_update(view):
            published.append(view)

        refresher = ViewRefresher(fetch, on_update)
        assert await refresher.refresh() is True

        assert published == ["view-1"]
        assert refresher.current == "view-1"

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        """An older fetch finishing last never overwrites a newer view"""
        fetch = ControlledFetch()
        published = []

        async def on_update(view):
            published.append(view)

        refresher = ViewRefresher(fetch, on_update)
        first = asyncio.create_task(refresher.refresh())
        second = asyncio.create_task(refresher.refresh())
        await asyncio.sleep(0)
        assert fetch.calls == 2

        fetch.pending[1].set_result("newer")
        assert await second is True

        fetch.pending[0].set_result("older")
        assert await first is False

        assert published == ["newer"]
        assert refresher.current == "newer"

    @pytest.mark.asyncio
    async def test_in_order_responses_both_publish(self):
        fetch = ControlledFetch()
        published = []

        async def on_update(view):
            published.append(view)

        refresher = ViewRefresher(fetch, on_update)
        first = asyncio.create_task(refresher.refresh())
        second = asyncio.create_task(refresher.refresh())
        await asyncio.sleep(0)

        fetch.pending[0].set_result("older")
        await first
        fetch.pending[1].set_result("newer")
        await second

        assert published == ["older", "newer"]
        assert refresher.current == "newer"

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_current_view(self):
        views = iter(["view-1"])

        async def fetch():
            try:
                return next(views)
            except StopIteration:
                raise RuntimeError("store unavailable")

        async def on_update(view):
            pass

        refresher = ViewRefresher(fetch, on_update)
        await refresher.refresh()

        with pytest.raises(RuntimeError):
            await refresher.refresh()

        assert refresher.current == "view-1"
        assert refresher.published_ticket == 1
