from dataclasses import dataclass
from datetime import date
from unittest.mock import AsyncMock

import httpx
import pytest

from hecubot.exceptions import PhotoSourceExhausted
from hecubot.photos import DailyQuotaCounter, PhotoRetrievalPipeline, ProgressEvent, QueryMode, QuotaState, RandomMode
from hecubot.photos import pipeline as pipeline_module
from hecubot.types import PhotoResult, QuotaExceeded

TODAY = date(2024, 3, 1)


class _FixedRng:
    """Start offset is fixed; candidates are taken in list order."""

    def __init__(self, start=1):
        self.start = start

    def randint(self, a, b):
        assert a <= self.start <= b
        return self.start

    def randrange(self, n):
        return 0


def _pipeline(search=None, downloader=None, random_source=None, quota=None, start=1, **kwargs):
    return PhotoRetrievalPipeline(
        search=search or AsyncMock(),
        downloader=downloader or AsyncMock(),
        random_source=random_source or AsyncMock(),
        quota=quota or DailyQuotaCounter(100, clock=lambda: TODAY),
        rng=_FixedRng(start),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_quota_exceeded_makes_no_network_call():
    search = AsyncMock()
    downloader = AsyncMock()
    quota = DailyQuotaCounter(100, clock=lambda: TODAY, initial=QuotaState(100, TODAY))
    pipeline = _pipeline(search=search, downloader=downloader, quota=quota)

    result = await pipeline.fetch(QueryMode("cats"), 3)

    assert result == QuotaExceeded(100)
    search.search.assert_not_awaited()
    downloader.download.assert_not_awaited()


@pytest.mark.asyncio
async def test_only_allowed_formats_are_accepted(make_image):
    search = AsyncMock()
    search.search.return_value = ["u1", "u2", "u3", "u4", "u5"]
    downloader = AsyncMock()
    downloader.download.side_effect = [
        make_image("GIF"),
        make_image("JPEG"),
        b"<svg xmlns='http://www.w3.org/2000/svg'/>",
        make_image("BMP"),
        make_image("WEBP"),
    ]
    pipeline = _pipeline(search=search, downloader=downloader)

    photos = await pipeline.fetch(QueryMode("cats"), 2)

    assert [p.name for p in photos] == ["cats0.jpg", "cats1.webp"]
    assert [p.mime for p in photos] == ["image/jpeg", "image/webp"]
    assert search.search.await_count == 1


@pytest.mark.asyncio
async def test_query_consumes_one_quota_slot(make_image):
    quota = DailyQuotaCounter(100, clock=lambda: TODAY)
    search = AsyncMock()
    search.search.return_value = ["u"] * 5
    downloader = AsyncMock()
    downloader.download.return_value = make_image("PNG")

    photos = await _pipeline(search=search, downloader=downloader, quota=quota).fetch(QueryMode("dogs"), 5)

    assert len(photos) == 5
    assert [p.name for p in photos] == [f"dogs{i}.png" for i in range(5)]
    assert quota.state.count == 1


@pytest.mark.asyncio
async def test_paging_wraps_to_first_offset(make_image):
    search = AsyncMock()
    search.search.side_effect = [[], ["u"]]
    downloader = AsyncMock()
    downloader.download.return_value = make_image("PNG")
    pipeline = _pipeline(search=search, downloader=downloader, start=85, max_start=90, page_size=10)

    photos = await pipeline.fetch(QueryMode("cats"), 1)

    assert len(photos) == 1
    starts = [c.args[1] for c in search.search.await_args_list]
    assert starts == [85, 1]


@pytest.mark.asyncio
async def test_download_errors_discard_candidate(make_image):
    search = AsyncMock()
    search.search.return_value = ["bad", "404", "good"]
    downloader = AsyncMock()
    downloader.download.side_effect = [httpx.ConnectError("boom"), None, make_image("PNG")]

    photos = await _pipeline(search=search, downloader=downloader).fetch(QueryMode("x"), 1)

    assert [p.name for p in photos] == ["x0.png"]


@pytest.mark.asyncio
async def test_exhaustion_closes_accepted_streams(monkeypatch, make_image):
    created = []

    @dataclass
    class _RecordingResult(PhotoResult):
        def __post_init__(self):
            created.append(self)

    monkeypatch.setattr(pipeline_module, "PhotoResult", _RecordingResult)

    search = AsyncMock()
    search.search.return_value = ["u"]
    downloader = AsyncMock()
    downloader.download.side_effect = [make_image("PNG")] + [b"junk"] * 10
    pipeline = _pipeline(search=search, downloader=downloader, max_idle_batches=3)

    with pytest.raises(PhotoSourceExhausted) as exc_info:
        await pipeline.fetch(QueryMode("cats"), 2)

    assert exc_info.value.obtained == 1
    assert search.search.await_count == 4
    assert len(created) == 1 and created[0].content.closed


@pytest.mark.asyncio
async def test_search_error_propagates():
    search = AsyncMock()
    search.search.side_effect = httpx.ConnectTimeout("slow")

    with pytest.raises(httpx.HTTPError):
        await _pipeline(search=search).fetch(QueryMode("cats"), 1)


@pytest.mark.asyncio
async def test_random_mode_is_exempt_from_quota(make_image):
    quota = DailyQuotaCounter(1, clock=lambda: TODAY, initial=QuotaState(1, TODAY))
    random_source = AsyncMock()
    random_source.fetch.return_value = make_image("JPEG")

    photos = await _pipeline(random_source=random_source, quota=quota).fetch(RandomMode(300, 200), 3)

    assert [p.name for p in photos] == ["0.jpg", "1.jpg", "2.jpg"]
    random_source.fetch.assert_awaited_with(300, 200)
    assert quota.state.count == 1


@pytest.mark.asyncio
async def test_random_mode_gives_up_after_repeated_rejections():
    random_source = AsyncMock()
    random_source.fetch.return_value = b"not an image"
    pipeline = _pipeline(random_source=random_source, max_random_attempts=4)

    with pytest.raises(PhotoSourceExhausted):
        await pipeline.fetch(RandomMode(100, 100), 1)

    assert random_source.fetch.await_count == 4


@pytest.mark.asyncio
async def test_progress_events_are_reported(make_image):
    search = AsyncMock()
    search.search.return_value = ["u"]
    downloader = AsyncMock()
    downloader.download.return_value = make_image("PNG")
    progress = AsyncMock()

    await _pipeline(search=search, downloader=downloader).fetch(QueryMode("cats"), 1, progress)

    events = [c.args[0] for c in progress.await_args_list]
    assert events == [ProgressEvent.BATCH_START, ProgressEvent.CANDIDATE, ProgressEvent.ACCEPTED]


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 11])
async def test_count_out_of_range_is_a_caller_error(count):
    with pytest.raises(ValueError):
        await _pipeline(group_limit=10).fetch(QueryMode("cats"), count)
