import pytest

from hecubot.photos import PhotoRequest, QueryMode, RandomMode, parse_photo_request
from hecubot.types import MalformedReason, MalformedRequest


def parse(text):
    return parse_photo_request(text, group_limit=10, default_size=800)


def test_query_with_default_count():
    assert parse("black mesa") == PhotoRequest(QueryMode("black mesa"), 5)


def test_query_with_count():
    assert parse("headcrab//3") == PhotoRequest(QueryMode("headcrab"), 3)


def test_count_split_at_last_separator():
    assert parse("http://x//2") == PhotoRequest(QueryMode("http://x"), 2)


@pytest.mark.parametrize("text", ["cats//0", "cats//11", "cats//-2"])
def test_count_out_of_range(text):
    result = parse(text)
    assert isinstance(result, MalformedRequest)
    assert result.reason is MalformedReason.OUT_OF_RANGE


@pytest.mark.parametrize("text", ["cats//many", "cats//", "cats//2.5"])
def test_count_not_a_number(text):
    assert parse(text).reason is MalformedReason.UNPARSEABLE


def test_empty_query():
    assert parse("   //3").reason is MalformedReason.EMPTY_QUERY


def test_random_default_size():
    assert parse("random") == PhotoRequest(RandomMode(800, 800), 5)


def test_random_is_case_insensitive():
    assert parse("RANDOM//2") == PhotoRequest(RandomMode(800, 800), 2)


def test_random_square():
    assert parse("random-300") == PhotoRequest(RandomMode(300, 300), 5)


def test_random_width_height():
    assert parse("random-640-480//4") == PhotoRequest(RandomMode(640, 480), 4)


@pytest.mark.parametrize("text", ["random-abc", "random-0", "random-10-x", "random-6000-10", "random--5"])
def test_random_bad_dimensions(text):
    assert parse(text).reason is MalformedReason.UNPARSEABLE
