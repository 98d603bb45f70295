import re
import uuid

from api_store.utils.identifiers import generate_id_from_text, generate_uuid


def test_ids_from_same_text_differ_but_share_slug():
    first = generate_id_from_text("Get Forecast")
    second = generate_id_from_text("Get Forecast")

    assert first != second
    assert re.fullmatch(r"get-forecast-[0-9a-f]{8}", first)
    assert re.fullmatch(r"get-forecast-[0-9a-f]{8}", second)


def test_punctuation_is_collapsed_in_slug():
    assert generate_id_from_text("  Weather: 5-day / forecast! ").startswith("weather-5-day-forecast-")


def test_empty_text_yields_uuid():
    for text in ("", "!!!"):
        generated = generate_id_from_text(text)
        assert str(uuid.UUID(generated)) == generated


def test_generate_uuid_is_unique():
    assert len({generate_uuid() for _ in range(100)}) == 100
