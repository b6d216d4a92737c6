import pytest

from growlink.client import TransportResponse
from growlink.shared.models import DeviceStatus

from conftest import PLACEHOLDERS, channel, feed


@pytest.mark.asyncio
async def test_status_maps_control_fields(make_client):
    client, transport = make_client(
        channel([feed("20", "50", "60", "70", field5="1", field6="0", field7="1")])
    )

    status = await client.fetch_status()

    assert status == DeviceStatus(grow_light=True, watering=False, auto_mode=True)


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["0", None, "", "true", "on", "01", "1.0"])
async def test_anything_but_one_is_off(make_client, value):
    client, transport = make_client(
        channel([feed(field5=value, field6="1", field7=value)])
    )

    status = await client.fetch_status()

    assert status == DeviceStatus(grow_light=False, watering=True, auto_mode=False)


@pytest.mark.asyncio
async def test_missing_control_fields_are_off(make_client):
    client, transport = make_client(channel([feed("20", "50", "60", "70")]))

    assert await client.fetch_status() == DeviceStatus.all_off()


@pytest.mark.asyncio
async def test_status_uses_short_timeout(make_client):
    client, transport = make_client(channel([feed(field5="1")]))

    await client.fetch_status()

    assert [call.timeout for call in transport.feed_calls()] == [3.0, 3.0]


@pytest.mark.asyncio
async def test_status_failure_is_all_off(make_client, timeout_error):
    client, transport = make_client(channel(error=timeout_error))

    assert await client.fetch_status() == DeviceStatus.all_off()
    assert await client.fetch_live_status() is None


@pytest.mark.asyncio
async def test_status_bad_status_is_all_off(make_client):
    client, transport = make_client(channel([feed(field5="1")], status=500))

    assert await client.fetch_status() == DeviceStatus.all_off()


@pytest.mark.asyncio
async def test_status_malformed_body_is_all_off(make_client):
    client, transport = make_client(lambda url, params: TransportResponse(200, '{"feeds": "nope"}'))

    assert await client.fetch_live_status() is None


@pytest.mark.asyncio
async def test_status_does_not_use_zero_heuristic_or_cache(make_client):
    client, transport = make_client(channel([feed("0", "0", "0", "0", field6="1")]))

    status = await client.fetch_status()

    assert status.watering is True
    assert not client.cache.has_data()


@pytest.mark.asyncio
async def test_status_unconfigured_makes_no_calls(make_client):
    client, transport = make_client(credentials=PLACEHOLDERS)

    assert await client.fetch_status() == DeviceStatus.all_off()
    assert transport.calls == []
