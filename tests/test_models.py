from growlink.shared.models import ControlField, Credentials, DeviceStatus, Reading


def test_zero_reading():
    reading = Reading.zero("2024-01-01T00:00:00+00:00")
    assert reading.is_all_zero()
    assert reading.timestamp == "2024-01-01T00:00:00+00:00"
    assert Reading.zero().timestamp is not None


def test_any_nonzero_value_is_real_data():
    assert not Reading(0.0, 0.0, 0.0, 0.1).is_all_zero()
    assert not Reading(0.0, 12.0, 0.0, 0.0).is_all_zero()


def test_device_status_replace():
    status = DeviceStatus.all_off().replace(ControlField.WATERING, True)

    assert status == DeviceStatus(grow_light=False, watering=True, auto_mode=False)
    assert status.get(ControlField.WATERING) is True
    assert status.get(ControlField.AUTO_MODE) is False


def test_control_field_wire_names():
    assert [c.value for c in ControlField] == ["field5", "field6", "field7"]
    assert ControlField.AUTO_MODE.attribute == "auto_mode"


def test_credentials_configured():
    credentials = Credentials("123", "READ", "WRITE")
    assert credentials.is_configured()
    assert credentials.can_read()
    assert credentials.can_write()
    assert not credentials.has_placeholder()


def test_placeholder_credentials():
    credentials = Credentials("##", "####", "####")
    assert not credentials.is_configured()
    assert not credentials.can_read()
    assert not credentials.can_write()
    assert credentials.has_placeholder()


def test_partial_credentials():
    read_only = Credentials("123", "READ", None)
    assert read_only.can_read()
    assert not read_only.can_write()
    assert not read_only.is_configured()

    assert not Credentials(None, "READ", "WRITE").can_read()
    assert not Credentials("123", "####", "WRITE").can_read()
    assert Credentials("123", "####", "WRITE").can_write()
