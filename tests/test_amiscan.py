from datetime import datetime, timezone

import mock
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ami.amiscan import ami_age_days, get_ami_creation, parse_creation_date
from errors.scanerrors import (
    ImageLookupError,
    ImageNotFoundError,
    TimestampParseError,
)


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "DescribeImages")


@pytest.fixture
def client():
    c = mock.Mock(name="ec2")
    c.describe_images.side_effect = lambda ImageIds: {
        "Images": [
            {"ImageId": ImageIds[0], "CreationDate": "2024-01-01T00:00:00.000Z"}
        ]
    }
    return c


def test_get_ami_creation_cache_miss(client):
    creation_map = {}
    assert get_ami_creation(client, "ami-1", creation_map) == \
        "2024-01-01T00:00:00.000Z"
    client.describe_images.assert_called_once_with(ImageIds=["ami-1"])
    assert creation_map == {"ami-1": "2024-01-01T00:00:00.000Z"}


def test_get_ami_creation_cached_once(client):
    creation_map = {}
    first = get_ami_creation(client, "ami-1", creation_map)
    second = get_ami_creation(client, "ami-1", creation_map)
    assert first == second
    assert client.describe_images.call_count == 1


def test_get_ami_creation_preseeded_cache(client):
    creation_map = {"ami-1": "2020-05-05T10:00:00.000Z"}
    assert get_ami_creation(client, "ami-1", creation_map) == \
        "2020-05-05T10:00:00.000Z"
    assert not client.describe_images.called


def test_get_ami_creation_distinct_ids():
    c = mock.Mock(name="ec2")
    dates = {
        "ami-1": "2024-01-01T00:00:00.000Z",
        "ami-2": "2023-06-01T12:30:00.000Z",
    }
    c.describe_images.side_effect = lambda ImageIds: {
        "Images": [{"CreationDate": dates[ImageIds[0]]}]
    }
    creation_map = {}
    assert get_ami_creation(c, "ami-2", creation_map) == dates["ami-2"]
    assert get_ami_creation(c, "ami-1", creation_map) == dates["ami-1"]
    assert get_ami_creation(c, "ami-2", creation_map) == dates["ami-2"]
    assert creation_map == dates
    assert c.describe_images.call_count == 2


def test_get_ami_creation_first_image_wins():
    c = mock.Mock(name="ec2")
    c.describe_images.return_value = {
        "Images": [
            {"CreationDate": "2024-01-01T00:00:00.000Z"},
            {"CreationDate": "2019-01-01T00:00:00.000Z"},
        ]
    }
    assert get_ami_creation(c, "ami-1", {}) == "2024-01-01T00:00:00.000Z"


def test_get_ami_creation_no_images():
    c = mock.Mock(name="ec2")
    c.describe_images.return_value = {"Images": []}
    creation_map = {}
    with pytest.raises(ImageNotFoundError) as excinfo:
        get_ami_creation(c, "ami-gone", creation_map)
    assert excinfo.value.image_id == "ami-gone"
    assert "ami-gone" in str(excinfo.value)
    assert creation_map == {}


def test_get_ami_creation_not_found_code():
    c = mock.Mock(name="ec2")
    c.describe_images.side_effect = client_error("InvalidAMIID.NotFound")
    creation_map = {}
    with pytest.raises(ImageNotFoundError):
        get_ami_creation(c, "ami-gone", creation_map)
    assert creation_map == {}


def test_get_ami_creation_api_error():
    c = mock.Mock(name="ec2")
    c.describe_images.side_effect = client_error("UnauthorizedOperation")
    creation_map = {}
    with pytest.raises(ImageLookupError) as excinfo:
        get_ami_creation(c, "ami-1", creation_map)
    assert not isinstance(excinfo.value, ImageNotFoundError)
    assert isinstance(excinfo.value.__cause__, ClientError)
    assert creation_map == {}


def test_get_ami_creation_transport_error():
    c = mock.Mock(name="ec2")
    c.describe_images.side_effect = EndpointConnectionError(
        endpoint_url="https://ec2.eu-central-1.amazonaws.com"
    )
    creation_map = {}
    with pytest.raises(ImageLookupError):
        get_ami_creation(c, "ami-1", creation_map)
    assert creation_map == {}


def test_get_ami_creation_retries_after_failure():
    c = mock.Mock(name="ec2")
    c.describe_images.side_effect = [
        {"Images": []},
        {"Images": [{"CreationDate": "2024-01-01T00:00:00.000Z"}]},
    ]
    creation_map = {}
    with pytest.raises(ImageNotFoundError):
        get_ami_creation(c, "ami-1", creation_map)
    assert get_ami_creation(c, "ami-1", creation_map) == \
        "2024-01-01T00:00:00.000Z"
    assert c.describe_images.call_count == 2


def test_parse_creation_date():
    assert parse_creation_date("2024-01-01T06:30:15.123Z") == \
        datetime(2024, 1, 1, 6, 30, 15, 123000, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [
    "2024-01-01",
    "2024-01-01T00:00:00Z",
    "01/01/2024 00:00:00",
    "2024-01-01T00:00:00.5Z",
    "2024-01-01T00:00:00.123456Z",
    "2024-1-1T0:0:0.000Z",
    "2024-01-01T00:00:00.000",
    "2024-13-01T00:00:00.000Z",
    " 2024-01-01T00:00:00.000Z",
    "",
    None,
])
def test_parse_creation_date_bad(value):
    with pytest.raises(TimestampParseError):
        parse_creation_date(value)


def test_ami_age_days():
    created = parse_creation_date("2024-01-01T00:00:00.000Z")
    now = parse_creation_date("2024-01-11T00:00:00.000Z")
    assert ami_age_days(created, now) == 10


def test_ami_age_days_rounds_down():
    created = parse_creation_date("2024-01-01T00:00:00.000Z")
    now = parse_creation_date("2024-01-11T23:59:59.999Z")
    assert ami_age_days(created, now) == 10


def test_ami_age_days_defaults_to_now():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    with mock.patch("ami.amiscan.datetime") as m_datetime:
        m_datetime.now.return_value = datetime(2024, 1, 4, tzinfo=timezone.utc)
        assert ami_age_days(created) == 3
        m_datetime.now.assert_called_once_with(timezone.utc)
