#!/usr/bin/env python3
"""
AMI age resolver
"""
import logging
import re
from datetime import datetime, timezone
from botocore.exceptions import BotoCoreError, ClientError
from errors.scanerrors import (
    ImageLookupError,
    ImageNotFoundError,
    TimestampParseError,
)

log = logging.getLogger(__name__)
CREATION_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
CREATION_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z")
NOT_FOUND_CODES = ("InvalidAMIID.NotFound", "InvalidAMIID.Unavailable")


def get_ami_creation(client, image_id, creation_map):
    """
    AMI creation date, cached in creation_map by image id
    """
    if image_id in creation_map:
        log.debug("Creation date of %s found in cache", image_id)
        return creation_map[image_id]

    log.debug("Looking up creation date of %s", image_id)
    try:
        response = client.describe_images(ImageIds=[image_id])
    except ClientError as exception:
        if exception.response["Error"]["Code"] in NOT_FOUND_CODES:
            raise ImageNotFoundError(
                image_id, f"no date for {image_id}: {exception}"
            ) from exception
        raise ImageLookupError(
            image_id, f"error getting image info for {image_id}: {exception}"
        ) from exception
    except BotoCoreError as exception:
        raise ImageLookupError(
            image_id, f"error getting image info for {image_id}: {exception}"
        ) from exception

    images = response.get("Images")
    if not images:
        raise ImageNotFoundError(image_id, f"no date for {image_id}")

    creation_date = images[0]["CreationDate"]
    creation_map[image_id] = creation_date

    return creation_date


def parse_creation_date(creation_date):
    """
    Parse an EC2 CreationDate string into an aware UTC datetime
    """
    if not isinstance(creation_date, str) or not CREATION_DATE_PATTERN.fullmatch(
        creation_date
    ):
        raise TimestampParseError(f"failed to parse time string {creation_date}")

    try:
        created = datetime.strptime(creation_date, CREATION_DATE_FORMAT)
    except ValueError as exception:
        raise TimestampParseError(
            f"failed to parse time string {creation_date}: {exception}"
        ) from exception

    return created.replace(tzinfo=timezone.utc)


def ami_age_days(created, now=None):
    """
    Whole days elapsed since created, rounded down
    """
    if now is None:
        now = datetime.now(timezone.utc)

    return (now - created).days
