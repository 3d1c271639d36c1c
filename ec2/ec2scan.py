#!/usr/bin/env python3
"""
EC2 scanner
"""
import logging
from collections import namedtuple
from datetime import datetime, timezone
from botocore.exceptions import BotoCoreError, ClientError
from ami.amiscan import ami_age_days, get_ami_creation, parse_creation_date
from errors.scanerrors import ListError

log = logging.getLogger(__name__)
ACTIVE_STATES = ["running", "pending"]

InstanceRecord = namedtuple(
    "InstanceRecord", ["account_id", "instance_id", "name", "image_id", "age_days"]
)


def utc_now():
    """
    Current UTC time
    """
    return datetime.now(timezone.utc)


def check_instance_name(instance):
    """
    EC2 name, falls back to the instance id
    """
    instance_name = instance["InstanceId"]
    instance_tags = instance.get("Tags")
    if instance_tags:
        for tag in instance_tags:
            if tag["Key"] == "Name":
                instance_name = tag.get("Value")

    return instance_name


def list_active_instances(client):
    """
    Running and pending instances, in the order EC2 returns them
    """
    instances = []
    try:
        paginator = client.get_paginator("describe_instances")
        page_iterator = paginator.paginate(
            Filters=[{"Name": "instance-state-name", "Values": ACTIVE_STATES}]
        )
        for page in page_iterator:
            for reservation in page["Reservations"]:
                for instance in reservation["Instances"]:
                    instance_state = instance.get("State", {}).get("Name")
                    if instance_state and instance_state not in ACTIVE_STATES:
                        log.debug(
                            "Skipping %s in state %s",
                            instance["InstanceId"],
                            instance_state,
                        )
                        continue
                    instances.append(instance)
    except (BotoCoreError, ClientError) as exception:
        raise ListError(f"DescribeInstances failed: {exception}") from exception

    return instances


def query_ec2(client, account_id, creation_map, emit, clock=utc_now):
    """
    EC2 entrypoint

    Emits one InstanceRecord per running/pending instance of the account.
    The first lookup or parse error aborts the account, so nothing is
    emitted for the instances after it.
    """
    log.info("Running in EC2 mode for account %s", account_id)

    records = []
    for instance in list_active_instances(client):
        instance_id = instance["InstanceId"]
        instance_name = check_instance_name(instance)
        image_id = instance["ImageId"]

        creation_date = get_ami_creation(client, image_id, creation_map)
        created = parse_creation_date(creation_date)

        record = InstanceRecord(
            account_id,
            instance_id,
            instance_name,
            image_id,
            ami_age_days(created, clock()),
        )
        emit(record)
        records.append(record)

    log.debug("Reported %d instances for account %s", len(records), account_id)

    return records
