#!/usr/bin/env python3
"""
Account and role iteration
"""
import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from ec2.ec2scan import query_ec2
from errors.scanerrors import (
    CredentialError,
    RoleFileError,
    RoleFormatError,
    ScanError,
)

log = logging.getLogger(__name__)
ROLE_SESSION_NAME = "ami-age-report"


def query_caller_account(session):
    """
    Account id of the default credentials
    """
    try:
        identity = session.client("sts").get_caller_identity()
    except (BotoCoreError, ClientError) as exception:
        raise CredentialError(f"Failed to get identity: {exception}") from exception

    return identity["Account"]


def query_default_account(session, region, creation_map, emit):
    """
    Scan the account of the default credentials
    """
    account_id = query_caller_account(session)
    ec2_client = session.client("ec2", region_name=region)

    return query_ec2(ec2_client, account_id, creation_map, emit)


def read_roles(path):
    """
    Role ARNs from a role file, skipping comments and blank lines
    """
    try:
        with open(path, encoding="utf-8") as role_file:
            for line in role_file:
                role = line.rstrip("\r\n")
                if role.startswith("#") or not role.strip():
                    continue
                yield role
    except (OSError, UnicodeDecodeError) as exception:
        raise RoleFileError(
            f"Error processing role-file: {path} {exception}"
        ) from exception


def account_from_role(role):
    """
    Account id out of arn:aws:iam::<account>:role/<name>
    """
    fields = role.split(":")
    if len(fields) < 5:
        raise RoleFormatError(f"no account field in role {role}")

    return fields[4]


def assume_role_session(session, role, session_name=ROLE_SESSION_NAME):
    """
    Session holding temporary credentials of the assumed role
    """
    try:
        response = session.client("sts").assume_role(
            RoleArn=role, RoleSessionName=session_name
        )
    except (BotoCoreError, ClientError) as exception:
        raise CredentialError(
            f"Failed to assume role {role}: {exception}"
        ) from exception

    credentials = response["Credentials"]
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
    )


def query_role(session, role, region, creation_map, emit, session_name):
    """
    Scan the account of one role
    """
    account_id = account_from_role(role)
    role_session = assume_role_session(session, role, session_name)
    ec2_client = role_session.client("ec2", region_name=region)

    return query_ec2(ec2_client, account_id, creation_map, emit)


def query_roles(
    session, path, region, creation_map, emit, session_name=ROLE_SESSION_NAME
):
    """
    Scan every role listed in the role file

    A failing role is logged and skipped, the next one is still scanned.
    Returns the (role, error) pairs of the roles that failed.
    """
    failures = []
    for role in read_roles(path):
        try:
            query_role(session, role, region, creation_map, emit, session_name)
        except ScanError as exception:
            log.error("Error for role %s %s", role, exception)
            failures.append((role, exception))

    return failures
