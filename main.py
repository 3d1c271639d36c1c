#!/usr/bin/env python3
"""
Main entrypoint
"""
import logging
import sys
import boto3
import click
from botocore.exceptions import BotoCoreError
from errors.scanerrors import CredentialError, ScanError
from report.output import Report, export_data
from sts.rolescan import ROLE_SESSION_NAME, query_default_account, query_roles

log = logging.getLogger(__name__)
DEFAULT_REGION = "eu-central-1"
EXPORT_EXIT_CODE = 9


def create_session(region):
    """
    Default credentials session
    """
    try:
        return boto3.Session(region_name=region)
    except BotoCoreError as exception:
        raise CredentialError(f"AWS login failed: {exception}") from exception


@click.command(context_settings={"show_default": True})
@click.help_option("-h", "--help")
@click.option(
    "-r",
    "--roles",
    help="File containing AWS roles to assume, one per line",
    required=False,
    type=click.Path(dir_okay=False),
)
@click.option(
    "--region",
    envvar="AMI_AGE_REGION",
    default=DEFAULT_REGION,
)
@click.option(
    "--role-session-name",
    default=ROLE_SESSION_NAME,
)
@click.option(
    "-o",
    "--output",
    type=click.Choice(["text", "table"]),
    default="text",
)
@click.option(
    "-e",
    "--export-file",
    help="Export file path",
    required=False,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
)
def main(**options):
    """
    Report running EC2 instances with the age of their AMI
    """
    logging.basicConfig(
        level=logging.DEBUG if options["verbose"] else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    roles = options["roles"]
    region = options["region"]
    export_file = options["export_file"]

    creation_map = {}
    report = Report(options["output"])

    exit_code = 0
    try:
        session = create_session(region)
        if roles:
            failures = query_roles(
                session,
                roles,
                region,
                creation_map,
                report.emit,
                options["role_session_name"],
            )
            if failures:
                log.error("%d of the roles in %s failed", len(failures), roles)
                exit_code = 1
        else:
            query_default_account(session, region, creation_map, report.emit)
    except ScanError as exception:
        log.error("%s", exception)
        exit_code = exception.exit_code

    report.finish()
    if export_file:
        try:
            export_data(export_file, report.table_data)
        except OSError as exception:
            log.error("Failed to export to %s: %s", export_file, exception)
            exit_code = exit_code or EXPORT_EXIT_CODE

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
