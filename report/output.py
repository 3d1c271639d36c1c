#!/usr/bin/env python3
"""
Report output
"""
import click
import openpyxl
from openpyxl.styles import Font
from tabulate import tabulate

TABLE_HEAD = ["Account", "InstanceId", "Name", "ImageId", "AMI age"]


def format_record(record):
    """
    One report line: account, instance, name, image and age
    """
    return (
        f"{record.account_id} {record.instance_id} {record.name} "
        f"{record.image_id} {record.age_days} days"
    )


def record_row(record):
    """
    Table row of a record
    """
    return [
        record.account_id,
        record.instance_id,
        record.name,
        record.image_id,
        f"{record.age_days} days",
    ]


class Report:
    """
    Collects emitted records, printing them as lines or as one table
    """

    def __init__(self, output="text"):
        self.output = output
        self.table_data = []

    def emit(self, record):
        """
        Record a row, printing it straight away in text mode
        """
        self.table_data.append(record_row(record))
        if self.output == "text":
            click.echo(format_record(record))

    def finish(self):
        """
        Print the collected table in table mode
        """
        if self.output == "table" and self.table_data:
            click.echo(
                tabulate(
                    self.table_data,
                    headers=TABLE_HEAD,
                    tablefmt="github",
                    disable_numparse=True,
                )
            )


def export_data(export_file, table_data, sheet_name="ami-age"):
    """
    Export data
    """
    workbook = openpyxl.Workbook()
    workbook.remove(workbook["Sheet"])
    sheet = workbook.create_sheet(sheet_name[:30])
    sheet.append(TABLE_HEAD)

    bold_font = Font(bold=True)
    for col_num in range(1, len(TABLE_HEAD) + 1):
        sheet.cell(row=1, column=col_num).font = bold_font

    for row in table_data:
        sheet.append(row)

    workbook.save(export_file)
