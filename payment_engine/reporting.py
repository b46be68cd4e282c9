"""
Account Reporting Module

Renders final client balances as CSV: one ``client,available,held,total,locked``
row per client, currency fields with exactly four decimal places.
"""

import csv
import io
from typing import Mapping, TextIO

from .accounts import ClientAccount

REPORT_HEADERS = ["client", "available", "held", "total", "locked"]


def account_row(client: int, account: ClientAccount) -> list:
    """Report row for a single account"""
    return [
        str(client),
        str(account.available),
        str(account.held),
        str(account.total),
        "true" if account.locked else "false",
    ]


def write_accounts(accounts: Mapping[int, ClientAccount], stream: TextIO) -> None:
    """
    Write the account report to a stream

    Args:
        accounts: Client id to account, written in mapping order
        stream: Destination text stream
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_HEADERS)
    for client, account in accounts.items():
        writer.writerow(account_row(client, account))


def render_accounts(accounts: Mapping[int, ClientAccount]) -> str:
    """Account report as a CSV string"""
    output = io.StringIO()
    write_accounts(accounts, output)
    return output.getvalue()
