"""
Human-readable and JSON reports over a parsed camt.053 document.
"""

import json
from typing import List

from camt_reader.iso20022.camt.camt053 import (
    Balance,
    Camt053Document,
    Entry,
    Statement,
)

NO_ACCOUNT = "(no account on file)"


def format_text_report(document: Camt053Document) -> str:
    """Render the statement report as plain text lines."""
    message = document.message
    lines = [f"Creation date: {message.header.creation_datetime.isoformat()}"]

    multiple = len(message.statements) > 1
    for statement in message.statements:
        if multiple:
            lines.append(f"Statement: {statement.identification or '(no id)'}")
        lines.extend(_statement_lines(statement))

    return "\n".join(lines)


def format_json_report(document: Camt053Document, indent: int = 2) -> str:
    return json.dumps(document.to_dict(), indent=indent or None, ensure_ascii=False)


def _statement_lines(statement: Statement) -> List[str]:
    lines = []

    opening = statement.opening_balance()
    if opening is not None:
        lines.append(f"Opening balance: {_balance_text(opening)}")
    closing = statement.closing_balance()
    if closing is not None:
        lines.append(f"Closing balance: {_balance_text(closing)}")

    lines.append("Entries:")
    for entry in statement.entries:
        lines.extend(_entry_lines(entry))
    return lines


def _balance_text(balance: Balance) -> str:
    return f"{balance.amount} {balance.credit_debit.value} ({balance.date.isoformat()})"


def _entry_lines(entry: Entry) -> List[str]:
    lines = [
        f"== {entry.booking_date.isoformat()} ==",
        f"A: {entry.amount.currency} {entry.amount.value} {entry.credit_debit.value}",
    ]

    for transaction in entry.transactions:
        if transaction.related_parties is not None:
            for counterparty in transaction.related_parties.counterparties():
                account = str(counterparty.account) if counterparty.has_account else NO_ACCOUNT
                lines.append(f"P: {counterparty.party.name} - {account}")
        if transaction.remittance_info is not None:
            lines.append(f"Info: {transaction.remittance_info}")

    if entry.additional_info is not None:
        lines.append(f"Additional: {entry.additional_info}")
    return lines
