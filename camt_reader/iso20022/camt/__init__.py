"""
ISO 20022 Cash Management (camt.*) Messages

Bank-to-customer statement messages.
"""

from camt_reader.iso20022.camt.camt053 import (
    Camt053Document,
    Camt053Parser,
    BankToCustomerStatement,
    GroupHeader,
    Statement,
    CashAccount,
    Balance,
    BalanceTypeCode,
    CodedBalanceType,
    ProprietaryBalanceType,
    CreditDebitIndicator,
    Amount,
    Entry,
    EntryDetails,
    TransactionDetails,
    TransactionReferences,
    BankTransactionCode,
    RemittanceInformation,
    RelatedParties,
    Counterparty,
    PartyRole,
    PartyId,
    PartyAccount,
    IbanAccount,
    OtherAccount,
    UnrecognizedAccount,
)

__all__ = [
    "Camt053Document",
    "Camt053Parser",
    "BankToCustomerStatement",
    "GroupHeader",
    "Statement",
    "CashAccount",
    "Balance",
    "BalanceTypeCode",
    "CodedBalanceType",
    "ProprietaryBalanceType",
    "CreditDebitIndicator",
    "Amount",
    "Entry",
    "EntryDetails",
    "TransactionDetails",
    "TransactionReferences",
    "BankTransactionCode",
    "RemittanceInformation",
    "RelatedParties",
    "Counterparty",
    "PartyRole",
    "PartyId",
    "PartyAccount",
    "IbanAccount",
    "OtherAccount",
    "UnrecognizedAccount",
]
