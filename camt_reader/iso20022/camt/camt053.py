"""
ISO 20022 camt.053 - Bank to Customer Statement

This message is sent by the account servicer to an account owner or
to a party authorised by the account owner to receive the message.
It is used to inform the account owner of the entries reported on their account.

Structure (subset read here, camt.053.001.02):
- Document
  - BkToCstmrStmt (BankToCustomerStatement)
    - GrpHdr (GroupHeader)
    - Stmt (Statement) [1..n]
      - Acct (Account) [0..1]
      - Bal (Balance) [0..n]
      - Ntry (Entry) [0..n]
        - NtryDtls/TxDtls (TransactionDetails) [0..n]
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from xml.etree import ElementTree as ET
import logging

from camt_reader.core.config import ReaderConfig, get_config
from camt_reader.core.exceptions import (
    InvalidCodeError,
    MissingAccountError,
    UnknownVariantError,
)
from camt_reader.iso20022.base import (
    ElementMapper,
    local_name,
    namespace_of,
    parse_amount,
    parse_date,
    parse_int,
    parse_timestamp,
    parse_xml,
)
from camt_reader.iso20022.choice import ChoiceResolver

logger = logging.getLogger(__name__)

MESSAGE_DEFINITION = "camt.053.001.02"


class BalanceTypeCode(Enum):
    """Balance type codes."""

    OPENING_BOOKED = ("OPBD", "Opening Booked")
    CLOSING_BOOKED = ("CLBD", "Closing Booked")
    OPENING_AVAILABLE = ("OPAV", "Opening Available")
    CLOSING_AVAILABLE = ("CLAV", "Closing Available")
    FORWARD_AVAILABLE = ("FWAV", "Forward Available")
    INTERIM_BOOKED = ("ITBD", "Interim Booked")
    INTERIM_AVAILABLE = ("ITAV", "Interim Available")
    PREVIOUSLY_CLOSED_BOOKED = ("PRCD", "Previously Closed Booked")
    INFORMATION = ("INFO", "Information")

    def __init__(self, code: str, description: str):
        self.type_code = code
        self.description = description

    @classmethod
    def from_code(cls, code: str) -> Optional["BalanceTypeCode"]:
        for bt in cls:
            if bt.type_code == code:
                return bt
        return None


class CreditDebitIndicator(Enum):
    """Credit/Debit indicator."""

    CREDIT = "CRDT"
    DEBIT = "DBIT"

    @classmethod
    def from_code(cls, code: str, field_name: str = "CdtDbtInd") -> "CreditDebitIndicator":
        try:
            return cls(code)
        except ValueError:
            raise InvalidCodeError(code, field_name) from None


class PartyRole(Enum):
    """Role of a related party in a transaction."""

    CREDITOR = "creditor"
    DEBTOR = "debtor"


@dataclass(frozen=True)
class Amount:
    """Monetary amount with currency."""

    currency: str  # taken verbatim, not checked against ISO 4217
    value: Decimal

    def __str__(self) -> str:
        return f"{self.currency} {self.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {"value": str(self.value), "currency": self.currency}


# -- Balance type choice (Tp/CdOrPrtry) ------------------------------------


@dataclass(frozen=True)
class CodedBalanceType:
    """``Cd`` branch. Any code is kept; ``known`` maps the listed ones."""

    code: str

    @property
    def known(self) -> Optional[BalanceTypeCode]:
        return BalanceTypeCode.from_code(self.code)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code}


@dataclass(frozen=True)
class ProprietaryBalanceType:
    """``Prtry`` branch: a bank-specific balance type."""

    proprietary: str

    def to_dict(self) -> Dict[str, Any]:
        return {"proprietary": self.proprietary}


BalanceType = Union[CodedBalanceType, ProprietaryBalanceType]


@dataclass(frozen=True)
class Balance:
    """Account balance."""

    balance_type: BalanceType
    amount: Amount
    credit_debit: CreditDebitIndicator
    date: date

    @property
    def type_code(self) -> Optional[str]:
        """Code of a coded balance type, None for proprietary types."""
        if isinstance(self.balance_type, CodedBalanceType):
            return self.balance_type.code
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.balance_type.to_dict(),
            "amount": str(self.amount.value),
            "currency": self.amount.currency,
            "credit_debit": self.credit_debit.value,
            "date": self.date.isoformat(),
        }


# -- Account identification choice (Id) -------------------------------------


@dataclass(frozen=True)
class IbanAccount:
    """``IBAN`` branch."""

    iban: str

    scheme = "IBAN"

    @property
    def identifier(self) -> str:
        return self.iban

    def __str__(self) -> str:
        return f"IBAN {self.iban}"

    def to_dict(self) -> Dict[str, Any]:
        return {"IBAN": self.iban}


@dataclass(frozen=True)
class OtherAccount:
    """``Othr`` branch: generic identification with an optional scheme name."""

    identification: str
    scheme_name: Optional[str] = None
    issuer: Optional[str] = None

    scheme = "Othr"

    @property
    def identifier(self) -> str:
        return self.identification

    def __str__(self) -> str:
        if self.scheme_name:
            return f"{self.scheme_name} {self.identification}"
        return self.identification

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Othr": {
                "Id": self.identification,
                "SchmeNm": self.scheme_name,
                "Issr": self.issuer,
            }
        }


@dataclass(frozen=True)
class UnrecognizedAccount:
    """An identification scheme this reader does not model; raw tag and text kept."""

    tag: str
    text: str

    @property
    def scheme(self) -> str:
        return self.tag

    @property
    def identifier(self) -> str:
        return self.text

    def __str__(self) -> str:
        return f"{self.tag} {self.text}"

    def to_dict(self) -> Dict[str, Any]:
        return {self.tag: self.text}


AccountIdentification = Union[IbanAccount, OtherAccount, UnrecognizedAccount]


@dataclass(frozen=True)
class PartyAccount:
    identification: AccountIdentification

    def __str__(self) -> str:
        return str(self.identification)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.identification.to_dict()}


@dataclass(frozen=True)
class PartyId:
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Counterparty:
    """A present related party together with its account, if one is on file."""

    role: PartyRole
    party: PartyId
    account: Optional[PartyAccount]

    @property
    def has_account(self) -> bool:
        return self.account is not None


@dataclass(frozen=True)
class RelatedParties:
    """
    Counterparties of a transaction.

    The four fields are independent: a party may be present without an
    account and an account without a party.
    """

    creditor: Optional[PartyId] = None
    creditor_account: Optional[PartyAccount] = None
    debtor: Optional[PartyId] = None
    debtor_account: Optional[PartyAccount] = None

    def party(self, role: PartyRole) -> Optional[PartyId]:
        return self.creditor if role is PartyRole.CREDITOR else self.debtor

    def account(self, role: PartyRole) -> Optional[PartyAccount]:
        return self.creditor_account if role is PartyRole.CREDITOR else self.debtor_account

    def require_account(self, role: PartyRole) -> PartyAccount:
        """Account of ``role``; raises MissingAccountError when none is on file."""
        account = self.account(role)
        if account is None:
            party = self.party(role)
            raise MissingAccountError(role.value, party.name if party else None)
        return account

    def counterparties(self) -> List[Counterparty]:
        """Present parties, creditor first, each with its optional account."""
        result = []
        for role in (PartyRole.CREDITOR, PartyRole.DEBTOR):
            party = self.party(role)
            if party is not None:
                result.append(Counterparty(role=role, party=party, account=self.account(role)))
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creditor": self.creditor.to_dict() if self.creditor else None,
            "creditor_account": self.creditor_account.to_dict() if self.creditor_account else None,
            "debtor": self.debtor.to_dict() if self.debtor else None,
            "debtor_account": self.debtor_account.to_dict() if self.debtor_account else None,
        }


@dataclass(frozen=True)
class RemittanceInformation:
    """Unstructured remittance lines (``Ustrd``)."""

    unstructured: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return " ".join(self.unstructured)

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        return {"unstructured": list(self.unstructured)}


@dataclass(frozen=True)
class TransactionReferences:
    account_servicer_reference: Optional[str] = None
    instruction_id: Optional[str] = None
    end_to_end_id: Optional[str] = None
    transaction_id: Optional[str] = None
    mandate_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_servicer_reference": self.account_servicer_reference,
            "instruction_id": self.instruction_id,
            "end_to_end_id": self.end_to_end_id,
            "transaction_id": self.transaction_id,
            "mandate_id": self.mandate_id,
        }


@dataclass(frozen=True)
class TransactionDetails:
    """Transaction details within an entry."""

    references: Optional[TransactionReferences] = None
    remittance_info: Optional[RemittanceInformation] = None
    related_parties: Optional[RelatedParties] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "references": self.references.to_dict() if self.references else None,
            "remittance_info": self.remittance_info.text if self.remittance_info else None,
            "related_parties": self.related_parties.to_dict() if self.related_parties else None,
        }


@dataclass(frozen=True)
class EntryDetails:
    transactions: Tuple[TransactionDetails, ...] = ()

    @property
    def transaction(self) -> Optional[TransactionDetails]:
        """First transaction, the common single-transaction case."""
        return self.transactions[0] if self.transactions else None

    def to_dict(self) -> Dict[str, Any]:
        return {"transactions": [tx.to_dict() for tx in self.transactions]}


@dataclass(frozen=True)
class BankTransactionCode:
    """Bank transaction code, structured (``Domn``) or proprietary (``Prtry``)."""

    domain: Optional[str] = None
    family: Optional[str] = None
    sub_family: Optional[str] = None
    proprietary: Optional[str] = None
    issuer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "family": self.family,
            "sub_family": self.sub_family,
            "proprietary": self.proprietary,
            "issuer": self.issuer,
        }


@dataclass(frozen=True)
class Entry:
    """Statement entry (transaction)."""

    amount: Amount
    credit_debit: CreditDebitIndicator
    booking_date: date
    value_date: date
    details: Optional[EntryDetails] = None
    additional_info: Optional[str] = None

    reference: Optional[str] = None
    status: Optional[str] = None
    account_servicer_reference: Optional[str] = None
    bank_transaction_code: Optional[BankTransactionCode] = None

    @property
    def is_credit(self) -> bool:
        return self.credit_debit is CreditDebitIndicator.CREDIT

    @property
    def transactions(self) -> Tuple[TransactionDetails, ...]:
        return self.details.transactions if self.details else ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "amount": str(self.amount.value),
            "currency": self.amount.currency,
            "credit_debit": self.credit_debit.value,
            "status": self.status,
            "booking_date": self.booking_date.isoformat(),
            "value_date": self.value_date.isoformat(),
            "account_servicer_reference": self.account_servicer_reference,
            "bank_transaction_code": (
                self.bank_transaction_code.to_dict() if self.bank_transaction_code else None
            ),
            "transactions": [tx.to_dict() for tx in self.transactions],
            "additional_info": self.additional_info,
        }


@dataclass(frozen=True)
class CashAccount:
    """The account a statement reports on."""

    identification: AccountIdentification
    currency: Optional[str] = None
    owner_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identification.to_dict(),
            "currency": self.currency,
            "owner_name": self.owner_name,
        }


@dataclass(frozen=True)
class Statement:
    """Bank statement for an account."""

    identification: Optional[str] = None
    electronic_sequence_number: Optional[int] = None
    creation_datetime: Optional[datetime] = None
    account: Optional[CashAccount] = None
    balances: Tuple[Balance, ...] = ()
    entries: Tuple[Entry, ...] = ()

    def find_balance(self, code: str) -> Optional[Balance]:
        """First balance, in document order, whose coded type equals ``code``."""
        for bal in self.balances:
            if bal.type_code == code:
                return bal
        return None

    def opening_balance(self) -> Optional[Balance]:
        """Get opening booked balance."""
        return self.find_balance(BalanceTypeCode.OPENING_BOOKED.type_code)

    def closing_balance(self) -> Optional[Balance]:
        """Get closing booked balance."""
        return self.find_balance(BalanceTypeCode.CLOSING_BOOKED.type_code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identification": self.identification,
            "electronic_sequence_number": self.electronic_sequence_number,
            "creation_datetime": (
                self.creation_datetime.isoformat() if self.creation_datetime else None
            ),
            "account": self.account.to_dict() if self.account else None,
            "balances": [b.to_dict() for b in self.balances],
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class GroupHeader:
    creation_datetime: datetime
    message_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "creation_datetime": self.creation_datetime.isoformat(),
        }


@dataclass(frozen=True)
class BankToCustomerStatement:
    """``BkToCstmrStmt``: group header plus one statement per reported account."""

    header: GroupHeader
    statements: Tuple[Statement, ...]

    @property
    def statement(self) -> Statement:
        """The first (usually only) statement."""
        return self.statements[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "statements": [s.to_dict() for s in self.statements],
        }


# Closed set of message variants a Document may carry
DocumentMessage = BankToCustomerStatement


@dataclass(frozen=True)
class Camt053Document:
    """
    ISO 20022 ``Document`` envelope holding one recognized message variant.
    """

    message: DocumentMessage
    namespace: Optional[str] = None

    @classmethod
    def from_string(
        cls, xml_content: Union[str, bytes], config: Optional[ReaderConfig] = None
    ) -> "Camt053Document":
        return Camt053Parser(config).parse(xml_content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_definition": MESSAGE_DEFINITION,
            "namespace": self.namespace,
            "message": self.message.to_dict(),
        }


class Camt053Parser:
    """
    Parser for camt.053.001.02 messages.

    Every mapping step fails immediately with a ParseException subclass;
    there is no partial result.
    """

    def __init__(self, config: Optional[ReaderConfig] = None):
        self.config = config or get_config()

        self._message_choice: ChoiceResolver[DocumentMessage] = ChoiceResolver(
            "Document",
            {"BkToCstmrStmt": self._parse_bank_to_customer_statement},
        )
        self._balance_type_choice: ChoiceResolver[BalanceType] = ChoiceResolver(
            "CdOrPrtry",
            {
                "Cd": lambda el: CodedBalanceType(code=_text(el)),
                "Prtry": lambda el: ProprietaryBalanceType(proprietary=_text(el)),
            },
        )
        self._account_choice: ChoiceResolver[AccountIdentification] = ChoiceResolver(
            "Id",
            {
                "IBAN": lambda el: IbanAccount(iban=_text(el)),
                "Othr": self._parse_other_account,
            },
            fallback=lambda tag, el: UnrecognizedAccount(
                tag=tag, text="".join(el.itertext()).strip()
            ),
        )

    def parse(self, xml_content: Union[str, bytes]) -> Camt053Document:
        """Parse camt.053 XML to the document model."""
        root = parse_xml(xml_content)

        root_tag = local_name(root.tag)
        if root_tag != "Document":
            raise UnknownVariantError(root_tag, "root", ("Document",))

        namespace = namespace_of(root)
        self._check_namespace(namespace)

        message = self._message_choice.resolve(root)

        logger.debug(
            f"Parsed {MESSAGE_DEFINITION} with {len(message.statements)} statement(s), "
            f"{sum(len(s.entries) for s in message.statements)} entries"
        )
        return Camt053Document(message=message, namespace=namespace)

    def _check_namespace(self, namespace: Optional[str]) -> None:
        expected = self.config.expected_namespace
        if expected and namespace != expected:
            logger.warning(
                f"Document namespace {namespace or '(none)'} differs from expected {expected}"
            )

    def _parse_bank_to_customer_statement(self, element: ET.Element) -> BankToCustomerStatement:
        node = ElementMapper(element, "BankToCustomerStatement")
        header = node.required("GrpHdr", self._parse_group_header)

        # At least one statement; each reported account gets its own Stmt
        node.required("Stmt", lambda el: el)
        statements = node.repeated("Stmt", self._parse_statement)

        return BankToCustomerStatement(header=header, statements=statements)

    def _parse_group_header(self, element: ET.Element) -> GroupHeader:
        node = ElementMapper(element, "GroupHeader")
        return GroupHeader(
            creation_datetime=self._timestamp(node.required_text("CreDtTm"), "GrpHdr/CreDtTm"),
            message_id=node.optional_text("MsgId"),
        )

    def _parse_statement(self, element: ET.Element) -> Statement:
        node = ElementMapper(element, "Statement")

        seq_nb = node.optional_text("ElctrncSeqNb")
        cre_dt_tm = node.optional_text("CreDtTm")

        return Statement(
            identification=node.optional_text("Id"),
            electronic_sequence_number=(
                parse_int(seq_nb, "Stmt/ElctrncSeqNb") if seq_nb is not None else None
            ),
            creation_datetime=(
                self._timestamp(cre_dt_tm, "Stmt/CreDtTm") if cre_dt_tm is not None else None
            ),
            account=node.optional("Acct", self._parse_cash_account),
            balances=node.repeated("Bal", self._parse_balance),
            entries=node.repeated("Ntry", self._parse_entry),
        )

    def _parse_cash_account(self, element: ET.Element) -> CashAccount:
        node = ElementMapper(element, "CashAccount")
        return CashAccount(
            identification=node.required("Id", self._account_choice.resolve),
            currency=node.optional_text("Ccy"),
            owner_name=node.optional(
                "Ownr", lambda el: ElementMapper(el, "Owner").optional_text("Nm")
            ),
        )

    def _parse_balance(self, element: ET.Element) -> Balance:
        node = ElementMapper(element, "Balance")
        return Balance(
            balance_type=node.required("Tp", self._parse_balance_type),
            amount=node.required("Amt", _parse_amount),
            credit_debit=CreditDebitIndicator.from_code(
                node.required_text("CdtDbtInd"), "Bal/CdtDbtInd"
            ),
            date=node.required("Dt", _date_wrapper("Bal/Dt")),
        )

    def _parse_balance_type(self, element: ET.Element) -> BalanceType:
        node = ElementMapper(element, "BalanceType")
        return node.required("CdOrPrtry", self._balance_type_choice.resolve)

    def _parse_entry(self, element: ET.Element) -> Entry:
        node = ElementMapper(element, "Entry")
        return Entry(
            amount=node.required("Amt", _parse_amount),
            credit_debit=CreditDebitIndicator.from_code(
                node.required_text("CdtDbtInd"), "Ntry/CdtDbtInd"
            ),
            booking_date=node.required("BookgDt", _date_wrapper("Ntry/BookgDt")),
            value_date=node.required("ValDt", _date_wrapper("Ntry/ValDt")),
            details=node.optional("NtryDtls", self._parse_entry_details),
            additional_info=node.optional_text("AddtlNtryInf"),
            reference=node.optional_text("NtryRef"),
            status=node.optional_text("Sts"),
            account_servicer_reference=node.optional_text("AcctSvcrRef"),
            bank_transaction_code=node.optional("BkTxCd", _parse_bank_transaction_code),
        )

    def _parse_entry_details(self, element: ET.Element) -> EntryDetails:
        node = ElementMapper(element, "EntryDetails")
        return EntryDetails(transactions=node.repeated("TxDtls", self._parse_transaction_details))

    def _parse_transaction_details(self, element: ET.Element) -> TransactionDetails:
        node = ElementMapper(element, "TransactionDetails")
        return TransactionDetails(
            references=node.optional("Refs", _parse_references),
            remittance_info=node.optional(
                "RmtInf",
                lambda el: RemittanceInformation(
                    unstructured=ElementMapper(el, "RemittanceInformation").repeated_text("Ustrd")
                ),
            ),
            related_parties=node.optional("RltdPties", self._parse_related_parties),
        )

    def _parse_related_parties(self, element: ET.Element) -> RelatedParties:
        node = ElementMapper(element, "RelatedParties")
        return RelatedParties(
            creditor=node.optional("Cdtr", _party_builder("Creditor")),
            creditor_account=node.optional("CdtrAcct", self._party_account_builder("CreditorAccount")),
            debtor=node.optional("Dbtr", _party_builder("Debtor")),
            debtor_account=node.optional("DbtrAcct", self._party_account_builder("DebtorAccount")),
        )

    def _party_account_builder(self, entity: str) -> Callable[[ET.Element], PartyAccount]:
        def build(element: ET.Element) -> PartyAccount:
            node = ElementMapper(element, entity)
            return PartyAccount(identification=node.required("Id", self._account_choice.resolve))

        return build

    def _parse_other_account(self, element: ET.Element) -> OtherAccount:
        node = ElementMapper(element, "GenericAccountIdentification")
        return OtherAccount(
            identification=node.required_text("Id"),
            scheme_name=node.optional("SchmeNm", _first_child_text),
            issuer=node.optional_text("Issr"),
        )

    def _timestamp(self, text: str, field_name: str) -> datetime:
        return parse_timestamp(text, field_name, assume_utc=self.config.assume_utc)


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _first_child_text(element: ET.Element) -> Optional[str]:
    # SchmeNm is itself a Cd/Prtry choice; either branch is a plain code
    for child in element:
        return _text(child)
    return None


def _parse_amount(element: ET.Element) -> Amount:
    node = ElementMapper(element, "Amount")
    return Amount(
        currency=node.attribute("Ccy"),
        value=parse_amount(node.text(), "Amt"),
    )


def _date_wrapper(field_name: str) -> Callable[[ET.Element], date]:
    """Builder for ``<X><Dt>YYYY-MM-DD</Dt></X>`` wrappers."""

    def build(element: ET.Element) -> date:
        node = ElementMapper(element, field_name)
        return parse_date(node.required_text("Dt"), f"{field_name}/Dt")

    return build


def _party_builder(entity: str) -> Callable[[ET.Element], PartyId]:
    def build(element: ET.Element) -> PartyId:
        return PartyId(name=ElementMapper(element, entity).required_text("Nm"))

    return build


def _parse_references(element: ET.Element) -> TransactionReferences:
    node = ElementMapper(element, "TransactionReferences")
    return TransactionReferences(
        account_servicer_reference=node.optional_text("AcctSvcrRef"),
        instruction_id=node.optional_text("InstrId"),
        end_to_end_id=node.optional_text("EndToEndId"),
        transaction_id=node.optional_text("TxId"),
        mandate_id=node.optional_text("MndtId"),
    )


def _parse_bank_transaction_code(element: ET.Element) -> BankTransactionCode:
    node = ElementMapper(element, "BankTransactionCode")

    domain = node.optional("Domn", lambda el: el)
    proprietary = node.optional("Prtry", lambda el: el)

    code = BankTransactionCode()
    if domain is not None:
        domn = ElementMapper(domain, "BankTransactionCode/Domn")
        fmly = ElementMapper(domn.required("Fmly", lambda el: el), "BankTransactionCode/Fmly")
        code = BankTransactionCode(
            domain=domn.required_text("Cd"),
            family=fmly.required_text("Cd"),
            sub_family=fmly.required_text("SubFmlyCd"),
        )
    if proprietary is not None:
        prtry = ElementMapper(proprietary, "BankTransactionCode/Prtry")
        code = BankTransactionCode(
            domain=code.domain,
            family=code.family,
            sub_family=code.sub_family,
            proprietary=prtry.required_text("Cd"),
            issuer=prtry.optional_text("Issr"),
        )
    return code
