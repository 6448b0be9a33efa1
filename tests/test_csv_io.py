import sys
import os
import io

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from csv_io import ABORT, RecordParseError, TransactionReader, write_accounts
from models import ClientAccount, ProcessingStats, TransactionType


def read(text, on_malformed="skip", stats=None):
    return list(TransactionReader(io.StringIO(text), on_malformed=on_malformed, stats=stats))


class TestTransactionReader:
    def test_reads_all_types(self):
        transactions = read('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "withdrawal, 1, 2, 0.5",
            "dispute, 1, 1,",
            "resolve, 1, 1,",
            "chargeback, 1, 1,",
        ]))

        assert [t.transaction_type for t in transactions] == list(TransactionType)
        assert transactions[0].amount == Amount.parse("1")
        assert transactions[1].amount == Amount.parse("0.5")
        assert all(t.amount is None for t in transactions[2:])

    def test_whitespace_stripped(self):
        transactions = read("type,client,tx,amount\n   deposit   , 55     ,     123 ,    17.64  \n")
        assert transactions[0].client_id == 55
        assert transactions[0].transaction_id == 123
        assert transactions[0].amount == Amount.parse("17.64")

    def test_amount_column_may_be_omitted(self):
        transactions = read("type,client,tx,amount\ndeposit,1,1,2\ndispute,1,1\n")
        assert transactions[1].transaction_type == TransactionType.DISPUTE
        assert transactions[1].amount is None

    def test_id_bounds(self):
        transactions = read("type,client,tx,amount\ndeposit,65535,4294967295,1\ndeposit,0,0,1\n")
        assert (transactions[0].client_id, transactions[0].transaction_id) == (65535, 4294967295)
        assert (transactions[1].client_id, transactions[1].transaction_id) == (0, 0)

    @pytest.mark.parametrize("row", [
        "bacon,1,1,1.0",
        "deposit,65536,1,1.0",
        "deposit,-1,1,1.0",
        "deposit,1,4294967296,1.0",
        "deposit,x,1,1.0",
        "deposit,1,1,abc",
        "deposit,1,1,1.23456",
        "deposit,1,1,",
        "withdrawal,1,1",
        "dispute,1,1,5.0",
        "deposit,1",
        "deposit,1,1,1.0,extra",
        "deposit,1,1," + "9" * 5000,
        "deposit,1,1,99999999999999999999",
        "deposit,1,1,922337203685478",
        "deposit,1," + "9" * 5000 + ",1.0",
        "deposit," + "1" * 5000 + ",1,1.0",
        "deposit,1,1,١.٥",
        "deposit,１,1,1.0",
    ])
    def test_malformed_rows_skipped(self, row):
        stats = ProcessingStats()
        transactions = read(f"type,client,tx,amount\n{row}\ndeposit,2,2,3.0\n", stats=stats)

        assert len(transactions) == 1
        assert transactions[0].client_id == 2
        assert stats.skipped == 1

    def test_oversized_id_reported_out_of_range(self):
        with pytest.raises(RecordParseError, match="tx with 5000 digits out of range"):
            read("type,client,tx,amount\ndeposit,1," + "9" * 5000 + ",1.0\n", on_malformed=ABORT)

    def test_ids_with_leading_zeros(self):
        transactions = read("type,client,tx,amount\ndeposit,000000000001,00000000000042,1\n")
        assert (transactions[0].client_id, transactions[0].transaction_id) == (1, 42)

    def test_malformed_row_aborts(self):
        with pytest.raises(RecordParseError) as exc_info:
            read("type,client,tx,amount\ndeposit,1,1,1.0\ndeposit,1,2,1.23456\n", on_malformed=ABORT)
        assert exc_info.value.line_number == 3
        assert "line 3" in str(exc_info.value)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            TransactionReader(io.StringIO(""), on_malformed="retry")

    def test_skipped_record_logged(self, caplog):
        read("type,client,tx,amount\nbacon,1,1,1.0\n")
        assert "unknown transaction type 'bacon'" in caplog.text


class TestWriteAccounts:
    def test_format(self):
        accounts = [
            ClientAccount(client_id=2, available=Amount.parse("2")),
            ClientAccount(client_id=1, available=Amount.parse("-0.25"), held=Amount.parse("1.5"), locked=True),
        ]
        buffer = io.StringIO()

        write_accounts(accounts, buffer)

        assert buffer.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,-0.2500,1.5000,1.2500,true",
            "2,2.0000,0.0000,2.0000,false",
        ]

    def test_no_accounts(self):
        buffer = io.StringIO()
        write_accounts([], buffer)
        assert buffer.getvalue() == "client,available,held,total,locked\n"
