"""Tests for the EventJournal — append-only, hash-chained, tamper-evident."""

from __future__ import annotations

import sqlite3

import pytest

from mintmarket.core.event_journal import EventJournal, JournalIntegrityError
from mintmarket.models.journal import JournalEntry

MARKET = "0x" + "aa" * 20
NFT = "0x" + "bb" * 20


def _entry(contract: str = MARKET, event: str = "ItemListed", block: int = 1, **args):
    return JournalEntry(
        contract_address=contract,
        event_name=event,
        block_number=block,
        tx_hash=f"0x{block:064x}",
        args=args,
    )


class TestEventJournal:
    def test_append_sets_entry_hash(self, journal: EventJournal):
        sealed = journal.append(_entry())
        assert sealed.entry_hash != ""
        assert sealed.previous_entry_hash == ""  # first entry

    def test_hash_chain_links(self, journal: EventJournal):
        e1 = journal.append(_entry(block=1))
        e2 = journal.append(_entry(block=2))
        assert e2.previous_entry_hash == e1.entry_hash

    def test_chains_are_per_contract(self, journal: EventJournal):
        journal.append(_entry(contract=MARKET))
        first_nft = journal.append(_entry(contract=NFT, event="Transfer"))
        assert first_nft.previous_entry_hash == ""

    def test_verify_chain_valid(self, journal: EventJournal):
        journal.append(_entry(block=1, price=10**17))
        journal.append(_entry(event="ItemBought", block=2, price=10**17))
        assert journal.verify_chain(MARKET) is True

    def test_verify_chain_empty(self, journal: EventJournal):
        assert journal.verify_chain("0x" + "00" * 20) is True

    def test_get_entries_in_order(self, journal: EventJournal):
        journal.append(_entry(block=1))
        journal.append(_entry(event="ItemCanceled", block=2))
        journal.append(_entry(block=3))
        entries = journal.get_entries(MARKET)
        assert [e.block_number for e in entries] == [1, 2, 3]

    def test_get_entries_filters_event(self, journal: EventJournal):
        journal.append(_entry(block=1))
        journal.append(_entry(event="ItemCanceled", block=2))
        assert len(journal.get_entries(MARKET, event_name="ItemCanceled")) == 1

    def test_get_entries_case_insensitive_address(self, journal: EventJournal):
        journal.append(_entry())
        assert len(journal.get_entries(MARKET.upper().replace("0X", "0x"))) == 1

    def test_args_roundtrip(self, journal: EventJournal):
        journal.append(_entry(seller=NFT, token_id=0, price=10**17))
        (entry,) = journal.get_entries(MARKET)
        assert entry.args == {"seller": NFT, "token_id": 0, "price": 10**17}

    def test_get_contract_addresses(self, journal: EventJournal):
        journal.append(_entry(contract=NFT, event="Transfer"))
        journal.append(_entry(contract=MARKET))
        journal.append(_entry(contract=NFT, event="Approval"))
        assert journal.get_contract_addresses() == [NFT, MARKET]

    def test_persists_across_instances(self, journal: EventJournal):
        journal.append(_entry())
        reopened = EventJournal(journal.db_path)
        assert len(reopened.get_entries(MARKET)) == 1
        assert reopened.verify_chain(MARKET) is True

    def test_append_all_links_within_batch(self, journal: EventJournal):
        first = journal.append(_entry(block=1))
        batch = journal.append_all(
            [_entry(block=2), _entry(contract=NFT, event="Transfer", block=2), _entry(block=2)]
        )
        assert batch[0].previous_entry_hash == first.entry_hash
        assert batch[1].previous_entry_hash == ""
        assert batch[2].previous_entry_hash == batch[0].entry_hash
        assert journal.verify_chain(MARKET) is True
        assert journal.verify_chain(NFT) is True

    def test_append_all_is_all_or_nothing(self, journal: EventJournal):
        journal.append(_entry(block=1))
        good = _entry(block=2)
        duplicate = _entry(block=3).model_copy(update={"entry_id": good.entry_id})
        with pytest.raises(sqlite3.IntegrityError):
            journal.append_all([good, duplicate])
        assert [e.block_number for e in journal.get_entries(MARKET)] == [1]


class TestAnchors:
    def test_anchor_roundtrip(self, journal: EventJournal):
        journal.append(_entry(block=1))
        journal.append(_entry(block=2))
        anchor = journal.export_anchor(MARKET)
        assert anchor["entry_count"] == 2
        assert anchor["anchor_hash"] != ""
        assert journal.verify_against_anchor(MARKET, anchor) is True

    def test_anchor_survives_growth(self, journal: EventJournal):
        journal.append(_entry(block=1))
        anchor = journal.export_anchor(MARKET)
        journal.append(_entry(block=2))
        assert journal.verify_against_anchor(MARKET, anchor) is True

    def test_empty_anchor(self, journal: EventJournal):
        anchor = journal.export_anchor(MARKET)
        assert anchor["entry_count"] == 0
        assert anchor["anchor_hash"] == ""
        assert journal.verify_against_anchor(MARKET, anchor) is True

    def test_anchor_mismatch(self, journal: EventJournal):
        journal.append(_entry(block=1))
        anchor = journal.export_anchor(MARKET)
        anchor["root_hash"] = "f" * 64
        with pytest.raises(JournalIntegrityError, match="Root hash mismatch"):
            journal.verify_against_anchor(MARKET, anchor)
