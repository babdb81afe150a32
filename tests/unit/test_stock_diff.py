"""
Unit tests for the grid edit batcher.
"""

import itertools
from types import SimpleNamespace

import pytest

from gradestock.models import SIZES, TransactionType
from gradestock.services.stock_diff_service import (
    GridEdit, batch_stock_diff, coerce_grid_quantity, edits_from_grid,
)

NOW = '2026-01-12T15:30:00.000000+00:00'


def record(record_id, stocks, name=None):
    return SimpleNamespace(id=record_id, name=name or f'Peça {record_id}', stocks=dict(stocks))


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f'tx-{next(counter)}'


def cells(batch):
    return [(t.product_id, t.size, t.type, t.quantity) for t in batch.transactions]


class TestWorkedExamples:
    """The three reference scenarios of the grid edit."""

    def test_increase_two_sizes(self):
        a = record('A', {'P': 2, 'M': 0})
        batch = batch_stock_diff([a], [GridEdit('A', 'P', 5), GridEdit('A', 'M', 3)], now=NOW)

        assert cells(batch) == [
            ('A', 'P', TransactionType.IN, 3),
            ('A', 'M', TransactionType.IN, 3),
        ]
        assert len(batch.updates) == 1
        assert batch.updates[0].stocks == {'P': 5, 'M': 3}
        assert batch.updates[0].total == 8

    def test_unchanged_and_new_zero_size_is_noop(self):
        a = record('A', {'P': 5})
        batch = batch_stock_diff([a], [GridEdit('A', 'P', 5), GridEdit('A', 'GG', 0)], now=NOW)

        assert batch.transactions == []
        assert batch.updates == []
        assert batch.is_empty

    def test_decrease_plus_size(self):
        a = record('A', {'G1': 4})
        batch = batch_stock_diff([a], [GridEdit('A', 'G1', 1)], now=NOW)

        assert cells(batch) == [('A', 'G1', TransactionType.OUT, 3)]
        assert batch.updates[0].stocks == {'G1': 1}
        assert batch.updates[0].total == 1


class TestBatchProperties:

    def test_empty_edit_set(self):
        batch = batch_stock_diff([record('A', {'P': 1})], [])
        assert batch.is_empty

    def test_zero_diff_idempotence(self):
        records = [record('A', {'P': 2, 'M': 1}), record('B', {'G1': 3})]
        edits = [GridEdit(r.id, size, qty) for r in records for size, qty in r.stocks.items()]

        batch = batch_stock_diff(records, edits, now=NOW)

        assert batch.is_empty

    def test_total_consistency_and_conservation(self):
        a = record('A', {'P': 4, 'M': 1, 'G': 7})
        b = record('B', {'G2': 2})
        edits = [
            GridEdit('A', 'P', 0), GridEdit('A', 'M', 6), GridEdit('A', 'GG', 2),
            GridEdit('B', 'G2', 9), GridEdit('B', 'G3', 1),
        ]
        batch = batch_stock_diff([a, b], edits, now=NOW)

        old_totals = {'A': 12, 'B': 2}
        for update in batch.updates:
            assert update.total == sum(update.stocks.values())
            signed = sum(t.signed_quantity for t in batch.transactions_for(update.record_id))
            assert signed == update.total - old_totals[update.record_id]

    def test_minimality_one_transaction_per_changed_cell(self):
        a = record('A', {'P': 1, 'M': 1})
        edits = [GridEdit('A', 'P', 3), GridEdit('A', 'M', 1), GridEdit('A', 'G', 2)]

        batch = batch_stock_diff([a], edits, now=NOW)

        assert len(batch.transactions) == 2
        assert {(t.size, t.quantity) for t in batch.transactions} == {('P', 2), ('G', 2)}

    def test_unknown_record_is_dropped(self):
        a = record('A', {'P': 1})
        batch = batch_stock_diff([a], [GridEdit('ghost', 'P', 10), GridEdit('A', 'P', 2)], now=NOW)

        assert [u.record_id for u in batch.updates] == ['A']
        assert all(t.product_id == 'A' for t in batch.transactions)

    def test_only_unknown_records(self):
        batch = batch_stock_diff([], [GridEdit('ghost', 'P', 10)])
        assert batch.is_empty

    def test_unknown_size_ignored(self):
        a = record('A', {'P': 1})
        batch = batch_stock_diff([a], [GridEdit('A', 'XL', 4)], now=NOW)
        assert batch.is_empty

    def test_last_edit_of_a_cell_wins(self):
        a = record('A', {'P': 1})
        batch = batch_stock_diff([a], [GridEdit('A', 'P', 9), GridEdit('A', 'P', 4)], now=NOW)

        assert cells(batch) == [('A', 'P', TransactionType.IN, 3)]

    def test_out_beyond_known_stock_is_not_rejected(self):
        """Grid values are trusted: going to zero from any value is a plain OUT."""
        a = record('A', {'M': 2})
        batch = batch_stock_diff([a], [GridEdit('A', 'M', 0)], now=NOW)

        assert cells(batch) == [('A', 'M', TransactionType.OUT, 2)]
        assert batch.updates[0].stocks == {'M': 0}

    def test_untouched_sizes_keep_their_value(self):
        a = record('A', {'P': 1, 'M': 2, 'G1': 5})
        batch = batch_stock_diff([a], [GridEdit('A', 'M', 4)], now=NOW)

        assert batch.updates[0].stocks == {'P': 1, 'M': 4, 'G1': 5}
        assert batch.updates[0].total == 10


class TestOrderingAndIdentity:

    def test_ordered_by_record_then_canonical_size(self):
        a = record('A', {})
        b = record('B', {})
        edits = [
            GridEdit('B', 'G3', 1), GridEdit('A', 'GG', 1), GridEdit('B', 'P', 1),
            GridEdit('A', 'P', 1), GridEdit('A', 'G1', 1),
        ]
        batch = batch_stock_diff([a, b], edits, now=NOW)

        assert [(t.product_id, t.size) for t in batch.transactions] == [
            ('A', 'P'), ('A', 'GG'), ('A', 'G1'), ('B', 'P'), ('B', 'G3'),
        ]
        assert [u.record_id for u in batch.updates] == ['A', 'B']
        for t in batch.transactions:
            assert SIZES.index(t.size) >= 0

    def test_shared_timestamp_and_generated_ids(self):
        a = record('A', {'P': 0})
        batch = batch_stock_diff(
            [a], [GridEdit('A', 'P', 1), GridEdit('A', 'M', 2)],
            now=NOW, id_factory=sequential_ids()
        )

        assert {t.date for t in batch.transactions} == {NOW}
        assert [t.id for t in batch.transactions] == ['tx-1', 'tx-2']

    def test_default_timestamp_is_utc_iso(self):
        batch = batch_stock_diff([record('A', {})], [GridEdit('A', 'P', 1)])
        assert batch.transactions[0].date.endswith('+00:00')
        assert len(batch.transactions[0].id) == 36

    def test_product_name_is_denormalized(self):
        a = record('A', {}, name='Vestido Azul')
        batch = batch_stock_diff([a], [GridEdit('A', 'P', 1)], now=NOW)
        assert batch.transactions[0].product_name == 'Vestido Azul'

    def test_input_records_are_not_mutated(self):
        a = record('A', {'P': 1})
        batch_stock_diff([a], [GridEdit('A', 'P', 3)], now=NOW)
        assert a.stocks == {'P': 1}


class TestGridCoercion:

    @pytest.mark.parametrize('raw, expected', [
        ('7', 7), (' 3 ', 3), (4, 4), ('', 0), (None, 0),
        ('abc', 0), ('-3', 0), (-2, 0), ('2.5', 0), (True, 0),
    ])
    def test_coerce_grid_quantity(self, raw, expected):
        assert coerce_grid_quantity(raw) == expected

    def test_grid_edit_rejects_negative(self):
        with pytest.raises(ValueError):
            GridEdit('A', 'P', -1)

    def test_grid_edit_rejects_non_int(self):
        with pytest.raises(TypeError):
            GridEdit('A', 'P', '3')

    def test_edits_from_grid(self):
        edits = edits_from_grid({'A': {'P': '2', 'M': 'x'}, 'B': 'not-a-dict'})
        assert edits == [GridEdit('A', 'P', 2), GridEdit('A', 'M', 0)]

    def test_edits_from_grid_normalizes_size_keys(self):
        edits = edits_from_grid({'A': {' p ': '4', 'g1': 2}})
        assert edits == [GridEdit('A', 'P', 4), GridEdit('A', 'G1', 2)]
