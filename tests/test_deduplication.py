from transcript_monitor.deduplication import UsedMessageLedger


def test_ledger_keeps_insertion_order_without_duplicates() -> None:
    ledger = UsedMessageLedger([30, 10, 30])

    assert ledger.add(20) is True
    assert ledger.add(10) is False
    assert ledger.to_list() == [30, 10, 20]
    assert 20 in ledger
    assert 99 not in ledger
    assert len(ledger) == 3


def test_ledger_prunes_ids_below_low_water_mark() -> None:
    ledger = UsedMessageLedger([100, 160, 120, 150, 149])

    removed = ledger.prune_below(150)

    assert removed == 3
    assert list(ledger) == [160, 150]
    assert 120 not in ledger
    # Pruned IDs can be recorded again
    assert ledger.add(120) is True
