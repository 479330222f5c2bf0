from __future__ import annotations

import threading

from src.payroll_system.payroll_system.common.locks import KeyedLocks


def test_lock_is_dropped_after_last_release():
    locks = KeyedLocks()

    with locks.hold((1, 3, 2024)):
        assert len(locks) == 1
        with locks.hold((1, 3, 2024)):
            assert len(locks) == 1

    assert len(locks) == 0


def test_map_stays_empty_after_many_keys():
    locks = KeyedLocks()

    for employee_id in range(50):
        with locks.hold((employee_id, 3, 2024)):
            pass

    assert len(locks) == 0


def test_same_key_is_serialized():
    locks = KeyedLocks()
    inside = []
    overlaps = []
    guard = threading.Lock()

    def work():
        with locks.hold("payslip"):
            with guard:
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(1)
            with guard:
                inside.pop()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert len(locks) == 0
