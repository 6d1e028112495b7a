import sys
import os
import random
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from payments_engine import PaymentsEngine


def replay(tmp_path, rows, num_workers):
    csv_file = tmp_path / f"replay_{num_workers}.csv"
    csv_file.write_text('\n'.join(["type, client, tx, amount"] + rows))
    engine = PaymentsEngine(num_workers=num_workers)
    return engine.process_file(str(csv_file))


class TestPaymentsEngineLargeScale:
    def test_1000_clients_6000_transactions(self, tmp_path):
        """Each client: deposits 100, 200, 300, withdrawals 50, 100, then a final deposit of 50."""
        num_clients = 1000
        rows = []
        tx_id = 1

        for client_id in range(1, num_clients + 1):
            for kind, amount in (("deposit", 100), ("deposit", 200), ("deposit", 300),
                                 ("withdrawal", 50), ("withdrawal", 100)):
                rows.append(f"{kind}, {client_id}, {tx_id}, {amount}")
                tx_id += 1

        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 50")
            tx_id += 1

        snapshots = replay(tmp_path, rows, num_workers=10)

        assert [s.client_id for s in snapshots] == list(range(1, num_clients + 1))
        for snapshot in snapshots:
            assert snapshot.available == Decimal("500"), f"Client {snapshot.client_id}"
            assert snapshot.held == Decimal("0")
            assert snapshot.locked is False

    def test_disputes_resolves_chargebacks_across_clients(self, tmp_path):
        rows = []

        def deposits(clients, amounts):
            for client_id in clients:
                for offset, amount in enumerate(amounts, start=1):
                    rows.append(f"deposit, {client_id}, {client_id * 100 + offset}, {amount}")

        def follow_up(kind, clients, offset):
            for client_id in clients:
                rows.append(f"{kind}, {client_id}, {client_id * 100 + offset},")

        # 1-10: deposits only
        deposits(range(1, 11), (100, 150, 250))

        # 11-20: dispute then resolve the first deposit
        deposits(range(11, 21), (100, 150, 250))
        follow_up("dispute", range(11, 21), 1)
        follow_up("resolve", range(11, 21), 1)

        # 21-30: dispute then charge back the first deposit
        deposits(range(21, 31), (100, 150, 250))
        follow_up("dispute", range(21, 31), 1)
        follow_up("chargeback", range(21, 31), 1)

        # 31-40: withdrawal, then dispute the first deposit
        for client_id in range(31, 41):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 250")
            rows.append(f"withdrawal, {client_id}, {client_id * 100 + 3}, 100")
        follow_up("dispute", range(31, 41), 1)

        accounts = {s.client_id: s for s in replay(tmp_path, rows, num_workers=10)}

        for client_id in range(1, 21):
            assert accounts[client_id].available == Decimal("500"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("0")
            assert accounts[client_id].locked is False

        for client_id in range(21, 31):
            assert accounts[client_id].available == Decimal("400"), f"Client {client_id}"
            assert accounts[client_id].total == Decimal("400")
            assert accounts[client_id].locked is True

        for client_id in range(31, 41):
            assert accounts[client_id].available == Decimal("150"), f"Client {client_id}"
            assert accounts[client_id].held == Decimal("150")
            assert accounts[client_id].total == Decimal("300")
            assert accounts[client_id].locked is False

    def test_sharded_matches_sequential(self, tmp_path):
        rng = random.Random(42)
        rows = []
        for tx_id in range(1, 3001):
            client_id = rng.randint(1, 25)
            kind = rng.choice(["deposit", "deposit", "withdrawal", "dispute", "resolve", "chargeback"])
            if kind in ("deposit", "withdrawal"):
                rows.append(f"{kind}, {client_id}, {tx_id}, {rng.randint(1, 100000) / 10000}")
            else:
                rows.append(f"{kind}, {client_id}, {rng.randint(1, tx_id)},")

        sequential = replay(tmp_path, rows, num_workers=1)
        sharded = replay(tmp_path, rows, num_workers=7)

        assert sharded == sequential
