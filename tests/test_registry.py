# tests/test_registry.py
"""
Registry Tests - Unit Tests for Provider Rotation and Cooldowns

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- chainprobe.application.registry (ProviderRegistry)
- chainprobe.domain.models (ProviderDescriptor for test data)
"""
import threading

import pytest  # Testing framework for writing and running tests

from chainprobe.application.registry import ProviderRegistry
from chainprobe.domain.models import AccessMethod, ProviderDescriptor


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


def _providers(*names):
    return [ProviderDescriptor(name=n, url_template=f"https://{n}.example/addr/{{address}}") for n in names]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    reg = ProviderRegistry(clock=clock)
    reg.register_providers("ethereum", _providers("p1", "p2", "p3"))
    return reg


class TestRotation:
    def test_round_robin_visits_each_once(self, registry):
        names = [registry.get_next_provider("ethereum").name for _ in range(3)]
        assert sorted(names) == ["p1", "p2", "p3"]
        assert len(set(names)) == 3

    def test_round_robin_repeats_in_order(self, registry):
        first = [registry.get_next_provider("ethereum").name for _ in range(3)]
        second = [registry.get_next_provider("ethereum").name for _ in range(3)]
        assert first == second == ["p1", "p2", "p3"]

    def test_rotation_is_per_currency(self, registry):
        registry.register_providers("tron", _providers("t1", "t2"))
        assert registry.get_next_provider("ethereum").name == "p1"
        assert registry.get_next_provider("tron").name == "t1"
        assert registry.get_next_provider("ethereum").name == "p2"

    def test_unknown_or_empty_currency_returns_none(self, registry):
        assert registry.get_next_provider("dogecoin") is None
        registry.register_providers("ton", [])
        assert registry.get_next_provider("ton") is None

    def test_register_replaces_list_and_resets_rotation(self, registry):
        registry.get_next_provider("ethereum")
        registry.register_providers("ethereum", _providers("x", "y"))
        assert [p.name for p in registry.providers("ethereum")] == ["x", "y"]
        assert registry.get_next_provider("ethereum").name == "x"

    def test_duplicate_names_rejected(self, registry):
        with pytest.raises(ValueError, match="Duplicate provider names"):
            registry.register_providers("bitcoin", _providers("a", "a"))

    def test_rest_template_without_placeholder_rejected(self, registry):
        bad = ProviderDescriptor(name="bad", url_template="https://bad.example/balance")
        with pytest.raises(ValueError, match="Invalid URL template"):
            registry.register_providers("bitcoin", [bad])

    def test_json_rpc_endpoint_needs_no_placeholder(self, registry):
        rpc = ProviderDescriptor(
            name="rpc", url_template="https://rpc.example", access_method=AccessMethod.JSON_RPC,
            rpc_method="getBalance",
        )
        registry.register_providers("solana", [rpc])
        assert registry.get_next_provider("solana") is rpc

    def test_concurrent_selection_stays_fair(self, registry):
        picked = []
        lock = threading.Lock()

        def worker():
            for _ in range(100):
                name = registry.get_next_provider("ethereum").name
                with lock:
                    picked.append(name)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(picked) == 600
        assert {n: picked.count(n) for n in ("p1", "p2", "p3")} == {"p1": 200, "p2": 200, "p3": 200}


class TestCooldown:
    def test_cooled_down_provider_is_skipped(self, registry, clock):
        registry.set_cooldown("ethereum", "p1", 60000)
        for _ in range(10):
            assert registry.get_next_provider("ethereum").name != "p1"
            clock.advance_ms(5000)  # 50s total, still inside the window

    def test_cooldown_expires(self, registry, clock):
        registry.set_cooldown("ethereum", "p1", 60000)
        clock.advance_ms(60000)
        names = {registry.get_next_provider("ethereum").name for _ in range(3)}
        assert "p1" in names

    def test_all_cooling_down_returns_none(self, registry):
        for name in ("p1", "p2", "p3"):
            registry.set_cooldown("ethereum", name, 1000)
        assert registry.get_next_provider("ethereum") is None
        assert registry.is_cooling_down("ethereum", "p2")

    def test_new_cooldown_supersedes_old(self, registry, clock):
        registry.set_cooldown("ethereum", "p1", 60000)
        registry.set_cooldown("ethereum", "p1", 0)
        assert not registry.is_cooling_down("ethereum", "p1")

    def test_cooldown_entry_and_snapshot(self, registry, clock):
        entry = registry.set_cooldown("ethereum", "p2", 30000)
        assert entry.until == pytest.approx(clock.now + 30.0)
        assert [(c.currency, c.provider) for c in registry.cooldowns()] == [("ethereum", "p2")]
        clock.advance_ms(30001)
        assert registry.cooldowns() == []

    def test_cooldown_is_scoped_to_currency(self, registry):
        registry.register_providers("tron", _providers("p1"))
        registry.set_cooldown("ethereum", "p1", 60000)
        assert registry.get_next_provider("tron").name == "p1"
