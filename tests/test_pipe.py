"""Tests for PipedState — the read/subscribe view of a StateObservable."""

from keystate import StateObservable, PipedState


class TestPipe:
    def test_returns_facade(self):
        s = StateObservable()
        assert isinstance(s.pipe(), PipedState)

    def test_hides_mutation(self):
        p = StateObservable().pipe()
        assert not hasattr(p, "next")
        assert not hasattr(p, "dispose")
        assert not hasattr(p, "value")

    def test_no_attributes_can_be_added(self):
        p = StateObservable().pipe()
        assert not hasattr(p, "__dict__")

    def test_shares_registry(self):
        s = StateObservable({"a": 0})
        p = s.pipe()
        log = []
        p.subscribe(log.append, ["a"], key="viewer")
        assert "viewer" in s
        s.next({"a": 1})
        assert log == [{"a": 1}]

    def test_unsubscribe(self):
        s = StateObservable()
        p = s.pipe()
        log = []
        p.subscribe(log.append, key="viewer")
        p.unsubscribe("viewer")
        p.unsubscribe("viewer")
        s.next({"a": 1})
        assert log == []

    def test_reset(self):
        s = StateObservable({"count": 0})
        p = s.pipe()
        log = []
        p.subscribe(log.append, ["count"])
        s.next({"count": 7})
        p.reset()
        assert s.value == {"count": 0}
        assert log == [{"count": 7}, {"count": 0}]

    def test_immediate_follows_behavior(self):
        s = StateObservable({"a": 1}, behavior=True)
        log = []
        s.pipe().subscribe(log.append)
        assert log == [{"a": 1}]

    def test_pipes_share_state(self):
        s = StateObservable()
        p1, p2 = s.pipe(), s.pipe()
        p1.subscribe(lambda v: None, key="shared")
        p2.unsubscribe("shared")
        assert "shared" not in s
