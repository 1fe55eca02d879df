import random
from unittest import TestCase, mock

from actionframe.core_services.Config import Config, Lottery
from actionframe.core_services.CookieJar import CookieJar
from actionframe.service_container._ServiceContainer import ServiceContainer
from actionframe.session.Handlers import ArraySessionHandler
from actionframe.session.SessionGuard import SessionGuard
from actionframe.session.Store import Store


def make_container(lottery=(0, 100), lifetime=30, store=None, cookies=None):
    settings = {
        "session": {
            "driver": "array",
            "cookie": "app_session",
            "lifetime": lifetime,
            "path": "/app",
            "domain": "example.test",
            "secure": True,
            "lottery": lottery,
        }
    }
    container = ServiceContainer()
    container.instance("config", Config(settings, environ={}))
    container.add("session.store", lambda: store)
    container.add("cookie", lambda: cookies)
    return container


class FixedRandom:
    """Stands in for random.Random with a predetermined draw."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.value


class TestSessionGuard(TestCase):
    def setUp(self):
        self.store = mock.Mock()
        self.store.get_id.return_value = "a" * 40
        self.cookies = mock.Mock()
        self.cookies.make.side_effect = lambda *args: ("cookie",) + args

    def test_process_saves_queues_and_skips_gc_on_miss(self):
        container = make_container(lottery=(0, 100), store=self.store, cookies=self.cookies)

        SessionGuard.handle(container, rng=random.Random(1))

        self.store.save.assert_called_once_with()
        self.cookies.queue.assert_called_once()
        self.store.get_handler.return_value.gc.assert_not_called()

    def test_lottery_one_in_one_always_collects(self):
        container = make_container(lottery=(1, 1), lifetime=30, store=self.store, cookies=self.cookies)

        for seed in range(20):
            self.store.reset_mock()
            self.cookies.reset_mock()
            SessionGuard.handle(container, rng=random.Random(seed))
            self.store.get_handler.return_value.gc.assert_called_once_with(1800)
            self.store.save.assert_called_once_with()
            self.cookies.queue.assert_called_once()

    def test_zero_numerator_never_collects(self):
        container = make_container(lottery=(0, 1), store=self.store, cookies=self.cookies)

        for seed in range(20):
            SessionGuard.handle(container, rng=random.Random(seed))
            assert self.store.save.call_count == seed + 1
            assert self.cookies.queue.call_count == seed + 1

        self.store.get_handler.return_value.gc.assert_not_called()
        assert self.store.save.call_count == 20
        assert self.cookies.queue.call_count == 20

    def test_lottery_draw_bounds(self):
        container = make_container(store=self.store, cookies=self.cookies)
        guard = SessionGuard(container, rng=FixedRandom(2))

        assert guard.hits_lottery(Lottery(2, 100)) is True
        assert guard.hits_lottery(Lottery(1, 100)) is False
        assert guard.rng.calls == [(1, 100), (1, 100)]

    def test_cookie_keeps_minutes_and_is_not_http_only(self):
        container = make_container(lifetime=45, store=self.store, cookies=self.cookies)

        SessionGuard.handle(container, rng=FixedRandom(100))

        self.cookies.make.assert_called_once_with(
            "app_session", "a" * 40, 45, "/app", "example.test", True, False
        )
        self.cookies.queue.assert_called_once_with(
            ("cookie", "app_session", "a" * 40, 45, "/app", "example.test", True, False)
        )

    def test_gc_lifetime_is_in_seconds(self):
        container = make_container(lottery=(1, 1), lifetime=45, store=self.store, cookies=self.cookies)

        SessionGuard.handle(container)

        self.store.get_handler.return_value.gc.assert_called_once_with(2700)

    def test_save_failure_propagates(self):
        self.store.save.side_effect = OSError("disk full")
        container = make_container(lottery=(1, 1), store=self.store, cookies=self.cookies)

        with self.assertRaises(OSError):
            SessionGuard.handle(container)

        self.cookies.queue.assert_not_called()
        self.store.get_handler.return_value.gc.assert_not_called()

    def test_with_real_store_and_cookie_jar(self):
        handler = ArraySessionHandler(clock=lambda: 1000)
        handler.write("b" * 40, "{}")
        store = Store("app_session", handler).start()
        store.put("user_id", 7)
        jar = CookieJar()
        container = make_container(lottery=(1, 1), lifetime=1, store=store, cookies=jar)
        handler.clock = lambda: 1061

        SessionGuard.handle(container)

        assert "b" * 40 not in handler.storage
        assert handler.read(store.get_id()) == '{"user_id": 7}'
        cookie = jar.queued("app_session")
        assert cookie.value == store.get_id()
        assert cookie.minutes == 1
        assert cookie.http_only is False
        assert cookie.secure is True
