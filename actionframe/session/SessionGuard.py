import random

from actionframe.core_services.Config import Lottery, SessionConfig
from actionframe.core_services.ErrorHandler import ErrorHandler
from actionframe.interfaces.Contracts import CookieQueueInterface, SessionStoreInterface

logger = ErrorHandler("actionframe.session").logger


class SessionGuard:
    """Finalizes the request's Session Store once the response is computed."""

    def __init__(self, container, rng: random.Random = None):
        self.container = container
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def handle(cls, container, rng: random.Random = None):
        """Finalize the Session Store."""
        processor = cls(container, rng)

        processor.process()

    def process(self):
        session = self.container["session.store"]

        # Save the Session Store's data; a failing save is fatal for the request.
        session.save()
        logger.debug(f"Session {session.get_id()} saved")

        config: SessionConfig = self.container["config"].session

        self.queue_session_cookie(session, config)

        self.collect_session_garbage(session, config)

    def queue_session_cookie(self, session: SessionStoreInterface, config: SessionConfig):
        cookie_jar: CookieQueueInterface = self.container["cookie"]

        # Store the Session ID in a Cookie; the lifetime stays in minutes.
        cookie = cookie_jar.make(
            config.cookie,
            session.get_id(),
            config.lifetime,
            config.path,
            config.domain,
            config.secure,
            False
        )

        cookie_jar.queue(cookie)

    def collect_session_garbage(self, session: SessionStoreInterface, config: SessionConfig):
        lifetime = config.lifetime * 60  # The option is in minutes.

        # Only requests hitting the lottery odds run the handler's cleanup of expired sessions.
        if self.hits_lottery(config.lottery):
            removed = session.get_handler().gc(lifetime)
            logger.debug(f"Session lottery hit, collected {removed} expired session(s)")

    def hits_lottery(self, lottery: Lottery) -> bool:
        """Determine if the configuration odds hit the lottery."""
        return self.rng.randint(1, lottery.denominator) <= lottery.numerator
