class _Continue:
    """Pre-hook result meaning "go on and run the action"."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "CONTINUE"


CONTINUE = _Continue()


class RequestHook:
    def before(self, context):
        """
        Before the action runs (after routing).
        Return CONTINUE, or a Response to skip the action and answer with it.
        """
        return CONTINUE

    def after(self, context, result):
        """After the action ran; receives the result before it is normalized."""
        pass
