class ActionFrameError(Exception):
    """Base class for every error raised by the framework."""


class UnknownAction(ActionFrameError):
    def __init__(self, action, controller=None):
        self.action = action
        self.controller = controller
        owner = f" on {controller}" if controller else ""
        super().__init__(f"Method [{action}] does not exist{owner}.")


class ActionInvocationError(ActionFrameError):
    def __init__(self, action, original: BaseException):
        self.action = action
        self.original = original
        super().__init__(f"Action [{action}] failed: {type(original).__name__}: {original}")


class InvalidNamespaceShape(ActionFrameError):
    def __init__(self, class_path):
        self.class_path = class_path
        super().__init__(f"Invalid Controller namespace: {class_path}")
