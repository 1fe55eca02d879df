import inspect
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response as WerkzeugResponse

from actionframe.core_services.ErrorHandler import ErrorHandler
from actionframe.core_services.Exceptions import ActionInvocationError, InvalidNamespaceShape, UnknownAction
from actionframe.core_services.Response import Response
from actionframe.core_services.View import Template, View
from actionframe.interfaces.Contracts import ObserverRegistry, ViewAccumulatorInterface
from actionframe.interfaces.RequestHook import CONTINUE, RequestHook
from actionframe.service_container._Injector import container_resolver

EXECUTING_EVENT = "actionframe.controller.executing"

errors = ErrorHandler("actionframe.controller")
logger = errors.logger

TOP_LEVEL_SHAPE = re.compile(r"^app\.controllers\.(.+)$", re.IGNORECASE)
MODULE_SHAPE = re.compile(r"^app\.modules\.(.+)\.controllers\.(.+)$", re.IGNORECASE)


class DispatchState(Enum):
    IDLE = "idle"
    PRE_HOOK = "pre_hook"
    ACTION_RUNNING = "action_running"
    SHORT_CIRCUITED = "short_circuited"
    POST_HOOK = "post_hook"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ActionContext:
    action_name: Optional[str] = None
    arguments: list = field(default_factory=list)
    template: Optional[str] = None
    layout: Union[str, bool] = "default"


class Controller:
    """
    Core controller, all other controllers extend this base controller.

    Subclasses define their actions as public methods. A request runs
    before() -> action -> after() and whatever the action returns is turned
    into a Response by process_response().
    """

    # The currently used Template; falls back to config "app.template".
    template: Optional[str] = None

    # The currently used Layout; False disables layout wrapping.
    layout: Union[str, bool] = "default"

    # Explicit action name -> view id map, consulted before any naming convention.
    views: dict = {}

    def __init__(self, container=None, hook: RequestHook = None):
        self.container = container_resolver(container)
        self.hook = hook
        self.config = self.container.get("config")
        self.events: Optional[ObserverRegistry] = self.container.get("events")
        self.state = DispatchState.IDLE

        # bindings shared with every view rendered during this request
        accumulator = self.container.get("view")
        self.shared = accumulator.shared if accumulator is not None else {}

        if self.template is None and self.config is not None:
            self.template = self.config.get("app.template")

        self.context = ActionContext(template=self.template, layout=self.layout)

    def execute(self, method: str, params: list = None) -> WerkzeugResponse:
        """Execute the Controller Method."""
        params = list(params or [])

        # Initialise the Controller's variables.
        self.context = ActionContext(method, params, self.template, self.layout)

        self._notify_executing(method, params)

        self.state = DispatchState.PRE_HOOK
        response = self._run_before()

        if isinstance(response, WerkzeugResponse):
            self.state = DispatchState.SHORT_CIRCUITED
            logger.debug(f"{self.__class__.__name__}.{method} short-circuited by the before stage")
        else:
            action = self.resolve_action(method)
            if action is None:
                raise UnknownAction(method, self.__class__.__name__)

            self.state = DispatchState.ACTION_RUNNING
            response = self._invoke(action, method, params)

        self.state = DispatchState.POST_HOOK
        self.after(response)
        if self.hook is not None:
            self.hook.after(self.context, response)

        self.state = DispatchState.NORMALIZING
        response = self.process_response(response)

        self.state = DispatchState.DONE
        return response

    def _notify_executing(self, method, params):
        if self.events is None:
            return

        with errors.handle_errors({Exception: f"[Event Error] {EXECUTING_EVENT} notification failed"}):
            self.events.fire(EXECUTING_EVENT, {"controller": self, "action": method, "arguments": params})

    def _run_before(self):
        if self.hook is not None:
            result = self.hook.before(self.context)
            if isinstance(result, WerkzeugResponse):
                return result

        return self.before()

    def _invoke(self, action: Callable, method: str, params: list):
        logger.debug(f"Dispatching {self.__class__.__name__}.{method} with {len(params)} argument(s)")
        try:
            return action(*params)
        except HTTPException:
            self.state = DispatchState.FAILED
            raise
        except Exception as e:
            self.state = DispatchState.FAILED
            raise ActionInvocationError(method, e) from e

    def resolve_action(self, method: str) -> Optional[Callable]:
        """Returns the bound action for `method`, or None when there is no such action."""
        if not method or method.startswith("_") or hasattr(Controller, method):
            return None

        action = getattr(self, method, None)
        if not inspect.ismethod(action):
            return None
        return action

    def process_response(self, response: Any) -> WerkzeugResponse:
        """Create from the given result a Response instance."""
        # A None result with legacy views queued means we are on Legacy Mode.
        if response is None:
            accumulator: Optional[ViewAccumulatorInterface] = self.container.get("view")
            views = accumulator.list_pending() if accumulator is not None else []

            if views:
                content = "".join(str(view.fetch(self.shared)) for view in views)
                response = Response.make(content, 200, accumulator.pending_headers())

        elif isinstance(response, View):
            if self.context.layout is not False:
                response = self._wrap_in_layout(response)
            response = Response.make(str(response.render(self.shared)), 200, response.headers)

        if not isinstance(response, WerkzeugResponse):
            response = Response.make(response)

        return response

    def _wrap_in_layout(self, view: View) -> Template:
        template = Template.make(self.context.layout, self.context.template, engine=view.engine, headers=view.headers)
        return template.with_("content", view)

    def before(self):
        """
        Invoked before the current Action. Return CONTINUE to go on, or a
        Response to skip the Action. Meant to be overridden.
        """
        return CONTINUE

    def after(self, result):
        """
        Invoked after the current Action with its returned value.
        Meant to be overridden.
        """
        pass

    def title(self, title: str):
        """Share the page title with every view rendered in this request."""
        self.shared["title"] = title
        return self

    def get_view(self, data: dict = None, action: str = None) -> View:
        """Return a default View instance for the current (or given) action."""
        path, module = self.resolve_view_path(action)
        return View.make(path, data, module, engine=self.container.get("template"))

    def resolve_view_path(self, action: str = None) -> tuple:
        """
        Derive (view path, module) for an action. An explicit mapping wins,
        otherwise the controller's module path must be one of
        app.controllers.<path> or app.modules.<Module>.controllers.<path>.
        """
        action = action or self.context.action_name
        if not action:
            raise ValueError("No action to resolve a view for")

        mapped = self._mapped_view(action)
        if mapped is not None:
            return mapped

        base_view = action[0].upper() + action[1:]
        class_path = self.__class__.__module__

        matches = TOP_LEVEL_SHAPE.match(class_path)
        if matches:
            return f"{matches.group(1).replace('.', '/')}/{base_view}", None

        matches = MODULE_SHAPE.match(class_path)
        if matches:
            return f"{matches.group(2).replace('.', '/')}/{base_view}", matches.group(1)

        raise InvalidNamespaceShape(f"{class_path}.{self.__class__.__name__}")

    def _mapped_view(self, action: str) -> Optional[tuple]:
        view = self.views.get(action)
        if view is None and self.config is not None:
            view = (self.config.get("app.views") or {}).get(f"{self.__class__.__name__}.{action}")
        if view is None:
            return None

        if "::" in view:
            module, path = view.split("::", 1)
            return path, module
        return view, None

    def get_template(self):
        return self.context.template

    def get_layout(self):
        return self.context.layout

    def get_method(self):
        return self.context.action_name

    def get_params(self):
        return self.context.arguments
