from flask import g, request

from actionframe.core_services.Config import Config
from actionframe.core_services.CookieJar import CookieJar
from actionframe.core_services.EventBus import EventBus
from actionframe.core_services.View import TemplateEngine, ViewAccumulator
from actionframe.service_container._Injector import singleton
from actionframe.service_container._ServiceContainer import ServiceContainer
from actionframe.session.Handlers import ArraySessionHandler, FileSessionHandler
from actionframe.session.Store import Store


def session_handler_factory(config: Config):
    session = config.session
    if session.driver == "array":
        return ArraySessionHandler
    return singleton(lambda: FileSessionHandler(session.files))


def request_service(attribute: str):
    """Factory reading a per-request service from flask.g."""
    def resolve():
        return g.get(attribute)
    return resolve


def init_container(app, config: Config = None, template_engine: TemplateEngine = None):
    app.container = ServiceContainer()
    config = config or Config()

    app.container.instance("config", config)
    app.container.add("events", EventBus)
    if template_engine is not None:
        app.container.instance("template", template_engine)
    else:
        app.container.add("template", TemplateEngine)
    app.container.add("session.handler", session_handler_factory(config))

    # per-request services, created in before_request
    app.container.add("session.store", request_service("_actionframe_session"))
    app.container.add("cookie", request_service("_actionframe_cookies"))
    app.container.add("view", request_service("_actionframe_views"))
    return app


def start_request_services(container):
    """Create the per-request services on flask.g."""
    config = container.get("config")
    session_config = config.session

    store = Store(session_config.cookie, container.get("session.handler"),
                  request.cookies.get(session_config.cookie))
    g._actionframe_session = store.start()
    g._actionframe_cookies = CookieJar(session_config.path, session_config.domain, session_config.secure)
    g._actionframe_views = ViewAccumulator()
