import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, g, request

from .core_services.Config import Config
from .core_services.Controller import Controller, DispatchState, ActionContext
from .core_services.Exceptions import ActionFrameError, ActionInvocationError, InvalidNamespaceShape, UnknownAction
from .core_services.Response import Response
from .core_services.View import TemplateEngine, Template, View
from .interfaces.RequestHook import CONTINUE, RequestHook
from .service_container._Injector import controller_route
from .service_container._ServiceLoader import init_container, start_request_services
from .session.SessionGuard import SessionGuard

SKIPPED_PREFIXES = ("/static", "/resources")


def _skip_request(path: str) -> bool:
    return path.startswith(SKIPPED_PREFIXES)


def ActionFrame(app: Flask, debug=False, config: Config = None, **kwargs):
    """Attaches the service container, the session lifecycle and the
    controller error handling to a Flask application.
    """
    load_dotenv()
    if os.getenv('APP_SECRET_KEY'):
        app.secret_key = os.getenv('APP_SECRET_KEY')

    config = config or Config(kwargs.get("settings"))
    if debug:
        config.set("app.debug", True)

    init_container(app, config, template_engine=kwargs.get("template_engine"))

    level = logging.DEBUG if config.get("app.debug") else logging.INFO
    for name in ("actionframe.controller", "actionframe.session", "actionframe.events"):
        logging.getLogger(name).setLevel(level)

    @app.before_request
    def _actionframe_before_request():
        if _skip_request(request.path):
            return
        start_request_services(app.container)

    @app.after_request
    def _actionframe_after_request(response):
        if _skip_request(request.path) or g.get("_actionframe_session") is None:
            return response

        SessionGuard.handle(app.container, rng=kwargs.get("rng"))
        return app.container.get("cookie").apply(response)

    @app.errorhandler(UnknownAction)
    def _actionframe_unknown_action(error):
        return Response.make(str(error), 404)

    @app.cli.command("session-gc")
    def session_gc():
        """Remove every session older than the configured lifetime."""
        lifetime = config.session.lifetime * 60
        removed = app.container.get("session.handler").gc(lifetime)
        click.echo(f"Removed {removed} expired session(s).")

    return app


__all__ = [
    "ActionFrame",
    "ActionContext",
    "ActionFrameError",
    "ActionInvocationError",
    "CONTINUE",
    "Config",
    "Controller",
    "DispatchState",
    "InvalidNamespaceShape",
    "RequestHook",
    "Response",
    "SessionGuard",
    "Template",
    "TemplateEngine",
    "UnknownAction",
    "View",
    "controller_route",
]
