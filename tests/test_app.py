import random
import tempfile
from unittest import TestCase

from flask import Flask
from jinja2 import DictLoader

from actionframe import ActionFrame, Controller, Response, controller_route
from actionframe.core_services.Config import Config
from actionframe.core_services.View import Template, TemplateEngine, View
from actionframe.session.Handlers import FileSessionHandler

TEMPLATES = {
    "templates/default/default.html": "<body>{{ content }}</body>",
    "pages/Welcome.html": "<p>Welcome {{ name }}</p>",
}


class PagesController(Controller):
    __module__ = "app.controllers.pages"

    def welcome(self, name):
        session = self.container.get("session.store")
        session.put("visits", session.get("visits", 0) + 1)
        return self.get_view({"name": name})

    def visits(self):
        return {"visits": self.container.get("session.store").get("visits", 0)}

    def broken(self):
        raise RuntimeError("kaput")


class AdminController(PagesController):
    def before(self):
        return Response.make("forbidden", 403)


def make_app(lottery=(0, 100)):
    app = Flask(__name__)
    app.config["TESTING"] = True
    config = Config({"session": {"driver": "array", "cookie": "sid", "lifetime": 10, "lottery": lottery}},
                    environ={})
    ActionFrame(app, config=config, template_engine=TemplateEngine(loader=DictLoader(TEMPLATES)),
                rng=random.Random(7))

    controller_route(app, "/welcome/<name>", PagesController, "welcome")
    controller_route(app, "/visits", PagesController, "visits")
    controller_route(app, "/broken", PagesController, "broken")
    controller_route(app, "/admin/<name>", AdminController, "welcome")
    controller_route(app, "/ghost", PagesController, "ghost")
    return app


class TestActionFrameApp(TestCase):
    def setUp(self):
        self.app = make_app()
        self.client = self.app.test_client()

    def test_action_renders_in_layout_and_sets_session_cookie(self):
        response = self.client.get("/welcome/Ada")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "<body><p>Welcome Ada</p></body>"
        cookie = next(h for h in response.headers.getlist("Set-Cookie") if h.startswith("sid="))
        assert "Max-Age=600" in cookie
        assert "HttpOnly" not in cookie

    def test_session_survives_between_requests(self):
        self.client.get("/welcome/Ada")
        self.client.get("/welcome/Ada")

        response = self.client.get("/visits")

        assert response.get_json() == {"visits": 2}

    def test_before_hook_short_circuits(self):
        response = self.client.get("/admin/Ada")

        assert response.status_code == 403
        assert self.client.get("/visits").get_json() == {"visits": 0}

    def test_unknown_action_is_404(self):
        response = self.client.get("/ghost")

        assert response.status_code == 404
        assert "ghost" in response.get_data(as_text=True)

    def test_action_error_is_500(self):
        self.app.config["TESTING"] = False
        self.app.config["PROPAGATE_EXCEPTIONS"] = False

        response = self.client.get("/broken")

        assert response.status_code == 500

    def test_lottery_hit_collects_expired_sessions(self):
        app = make_app(lottery=(1, 1))
        handler = app.container.get("session.handler")
        handler.storage["e" * 40] = {"data": "{}", "time": 0}

        app.test_client().get("/visits")

        assert "e" * 40 not in handler.storage
        assert len(handler.storage) == 1

    def test_session_handler_is_shared(self):
        assert self.app.container.get("session.handler") is self.app.container.get("session.handler")
        assert self.app.container.get("template") is self.app.container.get("template")

    def test_file_session_handler_is_shared(self):
        with tempfile.TemporaryDirectory() as files:
            app = Flask(__name__)
            ActionFrame(app, config=Config({"session": {"driver": "file", "files": files}}, environ={}))

            handler = app.container.get("session.handler")

            assert isinstance(handler, FileSessionHandler)
            assert handler is app.container.get("session.handler")

    def test_views_resolve_engine_from_app_container(self):
        with self.app.app_context():
            view = View.make("pages/Welcome", {"name": "Bo"})
            layout = Template.make("default", "default").with_("content", view)

            assert view.engine is self.app.container.get("template")
            assert str(layout.render()) == "<body><p>Welcome Bo</p></body>"

    def test_session_gc_command(self):
        handler = self.app.container.get("session.handler")
        handler.storage["e" * 40] = {"data": "{}", "time": 0}

        result = self.app.test_cli_runner().invoke(args=["session-gc"])

        assert result.exit_code == 0
        assert "Removed 1 expired session(s)." in result.output
