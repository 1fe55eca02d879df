import os
from typing import Any, Mapping, Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from actionframe.service_container._Injector import container_resolver, singleton


@singleton
class TemplateEngine:
    """
    Jinja2 backed renderer.

    Views live at  <path>.html  or  modules/<Module>/<path>.html
    Layouts live at  templates/<template>/<layout>.html
    """

    def __init__(self, loader: Optional[BaseLoader] = None, search_path: str = None):
        if loader is None:
            loader = FileSystemLoader(search_path or os.getenv("VIEWS_PATH", "lib/views"))
        self.environment = Environment(loader=loader, autoescape=select_autoescape(["html", "xml"]))

    @staticmethod
    def view_name(path: str, module: str = None) -> str:
        path = path.replace(os.sep, "/")
        if module:
            return f"modules/{module}/{path}.html"
        return f"{path}.html"

    @staticmethod
    def layout_name(layout: str, template: str) -> str:
        return f"templates/{template}/{layout}.html"

    def render(self, template_id: str, bindings: Mapping[str, Any] = None) -> Markup:
        template = self.environment.get_template(template_id)
        return Markup(template.render(**dict(bindings or {})))

    def wrap_in_layout(self, layout: str, template: str, bindings: Mapping[str, Any] = None) -> Markup:
        return self.render(self.layout_name(layout, template), bindings)


class View:
    def __init__(self, engine: TemplateEngine, path: str, data: dict = None, module: str = None,
                 headers: dict = None):
        self.engine = engine
        self.path = path
        self.module = module
        self.data = dict(data or {})
        self.headers = dict(headers or {})

    @classmethod
    def make(cls, path: str, data: dict = None, module: str = None, engine: TemplateEngine = None):
        if engine is None:
            engine = container_resolver().get("template")
        return cls(engine, path, data, module)

    def with_(self, key, value=None):
        """Bind one value, or a whole dict of values, to the view."""
        if isinstance(key, dict):
            self.data.update(key)
        else:
            self.data[key] = value
        return self

    def with_header(self, name: str, value: str):
        self.headers[name] = value
        return self

    def bindings(self, shared: dict = None) -> dict:
        # nested views are rendered before being handed to the template
        bindings = dict(shared or {})
        bindings.update({
            key: value.render(shared) if isinstance(value, View) else value
            for key, value in self.data.items()
        })
        return bindings

    def render(self, shared: dict = None) -> Markup:
        return self.engine.render(self.engine.view_name(self.path, self.module), self.bindings(shared))

    # name used by legacy views
    fetch = render

    def display(self, accumulator=None):
        """Queue the view for legacy output instead of returning it from the action."""
        if accumulator is None:
            accumulator = container_resolver().get("view")
        accumulator.add(self)
        return self

    def __str__(self):
        return str(self.render())

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.path!r} module={self.module!r}>"


class Template(View):
    """A layout of a template, wrapping the `content` binding."""

    def __init__(self, engine: TemplateEngine, layout: str, template: str, data: dict = None,
                 headers: dict = None):
        super().__init__(engine, layout, data, headers=headers)
        self.layout = layout
        self.template = template

    @classmethod
    def make(cls, layout: str, template: str, data: dict = None, engine: TemplateEngine = None,
             headers: dict = None):
        if engine is None:
            engine = container_resolver().get("template")
        return cls(engine, layout, template, data, headers)

    def render(self, shared: dict = None) -> Markup:
        return self.engine.wrap_in_layout(self.layout, self.template, self.bindings(shared))

    fetch = render

    def __repr__(self):
        return f"<Template {self.layout!r} of {self.template!r}>"


class ViewAccumulator:
    """Legacy views, headers and shared bindings of one request."""

    def __init__(self):
        self._views = []
        self._headers = {}
        self.shared = {}

    def add(self, view):
        self._views.append(view)
        return view

    def add_header(self, name: str, value: str):
        self._headers[name] = value
        return self

    def list_pending(self) -> list:
        return list(self._views)

    def pending_headers(self) -> dict:
        return dict(self._headers)
