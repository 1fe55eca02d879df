from flask import current_app, has_app_context


def container_resolver(container=None):
    """Returns the given container, or the one attached to the current Flask app."""
    if container is not None:
        return container

    if not has_app_context():
        raise RuntimeError("No Flask app context available to resolve the service container")

    container = getattr(current_app, "container", None)
    if container is None:
        raise RuntimeError("The current Flask app has no service container. Was ActionFrame(app) called?")
    return container


def controller_view(controller_class, action, container=None):
    """Builds a Flask view function dispatching to `controller_class.action`."""

    def view(**view_args):
        controller = controller_class(container=container_resolver(container))
        return controller.execute(action, list(view_args.values()))

    view.__name__ = f"{controller_class.__name__}@{action}"
    view.__qualname__ = view.__name__
    view.__doc__ = getattr(getattr(controller_class, action, None), "__doc__", None)
    return view


# Combined route and controller dispatch
def controller_route(app, route, controller_class, action, prefix=None, **options):
    if prefix:
        route = f"{prefix.rstrip('/')}/{route.lstrip('/')}"

    options.setdefault("endpoint", f"{controller_class.__name__}@{action}")
    view = controller_view(controller_class, action)
    app.add_url_rule(route, view_func=view, **options)
    return view


def singleton(cls):
    cls.__singleton__ = True
    return cls

