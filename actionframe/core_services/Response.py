import json
from typing import Any, Mapping, Optional

from flask import Response as FlaskResponse
from werkzeug.wrappers import Response as WerkzeugResponse


class Response(FlaskResponse):
    """The response every controller action ends up as."""

    @classmethod
    def make(cls, content: Any = "", status: int = 200, headers: Optional[Mapping[str, str]] = None) -> "Response":
        """
        Coerce any value into a Response:
          None            -> empty body
          str / bytes     -> body as-is
          dict / list     -> JSON body (application/json)
          anything else   -> str(value)
        An existing Response is returned unchanged.
        """
        if isinstance(content, WerkzeugResponse):
            return content

        mimetype = None
        if content is None:
            body = ""
        elif isinstance(content, (str, bytes)):
            body = content
        elif isinstance(content, (dict, list, tuple)):
            body = json.dumps(content, default=str)
            mimetype = "application/json"
        else:
            body = str(content)

        return cls(body, status=status, headers=dict(headers or {}), mimetype=mimetype)
