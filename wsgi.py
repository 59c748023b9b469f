"""Web Server Gateway Interface entry-point."""

import os
from typing import Callable, Iterable, Optional

from flask import Flask

from microproducts.factory import create_app

__app__: Optional[Flask] = None


def application(environ: dict, start_response: Callable) -> Iterable[bytes]:
    """WSGI application factory."""
    global __app__
    if __app__ is None:
        # Configuration is read from the environment when the app is built.
        for key, value in environ.items():
            if key != 'SERVER_NAME' and isinstance(value, str):
                os.environ[key] = value
        __app__ = create_app()
    return __app__(environ, start_response)
