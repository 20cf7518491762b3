"""
Root logger configuration.

``setup_logging`` is called once from the application lifespan.  Every
module logs through ``logging.getLogger(__name__)`` and inherits the
handler installed here.
"""
import logging

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a console handler to the root logger and set its level.

    A no-op when the root logger already has handlers (pytest's log
    capture, uvicorn's own config, or a repeated startup).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
