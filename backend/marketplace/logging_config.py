import logging


def setup_logging(level: str = "INFO") -> None:
    """Attach a console handler to the root logger unless one is already there."""
    root = logging.getLogger()
    if root.handlers:
        # pytest and uvicorn install their own handlers first.
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
