import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

FORMAT = (
    "%(asctime)s | %(levelname)-7s | %(name)s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
formatter = logging.Formatter(FORMAT)

CORE_LOGGER = "embedded_ansible"
SETUP_LOGGER = "embedded_ansible.services.setup_runner"


def _file_handler(path: Path, level=logging.INFO) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler) -> bool:
    for h in logger.handlers:
        if getattr(h, "baseFilename", None) == getattr(handler, "baseFilename", None):
            return False
    logger.addHandler(handler)
    return True


def setup_logging(log_dir: Path = Path("logs")) -> None:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # --- Core ---
    core = logging.getLogger(CORE_LOGGER)
    core.setLevel(logging.DEBUG)
    core_handler = _file_handler(log_dir / "core.log")
    if not _attach(core, core_handler):
        core_handler.close()

    # --- Installer runs (captured output is large, keep it apart) ---
    setup = logging.getLogger(SETUP_LOGGER)
    setup_handler = _file_handler(log_dir / "setup.log", level=logging.DEBUG)
    if not _attach(setup, setup_handler):
        setup_handler.close()
