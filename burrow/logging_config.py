import logging
from contextvars import ContextVar

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
session_id_ctx: ContextVar[str] = ContextVar("session_id", default="-")


class ContextFilter(logging.Filter):
    """Stamps every record with the current request and session ids."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        record.session_id = session_id_ctx.get()
        return True


def setup_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s | %(levelname)s | %(name)s:%(lineno)d"
               " | req=%(request_id)s | session=%(session_id)s | %(message)s",
    )
    for h in logging.getLogger().handlers:
        h.addFilter(ContextFilter())
    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(lvl, logging.INFO))
