import logging
from types import TracebackType
from typing import Optional, Type

logger = logging.getLogger(__name__)


class best_effort:
    """
    Context manager cho các side effect không được phép làm hỏng request chính
    (dọn deployment cũ, trigger workflow destroy, giải mã token đã lưu).

    Mọi exception trong block đều được log rồi bỏ qua:

        with best_effort("cleanup old deployments for app %s", app_id):
            crud_deployment.prune_deployments(db, app_id, keep=5)

    ``failed`` cho biết block có bị lỗi hay không.
    """

    def __init__(self, description: str, *args: object, log: Optional[logging.Logger] = None):
        self.description = description
        self.args = args
        self.log = log or logger
        self.failed = False

    def __enter__(self) -> "best_effort":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        if exc is None:
            return False
        if not isinstance(exc, Exception):
            return False # KeyboardInterrupt, CancelledError... vẫn phải propagate
        self.failed = True
        action = self.description % self.args if self.args else self.description
        self.log.error(f"Failed to {action}: {exc}")
        return True
