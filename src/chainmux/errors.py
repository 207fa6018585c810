"""Chainmux exception hierarchy.

Shared across the registry, chain executor, server, and static helper so
every module raises and catches the same types.
"""


class ChainmuxError(Exception):
    """Base for all chainmux-specific errors."""


class ConfigurationError(ChainmuxError):
    """Raised when the server is wired up incorrectly.

    Always raised during the configuring phase (route registration),
    never while requests are being served.
    """


class RouterNotFound(ChainmuxError):  # noqa: N818
    """No router exists for the requested version namespace.

    Recoverable: the caller decides what to do. ``default`` holds a fresh,
    unregistered router that can be used as a safe stand-in.
    """

    def __init__(self, version: str, default: object = None) -> None:
        super().__init__(f"No router configured for namespace '{version}'")
        self.version = version
        self.default = default


class HTTPError(ChainmuxError):
    """An error that maps directly to an HTTP status code.

    Raised by the router when a request cannot be matched. The version
    dispatcher turns these into plain-text responses. Fields are
    read-only; the exception itself stays a normal mutable exception so
    tracebacks and notes can be attached to it.
    """

    def __init__(
        self,
        status: int,
        detail: str = "",
        headers: tuple[tuple[str, str], ...] = (),
    ) -> None:
        super().__init__(status, detail)
        self._status = status
        self._detail = detail
        self._headers = headers

    @property
    def status(self) -> int:
        return self._status

    @property
    def detail(self) -> str:
        return self._detail

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return self._headers

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Carries an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
