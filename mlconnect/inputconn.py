"""Base input connector and data element fetching."""

from __future__ import annotations

from typing import Any, Protocol

from mlconnect import fileops
from mlconnect.httpclient import get_call

_REMOTE_MARKERS = ("https://", "http://", "file://")


class InputConnectorBadParamError(Exception):
    """Raised when an input connector is given bad parameters or data."""


class InputConnectorInternalError(Exception):
    """Raised on an internal failure of an input connector."""


class _DataReader(Protocol):
    def read_file(self, fname: str) -> bool: ...

    def read_mem(self, content: str | bytes) -> bool: ...

    def read_dir(self, dir: str) -> bool: ...


def read_element(uri: str, reader: _DataReader) -> bool:
    """Fetch the data behind *uri* and hand it to *reader*.

    URLs are downloaded and passed to ``read_mem`` as bytes; directories go
    to ``read_dir``, existing files to ``read_file``, and anything else is
    taken as the content itself and passed to ``read_mem``. Returns whether
    data could be read.
    """
    if any(marker in uri for marker in _REMOTE_MARKERS):
        response = get_call(uri, "GET")
        if response.status != 200:
            return False
        return reader.read_mem(response.body)
    if fileops.is_directory(uri):
        return reader.read_dir(uri)
    if fileops.file_exists(uri):
        return reader.read_file(uri)
    return reader.read_mem(uri)


class InputConnectorStrategy:
    """Common state and behaviour of input connectors."""

    def __init__(self) -> None:
        self.train = False
        self.uris: list[str] = []

    def get_data(self, ad: dict[str, Any]) -> None:
        """Take the list of data URIs from the mandatory ``data`` field."""
        try:
            data = ad["data"]
        except (KeyError, TypeError) as err:
            raise InputConnectorBadParamError("missing data") from err
        if not isinstance(data, list) or not all(isinstance(u, str) for u in data):
            raise InputConnectorBadParamError("missing data")
        if not data:
            raise InputConnectorBadParamError("missing data")
        self.uris = list(data)

    def _reported_params(self) -> dict[str, Any]:
        """Parameters to report back; the base connector has none."""
        return {}

    def response_params(self, out: dict[str, Any]) -> None:
        """Add input parameters worth reporting back to *out*."""
        out.update(self._reported_params())