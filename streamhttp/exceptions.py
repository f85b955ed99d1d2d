class HttpClientError(Exception):
    """
    Base exception for all streamhttp failures.
    """

    pass


class TransportError(HttpClientError):
    """
    Raised when the transport cannot complete a round trip.
    """

    pass


class StreamOpenError(TransportError):
    """
    Raised when the underlying stream cannot be established
    (DNS failure, connection refused, TLS handshake, timeout, bad URL).
    """

    pass


class StreamReadError(TransportError):
    """
    Raised when reading the response body fails after the stream was opened.
    """

    pass


class ResponseFormatError(HttpClientError):
    """
    Raised when a response body cannot be decoded in the requested format.
    """

    pass
