"""
Request canonicalization for OAuth 1.0a signatures (RFC 5849, sections 3.4 and 3.6).
"""

import io
import urllib.parse

from typing import Iterable, List, Mapping, Tuple, Union

Pairs = Union[Mapping[str, object], Iterable[Tuple[str, object]]]

DEFAULT_PORTS = {'http': 80, 'https': 443}


def percent_encode(value) -> str:
    """
    Percent-encode `value` the way OAuth wants it:
    UTF-8, unreserved characters (ALPHA, DIGIT, '-', '.', '_', '~') kept as is,
    everything else as '%XX' with uppercase hex digits.

    Empty strings and None are returned unchanged.
    """

    if value is None:
        return value

    if not isinstance(value, (str, bytes)):
        value = str(value)

    if not value:
        return value

    return urllib.parse.quote(value, safe='~')


def base_string_uri(uri: str) -> str:
    """
    Scheme, authority and path of `uri` as used in the signature base string.

    Examples:
        'HTTP://Example.com:80/r%20v/X?id=123' -> 'http://example.com/r%20v/X'
    """

    parts = urllib.parse.urlsplit(uri)

    scheme = parts.scheme.lower()
    host = parts.hostname or ""

    if ":" in host:
        host = f"[{host}]"

    if parts.port and (parts.port != DEFAULT_PORTS.get(scheme)):
        host = f"{host}:{parts.port}"

    return urllib.parse.urlunsplit((scheme, host, parts.path or "/", "", ""))


def iter_pairs(post_data: Pairs) -> List[Tuple[str, object]]:
    if post_data is None:
        return []

    if isinstance(post_data, Mapping):
        return list(post_data.items())

    return list(post_data)


def collect_parameters(uri: str, post_data: Pairs = None) -> List[Tuple[str, str]]:
    """
    Query parameters of `uri` (decoded) followed by the body parameters.
    Duplicate names are kept.
    """

    query = urllib.parse.urlsplit(uri).query
    params = urllib.parse.parse_qsl(query, keep_blank_values=True)

    params.extend(
        (str(k), "" if (v is None) else str(v))
        for (k, v) in iter_pairs(post_data)
    )

    return params


def normalize_parameters(params: Iterable[Tuple[str, str]]) -> str:
    encoded = sorted(
        (percent_encode(k) or "", percent_encode(v) or "")
        for (k, v) in params
    )

    return "&".join(f"{k}={v}" for (k, v) in encoded)


def signature_base_string(http_method: str, uri: str, normalized_parameters: str) -> str:
    return "&".join([
        percent_encode(http_method.upper()),
        percent_encode(base_string_uri(uri)),
        percent_encode(normalized_parameters) or "",
    ])


def form_urlencode(post_data: Pairs) -> str:
    return "&".join(
        f"{percent_encode(str(k))}={percent_encode('' if (v is None) else str(v)) or ''}"
        for (k, v) in iter_pairs(post_data)
    )


def append_query(uri: str, post_data: Pairs) -> str:
    """
    Append `post_data` to the query string of `uri`, keeping the existing query.
    """

    extra = form_urlencode(post_data)

    if not extra:
        return uri

    parts = urllib.parse.urlsplit(uri)
    query = f"{parts.query}&{extra}" if parts.query else extra

    return urllib.parse.urlunsplit(parts._replace(query=query))


def multipart_form_data(post_data: Pairs, boundary: str) -> bytes:
    """
    Build a multipart/form-data body.

    Args:
        post_data: (name, value) pairs; `bytes` values become binary file parts,
            anything else a text part.
        boundary: The part delimiter announced in the Content-Type header.

    Returns:
        The encoded body, or b"" if there is no data.

    Raises:
        ValueError: If `boundary` is empty.
    """

    if not boundary:
        raise ValueError("The multipart boundary must be specified.")

    if post_data is None:
        return b""

    with io.BytesIO() as body:
        for (name, value) in iter_pairs(post_data):
            if isinstance(value, (bytes, bytearray)):
                head = (
                    f"--{boundary}\r\n"
                    f"Content-Disposition: form-data; name=\"{name}\"; filename=\"{name}\"\r\n"
                    f"Content-Type: application/octet-stream\r\n"
                    f"Content-Transfer-Encoding: binary\r\n\r\n"
                )
                body.write(head.encode('utf-8'))
                body.write(bytes(value))
                body.write(b"\r\n")
            else:
                part = (
                    f"--{boundary}\r\n"
                    f"Content-Disposition: form-data; name=\"{name}\"\r\n"
                    f"Content-Type: text/plain; charset=utf-8\r\n\r\n"
                    f"{value}\r\n"
                )
                body.write(part.encode('utf-8'))

        body.write(f"--{boundary}--\r\n".encode('utf-8'))

        return body.getvalue()
