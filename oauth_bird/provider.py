"""
Static description of an OAuth 1.0a service provider.
"""

import enum
import urllib.parse

from typing import Union


class HttpMethod(enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"

    @classmethod
    def coerce(cls, value: Union["HttpMethod", str]) -> "HttpMethod":
        if isinstance(value, cls):
            return value

        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {value!r}.")

    @property
    def has_body(self) -> bool:
        return self not in {HttpMethod.GET, HttpMethod.HEAD}


class SignatureMethod(enum.Enum):
    HMAC_SHA1 = "HMAC-SHA1"
    RSA_SHA1 = "RSA-SHA1"
    PLAINTEXT = "PLAINTEXT"


class ProtocolVersion(enum.Enum):
    V10 = "1.0"
    V10A = "1.0a"

    @property
    def wire_value(self) -> str:
        # 1.0a keeps oauth_version="1.0" on the wire
        return "1.0"


class OAuthEndPoint:
    def __init__(self, resource_uri: str, http_method: Union[HttpMethod, str] = HttpMethod.POST):
        self.resource_uri = resource_uri
        self.http_method = http_method

    @property
    def resource_uri(self) -> str:
        return self._resource_uri

    @resource_uri.setter
    def resource_uri(self, value: str):
        if value is None:
            raise TypeError("The resource URI must not be None.")

        parts = urllib.parse.urlsplit(value)

        if parts.scheme.lower() not in {'http', 'https'} or not parts.netloc:
            raise ValueError(f"Invalid URI (absolute http/https expected): {value!r}.")

        self._resource_uri = value

    @property
    def http_method(self) -> HttpMethod:
        return self._http_method

    @http_method.setter
    def http_method(self, value: Union[HttpMethod, str]):
        self._http_method = HttpMethod.coerce(value)

    def __repr__(self):
        return f"OAuthEndPoint({self.resource_uri!r}, {self.http_method.value})"


class ServiceProviderDescription:
    """
    The three endpoints of the OAuth dance.

    Args:
        request_token_endpoint: Temporary credentials endpoint.
        authorization_endpoint: Where the user is sent to approve the request token.
        access_token_endpoint: Token credentials endpoint.
        protocol_version: `ProtocolVersion.V10A` for providers with callback confirmation.
    """

    def __init__(
            self,
            request_token_endpoint: OAuthEndPoint,
            authorization_endpoint: OAuthEndPoint,
            access_token_endpoint: OAuthEndPoint,
            protocol_version: ProtocolVersion = ProtocolVersion.V10,
    ):
        self.request_token_endpoint = request_token_endpoint
        self.authorization_endpoint = authorization_endpoint
        self.access_token_endpoint = access_token_endpoint
        self.protocol_version = protocol_version

    @staticmethod
    def _checked(endpoint: OAuthEndPoint, name: str) -> OAuthEndPoint:
        if endpoint is None:
            raise TypeError(f"The {name} endpoint must not be None.")
        return endpoint

    @property
    def request_token_endpoint(self) -> OAuthEndPoint:
        return self._request_token_endpoint

    @request_token_endpoint.setter
    def request_token_endpoint(self, value: OAuthEndPoint):
        self._request_token_endpoint = self._checked(value, "request token")

    @property
    def authorization_endpoint(self) -> OAuthEndPoint:
        return self._authorization_endpoint

    @authorization_endpoint.setter
    def authorization_endpoint(self, value: OAuthEndPoint):
        self._authorization_endpoint = self._checked(value, "authorization")

    @property
    def access_token_endpoint(self) -> OAuthEndPoint:
        return self._access_token_endpoint

    @access_token_endpoint.setter
    def access_token_endpoint(self, value: OAuthEndPoint):
        self._access_token_endpoint = self._checked(value, "access token")
