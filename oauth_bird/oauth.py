"""
OAuth 1.0a (RFC 5849) request signing and the three-legged token dance.
"""

import base64
import hashlib
import hmac
import logging
import time
import urllib.parse
import uuid

from typing import Dict, List, Optional, Tuple, Union

import requests
from requests.utils import requote_uri

from .credentials import ConsumerCredential, TokenType
from .encoding import (
    Pairs,
    append_query,
    collect_parameters,
    form_urlencode,
    multipart_form_data,
    normalize_parameters,
    percent_encode,
    signature_base_string,
)
from .provider import HttpMethod, OAuthEndPoint, ServiceProviderDescription, SignatureMethod

logger = logging.getLogger(__name__)

BOUNDARY = "----------5rex6Zuq5pyq5p2l"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"

DEFAULT_USER_AGENT = "oauth-bird"
DEFAULT_TIMEOUT = 30

OAUTH_CALLBACK = "oauth_callback"
OAUTH_CALLBACK_CONFIRMED = "oauth_callback_confirmed"
OAUTH_CONSUMER_KEY = "oauth_consumer_key"
OAUTH_NONCE = "oauth_nonce"
OAUTH_SIGNATURE = "oauth_signature"
OAUTH_SIGNATURE_METHOD = "oauth_signature_method"
OAUTH_TIMESTAMP = "oauth_timestamp"
OAUTH_TOKEN = "oauth_token"
OAUTH_TOKEN_SECRET = "oauth_token_secret"
OAUTH_VERIFIER = "oauth_verifier"
OAUTH_VERSION = "oauth_version"


class OAuthError(Exception):
    pass


class OAuthStateError(OAuthError):
    """
    The operation is not allowed with the current token (e.g. no access token yet).
    """


class OAuthResponseFormatError(OAuthError):
    def __init__(self, message: str, content: str):
        super().__init__(message)
        self.content = content


class OAuthTokenVerificationError(OAuthError):
    def __init__(self, message: str, current_token: str, received_token: str):
        if not current_token:
            raise ValueError("Nontrivial value expected for 'current_token'.")

        if not received_token:
            raise ValueError("Nontrivial value expected for 'received_token'.")

        super().__init__(message)
        self.current_token = current_token
        self.received_token = received_token


def generate_nonce() -> str:
    return uuid.uuid4().hex


def generate_timestamp() -> str:
    return str(int(time.time()))


def keep_headers(request: requests.PreparedRequest) -> requests.PreparedRequest:
    return request


def parse_token_response(content: str, required: List[str]) -> Dict[str, str]:
    """
    Decode a form-encoded token response such as
    'oauth_token=...&oauth_token_secret=...&oauth_callback_confirmed=true'.

    Raises:
        `OAuthResponseFormatError` if any of the `required` fields is missing or empty.
    """

    fields = dict(urllib.parse.parse_qsl(content or "", keep_blank_values=True))

    if not all(fields.get(k) for k in required):
        raise OAuthResponseFormatError("The server returned an unrecognized content.", content)

    return fields


class OAuth:
    def __init__(
            self,
            consumer_credential: ConsumerCredential,
            service_provider_description: ServiceProviderDescription,
            signature_method: SignatureMethod = SignatureMethod.HMAC_SHA1,
            session: Optional[requests.Session] = None,
    ):
        """
        Args:
            consumer_credential: The consumer key/secret and the current token.
                It is updated in place as tokens are acquired.
            service_provider_description: The provider's token endpoints.
            signature_method: HMAC-SHA1 (default) or PLAINTEXT.
            session: HTTP session to send requests with (a new one by default).
        """

        if consumer_credential is None:
            raise TypeError("The consumer credential must not be None.")

        if service_provider_description is None:
            raise TypeError("The service provider description must not be None.")

        self._consumer_credential = consumer_credential
        self._service_provider_description = service_provider_description
        self._signature_method = signature_method
        self._realm = ""

        self.user_agent = DEFAULT_USER_AGENT
        self.timeout = DEFAULT_TIMEOUT
        self.proxies = {}
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.session.close()

    @property
    def request_token_endpoint(self) -> OAuthEndPoint:
        return self._service_provider_description.request_token_endpoint

    @property
    def authorization_endpoint(self) -> OAuthEndPoint:
        return self._service_provider_description.authorization_endpoint

    @property
    def access_token_endpoint(self) -> OAuthEndPoint:
        return self._service_provider_description.access_token_endpoint

    @property
    def authenticated(self) -> bool:
        return self._consumer_credential.token_type == TokenType.ACCESS_TOKEN

    @property
    def token(self) -> str:
        return self._consumer_credential.token

    @property
    def token_secret(self) -> str:
        return self._consumer_credential.secret

    @property
    def signature_method(self) -> SignatureMethod:
        return self._signature_method

    @property
    def realm(self) -> str:
        return self._realm

    @realm.setter
    def realm(self, value: Optional[str]):
        self._realm = value or ""

    def authorization_url(self) -> str:
        """
        Where the user should be sent to approve the current request token.
        """

        if self._consumer_credential.token_type != TokenType.REQUEST_TOKEN:
            raise OAuthStateError("The current token is not a request token.")

        return append_query(self.authorization_endpoint.resource_uri, {OAUTH_TOKEN: self.token})

    # Token dance

    def acquire_request_token(self, oauth_callback: str, post_data: Pairs = None) -> str:
        """
        Obtain a request token (temporary credentials).

        Args:
            oauth_callback: Callback URL, or 'oob' for the PIN-based flow.
            post_data: Additional parameters for the request-token endpoint.

        Returns:
            The authorization URL for the newly acquired request token.

        Raises:
            ValueError: If `oauth_callback` is empty.
            OAuthResponseFormatError: If the response is not a token response.
            OAuthError: If the provider did not confirm the callback.
            requests.HTTPError: On a non-2xx response.
        """

        if not oauth_callback:
            raise ValueError("The callback must be specified.")

        endpoint = self.request_token_endpoint

        protocol_params = self._common_protocol_parameters()
        protocol_params[OAUTH_CALLBACK] = oauth_callback

        (url, params, body) = self._request_parts(endpoint.resource_uri, endpoint.http_method, post_data)

        # Temporary credentials are signed with the consumer secret only
        authorization = self._authorize(endpoint.http_method, url, protocol_params, params, token_secret="")

        content = self._send(self._prepare(url, endpoint.http_method, authorization, body, FORM_CONTENT_TYPE))

        fields = parse_token_response(content, [OAUTH_TOKEN, OAUTH_TOKEN_SECRET, OAUTH_CALLBACK_CONFIRMED])

        self._consumer_credential.set_token(
            fields[OAUTH_TOKEN],
            fields[OAUTH_TOKEN_SECRET],
            TokenType.REQUEST_TOKEN,
        )

        logger.debug("Acquired a request token.")

        if fields[OAUTH_CALLBACK_CONFIRMED].lower() != "true":
            raise OAuthError("The server returned false for the oauth_callback parameter.")

        return self.authorization_url()

    def acquire_access_token(self, oauth_verifier: str, post_data: Pairs = None) -> Dict[str, str]:
        """
        Exchange the current request token and `oauth_verifier` for an access token.

        Returns:
            The remaining fields of the token response, e.g. {'user_id': ..., 'screen_name': ...}.

        Raises:
            ValueError: If `oauth_verifier` is empty.
            OAuthStateError: If the current token is not a request token.
            OAuthResponseFormatError: If the response is not a token response.
            requests.HTTPError: On a non-2xx response.
        """

        if not oauth_verifier:
            raise ValueError("The oauth_verifier parameter must be specified.")

        if self._consumer_credential.token_type != TokenType.REQUEST_TOKEN:
            raise OAuthStateError("The current token is not a request token.")

        endpoint = self.access_token_endpoint

        protocol_params = self._common_protocol_parameters()
        protocol_params[OAUTH_TOKEN] = self.token
        protocol_params[OAUTH_VERIFIER] = oauth_verifier

        (url, params, body) = self._request_parts(endpoint.resource_uri, endpoint.http_method, post_data)
        authorization = self._authorize(endpoint.http_method, url, protocol_params, params, self.token_secret)

        content = self._send(self._prepare(url, endpoint.http_method, authorization, body, FORM_CONTENT_TYPE))

        fields = parse_token_response(content, [OAUTH_TOKEN, OAUTH_TOKEN_SECRET])

        self._consumer_credential.set_token(
            fields.pop(OAUTH_TOKEN),
            fields.pop(OAUTH_TOKEN_SECRET),
            TokenType.ACCESS_TOKEN,
        )

        logger.debug("Acquired an access token.")

        return fields

    def acquire_access_token_from_callback(self, callback_url: str, post_data: Pairs = None) -> Dict[str, str]:
        """
        Like `acquire_access_token` but takes the URL the provider redirected the user to,
        e.g. 'https://example.com/cb?oauth_token=...&oauth_verifier=...'.

        Raises:
            OAuthResponseFormatError: If the callback lacks the token or the verifier.
            OAuthTokenVerificationError: If the token is not the current request token.
        """

        if self._consumer_credential.token_type != TokenType.REQUEST_TOKEN:
            raise OAuthStateError("The current token is not a request token.")

        query = dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(callback_url or "").query))

        token = query.get(OAUTH_TOKEN)
        verifier = query.get(OAUTH_VERIFIER)

        if not (token and verifier):
            raise OAuthResponseFormatError("The server's request is unrecognized.", callback_url)

        if token != self.token:
            raise OAuthTokenVerificationError("Request token validation failed.", self.token, token)

        return self.acquire_access_token(verifier, post_data)

    # Resource requests

    def sign(
            self,
            resource_uri: str,
            http_method: Union[HttpMethod, str] = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> str:
        """
        The Authorization header value for a resource request.

        For GET and HEAD, `post_data` is signed as part of the query string.
        """

        http_method = HttpMethod.coerce(http_method)
        (url, params, _) = self._request_parts(resource_uri, http_method, post_data)
        return self._resource_authorization(url, http_method, params)

    def prepare_request(
            self,
            resource_uri: str,
            http_method: Union[HttpMethod, str] = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> requests.PreparedRequest:
        http_method = HttpMethod.coerce(http_method)
        (url, params, body) = self._request_parts(resource_uri, http_method, post_data)
        authorization = self._resource_authorization(url, http_method, params)
        return self._prepare(url, http_method, authorization, body, FORM_CONTENT_TYPE)

    def execute_authenticated_request(
            self,
            resource_uri: str,
            http_method: Union[HttpMethod, str] = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> str:
        """
        Send a signed request and return the response body.

        Raises:
            OAuthStateError: If there is no access token.
            requests.HTTPError: On a non-2xx response.
        """

        return self._send(self.prepare_request(resource_uri, http_method, post_data))

    def prepare_multipart_request(self, resource_uri: str, post_data: Pairs) -> requests.PreparedRequest:
        if resource_uri is None:
            raise TypeError("The resource URI must not be None.")

        url = requote_uri(resource_uri)

        # Multipart bodies are not part of the signature
        authorization = self._resource_authorization(url, HttpMethod.POST, collect_parameters(url))
        body = multipart_form_data(post_data, BOUNDARY)

        return self._prepare(url, HttpMethod.POST, authorization, body, MULTIPART_CONTENT_TYPE)

    def execute_authenticated_request_for_multipart_form_data(self, resource_uri: str, post_data: Pairs) -> str:
        """
        POST `post_data` as multipart/form-data; `bytes` values are sent as file parts.
        """

        return self._send(self.prepare_multipart_request(resource_uri, post_data))

    def execute_unauthenticated_request(
            self,
            resource_uri: str,
            http_method: Union[HttpMethod, str] = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> str:
        http_method = HttpMethod.coerce(http_method)
        (url, _, body) = self._request_parts(resource_uri, http_method, post_data)
        return self._send(self._prepare(url, http_method, None, body, FORM_CONTENT_TYPE))

    # Internals

    def _common_protocol_parameters(self) -> Dict[str, str]:
        return {
            OAUTH_CONSUMER_KEY: self._consumer_credential.consumer_key,
            OAUTH_SIGNATURE_METHOD: self._signature_method.value,
            OAUTH_TIMESTAMP: generate_timestamp(),
            OAUTH_NONCE: generate_nonce(),
            OAUTH_VERSION: self._service_provider_description.protocol_version.wire_value,
        }

    def _request_parts(
            self,
            resource_uri: str,
            http_method: HttpMethod,
            post_data: Pairs,
    ) -> Tuple[str, List[Tuple[str, str]], Optional[str]]:
        """
        Returns:
            (url, parameters to sign, form body)
        """

        if resource_uri is None:
            raise TypeError("The resource URI must not be None.")

        if http_method.has_body:
            url = requote_uri(resource_uri)
            body = form_urlencode(post_data) or None
            return (url, collect_parameters(url, post_data), body)

        url = requote_uri(append_query(resource_uri, post_data))
        return (url, collect_parameters(url), None)

    def _resource_authorization(self, url: str, http_method: HttpMethod, params: List[Tuple[str, str]]) -> str:
        if not self.authenticated:
            raise OAuthStateError("The current token is not an access token.")

        protocol_params = self._common_protocol_parameters()
        protocol_params[OAUTH_TOKEN] = self.token

        return self._authorize(http_method, url, protocol_params, params, self.token_secret)

    def _authorize(
            self,
            http_method: HttpMethod,
            url: str,
            protocol_params: Dict[str, str],
            params: List[Tuple[str, str]],
            token_secret: str,
    ) -> str:
        normalized = normalize_parameters(list(protocol_params.items()) + list(params))
        base_string = signature_base_string(http_method.value, url, normalized)

        logger.debug("Signature base string: %s", base_string)

        protocol_params[OAUTH_SIGNATURE] = self._sign(base_string, token_secret)

        return self._authorization_header(protocol_params)

    def _signing_key(self, token_secret: str) -> str:
        return f"{percent_encode(self._consumer_credential.consumer_secret)}&{percent_encode(token_secret) or ''}"

    def _sign(self, base_string: str, token_secret: str) -> str:
        key = self._signing_key(token_secret)

        if self._signature_method == SignatureMethod.HMAC_SHA1:
            digest = hmac.new(key.encode('utf-8'), base_string.encode('utf-8'), hashlib.sha1).digest()
            return base64.b64encode(digest).decode('ascii')

        if self._signature_method == SignatureMethod.PLAINTEXT:
            return key

        raise NotImplementedError(f"Signature method {self._signature_method.value} is not supported.")

    def _authorization_header(self, protocol_params: Dict[str, str]) -> str:
        fields = [f'realm="{self._realm}"'] if self._realm else []

        fields.extend(
            f'{percent_encode(k)}="{percent_encode(v) or ""}"'
            for (k, v) in sorted(protocol_params.items())
        )

        return "OAuth " + ", ".join(fields)

    def _prepare(
            self,
            url: str,
            http_method: HttpMethod,
            authorization: Optional[str],
            body: Optional[Union[str, bytes]],
            content_type: str,
    ) -> requests.PreparedRequest:
        headers = {'User-Agent': self.user_agent}

        if authorization:
            headers['Authorization'] = authorization

        if body is not None:
            headers['Content-Type'] = content_type

        # The header is already set; keep requests from adding .netrc credentials
        request = requests.Request(method=http_method.value, url=url, headers=headers, data=body, auth=keep_headers)

        return self.session.prepare_request(request)

    def _send(self, prepared: requests.PreparedRequest) -> str:
        logger.debug("%s %s", prepared.method, prepared.url)

        settings = self.session.merge_environment_settings(prepared.url, self.proxies, None, None, None)
        response = self.session.send(prepared, timeout=self.timeout, **settings)

        logger.debug("Status %s from %s", response.status_code, prepared.url)

        response.raise_for_status()

        return response.text
