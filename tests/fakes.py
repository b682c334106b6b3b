import http.client
import re
import urllib.parse

import requests

from oauth_bird import ConsumerCredential, OAuth, OAuthEndPoint, ProtocolVersion, ServiceProviderDescription
from oauth_bird import HttpMethod, TokenType

REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token"
AUTHORIZE_URL = "https://api.twitter.com/oauth/authorize"
ACCESS_TOKEN_URL = "https://api.twitter.com/oauth/access_token"


def make_response(status_code: int = 200, text: str = "", url: str = "https://api.twitter.com/") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = http.client.responses.get(status_code, "")
    response.url = url
    response.encoding = 'utf-8'
    response._content = text.encode('utf-8')
    return response


def make_oauth(token="", secret="", token_type=TokenType.INVALID_TOKEN, **kwargs) -> OAuth:
    credential = ConsumerCredential("key", "secret")
    credential.set_token(token, secret, token_type)

    description = ServiceProviderDescription(
        OAuthEndPoint(REQUEST_TOKEN_URL),
        OAuthEndPoint(AUTHORIZE_URL, HttpMethod.GET),
        OAuthEndPoint(ACCESS_TOKEN_URL),
        ProtocolVersion.V10A,
    )

    return OAuth(credential, description, **kwargs)


def header_params(header: str) -> dict:
    assert header.startswith("OAuth ")
    return {
        k: urllib.parse.unquote(v)
        for (k, v) in re.findall(r'(\w+)="([^"]*)"', header)
    }
