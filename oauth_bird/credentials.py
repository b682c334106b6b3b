"""
Consumer and token credentials of an OAuth 1.0a client.
"""

import enum


class TokenType(enum.Enum):
    ACCESS_TOKEN = "access_token"
    INVALID_TOKEN = "invalid_token"
    REQUEST_TOKEN = "request_token"


class TokenCredential:
    """
    A token/secret pair together with what kind of token it is.

    An empty token or secret is only allowed for `TokenType.INVALID_TOKEN`,
    and an invalid token must not carry both a token and a secret.
    """

    def __init__(self, token: str = "", secret: str = "", token_type: TokenType = TokenType.INVALID_TOKEN):
        self.set_token(token, secret, token_type)

    @property
    def token(self) -> str:
        return self._token

    @property
    def secret(self) -> str:
        return self._secret

    @property
    def token_type(self) -> TokenType:
        return self._token_type

    def set_token(self, token: str, secret: str, token_type: TokenType):
        """
        Replace the current token.

        Raises:
            TypeError: if `token` or `secret` is None.
            ValueError: if the values contradict `token_type`.
        """

        if token is None:
            raise TypeError("The token must not be None.")

        if secret is None:
            raise TypeError("The secret must not be None.")

        if token and secret and (token_type == TokenType.INVALID_TOKEN):
            raise ValueError("The token and secret are not empty but the token type is INVALID_TOKEN.")

        if ((not token) or (not secret)) and (token_type != TokenType.INVALID_TOKEN):
            raise ValueError("Invalid token or secret.")

        self._token = token
        self._secret = secret
        self._token_type = token_type

    def reset(self):
        self.set_token("", "", TokenType.INVALID_TOKEN)


class ConsumerCredential(TokenCredential):
    def __init__(self, consumer_key: str, consumer_secret: str):
        super().__init__()
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret

    @property
    def consumer_key(self) -> str:
        return self._consumer_key

    @consumer_key.setter
    def consumer_key(self, value: str):
        if not value:
            raise ValueError("The consumer key can not be None or empty.")
        self._consumer_key = value

    @property
    def consumer_secret(self) -> str:
        return self._consumer_secret

    @consumer_secret.setter
    def consumer_secret(self, value: str):
        if not value:
            raise ValueError("The consumer secret can not be None or empty.")
        self._consumer_secret = value
