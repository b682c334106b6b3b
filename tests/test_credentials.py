from unittest import TestCase

from oauth_bird import ConsumerCredential, TokenCredential, TokenType
from oauth_bird import HttpMethod, OAuthEndPoint, ServiceProviderDescription


class TestTokenCredential(TestCase):
    def test_default_is_invalid(self):
        credential = TokenCredential()
        self.assertEqual(credential.token, "")
        self.assertEqual(credential.secret, "")
        self.assertEqual(credential.token_type, TokenType.INVALID_TOKEN)

    def test_set_token(self):
        credential = TokenCredential()
        credential.set_token("tok", "sec", TokenType.REQUEST_TOKEN)
        self.assertEqual((credential.token, credential.secret), ("tok", "sec"))
        self.assertEqual(credential.token_type, TokenType.REQUEST_TOKEN)

    def test_set_token_raises_on_none(self):
        credential = TokenCredential()

        with self.assertRaises(TypeError):
            credential.set_token(None, "sec", TokenType.ACCESS_TOKEN)

        with self.assertRaises(TypeError):
            credential.set_token("tok", None, TokenType.ACCESS_TOKEN)

    def test_set_token_raises_on_inconsistent_type(self):
        credential = TokenCredential()

        # Complete token marked invalid
        with self.assertRaises(ValueError):
            credential.set_token("tok", "sec", TokenType.INVALID_TOKEN)

        # Incomplete token marked valid
        for token_type in [TokenType.ACCESS_TOKEN, TokenType.REQUEST_TOKEN]:
            with self.assertRaises(ValueError):
                credential.set_token("tok", "", token_type)
            with self.assertRaises(ValueError):
                credential.set_token("", "sec", token_type)

    def test_incomplete_invalid_token_is_allowed(self):
        credential = TokenCredential("tok", "", TokenType.INVALID_TOKEN)
        self.assertEqual(credential.token, "tok")

    def test_reset(self):
        credential = TokenCredential("tok", "sec", TokenType.ACCESS_TOKEN)
        credential.reset()
        self.assertEqual(credential.token_type, TokenType.INVALID_TOKEN)
        self.assertEqual(credential.token, "")


class TestConsumerCredential(TestCase):
    def test_constructor(self):
        credential = ConsumerCredential("key", "secret")
        self.assertEqual(credential.consumer_key, "key")
        self.assertEqual(credential.consumer_secret, "secret")
        self.assertEqual(credential.token_type, TokenType.INVALID_TOKEN)

    def test_constructor_raises_on_missing_values(self):
        for (key, secret) in [("", "secret"), ("key", ""), (None, "secret"), ("key", None)]:
            with self.assertRaises(ValueError):
                ConsumerCredential(key, secret)

    def test_assignment_is_checked(self):
        credential = ConsumerCredential("key", "secret")

        with self.assertRaises(ValueError):
            credential.consumer_key = ""

        with self.assertRaises(ValueError):
            credential.consumer_secret = None

        self.assertEqual(credential.consumer_key, "key")


class TestServiceProvider(TestCase):
    def test_endpoint_defaults_to_post(self):
        endpoint = OAuthEndPoint("https://api.twitter.com/oauth/request_token")
        self.assertEqual(endpoint.http_method, HttpMethod.POST)

    def test_endpoint_accepts_method_names(self):
        endpoint = OAuthEndPoint("http://example.com/authorize", "get")
        self.assertEqual(endpoint.http_method, HttpMethod.GET)

        with self.assertRaises(ValueError):
            OAuthEndPoint("http://example.com/authorize", "PATCH")

    def test_endpoint_requires_absolute_http_uri(self):
        for uri in ["ftp://example.com/token", "/oauth/token", "example.com/token"]:
            with self.assertRaises(ValueError):
                OAuthEndPoint(uri)

        with self.assertRaises(TypeError):
            OAuthEndPoint(None)

    def test_description_requires_endpoints(self):
        endpoint = OAuthEndPoint("https://example.com/token")

        with self.assertRaises(TypeError):
            ServiceProviderDescription(endpoint, None, endpoint)

        description = ServiceProviderDescription(endpoint, endpoint, endpoint)

        with self.assertRaises(TypeError):
            description.access_token_endpoint = None
