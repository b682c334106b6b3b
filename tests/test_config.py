import os
import tempfile

from unittest import TestCase, mock

from oauth_bird.config import load_auth_params, load_http_settings


class TestConfig(TestCase):
    def setUp(self):
        self.folder = tempfile.TemporaryDirectory()
        self.env_file = os.path.join(self.folder.name, ".env")

    def tearDown(self):
        self.folder.cleanup()

    def write_env(self, text: str):
        with open(self.env_file, 'w') as fd:
            fd.write(text)

    def test_load_auth_params(self):
        self.write_env("CONSUMER_KEY=ck\nCONSUMER_SECRET=cs\nACCESS_TOKEN=at\nACCESS_TOKEN_SECRET=ats\n")

        with mock.patch.dict(os.environ, {}, clear=True):
            auth_params = load_auth_params(self.env_file)

        expected = {
            'consumer_key': "ck",
            'consumer_secret': "cs",
            'access_token': "at",
            'access_token_secret': "ats",
        }

        self.assertDictEqual(auth_params, expected)

    def test_environment_wins_over_file(self):
        self.write_env("CONSUMER_KEY=from-file\nCONSUMER_SECRET=cs\n")

        with mock.patch.dict(os.environ, {'CONSUMER_KEY': "from-env"}, clear=True):
            auth_params = load_auth_params(self.env_file)

        self.assertEqual(auth_params['consumer_key'], "from-env")
        self.assertEqual(auth_params['access_token'], "")
        self.assertEqual(auth_params['access_token_secret'], "")

    def test_missing_consumer_credentials(self):
        self.write_env("CONSUMER_KEY=ck\n")

        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(KeyError):
                load_auth_params(self.env_file)

    def test_http_settings(self):
        self.write_env("")

        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(load_http_settings(self.env_file), {'timeout': 30})

        with mock.patch.dict(os.environ, {'OAUTH_BIRD_TIMEOUT': "2", 'OAUTH_BIRD_USER_AGENT': "ua"}, clear=True):
            self.assertEqual(load_http_settings(self.env_file), {'timeout': 2.0, 'user_agent': "ua"})

        with mock.patch.dict(os.environ, {'OAUTH_BIRD_TIMEOUT': "soon"}, clear=True):
            with self.assertRaises(ValueError):
                load_http_settings(self.env_file)
