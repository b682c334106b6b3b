"""
Twitter REST API (v1 / v1.1) on top of the OAuth signer.
"""

import contextlib
import dataclasses
import enum
import json
import logging
import time

from typing import Dict, Iterable, List, Optional

import requests

from .config import load_auth_params, load_http_settings
from .credentials import ConsumerCredential, TokenType
from .encoding import Pairs
from .oauth import OAuth, OAuthStateError
from .provider import HttpMethod, OAuthEndPoint, ProtocolVersion, ServiceProviderDescription

logger = logging.getLogger(__name__)

API_BASE_URI = "https://api.twitter.com"
UPLOAD_API_URI = "https://upload.twitter.com"

TWEET_MAX_LEN = 140

# Twitter's "Status is a duplicate."
DUPLICATE_STATUS_CODE = 187

CONFIGURATION_MAX_AGE = 24 * 3600


class ApiVersion(enum.Enum):
    V1 = "1"
    V1_1 = "1.1"


class TwitterError(Exception):
    """
    An error reported by Twitter.

    Attributes:
        status_code: HTTP status of the response, if there was one.
        errors: Twitter's error list, each like {'code': 187, 'message': 'Status is a duplicate.'}.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[Dict]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []

    @property
    def code(self) -> Optional[int]:
        return self.errors[0].get('code') if self.errors else None

    @property
    def request(self) -> Optional[str]:
        return self.errors[0].get('request') if self.errors else None


class DuplicateTweetError(TwitterError):
    pass


def error_list(content) -> List[Dict]:
    """
    Twitter's error payload in one shape.

    v1.1: {'errors': [{'code': 34, 'message': '...'}]}
    v1:   {'error': '...', 'request': '/1/...'}
    """

    if not isinstance(content, dict):
        return []

    errors = content.get('errors')

    if isinstance(errors, list):
        return [e if isinstance(e, dict) else {'message': str(e)} for e in errors]

    if isinstance(errors, str):
        return [{'message': errors}]

    if content.get('error'):
        return [{'message': content['error'], 'request': content.get('request')}]

    return []


def make_error(message: str, status_code: Optional[int], errors: List[Dict]) -> TwitterError:
    if any(e.get('code') == DUPLICATE_STATUS_CODE for e in errors):
        return DuplicateTweetError(message, status_code, errors)
    return TwitterError(message, status_code, errors)


def from_http_error(e: requests.HTTPError) -> TwitterError:
    response = e.response

    if response is None:
        return TwitterError(str(e))

    try:
        errors = error_list(response.json())
    except ValueError:
        errors = []

    message = errors[0].get('message') if errors else None

    return make_error(message or f"Status {response.status_code}: {response.text}.", response.status_code, errors)


@contextlib.contextmanager
def twitter_errors():
    """
    Turn HTTP protocol errors into `TwitterError`; network errors pass through.
    """

    try:
        yield
    except requests.HTTPError as e:
        raise from_http_error(e) from e


def parse(content: str):
    """
    JSON-deserialize a response body.

    Raises:
        `TwitterError` if the body is not JSON or is an error reported by Twitter.
    """

    try:
        data = json.loads(content)
    except ValueError:
        raise TwitterError(f"Cannot parse the response: {content}.")

    errors = error_list(data)

    if errors:
        raise make_error(errors[0].get('message') or "Twitter reported an error.", None, errors)

    return data


def flag(value: bool) -> str:
    return "true" if value else "false"


def to_int(value) -> int:
    try:
        return int(str(value))
    except ValueError:
        return 0


def check_status_text(text: str) -> str:
    if not isinstance(text, str):
        raise TypeError("Tweet should be a string.")
    else:
        text = text.strip()

    if not text:
        raise ValueError("Tweet should not be empty.")

    if len(text) > TWEET_MAX_LEN:
        raise OverflowError(f"The intended tweet is too long (max: {TWEET_MAX_LEN}).")

    return text


def check_id(id: str) -> str:
    if not id:
        raise ValueError("A status id is required.")
    return str(id)


NON_USERNAME_PATHS = [
    "about", "account", "accounts", "activity", "all", "announcements", "anywhere",
    "api_rules", "api_terms", "apirules", "apps", "auth", "badges", "blog", "business",
    "buttons", "contacts", "devices", "direct_messages", "download", "downloads",
    "edit_announcements", "faq", "favorites", "find_sources", "find_users", "followers",
    "following", "friend_request", "friendrequest", "friends", "goodies", "help", "home",
    "im_account", "inbox", "invitations", "invite", "jobs", "list", "login", "logout", "me",
    "mentions", "messages", "mockview", "newtwitter", "notifications", "nudge", "oauth",
    "phoenix_search", "positions", "privacy", "public_timeline", "related_tweets", "replies",
    "retweeted_of_mine", "retweets", "retweets_by_others", "rules", "saved_searches", "search",
    "sent", "settings", "share", "signup", "signin", "similar_to", "statistics", "terms", "tos",
    "translate", "trends", "tweetbutton", "twttr", "update_discoverability", "users", "welcome",
    "who_to_follow", "widgets", "zendesk_auth", "media_signup", "t1_qunit_tests", "phoenix_qunit_tests",
]


def default_photo_sizes() -> Dict[str, Dict]:
    return {
        'large': {'w': 1024, 'h': 2048, 'resize': "fit"},
        'medium': {'w': 600, 'h': 1200, 'resize': "fit"},
        'small': {'w': 340, 'h': 480, 'resize': "fit"},
        'thumb': {'w': 150, 'h': 150, 'resize': "crop"},
    }


@dataclasses.dataclass
class TwitterConfiguration:
    """
    Limits published by Twitter under help/configuration, with the documented defaults.
    """

    characters_reserved_per_media: int = 21
    max_media_per_upload: int = 1
    photo_size_limit: int = 3145728
    short_url_length: int = 20
    short_url_length_https: int = 21
    photo_sizes: Dict[str, Dict] = dataclasses.field(default_factory=default_photo_sizes)
    non_username_paths: List[str] = dataclasses.field(default_factory=lambda: list(NON_USERNAME_PATHS))

    @classmethod
    def from_dict(cls, content: Dict) -> "TwitterConfiguration":
        if not isinstance(content, dict):
            raise TypeError("A configuration dict is required.")

        config = cls()

        for field in dataclasses.fields(cls):
            value = content.get(field.name)

            if value is None:
                continue

            if field.type is int:
                setattr(config, field.name, to_int(value))
            elif field.name == 'photo_sizes':
                config.photo_sizes.update(value)
            elif field.name == 'non_username_paths':
                config.non_username_paths = [str(p) for p in value]

        return config


class TwitterApi:
    def __init__(
            self,
            consumer_key: str,
            consumer_secret: str,
            access_token: str = "",
            access_token_secret: str = "",
            api_version: ApiVersion = ApiVersion.V1_1,
            session: Optional[requests.Session] = None,
    ):
        """
        Args:
            consumer_key, consumer_secret: The app's credentials.
            access_token, access_token_secret: The app's access to a user account;
                leave both empty to go through `acquire_request_token` / `acquire_access_token`.
            api_version: REST API version used in resource URIs.
            session: HTTP session (a new one by default).
        """

        credential = ConsumerCredential(consumer_key, consumer_secret)

        if access_token or access_token_secret:
            credential.set_token(access_token, access_token_secret, TokenType.ACCESS_TOKEN)

        description = ServiceProviderDescription(
            OAuthEndPoint(f"{API_BASE_URI}/oauth/request_token"),
            OAuthEndPoint(f"{API_BASE_URI}/oauth/authorize", HttpMethod.GET),
            OAuthEndPoint(f"{API_BASE_URI}/oauth/access_token"),
            ProtocolVersion.V10A,
        )

        self.oauth = OAuth(credential, description, session=session)
        self.oauth.realm = API_BASE_URI

        self.api_version = api_version

        self._configuration = TwitterConfiguration()
        self._configuration_time = None

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs) -> "TwitterApi":
        """
        Build a client from CONSUMER_KEY, CONSUMER_SECRET, ACCESS_TOKEN, ACCESS_TOKEN_SECRET
        (environment or dotenv file).
        """

        api = cls(**load_auth_params(env_file), **kwargs)

        settings = load_http_settings(env_file)
        api.oauth.timeout = settings['timeout']

        if 'user_agent' in settings:
            api.user_agent = settings['user_agent']

        return api

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.oauth.close()

    @property
    def authenticated(self) -> bool:
        return self.oauth.authenticated

    @property
    def user_agent(self) -> str:
        return self.oauth.user_agent

    @user_agent.setter
    def user_agent(self, value: str):
        self.oauth.user_agent = value

    @property
    def proxies(self) -> Dict[str, str]:
        return self.oauth.proxies

    @proxies.setter
    def proxies(self, value: Dict[str, str]):
        self.oauth.proxies = dict(value or {})

    @property
    def configuration(self) -> TwitterConfiguration:
        """
        Twitter's current limits, refreshed from help/configuration at most once a day.
        """

        now = time.monotonic()

        if (self._configuration_time is None) or (now - self._configuration_time > CONFIGURATION_MAX_AGE):
            self._configuration_time = now
            config = self.retrieve_configuration()

            if config is not None:
                self._configuration = config

        return self._configuration

    @configuration.setter
    def configuration(self, value: TwitterConfiguration):
        self._configuration = value
        self._configuration_time = time.monotonic()

    def resource_uri(self, path: str, base: str = API_BASE_URI) -> str:
        """
        E.g. 'statuses/update' -> 'https://api.twitter.com/1.1/statuses/update.json'.
        """

        return f"{base}/{self.api_version.value}/{path.strip('/')}.json"

    # OAuth flow

    def acquire_request_token(self, oauth_callback: str = "oob", post_data: Pairs = None) -> str:
        """
        Returns:
            The URL where the user authorizes the app.
        """

        with twitter_errors():
            return self.oauth.acquire_request_token(oauth_callback, post_data)

    def acquire_access_token(self, oauth_verifier: str, post_data: Pairs = None) -> Dict[str, str]:
        """
        Returns:
            Typically {'user_id': ..., 'screen_name': ...}.
        """

        with twitter_errors():
            return self.oauth.acquire_access_token(oauth_verifier, post_data)

    def acquire_access_token_from_callback(self, callback_url: str, post_data: Pairs = None) -> Dict[str, str]:
        with twitter_errors():
            return self.oauth.acquire_access_token_from_callback(callback_url, post_data)

    # Raw requests

    def execute_authenticated_request(
            self,
            resource_uri: str,
            http_method: HttpMethod = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> str:
        with twitter_errors():
            return self.oauth.execute_authenticated_request(resource_uri, http_method, post_data)

    def execute_authenticated_request_for_multipart_form_data(self, resource_uri: str, post_data: Pairs) -> str:
        with twitter_errors():
            return self.oauth.execute_authenticated_request_for_multipart_form_data(resource_uri, post_data)

    def execute_unauthenticated_request(
            self,
            resource_uri: str,
            http_method: HttpMethod = HttpMethod.GET,
            post_data: Pairs = None,
    ) -> str:
        with twitter_errors():
            return self.oauth.execute_unauthenticated_request(resource_uri, http_method, post_data)

    def _get(self, resource_uri: str, params: Pairs = None) -> str:
        if self.authenticated:
            return self.execute_authenticated_request(resource_uri, HttpMethod.GET, params)
        else:
            return self.execute_unauthenticated_request(resource_uri, HttpMethod.GET, params)

    def _require_authentication(self):
        if not self.authenticated:
            raise OAuthStateError("Authentication required.")

    # Help

    def retrieve_configuration(self) -> Optional[TwitterConfiguration]:
        """
        Fetch help/configuration; None if that fails.
        """

        try:
            content = parse(self._get(self.resource_uri("help/configuration")))
        except (TwitterError, requests.RequestException) as e:
            logger.warning("Could not retrieve the Twitter configuration: %s", e)
            return None

        if not isinstance(content, dict):
            logger.warning("Unexpected Twitter configuration: %s", content)
            return None

        return TwitterConfiguration.from_dict(content)

    def get_supported_languages(self) -> List[Dict]:
        """
        Returns:
            List like [{'code': 'fr', 'name': 'French', 'status': 'production'}, ...].
        """

        return parse(self._get(self.resource_uri("help/languages")))

    # Statuses

    def show_status(self, id: str, trim_user: bool = False, include_entities: bool = True) -> Dict:
        params = {
            'id': check_id(id),
            'trim_user': flag(trim_user),
            'include_entities': flag(include_entities),
        }

        return parse(self._get(self.resource_uri("statuses/show"), params))

    def update_status(
            self,
            text: str,
            in_reply_to_status_id: Optional[str] = None,
            latitude: Optional[float] = None,
            longitude: Optional[float] = None,
            place_id: Optional[str] = None,
            display_coordinates: bool = True,
            trim_user: bool = False,
            include_entities: bool = True,
    ) -> Dict:
        """
        Tweet something.

        In case of a duplicate tweet, `DuplicateTweetError` is raised.

        Returns:
            The new status as decoded JSON.
        """

        text = check_status_text(text)
        self._require_authentication()

        post_data = {
            'status': text,
            'display_coordinates': flag(display_coordinates),
            'trim_user': flag(trim_user),
            'include_entities': flag(include_entities),
        }

        post_data.update(self._location_params(in_reply_to_status_id, latitude, longitude, place_id))

        content = self.execute_authenticated_request(self.resource_uri("statuses/update"), HttpMethod.POST, post_data)

        return parse(content)

    def update_status_with_media(
            self,
            text: str,
            media: Iterable[bytes],
            in_reply_to_status_id: Optional[str] = None,
            latitude: Optional[float] = None,
            longitude: Optional[float] = None,
            place_id: Optional[str] = None,
            display_coordinates: bool = True,
            possibly_sensitive: bool = False,
    ) -> Dict:
        """
        Tweet with attached images (multipart upload).

        Media beyond `configuration.max_media_per_upload` are dropped.
        """

        text = check_status_text(text)
        self._require_authentication()

        post_data = [
            ('status', text),
            ('display_coordinates', flag(display_coordinates)),
            ('possibly_sensitive', flag(possibly_sensitive)),
        ]

        post_data.extend(self._location_params(in_reply_to_status_id, latitude, longitude, place_id).items())

        limit = self.configuration.max_media_per_upload
        post_data.extend(('media[]', bytes(m)) for m in list(media or [])[:limit])

        url = self.resource_uri("statuses/update_with_media", base=UPLOAD_API_URI)
        content = self.execute_authenticated_request_for_multipart_form_data(url, post_data)

        return parse(content)

    def destroy_status(self, id: str, trim_user: bool = False, include_entities: bool = True) -> Dict:
        """
        Delete a tweet.

        Returns:
            The deleted status as decoded JSON.
        """

        id = check_id(id)
        self._require_authentication()

        post_data = {
            'trim_user': flag(trim_user),
            'include_entities': flag(include_entities),
        }

        content = self.execute_authenticated_request(
            self.resource_uri(f"statuses/destroy/{id}"), HttpMethod.POST, post_data
        )

        return parse(content)

    @staticmethod
    def _location_params(in_reply_to_status_id, latitude, longitude, place_id) -> Dict[str, str]:
        params = {}

        if in_reply_to_status_id:
            params['in_reply_to_status_id'] = str(in_reply_to_status_id)

        if latitude is not None:
            params['lat'] = str(latitude)

        if longitude is not None:
            params['long'] = str(longitude)

        if place_id:
            params['place_id'] = place_id

        return params
