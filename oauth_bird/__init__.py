from .credentials import ConsumerCredential, TokenCredential, TokenType
from .provider import HttpMethod, OAuthEndPoint, ProtocolVersion, ServiceProviderDescription, SignatureMethod
from .oauth import (
    OAuth,
    OAuthError,
    OAuthResponseFormatError,
    OAuthStateError,
    OAuthTokenVerificationError,
)
from .twitter import (
    ApiVersion,
    DuplicateTweetError,
    TwitterApi,
    TwitterConfiguration,
    TwitterError,
    parse,
)
from .config import load_auth_params

__version__ = "0.1.0"
