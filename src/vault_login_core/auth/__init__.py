"""Login methods and the login task."""

from .approle import AppRoleAuthMethod
from .aws import AWSAuthMethod, IAMAuthElements, get_iam_auth_elements
from .base import AuthMethod, AuthToken, LoginAuthMethod
from .factory import UnknownAuthMethodError, create_auth_method, list_auth_methods
from .handler import AuthHandler
from .jwt import JWTAuthMethod, KubernetesAuthMethod
from .token import TokenAuthMethod

__all__ = [
    "AWSAuthMethod",
    "AppRoleAuthMethod",
    "AuthHandler",
    "AuthMethod",
    "AuthToken",
    "IAMAuthElements",
    "JWTAuthMethod",
    "KubernetesAuthMethod",
    "LoginAuthMethod",
    "TokenAuthMethod",
    "UnknownAuthMethodError",
    "create_auth_method",
    "get_iam_auth_elements",
    "list_auth_methods",
]
